# ./app/core/errors.py
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

__all__ = ["AdvisoryUnavailableError", "register_exception_handlers"]


class AdvisoryUnavailableError(RuntimeError):
    """Advisory(LLM) 호출 실패. advisory 서비스 경계 밖으로는 절대 전파되지 않음."""


def _build_problem_response(
    *,
    status_code: int,
    code: str,
    message: str,
    detail: Any | None = None,
) -> JSONResponse:
    """애플리케이션 공통 에러 응답 포맷 생성."""
    payload: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if detail is not None:
        payload["detail"] = detail

    return JSONResponse(
        status_code=status_code,
        content=payload,
        media_type="application/problem+json",
    )


def _convert_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """FastAPI RequestValidationError → 단순화된 에러 리스트로 변환."""
    return [
        {
            "loc": list(e.get("loc") or []),
            "msg": e.get("msg"),
            "type": e.get("type"),
        }
        for e in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """
    FastAPI 앱 전역 예외 핸들러 등록.

    - RequestValidationError: 입력 검증 실패(422)
    - HTTPException / StarletteHTTPException: 일반 HTTP 에러(400, 404 등)
    - Exception: 그 외 모든 예외(500)
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = _convert_validation_errors(exc)

        logger.info(
            "Request validation failed: {} {} ({} errors)",
            request.method,
            request.url.path,
            len(errors),
        )

        return _build_problem_response(
            status_code=422,
            code="INVALID_INPUT",
            message="입력 검증 실패",
            detail=errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        logger.warning(
            "HTTPException: {} {} -> {} ({})",
            request.method,
            request.url.path,
            exc.status_code,
            exc.detail,
        )

        return _build_problem_response(
            status_code=exc.status_code,
            code="HTTP_ERROR",
            message=str(exc.detail) if exc.detail else "HTTP error",
            detail=None,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """최상위 핸들러: 예상치 못한 모든 예외를 500으로 포장."""
        logger.opt(exception=exc).error(
            "Unhandled exception: {} {}",
            request.method,
            request.url.path,
        )

        return _build_problem_response(
            status_code=500,
            code="INTERNAL_SERVER_ERROR",
            message="알 수 없는 오류가 발생했습니다.",
            detail=None,
        )
