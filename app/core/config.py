# app\core\config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, List, Optional, Union

from pydantic import Field, AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 환경 설정."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =========================================================
    # 1. 프로젝트 기본 정보
    # =========================================================
    PROJECT_NAME: str = Field(
        default="OzoNova API", description="Swagger UI 등에 표시될 프로젝트 이름"
    )
    API_V1_STR: str = Field(default="/api/v1", description="API 버전 Prefix")

    APP_ENV: Literal["local", "dev", "test", "prod"] = Field(
        default="local",
        description="애플리케이션 실행 환경 (local/dev/test/prod)",
    )

    # =========================================================
    # 2. 보안 / CORS
    # =========================================================
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = Field(
        default=[], description="CORS 허용 도메인 목록 (예: http://localhost:3000)"
    )

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        """문자열로 들어온 CORS 설정을 리스트로 변환"""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # =========================================================
    # 3. 데이터베이스 / 로그
    # =========================================================
    DB_URL: str = Field(
        default="sqlite:///./.data/ozonova.db",
        description="SQLAlchemy DB URL (시나리오 이력 저장용)",
    )

    LOG_DIR: str = Field(default=".logs", description="로그 파일 디렉터리")
    LOG_LEVEL: str = Field(default="INFO", description="콘솔 로그 레벨")

    # =========================================================
    # 4. Advisory (LLM 공정 감사) 연동
    # =========================================================
    ADVISORY_API_KEY: Optional[str] = Field(
        default=None, description="OpenAI 호환 엔드포인트 API Key (없으면 fallback)"
    )
    ADVISORY_BASE_URL: Optional[str] = Field(
        default=None, description="OpenAI 호환 엔드포인트 base URL (None이면 기본값)"
    )
    ADVISORY_MODEL: str = Field(default="gpt-4o-mini", description="Advisory 모델명")
    ADVISORY_TIMEOUT_S: float = Field(default=30.0, gt=0)
    ADVISORY_MAX_TOKENS: int = Field(default=1024, ge=64)

    # =========================================================
    # 5. 규제 / 운전 목표치 (Compliance)
    # =========================================================
    BROMATE_LIMIT_UGL: float = Field(
        default=10.0, description="Bromate MCL (µg/L)"
    )
    LRV_TARGET: float = Field(
        default=4.0, description="Virus/Bacteria/Protozoa 목표 불활성화 log"
    )
    H2O2_O3_RATIO_MIN: float = Field(default=0.3, description="Peroxone 질량비 하한")
    H2O2_O3_RATIO_MAX: float = Field(default=0.5, description="Peroxone 질량비 상한")

    # =========================================================
    # 6. Path 편의 프로퍼티
    # =========================================================
    @property
    def log_dir_path(self) -> Path:
        """로그 디렉터리 절대 경로 (Path 객체)."""
        return Path(self.LOG_DIR).resolve()

    @property
    def advisory_configured(self) -> bool:
        return bool(self.ADVISORY_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """FastAPI Depends용 싱글톤 Settings 인스턴스."""
    return Settings()


# 전역 설정 객체
settings = get_settings()
