# app/api/v1/endpoints/advisory.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from loguru import logger

from app.api.v1.schemas import AdvisoryOut, AdvisoryRequest
from app.services.advisory import AdvisoryBackend, OpenAIAdvisoryBackend, get_expert_analysis
from app.services.simulation import simulate

router = APIRouter(tags=["advisory"])


def get_advisory_backend() -> AdvisoryBackend:
    """테스트에서 dependency_overrides 로 교체 가능."""
    return OpenAIAdvisoryBackend()


@router.post("", response_model=AdvisoryOut)
def run_advisory(
    request: AdvisoryRequest,
    backend: AdvisoryBackend = Depends(get_advisory_backend),
):
    result = request.result or simulate(request.system, request.water)
    out = get_expert_analysis(request.system, request.water, result, backend=backend)
    logger.info(f"🧠 [Advisory] source={out.source}")
    return out
