# app/schemas/advisory.py
from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, Field, model_validator

from .common import AppBaseModel, drop_none_recursive
from .treatment import SystemParams, TreatmentResult, WaterQualityParams


class AdvisoryReport(AppBaseModel):
    """LLM 공정 감사 결과 ({summary, recommendations, warnings})."""

    summary: str
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class AdvisoryRequest(AppBaseModel):
    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data: Any) -> Any:
        return drop_none_recursive(data) if isinstance(data, dict) else data

    system: SystemParams = Field(
        default_factory=SystemParams,
        validation_alias=AliasChoices("system", "system_params", "systemParams"),
    )
    water: WaterQualityParams = Field(
        default_factory=WaterQualityParams,
        validation_alias=AliasChoices("water", "water_params", "waterParams"),
    )
    # 없으면 서버에서 simulate() 로 계산
    result: Optional[TreatmentResult] = None


class AdvisoryOut(AppBaseModel):
    report: AdvisoryReport
    source: Literal["llm", "fallback"]
    model: Optional[str] = None
