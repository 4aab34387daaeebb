# app/schemas/treatment.py
# =============================================================================
# OzoNova Treatment Schemas (Pydantic v2)
#
# Key Policies:
# - 입력 스냅샷(System / Water / Kinetic)과 결과(TreatmentResult)는 모두 frozen.
# - explicit "None" key 는 제거하여 기본값이 적용되도록 함.
# - 프런트엔드(camelCase) 필드명을 validation alias 로 그대로 수용.
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import AliasChoices, Field, model_validator

from .common import (
    AppBaseModel,
    FrozenModel,
    TreatmentMode,
    WarningLevel,
    drop_none_recursive,
)


# =============================================================================
# Input Snapshots
# =============================================================================
class SystemParams(FrozenModel):
    """오존 접촉조 설계/운전 조건 (운전자 입력)."""

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data: Any) -> Any:
        return drop_none_recursive(data) if isinstance(data, dict) else data

    # flow=0 은 엔진의 degenerate-input 정책(분모 1)으로 처리하므로 허용
    flow_m3h: float = Field(
        default=1000.0,
        ge=0,
        validation_alias=AliasChoices("flow_m3h", "flowRate", "flow_rate"),
        description="Flow rate (m³/h)",
    )
    ozone_dose_mgL: float = Field(
        default=2.5,
        ge=0,
        validation_alias=AliasChoices("ozone_dose_mgL", "ozoneDose", "ozone_dose"),
        description="Applied ozone dose (mg/L)",
    )
    h2o2_dose_mgL: float = Field(
        default=0.0,
        ge=0,
        validation_alias=AliasChoices("h2o2_dose_mgL", "h2o2Dose", "h2o2_dose"),
        description="Hydrogen peroxide dose (mg/L). > 0 이면 Peroxone(AOP) 모드",
    )
    tank_length_m: float = Field(
        default=15.0,
        gt=0,
        validation_alias=AliasChoices("tank_length_m", "tankLength"),
    )
    tank_width_m: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("tank_width_m", "tankWidth"),
    )
    water_depth_m: float = Field(
        default=4.0,
        gt=0,
        validation_alias=AliasChoices("water_depth_m", "waterDepth"),
    )
    baffling_factor: float = Field(
        default=0.6,
        gt=0,
        le=1.0,
        validation_alias=AliasChoices("baffling_factor", "bafflingFactor"),
        description="T10/HRT (dimensionless)",
    )

    @property
    def is_aop(self) -> bool:
        return self.h2o2_dose_mgL > 0

    @property
    def mode(self) -> TreatmentMode:
        return TreatmentMode.PEROXONE if self.is_aop else TreatmentMode.OZONE


class WaterQualityParams(FrozenModel):
    """유입 원수 수질."""

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data: Any) -> Any:
        return drop_none_recursive(data) if isinstance(data, dict) else data

    ph: float = Field(default=7.8, ge=0, le=14, validation_alias=AliasChoices("ph", "pH"))
    bromide_ugL: float = Field(
        default=150.0,
        ge=0,
        validation_alias=AliasChoices("bromide_ugL", "bromide"),
    )
    ammonia_mgL: float = Field(
        default=0.05,
        ge=0,
        validation_alias=AliasChoices("ammonia_mgL", "ammonia"),
    )
    doc_mgL: float = Field(
        default=4.5,
        gt=0,
        validation_alias=AliasChoices("doc_mgL", "doc", "DOC"),
    )
    mib_ngL: float = Field(
        default=40.0,
        ge=0,
        validation_alias=AliasChoices("mib_ngL", "mib", "MIB"),
    )
    geosmin_ngL: float = Field(
        default=35.0,
        ge=0,
        validation_alias=AliasChoices("geosmin_ngL", "geosmin"),
    )
    temperature_C: float = Field(
        default=15.0,
        ge=0,
        le=40,
        validation_alias=AliasChoices("temperature_C", "temperature", "temp_C"),
    )


class KineticParams(FrozenModel):
    """
    2차 반응 속도상수 (M⁻¹s⁻¹) override.
    생략 시 문헌값(von Gunten 계열) 사용. 산화 동역학 단계에만 영향.
    """

    mib_kO3: float = Field(default=0.35, ge=0, description="MIB + O3")
    mib_kOH: float = Field(default=5.1e9, ge=0, description="MIB + •OH")
    geosmin_kO3: float = Field(default=0.10, ge=0, description="Geosmin + O3")
    geosmin_kOH: float = Field(default=7.8e9, ge=0, description="Geosmin + •OH")


DEFAULT_SYSTEM_PARAMS = SystemParams()
DEFAULT_WATER_PARAMS = WaterQualityParams()
DEFAULT_KINETICS = KineticParams()


# =============================================================================
# Core Output
# =============================================================================
class TreatmentResult(FrozenModel):
    """simulate() 결과. 모든 값은 반환 전에 고정 자릿수로 반올림됨."""

    calculated_residual_mgL: float
    hydraulic_retention_time_min: float
    contact_time_t10_min: float
    ct_value: float

    final_ph: float
    final_mib_ngL: float
    final_geosmin_ngL: float
    final_doc_mgL: float

    removal_mib_pct: float
    removal_geosmin_pct: float
    removal_doc_pct: float

    bromate_ugL: float

    lrv_virus: float
    lrv_bacteria: float
    lrv_protozoa: float


# =============================================================================
# Service-level Request / Output
# =============================================================================
class SimulationRequest(AppBaseModel):
    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data: Any) -> Any:
        return drop_none_recursive(data) if isinstance(data, dict) else data

    simulation_id: str = Field(default_factory=lambda: str(UUID(int=0)))
    project_id: Union[UUID, str] = "default"
    scenario_name: str = "Simulation"

    system: SystemParams = Field(
        default_factory=SystemParams,
        validation_alias=AliasChoices("system", "system_params", "systemParams"),
    )
    water: WaterQualityParams = Field(
        default_factory=WaterQualityParams,
        validation_alias=AliasChoices("water", "water_params", "waterParams"),
    )
    kinetics: Optional[KineticParams] = Field(
        default=None,
        validation_alias=AliasChoices("kinetics", "kinetic_params", "kineticParams"),
    )


class StageTrace(AppBaseModel):
    """파이프라인 단계별 중간값 (반올림 전)."""

    key: str
    values: Dict[str, float] = Field(default_factory=dict)


class SimulationWarning(AppBaseModel):
    key: str
    message: str
    value: Optional[float] = None
    limit: Any = None
    unit: str = ""
    level: WarningLevel = WarningLevel.WARN


class ComplianceOut(AppBaseModel):
    bromate_status: str
    bromate_limit_ugL: float
    lrv_target: float
    virus_passing: bool
    bacteria_passing: bool
    protozoa_passing: bool
    credit_disqualified: bool = False


class SimulationOutput(AppBaseModel):
    scenario_id: Union[UUID, str]
    mode: TreatmentMode
    h2o2_o3_ratio: float
    result: TreatmentResult
    stages: List[StageTrace] = Field(default_factory=list)
    compliance: ComplianceOut
    warnings: List[SimulationWarning] = Field(default_factory=list)

    schema_version: int = 1


# =============================================================================
# Parameter Sweep
# =============================================================================
class SweepRequest(SimulationRequest):
    parameter: str = Field(description="SystemParams / WaterQualityParams 필드명")
    values: Optional[List[float]] = None
    start: Optional[float] = None
    stop: Optional[float] = None
    steps: Optional[int] = Field(default=None, ge=2, le=500)

    @model_validator(mode="after")
    def _resolve_values(self):
        if self.values:
            return self
        if self.start is None or self.stop is None or self.steps is None:
            raise ValueError("either 'values' or 'start'/'stop'/'steps' is required")
        span = self.stop - self.start
        self.values = [
            self.start + span * i / (self.steps - 1) for i in range(self.steps)
        ]
        return self


class SweepPoint(AppBaseModel):
    value: float
    result: TreatmentResult


class SweepOutput(AppBaseModel):
    parameter: str
    mode: TreatmentMode
    points: List[SweepPoint] = Field(default_factory=list)


class DefaultsOut(AppBaseModel):
    system: SystemParams
    water: WaterQualityParams
    kinetics: KineticParams
