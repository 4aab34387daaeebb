# app/api/v1/schemas.py
# (Barrel File: 엔드포인트는 여기서만 스키마를 가져옵니다)

from app.schemas.common import (
    AppBaseModel,
    FrozenModel,
    PathogenClass,
    TreatmentMode,
    WarningLevel,
)

from app.schemas.treatment import (
    DEFAULT_KINETICS,
    DEFAULT_SYSTEM_PARAMS,
    DEFAULT_WATER_PARAMS,
    ComplianceOut,
    DefaultsOut,
    KineticParams,
    SimulationOutput,
    SimulationRequest,
    SimulationWarning,
    StageTrace,
    SweepOutput,
    SweepPoint,
    SweepRequest,
    SystemParams,
    TreatmentResult,
    WaterQualityParams,
)

from app.schemas.advisory import AdvisoryOut, AdvisoryReport, AdvisoryRequest

from app.schemas.scenario import ScenarioDetailOut, ScenarioSummaryOut
