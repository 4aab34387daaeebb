# app/services/simulation/engine.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from loguru import logger

from app.core.config import settings
from app.schemas.common import PathogenClass, WarningLevel
from app.schemas.treatment import (
    DEFAULT_KINETICS,
    ComplianceOut,
    KineticParams,
    SimulationOutput,
    SimulationRequest,
    SimulationWarning,
    StageTrace,
    SweepOutput,
    SweepPoint,
    SystemParams,
    TreatmentResult,
    WaterQualityParams,
)
from app.services.simulation.coefficients import (
    ROUND_CONCENTRATION,
    ROUND_PERCENT,
    ROUND_TIME,
)
from app.services.simulation.modules.base import PipelineState, TreatmentModule
from app.services.simulation.modules.bromate import BromateModule
from app.services.simulation.modules.disinfection import DisinfectionModule
from app.services.simulation.modules.hydraulics import HydraulicsModule
from app.services.simulation.modules.mineralization import MineralizationModule
from app.services.simulation.modules.oxidation import OxidationModule
from app.services.simulation.modules.residual import CTModule, ResidualModule
from app.services.simulation.utils import _r

AMMONIA_INHIBITION_THRESHOLD_MGL = 0.01

# 실행 순서 고정: 하류 단계는 상류 단계의 확정값만 소비
PIPELINE: Tuple[TreatmentModule, ...] = (
    HydraulicsModule(),
    ResidualModule(),
    CTModule(),
    OxidationModule(),
    BromateModule(),
    MineralizationModule(),
    DisinfectionModule(),
)


def _run_pipeline(
    system: SystemParams,
    water: WaterQualityParams,
    kinetics: Optional[KineticParams],
    modules: Sequence[TreatmentModule] = PIPELINE,
) -> PipelineState:
    state = PipelineState(system=system, water=water, kinetics=kinetics or DEFAULT_KINETICS)
    for module in modules:
        state = module.compute(state)
    return state


def _to_result(state: PipelineState) -> TreatmentResult:
    c, p, t = ROUND_CONCENTRATION, ROUND_PERCENT, ROUND_TIME

    hyd = state.require("hydraulics", "result")
    res = state.require("residual", "result")
    ox = state.require("oxidation", "result")
    br = state.require("bromate", "result")
    mn = state.require("mineralization", "result")
    dis = state.require("disinfection", "result")

    return TreatmentResult(
        calculated_residual_mgL=_r(res.residual_mgL, c),
        hydraulic_retention_time_min=_r(hyd.hrt_min, t),
        contact_time_t10_min=_r(hyd.t10_min, t),
        ct_value=_r(state.ct_value, c),
        final_ph=_r(mn.final_ph, c),
        final_mib_ngL=_r(ox.mib.final_ngL, c),
        final_geosmin_ngL=_r(ox.geosmin.final_ngL, c),
        final_doc_mgL=_r(mn.final_doc_mgL, c),
        removal_mib_pct=_r(ox.mib.removal_pct, p),
        removal_geosmin_pct=_r(ox.geosmin.removal_pct, p),
        removal_doc_pct=_r(mn.removal_pct, p),
        bromate_ugL=_r(br.bromate_ugL, c),
        lrv_virus=_r(dis.lrv_virus, c),
        lrv_bacteria=_r(dis.lrv_bacteria, c),
        lrv_protozoa=_r(dis.lrv_protozoa, c),
    )


def simulate(
    system: SystemParams,
    water: WaterQualityParams,
    kinetics: Optional[KineticParams] = None,
) -> TreatmentResult:
    """순수 함수: 같은 입력 → 같은 TreatmentResult. I/O, 공유 상태 없음."""
    result = _to_result(_run_pipeline(system, water, kinetics))
    logger.debug(
        "simulate mode={} CT={} bromate={} removal(MIB)={}",
        system.mode.value,
        result.ct_value,
        result.bromate_ugL,
        result.removal_mib_pct,
    )
    return result


def h2o2_o3_ratio(system: SystemParams) -> float:
    if system.ozone_dose_mgL <= 0:
        return 0.0
    return system.h2o2_dose_mgL / system.ozone_dose_mgL


SWEEPABLE_PARAMETERS = frozenset(SystemParams.model_fields) | frozenset(
    WaterQualityParams.model_fields
)


class TreatmentSimulator:
    def __init__(
        self,
        *,
        bromate_limit_ugL: Optional[float] = None,
        lrv_target: Optional[float] = None,
        ratio_band: Optional[Tuple[float, float]] = None,
    ) -> None:
        self.modules: Tuple[TreatmentModule, ...] = PIPELINE
        self.bromate_limit_ugL = (
            settings.BROMATE_LIMIT_UGL if bromate_limit_ugL is None else bromate_limit_ugL
        )
        self.lrv_target = settings.LRV_TARGET if lrv_target is None else lrv_target
        self.ratio_band = ratio_band or (settings.H2O2_O3_RATIO_MIN, settings.H2O2_O3_RATIO_MAX)

    def simulate(
        self,
        system: SystemParams,
        water: WaterQualityParams,
        kinetics: Optional[KineticParams] = None,
    ) -> TreatmentResult:
        return _to_result(_run_pipeline(system, water, kinetics, self.modules))

    def run(self, request: SimulationRequest) -> SimulationOutput:
        system, water = request.system, request.water
        state = _run_pipeline(system, water, request.kinetics, self.modules)
        result = _to_result(state)

        logger.info(
            f"[Simulation] {request.scenario_name} mode={system.mode.value} "
            f"CT={result.ct_value} bromate={result.bromate_ugL} µg/L"
        )

        return SimulationOutput(
            scenario_id=request.simulation_id or str(UUID(int=0)),
            mode=system.mode,
            h2o2_o3_ratio=_r(h2o2_o3_ratio(system), 2),
            result=result,
            stages=[StageTrace(key=m.key, values=m.trace(state)) for m in self.modules],
            compliance=self._compliance(system, water, result),
            warnings=self._extract_warnings(system, state, result),
        )

    def sweep(
        self, request: SimulationRequest, parameter: str, values: Iterable[float]
    ) -> SweepOutput:
        """한 입력 필드만 바꿔가며 simulate 반복. 각 점은 서로 독립."""
        if parameter not in SWEEPABLE_PARAMETERS:
            raise ValueError(
                f"Unknown sweep parameter '{parameter}'. "
                f"Choose one of: {', '.join(sorted(SWEEPABLE_PARAMETERS))}"
            )

        points: List[SweepPoint] = []
        for v in values:
            system, water = self._with_override(request.system, request.water, parameter, v)
            points.append(
                SweepPoint(value=float(v), result=self.simulate(system, water, request.kinetics))
            )

        logger.info(f"[Sweep] {parameter} x {len(points)} points")
        return SweepOutput(parameter=parameter, mode=request.system.mode, points=points)

    # =========================================================================
    # Helpers
    # =========================================================================
    @staticmethod
    def _with_override(
        system: SystemParams, water: WaterQualityParams, parameter: str, value: float
    ) -> Tuple[SystemParams, WaterQualityParams]:
        # model_validate 로 다시 검증 (범위 밖 값이면 ValidationError → ValueError)
        if parameter in SystemParams.model_fields:
            system = SystemParams.model_validate({**system.model_dump(), parameter: value})
        else:
            water = WaterQualityParams.model_validate({**water.model_dump(), parameter: value})
        return system, water

    def _bromate_status(self, water: WaterQualityParams, result: TreatmentResult) -> str:
        if result.bromate_ugL > self.bromate_limit_ugL:
            return "Above Limit"
        if water.ammonia_mgL > AMMONIA_INHIBITION_THRESHOLD_MGL:
            return "Ammonia Inhibited"
        return "Safe"

    def _compliance(
        self, system: SystemParams, water: WaterQualityParams, result: TreatmentResult
    ) -> ComplianceOut:
        return ComplianceOut(
            bromate_status=self._bromate_status(water, result),
            bromate_limit_ugL=self.bromate_limit_ugL,
            lrv_target=self.lrv_target,
            virus_passing=result.lrv_virus >= self.lrv_target,
            bacteria_passing=result.lrv_bacteria >= self.lrv_target,
            protozoa_passing=result.lrv_protozoa >= self.lrv_target,
            credit_disqualified=system.is_aop,
        )

    def _extract_warnings(
        self, system: SystemParams, state: PipelineState, result: TreatmentResult
    ) -> List[SimulationWarning]:
        """운전/규제 기준 위반 사항을 System Warning 으로 롤업"""
        warnings: List[SimulationWarning] = []

        if result.bromate_ugL > self.bromate_limit_ugL:
            warnings.append(
                SimulationWarning(
                    key="bromate_limit",
                    message="Bromate exceeds the regulatory limit.",
                    value=result.bromate_ugL,
                    limit=self.bromate_limit_ugL,
                    unit="µg/L",
                )
            )

        res = state.require("residual", "warnings")
        if res.residual_mgL <= 0:
            warnings.append(
                SimulationWarning(
                    key="ozone_underdose",
                    message="Ozone demand exceeds the applied dose; no residual remains for CT credit.",
                    value=_r(res.ozone_demand_mgL + res.h2o2_consumption_mgL, 2),
                    limit=system.ozone_dose_mgL,
                    unit="mg/L",
                )
            )

        if system.is_aop:
            warnings.append(
                SimulationWarning(
                    key="aop_credit_disqualified",
                    message="Peroxone mode: ozone residual disinfection credit is not granted.",
                    level=WarningLevel.INFO,
                )
            )
            lo, hi = self.ratio_band
            ratio = _r(h2o2_o3_ratio(system), 2)
            if not lo <= ratio <= hi:
                warnings.append(
                    SimulationWarning(
                        key="h2o2_o3_ratio",
                        message="H2O2:O3 mass ratio is outside the typical Peroxone band.",
                        value=ratio,
                        limit=[lo, hi],
                        unit="mg/mg",
                    )
                )
        else:
            lrvs = {
                PathogenClass.VIRUS: result.lrv_virus,
                PathogenClass.BACTERIA: result.lrv_bacteria,
                PathogenClass.PROTOZOA: result.lrv_protozoa,
            }
            for pathogen, lrv in lrvs.items():
                if lrv < self.lrv_target:
                    warnings.append(
                        SimulationWarning(
                            key=f"lrv_{pathogen.value}",
                            message=f"{pathogen.value.capitalize()} inactivation below target.",
                            value=lrv,
                            limit=self.lrv_target,
                            unit="log",
                        )
                    )

        return warnings
