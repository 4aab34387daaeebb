# app/services/simulation/modules/residual.py
# ✅ Ozone demand model (DOC 가 주 소모원) + net residual + CT accumulator

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.treatment import SystemParams, WaterQualityParams
from app.services.simulation.coefficients import (
    DEMAND_BASE_MGL,
    DEMAND_PER_DOC,
    DEMAND_TEMP_COEFF,
    H2O2_OZONE_CONSUMPTION,
    REFERENCE_TEMP_C,
)
from app.services.simulation.modules.base import PipelineState, StageOut, TreatmentModule


@dataclass(frozen=True)
class ResidualOut(StageOut):
    temp_correction: float
    ozone_demand_mgL: float
    h2o2_consumption_mgL: float
    residual_mgL: float


def demand_temperature_correction(temperature_C: float) -> float:
    """고온일수록 반응이 빨라 demand 증가 (+2 %/°C)."""
    return 1.0 + (temperature_C - REFERENCE_TEMP_C) * DEMAND_TEMP_COEFF


def ozone_demand_mgL(doc_mgL: float, temperature_C: float) -> float:
    return (doc_mgL * DEMAND_PER_DOC + DEMAND_BASE_MGL) * demand_temperature_correction(
        temperature_C
    )


def peroxide_consumption_mgL(h2o2_dose_mgL: float) -> float:
    return h2o2_dose_mgL * H2O2_OZONE_CONSUMPTION


def net_residual_mgL(ozone_dose_mgL: float, demand_mgL: float, h2o2_consumed_mgL: float) -> float:
    # 음수 = 과소 주입. CT / kinetics 로 음수가 흘러가면 안 됨
    return max(0.0, ozone_dose_mgL - demand_mgL - h2o2_consumed_mgL)


def compute_residual(system: SystemParams, water: WaterQualityParams) -> ResidualOut:
    corr = demand_temperature_correction(water.temperature_C)
    demand = ozone_demand_mgL(water.doc_mgL, water.temperature_C)
    consumed = peroxide_consumption_mgL(system.h2o2_dose_mgL)
    return ResidualOut(
        temp_correction=corr,
        ozone_demand_mgL=demand,
        h2o2_consumption_mgL=consumed,
        residual_mgL=net_residual_mgL(system.ozone_dose_mgL, demand, consumed),
    )


def accumulate_ct(residual_mgL: float, t10_min: float) -> float:
    """CT (mg·min/L) = residual × T10."""
    # residual 0 이면 T10 이 overflow(inf) 여도 CT = 0 (0 × inf = NaN 방지)
    if residual_mgL <= 0:
        return 0.0
    return residual_mgL * t10_min


class ResidualModule(TreatmentModule):
    key = "residual"

    def compute(self, state: PipelineState) -> PipelineState:
        return state.with_(residual=compute_residual(state.system, state.water))


class CTModule(TreatmentModule):
    key = "ct_value"

    def compute(self, state: PipelineState) -> PipelineState:
        residual = state.require("residual", self.key)
        hyd = state.require("hydraulics", self.key)
        return state.with_(ct_value=accumulate_ct(residual.residual_mgL, hyd.t10_min))
