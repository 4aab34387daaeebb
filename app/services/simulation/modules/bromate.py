# app/services/simulation/modules/bromate.py
# ✅ Br⁻ → HOBr/OBr⁻ → BrO3⁻ 경험식
# ✅ 독립 억제 인자 2개: H2O2 (HOBr → Br⁻ 환원), NH3 (HOBr → bromamine 격리)

from __future__ import annotations

import math
from dataclasses import dataclass

from app.schemas.treatment import SystemParams, WaterQualityParams
from app.services.simulation.coefficients import (
    AMMONIA_MAX_EFFECTIVENESS,
    AMMONIA_PKA_PIVOT,
    BROMATE_PH_BASE,
    BROMATE_T10_SCALE_MIN,
    BROMATE_YIELD,
    H2O2_BROMATE_SUPPRESSION,
)
from app.services.simulation.modules.base import PipelineState, StageOut, TreatmentModule
from app.services.simulation.modules.oxidation import arrhenius_factor


@dataclass(frozen=True)
class BromateOut(StageOut):
    ph_amplification: float
    baseline_ugL: float
    peroxide_suppression: float
    ammonia_effectiveness: float
    ammonia_inhibition: float
    bromate_ugL: float


def ph_amplification(ph: float) -> float:
    # pH ↑ → OBr⁻ 분율 ↑ → 브로메이트 급증
    return BROMATE_PH_BASE ** (ph - 7.0)


def baseline_bromate_ugL(
    bromide_ugL: float,
    ozone_dose_mgL: float,
    ph: float,
    t10_min: float,
    temperature_C: float,
) -> float:
    if bromide_ugL <= 0 or ozone_dose_mgL <= 0:
        return 0.0
    return (
        BROMATE_YIELD
        * bromide_ugL
        * ozone_dose_mgL
        * ph_amplification(ph)
        * (t10_min / BROMATE_T10_SCALE_MIN)
        * arrhenius_factor(temperature_C)
    )


def peroxide_suppression(h2o2_dose_mgL: float) -> float:
    return 1.0 / (1.0 + h2o2_dose_mgL * H2O2_BROMATE_SUPPRESSION)


def ammonia_effectiveness(ph: float) -> float:
    """저 pH(HOBr 우세)에서 더 효과적. pH 8.5 근방에서 반감."""
    return AMMONIA_MAX_EFFECTIVENESS / (1.0 + math.exp(ph - AMMONIA_PKA_PIVOT))


def ammonia_inhibition(ammonia_mgL: float, ph: float) -> float:
    return 1.0 / (1.0 + ammonia_mgL * ammonia_effectiveness(ph))


def compute_bromate(system: SystemParams, water: WaterQualityParams, t10: float) -> BromateOut:
    baseline = baseline_bromate_ugL(
        water.bromide_ugL,
        system.ozone_dose_mgL,
        water.ph,
        t10,
        water.temperature_C,
    )
    h2o2_f = peroxide_suppression(system.h2o2_dose_mgL)
    nh3_f = ammonia_inhibition(water.ammonia_mgL, water.ph)
    return BromateOut(
        ph_amplification=ph_amplification(water.ph),
        baseline_ugL=baseline,
        peroxide_suppression=h2o2_f,
        ammonia_effectiveness=ammonia_effectiveness(water.ph),
        ammonia_inhibition=nh3_f,
        bromate_ugL=max(0.0, baseline * h2o2_f * nh3_f),
    )


class BromateModule(TreatmentModule):
    key = "bromate"

    def compute(self, state: PipelineState) -> PipelineState:
        hyd = state.require("hydraulics", self.key)
        return state.with_(bromate=compute_bromate(state.system, state.water, hyd.t10_min))
