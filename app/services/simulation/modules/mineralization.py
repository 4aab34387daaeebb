# app/services/simulation/modules/mineralization.py
# ✅ DOC mineralization (CO2 까지 완전 산화되는 분율은 작음 → 상한 20 %)
# ✅ 오존 주입에 따른 처리수 pH 저하

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.treatment import SystemParams, WaterQualityParams
from app.services.simulation.coefficients import (
    AOP_MINERALIZATION_BONUS,
    MINERALIZATION_CAP,
    MINERALIZATION_PER_OZONE,
    PH_DROP_PER_OZONE,
)
from app.services.simulation.modules.base import PipelineState, StageOut, TreatmentModule
from app.services.simulation.utils import safe_divisor


@dataclass(frozen=True)
class MineralizationOut(StageOut):
    fraction: float
    final_doc_mgL: float
    removal_pct: float
    final_ph: float


def mineralization_fraction(ozone_dose_mgL: float, is_aop: bool) -> float:
    bonus = AOP_MINERALIZATION_BONUS if is_aop else 1.0
    return min(MINERALIZATION_CAP, MINERALIZATION_PER_OZONE * ozone_dose_mgL * bonus)


def effluent_ph(ph: float, ozone_dose_mgL: float) -> float:
    return max(0.0, ph - PH_DROP_PER_OZONE * ozone_dose_mgL)


def compute_mineralization(system: SystemParams, water: WaterQualityParams) -> MineralizationOut:
    frac = mineralization_fraction(system.ozone_dose_mgL, system.is_aop)
    final_doc = max(0.0, water.doc_mgL * (1.0 - frac))
    return MineralizationOut(
        fraction=frac,
        final_doc_mgL=final_doc,
        # 제거율은 잔류 DOC 기준으로 산출
        removal_pct=(1.0 - final_doc / safe_divisor(water.doc_mgL)) * 100.0,
        final_ph=effluent_ph(water.ph, system.ozone_dose_mgL),
    )


class MineralizationModule(TreatmentModule):
    key = "mineralization"

    def compute(self, state: PipelineState) -> PipelineState:
        return state.with_(mineralization=compute_mineralization(state.system, state.water))
