# app/services/simulation/modules/oxidation.py
# ✅ MIB / Geosmin: competitive O3 / •OH pseudo-first-order decay
# ✅ exposure 는 O3 dose × T10 에서만 유도 → 제거율(%)은 유입 농도와 무관

from __future__ import annotations

import math
from dataclasses import dataclass

from app.schemas.treatment import KineticParams, SystemParams, WaterQualityParams
from app.services.simulation.coefficients import (
    AOP_RATIO_CAP,
    AOP_RATIO_GAIN,
    ARRHENIUS_BASE,
    DIRECT_RATE_WEIGHT,
    DOC_SCAVENGING_COEFF,
    EXPOSURE_SCALE_MIN,
    PH_FACTOR_MIN,
    PH_RATE_SLOPE,
    RADICAL_RATE_WEIGHT,
    REFERENCE_TEMP_C,
)
from app.services.simulation.modules.base import PipelineState, StageOut, TreatmentModule
from app.services.simulation.utils import safe_divisor


@dataclass(frozen=True)
class CompoundRemoval:
    base_rate: float
    k_eff: float
    remaining_fraction: float
    influent_ngL: float
    final_ngL: float
    removed_ngL: float
    removal_pct: float


@dataclass(frozen=True)
class OxidationOut(StageOut):
    ph_factor: float
    temp_factor: float
    scavenging_factor: float
    aop_enhancement: float
    exposure: float
    mib: CompoundRemoval
    geosmin: CompoundRemoval


# -----------------------------------------------------------------------------
# k_eff building blocks
# -----------------------------------------------------------------------------
def base_rate_constant(k_o3: float, k_oh: float) -> float:
    """
    문헌 2차 속도상수 → 기본 rate factor.
    kOH 는 kO3 보다 ~1e9 배 크므로 radical 경로가 사실상 지배.
    """
    return k_oh * RADICAL_RATE_WEIGHT + k_o3 * DIRECT_RATE_WEIGHT


def ph_rate_factor(ph: float) -> float:
    # 고 pH → O3 분해 → •OH 생성 증가
    return max(PH_FACTOR_MIN, 1.0 + (ph - 7.0) * PH_RATE_SLOPE)


def arrhenius_factor(temperature_C: float) -> float:
    return ARRHENIUS_BASE ** (temperature_C - REFERENCE_TEMP_C)


def doc_scavenging_factor(doc_mgL: float) -> float:
    # DOC 가 •OH 를 경쟁 소비
    return 1.0 / (1.0 + doc_mgL * DOC_SCAVENGING_COEFF)


def aop_enhancement_factor(h2o2_dose_mgL: float, ozone_dose_mgL: float) -> float:
    """Ozone-only 모드에서는 정확히 1. Peroxone 모드는 H2O2:O3 비에 비례 (상한 있음)."""
    if h2o2_dose_mgL <= 0:
        return 1.0
    ratio = min(AOP_RATIO_CAP, h2o2_dose_mgL / safe_divisor(ozone_dose_mgL))
    return 1.0 + ratio * AOP_RATIO_GAIN


def oxidant_exposure(ozone_dose_mgL: float, t10_min: float) -> float:
    if ozone_dose_mgL <= 0:
        return 0.0
    return ozone_dose_mgL * t10_min / EXPOSURE_SCALE_MIN


def remaining_fraction(k_eff: float, exposure: float) -> float:
    if k_eff <= 0 or exposure <= 0:
        return 1.0
    return math.exp(-k_eff * exposure)


def _compound(
    influent_ngL: float,
    k_o3: float,
    k_oh: float,
    matrix_factor: float,
    exposure: float,
) -> CompoundRemoval:
    base = base_rate_constant(k_o3, k_oh)
    k_eff = base * matrix_factor
    frac = remaining_fraction(k_eff, exposure)
    return CompoundRemoval(
        base_rate=base,
        k_eff=k_eff,
        remaining_fraction=frac,
        influent_ngL=influent_ngL,
        final_ngL=influent_ngL * frac,
        removed_ngL=influent_ngL * (1.0 - frac),
        removal_pct=(1.0 - frac) * 100.0,
    )


def compute_oxidation(
    system: SystemParams,
    water: WaterQualityParams,
    kinetics: KineticParams,
    t10: float,
) -> OxidationOut:
    ph_f = ph_rate_factor(water.ph)
    temp_f = arrhenius_factor(water.temperature_C)
    scav_f = doc_scavenging_factor(water.doc_mgL)
    aop_f = aop_enhancement_factor(system.h2o2_dose_mgL, system.ozone_dose_mgL)
    exposure = oxidant_exposure(system.ozone_dose_mgL, t10)

    # compound 와 무관한 matrix 보정은 한 번만 곱함
    matrix = ph_f * temp_f * scav_f * aop_f

    return OxidationOut(
        ph_factor=ph_f,
        temp_factor=temp_f,
        scavenging_factor=scav_f,
        aop_enhancement=aop_f,
        exposure=exposure,
        mib=_compound(water.mib_ngL, kinetics.mib_kO3, kinetics.mib_kOH, matrix, exposure),
        geosmin=_compound(
            water.geosmin_ngL, kinetics.geosmin_kO3, kinetics.geosmin_kOH, matrix, exposure
        ),
    )


class OxidationModule(TreatmentModule):
    key = "oxidation"

    def compute(self, state: PipelineState) -> PipelineState:
        hyd = state.require("hydraulics", self.key)
        out = compute_oxidation(state.system, state.water, state.kinetics, hyd.t10_min)
        return state.with_(oxidation=out)
