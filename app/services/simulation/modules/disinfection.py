# app/services/simulation/modules/disinfection.py
# ✅ 온도 보정 CT table → LRV (virus / bacteria / protozoa)
# ✅ Peroxone(H2O2 > 0) 이면 오존 잔류 기반 소독 크레딧 전부 0 (규제상 불인정)

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.common import PathogenClass
from app.services.simulation.coefficients import (
    CT_BASE_20C,
    CT_TEMP_FACTOR,
    LOGS_PER_BASE,
    MAX_LOG_CREDIT,
    REFERENCE_TEMP_C,
)
from app.services.simulation.modules.base import PipelineState, StageOut, TreatmentModule
from app.services.simulation.utils import clamp, safe_divisor


@dataclass(frozen=True)
class DisinfectionOut(StageOut):
    ct_value: float
    credit_disqualified: bool
    ct_required_virus: float
    ct_required_bacteria: float
    ct_required_protozoa: float
    lrv_virus: float
    lrv_bacteria: float
    lrv_protozoa: float


def ct_required(pathogen: PathogenClass, temperature_C: float) -> float:
    """
    20°C 기준 CT 요구치를 수온으로 보정 (mg·min/L).
    virus 는 3-log 기준값, 나머지는 1-log 기준값.
    """
    return CT_BASE_20C[pathogen] * CT_TEMP_FACTOR ** (REFERENCE_TEMP_C - temperature_C)


def log_credit(ct_value: float, pathogen: PathogenClass, temperature_C: float) -> float:
    raw = ct_value / safe_divisor(ct_required(pathogen, temperature_C)) * LOGS_PER_BASE[pathogen]
    return clamp(raw, 0.0, MAX_LOG_CREDIT)


def compute_disinfection(ct_value: float, temperature_C: float, is_aop: bool) -> DisinfectionOut:
    req = {p: ct_required(p, temperature_C) for p in PathogenClass}

    if is_aop:
        lrv = {p: 0.0 for p in PathogenClass}
    else:
        lrv = {p: log_credit(ct_value, p, temperature_C) for p in PathogenClass}

    return DisinfectionOut(
        ct_value=ct_value,
        credit_disqualified=is_aop,
        ct_required_virus=req[PathogenClass.VIRUS],
        ct_required_bacteria=req[PathogenClass.BACTERIA],
        ct_required_protozoa=req[PathogenClass.PROTOZOA],
        lrv_virus=lrv[PathogenClass.VIRUS],
        lrv_bacteria=lrv[PathogenClass.BACTERIA],
        lrv_protozoa=lrv[PathogenClass.PROTOZOA],
    )


class DisinfectionModule(TreatmentModule):
    key = "disinfection"

    def compute(self, state: PipelineState) -> PipelineState:
        ct = state.require("ct_value", self.key)
        out = compute_disinfection(ct, state.water.temperature_C, state.is_aop)
        return state.with_(disinfection=out)
