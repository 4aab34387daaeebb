# app/services/simulation/utils.py
# ✅ Simulation Utilities
# - 분모 보호 / 클램프 / round-safe 헬퍼

from __future__ import annotations

import math
import sys
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.services.simulation.coefficients import DEGENERATE_DENOMINATOR

# 2^52 이상의 float 는 이미 정수값 (소수 자리 없음)
_INTEGRAL_FLOAT_MIN = 2.0**52


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp x to [lo, hi]."""
    return max(lo, min(hi, x))


def safe_divisor(v: float) -> float:
    """0 분모는 1 로 대체 (degenerate-input 정책). 음수/양수는 그대로."""
    return v if v else DEGENERATE_DENOMINATOR


def _finite(v: Any, default: float = 0.0) -> float:
    """NaN / 변환 불가 → default, ±inf → ±float max (overflow 는 0 이 아니라 포화)."""
    try:
        x = float(v)
    except (TypeError, ValueError):
        return float(default)
    if math.isnan(x):
        return float(default)
    if math.isinf(x):
        return math.copysign(sys.float_info.max, x)
    return x


def _r(v: Any, ndigits: int, default: float = 0.0) -> float:
    """
    round-safe: 항상 유한값 반환.
    float 의 정확한 10진 값 기준 half-up (JS toFixed 와 동일한 tie 처리).
    """
    x = _finite(v, default)
    if abs(x) >= _INTEGRAL_FLOAT_MIN:
        return x
    q = Decimal(1).scaleb(-ndigits)
    return float(Decimal(x).quantize(q, rounding=ROUND_HALF_UP))
