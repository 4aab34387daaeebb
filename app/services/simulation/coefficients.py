# app/services/simulation/coefficients.py
# ✅ Canonical coefficient set (EPA CT-table 기준, AOP 크레딧 박탈 버전)
# - 모든 경험 상수는 여기 한 곳에서만 정의
# - 변경 시 DESIGN.md 의 coefficient 표도 같이 갱신

from __future__ import annotations

from typing import Dict

from app.schemas.common import PathogenClass

# ============================================================
# Reference conditions
# ============================================================
REFERENCE_TEMP_C = 20.0
DEGENERATE_DENOMINATOR = 1.0  # flow=0, ozone=0 등 분모 대체값

# ============================================================
# Hydraulics
# ============================================================
MINUTES_PER_HOUR = 60.0

# ============================================================
# Ozone demand / residual
# ============================================================
DEMAND_PER_DOC = 0.55  # mg-O3 / mg-DOC
DEMAND_BASE_MGL = 0.25  # 비-DOC 즉시 소모분 (Fe/Mn/NO2 등)
DEMAND_TEMP_COEFF = 0.02  # per °C
H2O2_OZONE_CONSUMPTION = 0.7  # mg-O3 / mg-H2O2

# ============================================================
# Oxidation kinetics (MIB / Geosmin)
# ============================================================
RADICAL_RATE_WEIGHT = 1.0e-10  # kOH (M⁻¹s⁻¹) → base rate
DIRECT_RATE_WEIGHT = 0.4  # kO3 (M⁻¹s⁻¹) → base rate (MIB 0.65 / Geosmin 0.82)
PH_RATE_SLOPE = 0.4  # per pH unit above 7
PH_FACTOR_MIN = 0.1  # 산성 영역에서 k_eff 가 음수가 되지 않도록
ARRHENIUS_BASE = 1.04  # per °C above 20
DOC_SCAVENGING_COEFF = 0.15  # L/mg
AOP_RATIO_CAP = 2.0  # H2O2:O3 (mg/mg)
AOP_RATIO_GAIN = 1.5
EXPOSURE_SCALE_MIN = 10.0  # dose × T10 / 10

# ============================================================
# Bromate
# ============================================================
BROMATE_YIELD = 0.005
BROMATE_PH_BASE = 1.6
BROMATE_T10_SCALE_MIN = 10.0
H2O2_BROMATE_SUPPRESSION = 0.8  # L/mg
AMMONIA_MAX_EFFECTIVENESS = 6.0  # L/mg
AMMONIA_PKA_PIVOT = 8.5  # HOBr/OBr⁻ 전환 근방

# ============================================================
# Mineralization / pH
# ============================================================
MINERALIZATION_PER_OZONE = 0.015  # fraction per mg/L O3
MINERALIZATION_CAP = 0.20
AOP_MINERALIZATION_BONUS = 1.2
PH_DROP_PER_OZONE = 0.05

# ============================================================
# Disinfection credit
# ============================================================
CT_TEMP_FACTOR = 1.075
MAX_LOG_CREDIT = 4.0

# 20°C 기준 CT 요구치 (mg·min/L) 와 그 CT 가 의미하는 log 수
CT_BASE_20C: Dict[PathogenClass, float] = {
    PathogenClass.VIRUS: 0.40,  # 3-log (SWTR Guidance Manual)
    PathogenClass.BACTERIA: 0.08,  # 1-log
    PathogenClass.PROTOZOA: 2.0,  # 1-log Cryptosporidium (LT2ESWTR)
}
LOGS_PER_BASE: Dict[PathogenClass, float] = {
    PathogenClass.VIRUS: 3.0,
    PathogenClass.BACTERIA: 1.0,
    PathogenClass.PROTOZOA: 1.0,
}

# ============================================================
# Result rounding
# ============================================================
ROUND_CONCENTRATION = 2
ROUND_PERCENT = 1
ROUND_TIME = 1
