# app\schemas\common.py
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class AppBaseModel(BaseModel):
    """모든 모델의 부모 클래스: V2 설정 적용"""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        from_attributes=True,
    )


class FrozenModel(AppBaseModel):
    """시뮬레이션 1회 동안 변하지 않는 입력/출력 스냅샷."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        from_attributes=True,
        frozen=True,
        # inf / NaN 입력은 ge/gt 검사를 통과하므로 명시적으로 거부
        allow_inf_nan=False,
    )


class TreatmentMode(str, Enum):
    OZONE = "OZONE"
    PEROXONE = "PEROXONE"


class PathogenClass(str, Enum):
    VIRUS = "virus"
    BACTERIA = "bacteria"
    PROTOZOA = "protozoa"


class WarningLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"


def drop_none_recursive(obj: Any) -> Any:
    """explicit null 을 "missing" 으로 취급해 pydantic 기본값이 적용되도록 함."""
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if v is None:
                continue
            out[k] = drop_none_recursive(v)
        return out
    if isinstance(obj, list):
        return [drop_none_recursive(v) for v in obj]
    return obj
