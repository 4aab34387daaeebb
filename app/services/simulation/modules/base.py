# app\services\simulation\modules\base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, TYPE_CHECKING

from app.schemas.treatment import KineticParams, SystemParams, WaterQualityParams

if TYPE_CHECKING:
    from app.services.simulation.modules.bromate import BromateOut
    from app.services.simulation.modules.disinfection import DisinfectionOut
    from app.services.simulation.modules.hydraulics import HydraulicsOut
    from app.services.simulation.modules.mineralization import MineralizationOut
    from app.services.simulation.modules.oxidation import OxidationOut
    from app.services.simulation.modules.residual import ResidualOut


@dataclass(frozen=True)
class PipelineState:
    """
    1회 시뮬레이션의 불변 스냅샷.
    각 단계는 자신의 출력 슬롯만 채운 새 state 를 반환 (replace).
    """

    system: SystemParams
    water: WaterQualityParams
    kinetics: KineticParams

    hydraulics: Optional["HydraulicsOut"] = None
    residual: Optional["ResidualOut"] = None
    ct_value: Optional[float] = None
    oxidation: Optional["OxidationOut"] = None
    bromate: Optional["BromateOut"] = None
    mineralization: Optional["MineralizationOut"] = None
    disinfection: Optional["DisinfectionOut"] = None

    @property
    def is_aop(self) -> bool:
        return self.system.is_aop

    def require(self, slot: str, consumer: str) -> Any:
        v = getattr(self, slot)
        if v is None:
            raise RuntimeError(f"'{consumer}' requires '{slot}' to be computed first")
        return v

    def with_(self, **changes: Any) -> "PipelineState":
        return replace(self, **changes)


class StageOut:
    """단계 출력 dataclass 공통 mixin: 진단용 dict 변환."""

    def as_trace(self) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for k, v in asdict(self).items():  # type: ignore[call-overload]
            if isinstance(v, bool):
                out[k] = 1.0 if v else 0.0
            elif isinstance(v, (int, float)):
                out[k] = float(v)
            elif isinstance(v, dict):
                for kk, vv in v.items():
                    if isinstance(vv, (int, float)):
                        out[f"{k}.{kk}"] = float(vv)
        return out


class TreatmentModule(ABC):
    """
    모든 처리 단계(수리, 잔류, CT, 산화, 브로메이트, 무기화, 소독)의 공통 부모.
    Strategy 패턴의 Interface 역할을 합니다.
    """

    key: str = ""

    @abstractmethod
    def compute(self, state: PipelineState) -> PipelineState:
        """
        입력: 상류 단계까지 채워진 state
        출력: 이 단계 슬롯이 채워진 새 state
        """

    def trace(self, state: PipelineState) -> Dict[str, float]:
        v = getattr(state, self.key, None)
        if isinstance(v, StageOut):
            return v.as_trace()
        if isinstance(v, (int, float)):
            return {self.key: float(v)}
        return {}
