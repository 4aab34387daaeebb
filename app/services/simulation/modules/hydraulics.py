# app/services/simulation/modules/hydraulics.py
# ✅ Lumped hydraulics: basin geometry → HRT → T10 (baffling factor)

from __future__ import annotations

from dataclasses import dataclass

from app.schemas.treatment import SystemParams
from app.services.simulation.coefficients import MINUTES_PER_HOUR
from app.services.simulation.modules.base import PipelineState, StageOut, TreatmentModule
from app.services.simulation.utils import safe_divisor


@dataclass(frozen=True)
class HydraulicsOut(StageOut):
    volume_m3: float
    hrt_min: float
    t10_min: float


def basin_volume_m3(length_m: float, width_m: float, depth_m: float) -> float:
    return length_m * width_m * depth_m


def hydraulic_retention_time_min(volume_m3: float, flow_m3h: float) -> float:
    """HRT (min). flow=0 이면 1 m³/h 로 간주."""
    return (volume_m3 / safe_divisor(flow_m3h)) * MINUTES_PER_HOUR


def t10_min(hrt_min: float, baffling_factor: float) -> float:
    return hrt_min * baffling_factor


def compute_hydraulics(system: SystemParams) -> HydraulicsOut:
    volume = basin_volume_m3(system.tank_length_m, system.tank_width_m, system.water_depth_m)
    hrt = hydraulic_retention_time_min(volume, system.flow_m3h)
    return HydraulicsOut(
        volume_m3=volume,
        hrt_min=hrt,
        t10_min=t10_min(hrt, system.baffling_factor),
    )


class HydraulicsModule(TreatmentModule):
    key = "hydraulics"

    def compute(self, state: PipelineState) -> PipelineState:
        return state.with_(hydraulics=compute_hydraulics(state.system))
