# app/api/v1/endpoints/simulation.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from app.api.v1.schemas import (
    DEFAULT_KINETICS,
    DEFAULT_SYSTEM_PARAMS,
    DEFAULT_WATER_PARAMS,
    DefaultsOut,
    SimulationOutput,
    SimulationRequest,
    SweepOutput,
    SweepRequest,
)
from app.db.models import Scenario
from app.db.session import get_db
from app.services.simulation import TreatmentSimulator

router = APIRouter(tags=["simulations"])


def _project_key(project_id_raw: object) -> str:
    key = str(project_id_raw or "").strip()
    return key[:64] if key else "default"


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@router.post("/run", response_model=SimulationOutput)
def run_simulation(request: SimulationRequest, db: Session = Depends(get_db)):
    logger.info(f"🚀 [Simulation Start] ID: {request.simulation_id}")

    try:
        # 1) Run engine
        result = TreatmentSimulator().run(request)

        # 2) Persist Scenario (저장본과 응답 모두 같은 scenario_id)
        scenario_id = uuid.uuid4()
        result = result.model_copy(update={"scenario_id": str(scenario_id)})
        scn = Scenario(
            id=scenario_id,
            name=request.scenario_name or request.simulation_id or "Untitled",
            project_key=_project_key(request.project_id),
            mode=result.mode.value,
            input_json=request.model_dump(mode="json"),
            output_json=result.model_dump(mode="json"),
        )
        db.add(scn)
        db.commit()

        return result

    except ValueError as e:
        logger.warning(f"⚠️ Validation Error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("🔥 Internal Simulation Error")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sweep", response_model=SweepOutput)
def run_sweep(request: SweepRequest):
    logger.info(f"📈 [Sweep] {request.parameter} ({len(request.values or [])} points)")
    try:
        return TreatmentSimulator().sweep(request, request.parameter, request.values or [])
    except ValueError as e:
        logger.warning(f"⚠️ Sweep Error: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/defaults", response_model=DefaultsOut)
def get_defaults():
    return DefaultsOut(
        system=DEFAULT_SYSTEM_PARAMS,
        water=DEFAULT_WATER_PARAMS,
        kinetics=DEFAULT_KINETICS,
    )
