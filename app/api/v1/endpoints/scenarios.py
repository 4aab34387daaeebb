# app/api/v1/endpoints/scenarios.py
from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.v1.schemas import ScenarioDetailOut, ScenarioSummaryOut
from app.db.models import Scenario
from app.db.session import get_db

router = APIRouter(tags=["scenarios"])


@router.get("", response_model=List[ScenarioSummaryOut])
def list_scenarios(
    limit: int = Query(default=20, ge=1, le=200),
    project_key: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    stmt = select(Scenario).order_by(Scenario.created_at.desc()).limit(limit)
    if project_key:
        stmt = stmt.where(Scenario.project_key == project_key)
    return [ScenarioSummaryOut.model_validate(s) for s in db.scalars(stmt).all()]


@router.get("/{scenario_id}", response_model=ScenarioDetailOut)
def get_scenario(scenario_id: uuid.UUID, db: Session = Depends(get_db)):
    scn = db.get(Scenario, scenario_id)
    if scn is None:
        raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")
    return ScenarioDetailOut.model_validate(scn)
