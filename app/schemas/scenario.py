# app/schemas/scenario.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from .common import AppBaseModel, TreatmentMode


class ScenarioSummaryOut(AppBaseModel):
    id: UUID
    name: str
    project_key: str
    mode: TreatmentMode
    created_at: Optional[datetime] = None


class ScenarioDetailOut(ScenarioSummaryOut):
    input_json: Dict[str, Any]
    output_json: Dict[str, Any]
