# ./app/api/v1/endpoints/health.py
from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from app.core.config import settings
from app.db.session import engine

router = APIRouter(prefix="/health", tags=["health"])


class HealthOut(BaseModel):
    status: str
    env: str
    db_ping: bool | None = None
    advisory_configured: bool | None = None


@router.get("", response_model=dict)
def health_simple():
    return {"status": "ok", "env": settings.APP_ENV}


@router.get("/extended", response_model=HealthOut)
def health_extended():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        ping = True
    except Exception:
        ping = False

    return HealthOut(
        status="ok" if ping else "degraded",
        env=settings.APP_ENV,
        db_ping=ping,
        advisory_configured=settings.advisory_configured,
    )
