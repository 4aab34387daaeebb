# app/db/models/scenario.py
from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, UUIDMixin, TimestampMixin


class Scenario(UUIDMixin, TimestampMixin, Base):
    """POST /simulation/run 1회 = 1 row (입력 스냅샷 + 결과)."""

    __tablename__ = "scenario"

    name: Mapped[str] = mapped_column(String(120), index=True)
    # project_id 는 'e2e' 같은 임의 문자열도 허용하므로 문자열 key 로 저장
    project_key: Mapped[str] = mapped_column(String(64), index=True, default="default")
    mode: Mapped[str] = mapped_column(String(16))
    input_json: Mapped[dict] = mapped_column(JSON, default=dict)
    output_json: Mapped[dict] = mapped_column(JSON, default=dict)
