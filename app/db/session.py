# ./app/db/session.py

from __future__ import annotations

from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.db.models import Base

# 모델 강제 import (metadata 등록)
from app.db.models import scenario as _s  # noqa: F401


def _ensure_sqlite_dir(url: str) -> None:
    """sqlite:///path/to/db.sqlite 형태에서 폴더 자동 생성"""
    if not url.startswith("sqlite") or ":memory:" in url:
        return
    # sqlite:///./.data/ozonova.db → "./.data/ozonova.db"
    path_part = url.split("///", 1)[1] if "///" in url else ""
    path_part = path_part.split("?", 1)[0]
    if path_part:
        Path(path_part).parent.mkdir(parents=True, exist_ok=True)


_ensure_sqlite_dir(settings.DB_URL)

engine = create_engine(
    settings.DB_URL,
    connect_args={"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
