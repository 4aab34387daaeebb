# tests/conftest.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator, List, Optional

# app.core.config 가 import 되기 전에 테스트 환경 고정 (실제 DB 파일 / LLM 호출 방지)
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DB_URL", "sqlite:///:memory:")
os.environ["ADVISORY_API_KEY"] = ""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.endpoints.advisory import get_advisory_backend
from app.db.models import Base
from app.db.session import get_db
from app.main import app
from app.schemas.treatment import SimulationRequest, SystemParams, WaterQualityParams
from app.services.advisory import AdvisoryBackend


DEFAULT_E2E_BASE_URL = os.getenv("OZONOVA_E2E_BASE_URL", "http://127.0.0.1:8003")
DEFAULT_E2E_TIMEOUT = float(os.getenv("OZONOVA_E2E_TIMEOUT", "30"))


# =============================================================================
# E2E options (--e2e)
# =============================================================================
@dataclass(frozen=True)
class E2EConfig:
    enabled: bool
    base_url: str
    timeout_s: float
    quiet: bool
    strict: bool
    only: Optional[str]

    def log(self, msg: str) -> None:
        if not self.quiet:
            print(msg, flush=True)


def pytest_addoption(parser: pytest.Parser) -> None:
    g = parser.getgroup("ozonova-e2e")

    g.addoption(
        "--e2e",
        action="store_true",
        default=False,
        help="Run E2E tests (marked with @pytest.mark.e2e).",
    )
    g.addoption(
        "--e2e-base-url",
        action="store",
        default=DEFAULT_E2E_BASE_URL,
        help=f"Base URL for the running API server (default: {DEFAULT_E2E_BASE_URL}).",
    )
    g.addoption(
        "--e2e-timeout",
        action="store",
        type=float,
        default=DEFAULT_E2E_TIMEOUT,
        help=f"HTTP timeout seconds for E2E calls (default: {DEFAULT_E2E_TIMEOUT}).",
    )
    g.addoption(
        "--e2e-only",
        action="store",
        default=None,
        help="Run only E2E tests whose nodeid contains this substring (e.g. sweep).",
    )
    g.addoption(
        "--e2e-quiet",
        action="store_true",
        default=False,
        help="Reduce E2E extra prints.",
    )
    g.addoption(
        "--e2e-strict",
        action="store_true",
        default=False,
        help="Strict E2E mode: fail (instead of skip) if server connectivity check fails.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "e2e: end-to-end tests (require running API server)"
    )


def _get_e2e_config(config: pytest.Config) -> E2EConfig:
    return E2EConfig(
        enabled=bool(config.getoption("--e2e")),
        base_url=str(config.getoption("--e2e-base-url")).rstrip("/"),
        timeout_s=float(config.getoption("--e2e-timeout")),
        quiet=bool(config.getoption("--e2e-quiet")),
        strict=bool(config.getoption("--e2e-strict")),
        only=config.getoption("--e2e-only"),
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: List[pytest.Item]
) -> None:
    """
    - Default: skip all @pytest.mark.e2e unless --e2e is passed.
    - If --e2e-only is set: keep only tests whose nodeid contains that substring.
    """
    e2e = _get_e2e_config(config)

    if not e2e.enabled:
        skip_e2e = pytest.mark.skip(reason="E2E tests are disabled. Re-run with --e2e")
        for item in items:
            if "e2e" in item.keywords:
                item.add_marker(skip_e2e)
        return

    if e2e.only:
        needle = str(e2e.only)
        selected: List[pytest.Item] = []
        deselected: List[pytest.Item] = []

        for item in items:
            if needle in item.nodeid:
                selected.append(item)
            else:
                deselected.append(item)

        if deselected:
            config.hook.pytest_deselected(items=deselected)
            items[:] = selected


@pytest.fixture(scope="session")
def e2e_cfg(pytestconfig: pytest.Config) -> E2EConfig:
    return _get_e2e_config(pytestconfig)


@pytest.fixture(scope="session")
def e2e_client(e2e_cfg: E2EConfig):
    """HTTP client for calling a running OzoNova API server."""
    client = httpx.Client(
        base_url=e2e_cfg.base_url,
        timeout=httpx.Timeout(e2e_cfg.timeout_s),
        follow_redirects=True,
    )

    try:
        r = client.get("/health")
        e2e_cfg.log(f"[E2E] server check: GET {e2e_cfg.base_url}/health -> {r.status_code}")
    except httpx.HTTPError as exc:
        client.close()
        if e2e_cfg.strict:
            raise
        pytest.skip(f"E2E server not reachable: {exc}")

    yield client
    client.close()


# =============================================================================
# Domain fixtures
# =============================================================================
@pytest.fixture()
def default_system() -> SystemParams:
    return SystemParams()


@pytest.fixture()
def default_water() -> WaterQualityParams:
    return WaterQualityParams()


@pytest.fixture()
def default_request() -> SimulationRequest:
    return SimulationRequest(scenario_name="pytest default")


class StaticAdvisoryBackend(AdvisoryBackend):
    """고정 응답(또는 예외)을 돌려주는 테스트용 backend."""

    model = "static-test"

    def __init__(self, reply: str = "", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def backend_factory():
    return StaticAdvisoryBackend


@pytest.fixture()
def advisory_backend() -> StaticAdvisoryBackend:
    return StaticAdvisoryBackend(
        reply='{"summary": "Residual is low.", '
        '"recommendations": ["Increase dose"], "warnings": []}'
    )


# =============================================================================
# API client (in-memory SQLite, overrides)
# =============================================================================
@pytest.fixture()
def session_factory() -> Iterator[sessionmaker]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture()
def client(session_factory: sessionmaker, advisory_backend: StaticAdvisoryBackend) -> Iterator[TestClient]:
    def _get_test_db() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_advisory_backend] = lambda: advisory_backend
    try:
        # lifespan(로그 파일 / 기본 DB 생성)은 실행하지 않음
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
