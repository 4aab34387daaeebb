from fastapi import APIRouter

from app.api.v1.endpoints import (
    advisory,
    health,
    scenarios,
    simulation,
)

api_router = APIRouter()

# ==============================================================================
# 1. Core Engine (핵심 시뮬레이션)
# ==============================================================================
api_router.include_router(simulation.router, prefix="/simulation", tags=["Simulation"])

# ==============================================================================
# 2. Data (시나리오 이력)
# ==============================================================================
api_router.include_router(scenarios.router, prefix="/scenarios", tags=["Scenarios"])

# ==============================================================================
# 3. Features (LLM 공정 감사)
# ==============================================================================
api_router.include_router(advisory.router, prefix="/advisory", tags=["Advisory"])

# ==============================================================================
# 4. System (헬스 체크)
# ==============================================================================
api_router.include_router(health.router, tags=["Health"])
