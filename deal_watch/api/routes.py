# api/routes.py
"""
Deal Watch API
Operational endpoints for the pipeline: health, last cycle, manual run.
"""

from typing import Dict

from fastapi import APIRouter, HTTPException, Request
from loguru import logger
from pydantic import BaseModel

from ..schemas.deal_schemas import CycleReport


router = APIRouter(prefix="/api/deal-watch", tags=["deal-watch"])


# ============================================
# Models
# ============================================

class HealthResponse(BaseModel):
    """Component status"""
    status: str
    components: Dict[str, str]
    scheduler_running: bool


def _coordinator(request: Request):
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialised")
    return coordinator


# ============================================
# Endpoints
# ============================================

@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Check bus and price store connectivity"""
    coordinator = _coordinator(request)

    components = {
        "bus": "healthy" if coordinator.bus.health_check() else "unavailable",
        "store": "healthy" if coordinator.engine.store.health_check() else "unavailable"
    }
    status = "healthy" if all(v == "healthy" for v in components.values()) else "degraded"

    return HealthResponse(
        status=status,
        components=components,
        scheduler_running=coordinator.running
    )


@router.get("/cycles/last", response_model=CycleReport)
async def last_cycle(request: Request):
    """Counters of the most recent completed cycle"""
    coordinator = _coordinator(request)
    if coordinator.last_report is None:
        raise HTTPException(status_code=404, detail="No cycle has completed yet")
    return coordinator.last_report


@router.post("/cycles/run", response_model=CycleReport)
async def run_cycle(request: Request):
    """Run one cycle now and return its report"""
    coordinator = _coordinator(request)
    logger.info("Manual cycle requested")
    return await coordinator.run_cycle()
