from __future__ import annotations
import time
import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sdkgen import __version__
from sdkgen.obs.logging_setup import get_logger
from sdkgen.services.job_manager import job_manager

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

@router.get("/health")
async def health() -> JSONResponse:
    """Health check endpoint."""
    jobs = job_manager.list_jobs(limit=10_000)
    return JSONResponse({
        "status": "ok",
        "version": __version__,
        "timestamp": time.time(),
        "analysisClient": "openai" if job_manager.engine.client.enabled else "disabled",
        "jobs": {
            "total": len(jobs),
            "active": sum(1 for job in jobs if not job.status.is_terminal),
        },
        "progressSubscribers": job_manager.broadcaster.subscriber_count,
    })

@router.get("/live")
async def liveness_check() -> JSONResponse:
    """Liveness probe: the process is serving requests."""
    return JSONResponse({
        "status": "alive",
        "timestamp": time.time(),
        "service": "sdk-generator",
        "version": __version__
    })

@router.get("/ready")
async def readiness_check() -> JSONResponse:
    """
    Readiness probe.
    Unhealthy when memory or disk pressure would make PDF extraction and
    SDK packaging unreliable.
    """
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage('/')
    memory_healthy = memory.percent < 90
    disk_healthy = disk.percent < 95
    ready = memory_healthy and disk_healthy

    checks = {
        "system": {
            "status": "healthy" if ready else "degraded",
            "memory_percent": memory.percent,
            "disk_percent": disk.percent,
        },
        "analysis": {
            "status": "healthy",
            "mode": "openai" if job_manager.engine.client.enabled else "heuristic",
        },
    }

    if not ready:
        logger.warning("Readiness check failed", checks=checks)

    return JSONResponse(
        {"status": "ready" if ready else "not_ready", "timestamp": time.time(), "checks": checks},
        status_code=200 if ready else 503,
    )
