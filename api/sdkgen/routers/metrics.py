from __future__ import annotations
import os
import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
from sdkgen.obs.metrics import metrics_registry
from sdkgen.obs.prometheus_metrics import prometheus_metrics
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["metrics"])

@router.get("/metrics")
async def get_metrics() -> JSONResponse:
    """Get application metrics in JSON format."""
    metrics_data = metrics_registry.get_metrics()

    process = psutil.Process(os.getpid())
    system_metrics = {
        "system": {
            "cpu_percent": psutil.cpu_percent(),
            "memory_percent": psutil.virtual_memory().percent,
            "process_memory_mb": process.memory_info().rss / 1024 / 1024
        }
    }

    logger.debug("Metrics endpoint accessed")
    return JSONResponse({**metrics_data, **system_metrics})

@router.get("/metrics/prometheus")
async def prometheus_metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    process = psutil.Process(os.getpid())
    prometheus_metrics.update_system_metrics(process.memory_info().rss, process.cpu_percent())

    return Response(
        content=prometheus_metrics.get_prometheus_metrics(),
        media_type=prometheus_metrics.get_content_type()
    )
