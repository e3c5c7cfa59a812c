from __future__ import annotations
import asyncio
import contextlib
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from . import __version__
from .config import CORS_ORIGINS, JOB_SWEEP_INTERVAL
from .errors import GeneratorError

# Import observability setup
from .obs.otel import setup_tracing
from .obs.logging_setup import setup_logging, get_logger
from .obs.middleware import MetricsMiddleware

# Import middleware
from .middleware.request_id import RequestIDMiddleware

# Import services
from .services.job_manager import job_manager

# Import routers
from .routers import analysis, download, health, metrics, upload

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan with startup and shutdown logic."""

    # Startup
    setup_tracing()
    setup_logging()

    sweeper = asyncio.create_task(job_manager.run_sweeper(JOB_SWEEP_INTERVAL), name="job-sweeper")
    logger.info("SDK generator ready",
                version=__version__,
                analysis_mode="openai" if job_manager.engine.client.enabled else "heuristic")

    yield

    # Shutdown
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    await job_manager.shutdown()

    try:
        from opentelemetry import trace
        tracer_provider = trace.get_tracer_provider()
        if hasattr(tracer_provider, 'shutdown'):
            tracer_provider.shutdown()
    except Exception as e:
        logger.warning("Error during telemetry shutdown", error=str(e))

    logger.info("Shutdown complete")

# Create FastAPI app with lifespan
app = FastAPI(
    title="Integration SDK Generator",
    version=__version__,
    description="Analyzes provider API documentation and generates TypeScript client SDKs",
    lifespan=lifespan
)

@app.exception_handler(GeneratorError)
async def generator_error_handler(request: Request, exc: GeneratorError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message, error_code=exc.code)
    return JSONResponse(
        {"success": False, "error": exc.to_dict()},
        status_code=exc.status_code
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ())[1:])}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        {"success": False, "error": {"code": "VALIDATION_ERROR", "message": details or "Invalid request"}},
        status_code=400
    )

# Request ID middleware
app.add_middleware(RequestIDMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (before FastAPI instrumentation)
app.add_middleware(MetricsMiddleware)

# Auto-instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(
    app,
    excluded_urls="/health,/ready,/live,/metrics/prometheus,/metrics"
)

# Include routers
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(upload.router)
app.include_router(analysis.router)
app.include_router(download.router)

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Integration SDK Generator",
        "version": __version__,
        "endpoints": {
            "upload_pdf": "POST /api/upload/pdf - Upload PDF documentation",
            "upload_url": "POST /api/upload/url - Submit Swagger/OpenAPI URL",
            "status": "/api/analysis/{job_id} - Job status",
            "result": "/api/analysis/{job_id}/result - Analysis and generated SDK",
            "stream": "/api/analysis/{job_id}/stream - Stream job progress",
            "download": "/api/download/{job_id} - Download SDK as ZIP",
            "health": "/health - Basic health check",
            "metrics": "/metrics - JSON metrics",
            "prometheus": "/metrics/prometheus - Prometheus metrics"
        }
    }
