"""
Integration SDK Generator - API documentation analysis and client SDK synthesis.

A FastAPI service with:
- PDF and Swagger/OpenAPI document analysis
- LLM viability analysis with retry and heuristic fallback
- TypeScript SDK generation packaged as ZIP
- In-memory job orchestration with progress streaming (SSE)
- OpenTelemetry, Prometheus and Langfuse observability
"""

__version__ = "1.0.0"
__author__ = "SDK Generator Team"
__description__ = "Integration SDK generator service"

# Export main application
from .main import app

__all__ = ["app"]
