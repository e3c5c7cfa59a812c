"""
API routers module.

Provides:
- Document upload (PDF and Swagger/OpenAPI URL)
- Job status, result and progress stream
- SDK download
- Health and metrics endpoints
"""

from . import analysis, download, health, metrics, upload

__all__ = [
    "analysis",
    "download",
    "health",
    "metrics",
    "upload"
]
