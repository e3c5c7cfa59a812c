"""
Middleware module - HTTP middleware components.

Provides:
- Request ID correlation and access logging
"""

from .request_id import RequestIDMiddleware

__all__ = [
    "RequestIDMiddleware"
]
