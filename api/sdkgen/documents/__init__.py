"""
Document analyzers.

Provides:
- PDF text normalization with structural signals
- Swagger/OpenAPI parsing into endpoints and authentication
- Remote Swagger/OpenAPI discovery over HTTP
"""

from .base import DocumentSignals, TextDocument, SpecInfo, SpecDocument, NormalizedDocument
from .text_document import normalize_text
from .openapi_document import normalize_spec
from .fetcher import fetch_spec

__all__ = [
    "DocumentSignals",
    "TextDocument",
    "SpecInfo",
    "SpecDocument",
    "NormalizedDocument",
    "normalize_text",
    "normalize_spec",
    "fetch_spec",
]
