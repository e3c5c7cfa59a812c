"""
Utility functions and helpers.

Provides:
- Server-sent events formatting
- PDF validation and text extraction
- Retry logic with linear or exponential backoff
- SDK ZIP packaging
"""

from .sse import create_sse_message, create_sse_heartbeat, create_sse_close
from .pdf_extractor import pdf_extractor, PDFExtractor, ExtractedPdf
from .retry_backoff import (
    retry_with_backoff,
    RetryConfig,
    ANALYSIS_RETRY,
    retry_async_operation
)
from .zip_builder import build_sdk_zip, archive_name

__all__ = [
    "create_sse_message",
    "create_sse_heartbeat",
    "create_sse_close",
    "pdf_extractor",
    "PDFExtractor",
    "ExtractedPdf",
    "retry_with_backoff",
    "RetryConfig",
    "ANALYSIS_RETRY",
    "retry_async_operation",
    "build_sdk_zip",
    "archive_name"
]
