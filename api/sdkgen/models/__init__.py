"""
Data models and schemas.

Provides:
- Job, progress and analysis models
- Generated SDK models
- Pydantic models for API requests/responses
"""

from .schemas import (
    JobStatus,
    JobKind,
    ProviderType,
    AuthType,
    Parameter,
    EndpointResponse,
    Endpoint,
    Authentication,
    AnalysisResult,
    GeneratedFile,
    GeneratedSDK,
    JobProgress,
    ProgressEvent,
    JobRecord,
    UrlSubmissionRequest,
    SubmissionResponse,
    JobStatusResponse,
    JobResultResponse,
)

__all__ = [
    "JobStatus",
    "JobKind",
    "ProviderType",
    "AuthType",
    "Parameter",
    "EndpointResponse",
    "Endpoint",
    "Authentication",
    "AnalysisResult",
    "GeneratedFile",
    "GeneratedSDK",
    "JobProgress",
    "ProgressEvent",
    "JobRecord",
    "UrlSubmissionRequest",
    "SubmissionResponse",
    "JobStatusResponse",
    "JobResultResponse",
]
