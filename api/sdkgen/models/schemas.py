from __future__ import annotations
from enum import Enum
from typing import List, Literal, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with the camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JobStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobKind(str, Enum):
    DOCUMENT = "document"
    REMOTE_SPEC = "remote-spec"


class ProviderType(str, Enum):
    PAYMENT = "payment"
    SHIPPING = "shipping"
    MESSAGING = "messaging"
    UNKNOWN = "unknown"


class AuthType(str, Enum):
    BEARER = "bearer"
    API_KEY = "api-key"
    OAUTH = "oauth"
    BASIC = "basic"
    UNKNOWN = "unknown"


class Parameter(CamelModel):
    name: str
    type: str = "string"
    required: bool = False
    description: Optional[str] = None


class EndpointResponse(CamelModel):
    status_code: int
    description: str = ""
    schema_: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class Endpoint(CamelModel):
    path: str
    method: str
    purpose: str
    parameters: List[Parameter] = Field(default_factory=list)
    responses: List[EndpointResponse] = Field(default_factory=list)


class Authentication(CamelModel):
    type: AuthType = AuthType.UNKNOWN
    location: Optional[Literal["header", "query", "body", "cookie"]] = None
    parameter_name: Optional[str] = None
    description: Optional[str] = None


class AnalysisResult(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    is_viable: bool
    provider_type: ProviderType
    confidence: int = Field(ge=0, le=100)
    endpoints: List[Endpoint] = Field(default_factory=list)
    authentication: Authentication = Field(default_factory=Authentication)
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    source: Literal["llm", "heuristic"] = "heuristic"


class GeneratedFile(CamelModel):
    path: str
    content: str
    type: Literal["typescript", "json", "markdown", "javascript"]


class GeneratedSDK(CamelModel):
    provider_name: str
    files: List[GeneratedFile]
    manifest: Dict[str, Any]
    readme: str


class JobProgress(CamelModel):
    job_id: str
    status: JobStatus
    progress: int
    message: str
    error: Optional[str] = None


class ProgressEvent(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    job_id: str
    status: JobStatus
    progress: int
    message: str
    error: Optional[str] = None
    timestamp: float


class JobRecord(CamelModel):
    id: str
    kind: JobKind
    status: JobStatus
    progress: int
    message: str
    error: Optional[str] = None
    provider_name: str
    source: str
    created_at: float
    updated_at: float
    analysis: Optional[AnalysisResult] = None
    generated_sdk: Optional[GeneratedSDK] = Field(default=None, alias="generatedSDK")


# HTTP payloads

class UrlSubmissionRequest(CamelModel):
    url: str = Field(..., pattern=r"(?i)^https?://.+")
    provider_name: str = Field(..., min_length=1)


class SubmissionResponse(CamelModel):
    success: bool = True
    job_id: str
    message: str
    status: JobStatus = JobStatus.PENDING


class JobStatusResponse(CamelModel):
    success: bool = True
    job_id: str
    status: JobStatus
    progress: int
    message: str
    error: Optional[str] = None


class JobResultResponse(CamelModel):
    success: bool = True
    job_id: str
    analysis: Optional[AnalysisResult] = None
    generated_sdk: Optional[GeneratedSDK] = Field(default=None, alias="generatedSDK")
