from __future__ import annotations
from typing import Optional


class GeneratorError(Exception):
    """Base error for the SDK generation pipeline."""

    status_code: int = 500
    code: str = "GENERATOR_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class MalformedInput(GeneratorError):
    """Input document failed signature, extraction or parsing checks."""

    status_code = 400
    code = "MALFORMED_INPUT"


class InvalidSpec(MalformedInput):
    """Document is not a Swagger/OpenAPI description."""

    code = "INVALID_SPEC"


class SpecNotFound(InvalidSpec):
    """No URL variant produced a Swagger/OpenAPI document."""

    status_code = 404
    code = "SWAGGER_NOT_FOUND"


class ExternalServiceFailure(GeneratorError):
    """Timeout, rate limit or transport error from an external service."""

    status_code = 502
    code = "EXTERNAL_SERVICE_FAILURE"


class AnalysisParseFailure(GeneratorError):
    """LLM output did not satisfy the analysis schema."""

    code = "AI_PARSE_ERROR"


class SynthesisFailure(GeneratorError):
    """SDK synthesis raised unexpectedly."""

    code = "SDK_SYNTHESIS_ERROR"


class InvalidTransition(GeneratorError):
    """Job state machine rejected a transition."""

    code = "INVALID_TRANSITION"


class JobNotFound(GeneratorError):
    status_code = 404
    code = "JOB_NOT_FOUND"


class JobNotReady(GeneratorError):
    """Result or download requested before the job produced it."""

    status_code = 400
    code = "JOB_NOT_COMPLETED"
