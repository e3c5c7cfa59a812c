from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from sdkgen.models.schemas import Authentication, Endpoint, ProviderType


@dataclass(frozen=True)
class DocumentSignals:
    has_endpoints: bool = False
    has_authentication: bool = False
    has_examples: bool = False
    has_schemas: bool = False
    sections: List[str] = field(default_factory=list)
    provider_type: ProviderType = ProviderType.UNKNOWN


@dataclass(frozen=True)
class TextDocument:
    """Cleaned text extracted from an unstructured (PDF) document."""

    cleaned_text: str
    signals: DocumentSignals
    raw_text: str = ""
    pages: int = 0
    title: Optional[str] = None


@dataclass(frozen=True)
class SpecInfo:
    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    base_url: str = ""


@dataclass(frozen=True)
class SpecDocument:
    """Parsed Swagger/OpenAPI document."""

    document: Dict[str, Any]
    version: str
    info: SpecInfo
    endpoints: List[Endpoint]
    authentication: Authentication
    schemas: Dict[str, Any]
    provider_type: ProviderType


NormalizedDocument = Union[TextDocument, SpecDocument]
