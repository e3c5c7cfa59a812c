from __future__ import annotations
from typing import List
from sdkgen.documents.base import DocumentSignals, NormalizedDocument, SpecDocument, TextDocument
from sdkgen.models.schemas import (
    AnalysisResult,
    Authentication,
    AuthType,
    Endpoint,
    EndpointResponse,
    Parameter,
    ProviderType,
)
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

VIABILITY_THRESHOLD = 60
MAX_CONFIDENCE = 100

NOT_VIABLE_ISSUES = [
    "Insufficient documentation detected",
    "Missing critical API details",
]

RECOMMENDATIONS = [
    "Review authentication requirements",
    "Verify all required endpoints are documented",
    "Check for rate limiting information",
    "Validate request/response schemas",
]


def score_text(signals: DocumentSignals) -> int:
    confidence = 0
    if signals.has_authentication:
        confidence += 30
    if signals.has_endpoints:
        confidence += 40
    if signals.has_examples:
        confidence += 20
    if signals.provider_type != ProviderType.UNKNOWN:
        confidence += 10
    return min(confidence, MAX_CONFIDENCE)


def score_spec(endpoints: List[Endpoint], authentication: Authentication) -> int:
    confidence = 0
    if len(endpoints) >= 1:
        confidence += 40
    if len(endpoints) >= 3:
        confidence += 20
    if authentication.type != AuthType.UNKNOWN:
        confidence += 30
    if any(endpoint.method.upper() == "POST" for endpoint in endpoints):
        confidence += 10
    return min(confidence, MAX_CONFIDENCE)


def _responses(created: str, noun: str) -> List[EndpointResponse]:
    return [
        EndpointResponse(status_code=201, description=f"{noun} {created}", schema={}),
        EndpointResponse(status_code=400, description="Invalid request", schema={}),
    ]


def _lookup(noun: str) -> List[EndpointResponse]:
    return [
        EndpointResponse(status_code=200, description=f"{noun} details", schema={}),
        EndpointResponse(status_code=404, description=f"{noun} not found", schema={}),
    ]


def sample_endpoints(provider_type: ProviderType) -> List[Endpoint]:
    """Canned endpoints for a provider family when only free text is available."""
    if provider_type == ProviderType.PAYMENT:
        return [
            Endpoint(
                path="/api/payments",
                method="POST",
                purpose="create_payment",
                parameters=[
                    Parameter(name="amount", type="number", required=True, description="Payment amount"),
                    Parameter(name="currency", type="string", required=True, description="Currency code"),
                    Parameter(name="description", type="string", required=False, description="Payment description"),
                ],
                responses=_responses("created successfully", "Payment"),
            ),
            Endpoint(
                path="/api/payments/{id}",
                method="GET",
                purpose="get_payment",
                parameters=[Parameter(name="id", type="string", required=True, description="Payment ID")],
                responses=_lookup("Payment"),
            ),
        ]

    if provider_type == ProviderType.SHIPPING:
        return [
            Endpoint(
                path="/api/shipments",
                method="POST",
                purpose="create_shipment",
                parameters=[
                    Parameter(name="origin", type="object", required=True, description="Origin address"),
                    Parameter(name="destination", type="object", required=True, description="Destination address"),
                    Parameter(name="package", type="object", required=True, description="Package details"),
                ],
                responses=_responses("created successfully", "Shipment"),
            ),
            Endpoint(
                path="/api/shipments/{id}",
                method="GET",
                purpose="get_shipment",
                parameters=[Parameter(name="id", type="string", required=True, description="Shipment ID")],
                responses=_lookup("Shipment"),
            ),
        ]

    if provider_type == ProviderType.MESSAGING:
        return [
            Endpoint(
                path="/api/messages",
                method="POST",
                purpose="send_message",
                parameters=[
                    Parameter(name="to", type="string", required=True, description="Recipient address or number"),
                    Parameter(name="template", type="string", required=False, description="Message template"),
                    Parameter(name="body", type="string", required=True, description="Message body"),
                ],
                responses=_responses("sent successfully", "Message"),
            ),
            Endpoint(
                path="/api/campaigns",
                method="POST",
                purpose="create_campaign",
                parameters=[
                    Parameter(name="name", type="string", required=True, description="Campaign name"),
                    Parameter(name="recipients", type="array", required=True, description="Recipient list"),
                ],
                responses=_responses("created successfully", "Campaign"),
            ),
        ]

    return []


def _text_fallback(document: TextDocument) -> AnalysisResult:
    signals = document.signals
    confidence = score_text(signals)

    if signals.has_authentication:
        authentication = Authentication(
            type=AuthType.BEARER,
            location="header",
            parameter_name="Authorization",
            description="Bearer token authentication",
        )
    else:
        authentication = Authentication(type=AuthType.UNKNOWN)

    return AnalysisResult(
        is_viable=confidence >= VIABILITY_THRESHOLD,
        provider_type=signals.provider_type,
        confidence=confidence,
        endpoints=sample_endpoints(signals.provider_type),
        authentication=authentication,
        issues=list(NOT_VIABLE_ISSUES) if confidence < VIABILITY_THRESHOLD else [],
        recommendations=list(RECOMMENDATIONS),
        source="heuristic",
    )


def _spec_fallback(document: SpecDocument) -> AnalysisResult:
    confidence = score_spec(document.endpoints, document.authentication)

    issues: List[str] = []
    if confidence < VIABILITY_THRESHOLD:
        issues.extend(NOT_VIABLE_ISSUES)
        if not document.endpoints:
            issues.append("No endpoints found in specification")
        if document.authentication.type == AuthType.UNKNOWN:
            issues.append("No security scheme declared")

    return AnalysisResult(
        is_viable=confidence >= VIABILITY_THRESHOLD,
        provider_type=document.provider_type,
        confidence=confidence,
        endpoints=list(document.endpoints),
        authentication=document.authentication,
        issues=issues,
        recommendations=list(RECOMMENDATIONS),
        source="heuristic",
    )


def fallback_analysis(document: NormalizedDocument) -> AnalysisResult:
    """Deterministic viability estimate used when the external analysis is unavailable."""
    if isinstance(document, SpecDocument):
        result = _spec_fallback(document)
    else:
        result = _text_fallback(document)

    logger.info("Heuristic analysis computed",
               confidence=result.confidence,
               provider_type=result.provider_type.value,
               is_viable=result.is_viable)
    return result
