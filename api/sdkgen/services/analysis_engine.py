from __future__ import annotations
import json
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from sdkgen.config import ANALYSIS_CONTENT_BUDGET
from sdkgen.documents.base import NormalizedDocument, SpecDocument
from sdkgen.errors import AnalysisParseFailure, ExternalServiceFailure
from sdkgen.models.schemas import AnalysisResult, Authentication, Endpoint, ProviderType
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger
from sdkgen.obs.metrics import inc_counter
from sdkgen.obs.prometheus_metrics import prometheus_metrics
from sdkgen.services.heuristics import fallback_analysis
from sdkgen.services.llm_service import AnalysisClient, build_analysis_client
from sdkgen.utils.retry_backoff import ANALYSIS_RETRY, RetryConfig, retry_async_operation

logger = get_logger(__name__)

# "marketing" is the label older prompts used for the messaging family
_PROVIDER_LABELS = {
    "payment": ProviderType.PAYMENT,
    "shipping": ProviderType.SHIPPING,
    "messaging": ProviderType.MESSAGING,
    "marketing": ProviderType.MESSAGING,
    "unknown": ProviderType.UNKNOWN,
}

SYSTEM_PROMPT = """You are an expert API integration analyst specializing in ecommerce integrations. Your task is to analyze API documentation and determine if a client SDK can be generated for it.

INTEGRATION PATTERNS:
- Payment providers must implement: createPayment, getPaymentDetails, cancelPayment
- Shipping providers must implement: createShipment, getShipmentDetails, updateShipment, cancelShipment, getShippingLabel, getTrackingUrl
- Messaging providers must implement: sendEmail, sendSMS, createCampaign, getSubscribers

You must respond ONLY with valid JSON following this exact structure:
{
  "isViable": boolean,
  "providerType": "payment" | "shipping" | "messaging" | "unknown",
  "confidence": number (0-100),
  "endpoints": [
    {
      "path": "string",
      "method": "GET|POST|PUT|DELETE|PATCH",
      "purpose": "string (e.g., create_payment, get_shipment)",
      "parameters": [{"name": "string", "type": "string", "required": boolean, "description": "string"}],
      "responses": [{"statusCode": number, "description": "string", "schema": {}}]
    }
  ],
  "authentication": {
    "type": "bearer" | "api-key" | "oauth" | "basic" | "unknown",
    "location": "header" | "query" | "body",
    "parameterName": "string",
    "description": "string"
  },
  "issues": ["string array of missing or problematic elements"],
  "recommendations": ["string array of implementation suggestions"]
}"""

REQUIREMENTS = """REQUIREMENTS:
1. Determine if this API can be integrated as a generated client SDK
2. Identify the provider type (payment/shipping/messaging)
3. Extract all available endpoints with their methods, parameters, and responses
4. Identify authentication mechanism
5. List any missing critical elements
6. Provide implementation recommendations

Focus on practical integration feasibility for TypeScript SDK generation."""


def build_prompt(document: NormalizedDocument, provider_name: str,
                 budget: int = ANALYSIS_CONTENT_BUDGET) -> str:
    """User prompt with document metadata and truncated content."""
    if isinstance(document, SpecDocument):
        content = json.dumps(document.document, indent=2, default=str)[:budget]
        body = (
            "SWAGGER METADATA:\n"
            f"- Version: {document.version}\n"
            f"- Title: {document.info.title or 'N/A'}\n"
            f"- Base URL: {document.info.base_url}\n"
            f"- Endpoints Count: {len(document.endpoints)}\n"
            f"- Detected API Type: {document.provider_type.value}\n"
            f"- Authentication: {document.authentication.type.value}\n\n"
            f"SWAGGER DOCUMENT:\n{content}"
        )
        kind = "SWAGGER"
    else:
        signals = document.signals
        body = (
            "PDF METADATA:\n"
            f"- Pages: {document.pages}\n"
            f"- Title: {document.title or 'N/A'}\n"
            f"- Has Endpoints: {signals.has_endpoints}\n"
            f"- Has Authentication: {signals.has_authentication}\n"
            f"- Detected API Type: {signals.provider_type.value}\n"
            f"- Sections: {', '.join(signals.sections)}\n\n"
            f"EXTRACTED CONTENT:\n{document.cleaned_text[:budget]}"
        )
        kind = "PDF"

    return (
        f'Analyze this {kind} API documentation for "{provider_name}" and determine integration viability.\n\n'
        f"{body}\n\n{REQUIREMENTS}"
    )


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _endpoints(value: Any) -> List[Endpoint]:
    if not isinstance(value, list):
        return []
    endpoints = []
    for item in value:
        try:
            endpoint = Endpoint.model_validate(item)
        except ValidationError:
            logger.debug("Dropping malformed endpoint from analysis", endpoint=str(item)[:200])
            continue
        endpoints.append(endpoint.model_copy(update={"method": endpoint.method.upper()}))
    return endpoints


def _authentication(value: Any) -> Authentication:
    if not isinstance(value, dict):
        return Authentication()
    try:
        return Authentication.model_validate(value)
    except ValidationError:
        return Authentication()


def parse_analysis_response(text: str) -> AnalysisResult:
    """Validate the model's JSON answer; raise AnalysisParseFailure on contract violations."""
    try:
        parsed: Dict[str, Any] = json.loads(text)
    except (TypeError, ValueError) as e:
        raise AnalysisParseFailure(f"Invalid AI response format: {e}") from e

    if not isinstance(parsed, dict):
        raise AnalysisParseFailure("Invalid AI response format: expected a JSON object")

    if not isinstance(parsed.get("isViable"), bool):
        raise AnalysisParseFailure("Invalid isViable field")

    label = parsed.get("providerType")
    provider_type = _PROVIDER_LABELS.get(label) if isinstance(label, str) else None
    if provider_type is None:
        raise AnalysisParseFailure("Invalid providerType field")

    confidence = parsed.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not 0 <= confidence <= 100:
        raise AnalysisParseFailure("Invalid confidence field")

    return AnalysisResult(
        is_viable=parsed["isViable"],
        provider_type=provider_type,
        confidence=int(round(confidence)),
        endpoints=_endpoints(parsed.get("endpoints")),
        authentication=_authentication(parsed.get("authentication")),
        issues=_string_list(parsed.get("issues")),
        recommendations=_string_list(parsed.get("recommendations")),
        source="llm",
    )


class AnalysisEngine:
    """Produces an AnalysisResult for a normalized document.

    The external model is called under the retry policy; exhausting retries or
    receiving an unparseable answer yields the deterministic heuristic result
    instead of an error.
    """

    def __init__(self, client: Optional[AnalysisClient] = None, retry_config: Optional[RetryConfig] = None):
        self.client = client if client is not None else build_analysis_client()
        self.retry_config = retry_config or ANALYSIS_RETRY

    async def _attempt(self, system_prompt: str, user_prompt: str) -> str:
        try:
            text = await self.client.complete(system_prompt, user_prompt)
        except ExternalServiceFailure:
            prometheus_metrics.record_analysis_attempt("failure")
            raise
        prometheus_metrics.record_analysis_attempt("success")
        return text

    @traced("analyze_document")
    async def analyze(self, document: NormalizedDocument, provider_name: str) -> AnalysisResult:
        if not self.client.enabled:
            result = fallback_analysis(document)
        else:
            result = await self._analyze_with_model(document, provider_name)

        prometheus_metrics.record_analysis_result(result.source, result.provider_type.value)
        inc_counter("analysis_results_total", {"source": result.source})
        return result

    async def _analyze_with_model(self, document: NormalizedDocument, provider_name: str) -> AnalysisResult:
        user_prompt = build_prompt(document, provider_name)
        logger.info("Requesting external analysis",
                   provider_name=provider_name,
                   model=self.client.model,
                   prompt_length=len(user_prompt),
                   document_kind="spec" if isinstance(document, SpecDocument) else "text")

        try:
            text = await retry_async_operation(
                lambda: self._attempt(SYSTEM_PROMPT, user_prompt),
                self.retry_config,
                "viability_analysis",
            )
            result = parse_analysis_response(text)
        except ExternalServiceFailure as e:
            logger.warning("External analysis unavailable, using heuristic fallback", error=e.message)
            return fallback_analysis(document)
        except AnalysisParseFailure as e:
            logger.warning("External analysis unparseable, using heuristic fallback", error=e.message)
            return fallback_analysis(document)

        logger.info("External analysis completed",
                   confidence=result.confidence,
                   provider_type=result.provider_type.value,
                   endpoints=len(result.endpoints),
                   auth_type=result.authentication.type.value)
        return result
