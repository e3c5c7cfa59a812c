from __future__ import annotations
import json
import pytest
from sdkgen.documents import normalize_spec
from sdkgen.documents.base import DocumentSignals, TextDocument
from sdkgen.errors import AnalysisParseFailure, ExternalServiceFailure
from sdkgen.models.schemas import AuthType, ProviderType
from sdkgen.services.analysis_engine import AnalysisEngine, build_prompt, parse_analysis_response
from sdkgen.services.llm_service import DisabledAnalysisClient, build_analysis_client
from tests.helpers import ScriptedAnalysisClient, openapi_document


def answer(**overrides) -> str:
    payload = {
        "isViable": True,
        "providerType": "payment",
        "confidence": 87,
        "endpoints": [
            {
                "path": "/v1/charges",
                "method": "post",
                "purpose": "create_payment",
                "parameters": [{"name": "amount", "type": "number", "required": True}],
                "responses": [{"statusCode": 201, "description": "Created", "schema": {}}],
            }
        ],
        "authentication": {"type": "bearer", "location": "header", "parameterName": "Authorization"},
        "issues": [],
        "recommendations": ["Add idempotency keys"],
    }
    payload.update(overrides)
    return json.dumps(payload)


@pytest.fixture
def text_doc() -> TextDocument:
    return TextDocument(
        cleaned_text="POST /api/payments with a Bearer token",
        signals=DocumentSignals(has_endpoints=True, has_authentication=True, provider_type=ProviderType.PAYMENT),
        pages=1,
    )


def test_parse_valid_answer():
    result = parse_analysis_response(answer())
    assert result.is_viable is True
    assert result.provider_type == ProviderType.PAYMENT
    assert result.confidence == 87
    assert result.endpoints[0].method == "POST"
    assert result.endpoints[0].responses[0].status_code == 201
    assert result.authentication.type == AuthType.BEARER
    assert result.authentication.parameter_name == "Authorization"
    assert result.source == "llm"


def test_parse_maps_marketing_label_to_messaging():
    result = parse_analysis_response(answer(providerType="marketing"))
    assert result.provider_type == ProviderType.MESSAGING


def test_parse_drops_malformed_endpoints():
    result = parse_analysis_response(answer(endpoints=[{"path": "/x"}, "junk", {"path": "/y", "method": "get", "purpose": "list"}]))
    assert [e.path for e in result.endpoints] == ["/y"]


def test_parse_unknown_auth_degrades_to_unknown():
    result = parse_analysis_response(answer(authentication={"type": "mutual-tls"}))
    assert result.authentication.type == AuthType.UNKNOWN


@pytest.mark.parametrize("text", [
    "not json at all",
    "[1, 2, 3]",
    answer(isViable="yes"),
    answer(providerType="banking"),
    answer(providerType=["payment"]),
    answer(confidence=140),
    answer(confidence=-1),
    answer(confidence="high"),
    answer(confidence=True),
])
def test_parse_rejects_contract_violations(text):
    with pytest.raises(AnalysisParseFailure):
        parse_analysis_response(text)


def test_prompt_for_spec_includes_metadata():
    document = normalize_spec(openapi_document())
    prompt = build_prompt(document, "acme")
    assert 'for "acme"' in prompt
    assert "SWAGGER METADATA" in prompt
    assert "Endpoints Count: 3" in prompt
    assert "Authentication: bearer" in prompt


def test_prompt_truncates_text_content(text_doc):
    prompt = build_prompt(text_doc, "acme", budget=4)
    assert "EXTRACTED CONTENT:\nPOST\n" in prompt


def test_placeholder_key_disables_client():
    assert isinstance(build_analysis_client(""), DisabledAnalysisClient)
    assert isinstance(build_analysis_client(None), DisabledAnalysisClient)
    assert isinstance(build_analysis_client("your_actual_openai_api_key_here"), DisabledAnalysisClient)


@pytest.mark.asyncio
async def test_disabled_client_uses_heuristics(text_doc):
    engine = AnalysisEngine(client=DisabledAnalysisClient())
    result = await engine.analyze(text_doc, "acme")
    assert result.source == "heuristic"
    assert result.confidence == 80


@pytest.mark.asyncio
async def test_model_answer_is_used(text_doc, no_delay_retry):
    client = ScriptedAnalysisClient(answer())
    engine = AnalysisEngine(client=client, retry_config=no_delay_retry)

    result = await engine.analyze(text_doc, "acme")

    assert client.calls == 1
    assert result.source == "llm"
    assert result.confidence == 87


@pytest.mark.asyncio
async def test_timeouts_exhaust_retries_then_fall_back(text_doc, no_delay_retry):
    client = ScriptedAnalysisClient(ExternalServiceFailure("timed out", code="AI_TIMEOUT"))
    engine = AnalysisEngine(client=client, retry_config=no_delay_retry)

    result = await engine.analyze(text_doc, "acme")

    assert client.calls == 4
    assert result.source == "heuristic"
    assert result.confidence == 80
    assert result.is_viable is True


@pytest.mark.asyncio
async def test_transient_failure_then_success(text_doc, no_delay_retry):
    client = ScriptedAnalysisClient(ExternalServiceFailure("rate limited"), answer(confidence=55, isViable=False))
    engine = AnalysisEngine(client=client, retry_config=no_delay_retry)

    result = await engine.analyze(text_doc, "acme")

    assert client.calls == 2
    assert result.source == "llm"
    assert result.is_viable is False


@pytest.mark.asyncio
async def test_unparseable_answer_falls_back_without_retry(text_doc, no_delay_retry):
    client = ScriptedAnalysisClient("this is not json")
    engine = AnalysisEngine(client=client, retry_config=no_delay_retry)

    result = await engine.analyze(text_doc, "acme")

    assert client.calls == 1
    assert result.source == "heuristic"


@pytest.mark.asyncio
async def test_spec_fallback_uses_declared_endpoints(no_delay_retry):
    document = normalize_spec(openapi_document())
    client = ScriptedAnalysisClient(ExternalServiceFailure("down"))
    engine = AnalysisEngine(client=client, retry_config=no_delay_retry)

    result = await engine.analyze(document, "acme")

    assert result.source == "heuristic"
    assert result.confidence == 100
    assert len(result.endpoints) == 3
    assert result.authentication.type == AuthType.BEARER
