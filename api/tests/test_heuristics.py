from __future__ import annotations
import pytest
from sdkgen.documents import DocumentSignals, SpecDocument, SpecInfo, TextDocument
from sdkgen.documents.signals import detect_provider_type
from sdkgen.models.schemas import Authentication, AuthType, Endpoint, ProviderType
from sdkgen.services.heuristics import fallback_analysis, score_spec, score_text


def text_document(**signals) -> TextDocument:
    return TextDocument(cleaned_text="", signals=DocumentSignals(**signals))


def spec_document(endpoints, auth_type=AuthType.UNKNOWN, provider_type=ProviderType.UNKNOWN) -> SpecDocument:
    return SpecDocument(
        document={"openapi": "3.0.0"},
        version="3.0",
        info=SpecInfo(base_url="https://api.example.com"),
        endpoints=endpoints,
        authentication=Authentication(type=auth_type),
        schemas={},
        provider_type=provider_type,
    )


def endpoint(method: str, path: str = "/things") -> Endpoint:
    return Endpoint(path=path, method=method, purpose=f"{method.lower()}_things")


def test_empty_text_scores_zero():
    result = fallback_analysis(text_document())
    assert result.confidence == 0
    assert result.provider_type == ProviderType.UNKNOWN
    assert result.is_viable is False
    assert result.endpoints == []
    assert result.authentication.type == AuthType.UNKNOWN
    assert "Insufficient documentation detected" in result.issues
    assert result.source == "heuristic"


def test_fully_documented_payment_text():
    result = fallback_analysis(text_document(
        has_endpoints=True,
        has_authentication=True,
        has_examples=True,
        provider_type=ProviderType.PAYMENT,
    ))
    assert result.confidence == 100
    assert result.is_viable is True
    assert result.issues == []
    assert [e.purpose for e in result.endpoints] == ["create_payment", "get_payment"]
    assert result.authentication.type == AuthType.BEARER
    assert result.authentication.parameter_name == "Authorization"


@pytest.mark.parametrize("signals,expected", [
    ({"has_authentication": True}, 30),
    ({"has_endpoints": True}, 40),
    ({"has_examples": True}, 20),
    ({"provider_type": ProviderType.SHIPPING}, 10),
    ({"has_endpoints": True, "has_examples": True}, 60),
    ({"has_authentication": True, "has_endpoints": True}, 70),
])
def test_text_score_weights(signals, expected):
    assert score_text(DocumentSignals(**signals)) == expected


def test_spec_three_endpoints_with_post_and_bearer():
    endpoints = [endpoint("GET"), endpoint("POST"), endpoint("DELETE")]
    result = fallback_analysis(spec_document(endpoints, AuthType.BEARER))
    assert result.confidence == 100
    assert result.is_viable is True
    assert result.endpoints == endpoints


def test_spec_single_get_without_auth():
    result = fallback_analysis(spec_document([endpoint("GET")]))
    assert result.confidence == 40
    assert result.is_viable is False
    assert "No security scheme declared" in result.issues


def test_spec_without_endpoints():
    assert score_spec([], Authentication(type=AuthType.API_KEY)) == 30


@pytest.mark.parametrize("endpoints,auth_type", [
    ([], AuthType.UNKNOWN),
    ([endpoint("POST")], AuthType.UNKNOWN),
    ([endpoint("GET"), endpoint("GET"), endpoint("GET")], AuthType.UNKNOWN),
    ([endpoint("POST")], AuthType.OAUTH),
    ([endpoint("GET"), endpoint("PUT"), endpoint("POST")], AuthType.BASIC),
])
def test_viability_matches_threshold(endpoints, auth_type):
    result = fallback_analysis(spec_document(endpoints, auth_type))
    assert 0 <= result.confidence <= 100
    assert result.is_viable == (result.confidence >= 60)


def test_recommendations_do_not_change_confidence():
    viable = fallback_analysis(text_document(has_endpoints=True, has_authentication=True))
    weak = fallback_analysis(text_document(has_examples=True))
    assert viable.recommendations == weak.recommendations
    assert len(viable.recommendations) == 4


def test_provider_type_highest_family_wins():
    text = "payment payment refund shipment"
    assert detect_provider_type(text) == ProviderType.PAYMENT


def test_provider_type_tie_is_unknown():
    assert detect_provider_type("payment shipment") == ProviderType.UNKNOWN


def test_provider_type_without_keywords_is_unknown():
    assert detect_provider_type("lorem ipsum dolor") == ProviderType.UNKNOWN


def test_messaging_text_gets_message_endpoints():
    result = fallback_analysis(text_document(has_endpoints=True, provider_type=ProviderType.MESSAGING))
    assert result.endpoints[0].purpose == "send_message"
    assert result.confidence == 50
