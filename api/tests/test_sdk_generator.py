from __future__ import annotations
import io
import json
import zipfile
import pytest
from sdkgen.models.schemas import AnalysisResult, Authentication, AuthType, Endpoint, ProviderType
from sdkgen.services.sdk_generator import method_name, normalize_provider_name, synthesize_sdk
from sdkgen.utils.zip_builder import archive_name, build_sdk_zip

EXPECTED_PATHS = {
    "src/index.ts",
    "src/client-sdk.ts",
    "src/config/app-config.ts",
    "src/utils/httpService.ts",
    "src/utils/logger.ts",
    "src/utils/error.ts",
    "src/services/auth.service.ts",
    "src/interfaces/index.ts",
    "__tests__/client-sdk.test.ts",
    "jest.config.cjs",
    "tsconfig.json",
}


def analysis(provider_type=ProviderType.PAYMENT, endpoints=None, auth=None, **overrides) -> AnalysisResult:
    fields = dict(
        is_viable=True,
        provider_type=provider_type,
        confidence=90,
        endpoints=endpoints or [],
        authentication=auth or Authentication(type=AuthType.BEARER, location="header",
                                              parameter_name="Authorization"),
        issues=[],
        recommendations=["Check for rate limiting information"],
    )
    fields.update(overrides)
    return AnalysisResult(**fields)


def files_by_path(sdk):
    return {file.path: file for file in sdk.files}


@pytest.mark.parametrize("raw,expected", [
    ("Acme Pay", "acme-pay"),
    ("  Stripe!!  ", "stripe"),
    ("Post_NL v2", "post-nl-v2"),
    ("***", "provider"),
])
def test_normalize_provider_name(raw, expected):
    assert normalize_provider_name(raw) == expected


@pytest.mark.parametrize("purpose,expected", [
    ("create_payment", "createPayment"),
    ("List widgets", "listWidgets"),
    ("get-shipment-label", "getShipmentLabel"),
    ("3ds_verify", "op3dsVerify"),
    ("", "request"),
])
def test_method_name(purpose, expected):
    assert method_name(purpose) == expected


def test_payment_sdk_layout():
    sdk = synthesize_sdk(analysis(), "Acme Pay")
    files = files_by_path(sdk)

    assert sdk.provider_name == "acme-pay"
    assert EXPECTED_PATHS <= set(files)
    assert "src/services/checkout.service.ts" in files
    assert "src/interfaces/payment.interfaces.ts" in files
    assert "public readonly Checkout: CheckoutService" in files["src/client-sdk.ts"].content
    assert files["tsconfig.json"].type == "json"
    assert json.loads(files["tsconfig.json"].content)["compilerOptions"]
    assert sdk.manifest["name"] == "@sdkgen/acme-pay-sdk"
    assert sdk.manifest["version"] == "1.0.0"
    assert sdk.readme.startswith("# Acme Pay SDK")


def test_sample_endpoints_used_when_analysis_has_none():
    service = files_by_path(synthesize_sdk(analysis(), "acme"))["src/services/checkout.service.ts"].content
    assert "async createPayment(data: Record<string, any>)" in service
    assert "async getPayment(id: string)" in service
    assert "this.httpService.get<any>(`/api/payments/${id}`)" in service


def test_analysis_endpoints_drive_service_methods():
    endpoints = [
        Endpoint(path="/v1/labels/{labelId}", method="GET", purpose="get_label"),
        Endpoint(path="/v1/labels", method="POST", purpose="get_label"),
    ]
    sdk = synthesize_sdk(analysis(ProviderType.SHIPPING, endpoints=endpoints), "parcel")
    service = files_by_path(sdk)["src/services/shipping.service.ts"].content

    assert "export class ShippingService" in service
    assert "async getLabel(labelId: string)" in service
    # duplicate purposes get distinct method names
    assert "async getLabel2(data: Record<string, any>)" in service
    assert "- **GET /v1/labels/{labelId}**: get_label" in sdk.readme


def test_unknown_provider_uses_generic_service():
    files = files_by_path(synthesize_sdk(analysis(ProviderType.UNKNOWN), "misc"))
    assert "src/services/api.service.ts" in files
    assert "export class ApiService" in files["src/services/api.service.ts"].content
    assert "sdk.Api" in files["__tests__/client-sdk.test.ts"].content


def test_api_key_auth_header():
    auth = Authentication(type=AuthType.API_KEY, location="header", parameter_name="X-API-Key")
    files = files_by_path(synthesize_sdk(analysis(auth=auth), "acme"))
    assert "request.headers['X-API-Key'] = this.token;" in files["src/utils/httpService.ts"].content
    assert "api-key" in files["src/services/auth.service.ts"].content


def test_path_quotes_are_escaped():
    endpoints = [Endpoint(path="/it's", method="DELETE", purpose="remove")]
    service = files_by_path(synthesize_sdk(analysis(endpoints=endpoints), "acme"))[
        "src/services/checkout.service.ts"].content
    assert "logger.info('remove: DELETE /it\\'s');" in service


def test_readme_lists_issues_and_recommendations():
    sdk = synthesize_sdk(analysis(issues=["Missing webhooks"]), "acme")
    assert "## Issues to Address\n\n- Missing webhooks" in sdk.readme
    assert "## Recommendations" in sdk.readme


def test_zip_contains_all_files_and_manifest():
    sdk = synthesize_sdk(analysis(), "Acme Pay")
    data = build_sdk_zip(sdk)

    assert archive_name(sdk) == "acme-pay-sdk.zip"
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = set(archive.namelist())
        assert names == {file.path for file in sdk.files} | {"package.json", "README.md"}
        assert json.loads(archive.read("package.json"))["name"] == "@sdkgen/acme-pay-sdk"
        assert archive.getinfo("src/index.ts").compress_type == zipfile.ZIP_DEFLATED
        assert archive.read("README.md").decode() == sdk.readme
