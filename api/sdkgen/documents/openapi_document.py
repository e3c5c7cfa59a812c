from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Union
import yaml
from pydantic import ValidationError
from sdkgen.documents.base import SpecDocument, SpecInfo
from sdkgen.documents.signals import detect_provider_type
from sdkgen.errors import InvalidSpec
from sdkgen.models.schemas import (
    Authentication,
    AuthType,
    Endpoint,
    EndpointResponse,
    Parameter,
    ProviderType,
)
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options", "trace")
_AUTH_LOCATIONS = {"header", "query", "body", "cookie"}


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_document(raw: Union[bytes, str, Dict[str, Any]]) -> Dict[str, Any]:
    """Parse JSON first, then YAML; require a Swagger/OpenAPI version key."""
    if isinstance(raw, dict):
        document = raw
    else:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        try:
            document = json.loads(text)
        except ValueError:
            try:
                document = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise InvalidSpec("Unable to parse document as JSON or YAML", code="PARSE_ERROR") from e

    if not isinstance(document, dict) or not (document.get("swagger") or document.get("openapi")):
        raise InvalidSpec("Document is not a Swagger/OpenAPI specification (missing 'swagger' or 'openapi' key)")
    return document


def detect_version(document: Dict[str, Any]) -> str:
    if document.get("swagger"):
        return "2.0" if str(document["swagger"]).startswith("2.") else "unknown"
    openapi = str(document.get("openapi", ""))
    if openapi.startswith("3.0"):
        return "3.0"
    if openapi.startswith("3.1"):
        return "3.1"
    return "unknown"


def extract_info(document: Dict[str, Any]) -> SpecInfo:
    info = _mapping(document.get("info"))
    if document.get("swagger"):
        schemes = document.get("schemes")
        schemes = schemes if isinstance(schemes, list) and schemes else ["https"]
        host = document.get("host") or "api.example.com"
        base_url = f"{schemes[0]}://{host}{document.get('basePath') or ''}"
    else:
        servers = document.get("servers")
        base_url = _mapping(servers[0]).get("url") if isinstance(servers, list) and servers else None
        base_url = base_url or "https://api.example.com"

    return SpecInfo(
        title=info.get("title"),
        version=str(info["version"]) if info.get("version") is not None else None,
        description=info.get("description"),
        base_url=base_url,
    )


def extract_schemas(document: Dict[str, Any]) -> Dict[str, Any]:
    if document.get("swagger"):
        return _mapping(document.get("definitions"))
    return _mapping(_mapping(document.get("components")).get("schemas"))


def infer_purpose(path: str, method: str, operation: Dict[str, Any]) -> str:
    path_lower = path.lower()
    method_lower = method.lower()

    if "payment" in path_lower or "checkout" in path_lower:
        purpose = {"post": "create_payment", "get": "get_payment", "delete": "cancel_payment"}.get(method_lower)
        if purpose:
            return purpose

    if "shipment" in path_lower or "shipping" in path_lower:
        purpose = {
            "post": "create_shipment",
            "get": "get_shipment",
            "put": "update_shipment",
            "patch": "update_shipment",
            "delete": "cancel_shipment",
        }.get(method_lower)
        if purpose:
            return purpose

    if any(word in path_lower for word in ("message", "email", "sms", "notification")):
        purpose = {"post": "send_message", "get": "get_message"}.get(method_lower)
        if purpose:
            return purpose

    if "auth" in path_lower or "token" in path_lower:
        return "authentication"

    summary = operation.get("summary")
    if summary:
        return str(summary)
    last_segment = path_lower.rstrip("/").split("/")[-1]
    return f"{method_lower}_{last_segment or 'resource'}"


def _schema_properties(schema: Dict[str, Any]) -> List[Parameter]:
    required = schema.get("required")
    required = set(required) if isinstance(required, list) else set()
    return [
        Parameter(
            name=name,
            type=str(_mapping(prop).get("type") or "object"),
            required=name in required,
            description=_mapping(prop).get("description"),
        )
        for name, prop in _mapping(schema.get("properties")).items()
    ]


def extract_parameters(operation: Dict[str, Any]) -> List[Parameter]:
    parameters: List[Parameter] = []

    for param in operation.get("parameters") or []:
        if not isinstance(param, dict) or not param.get("name"):
            continue
        schema = _mapping(param.get("schema"))
        if param.get("in") == "body" and schema.get("properties"):
            parameters.extend(_schema_properties(schema))
            continue
        parameters.append(Parameter(
            name=str(param["name"]),
            type=str(schema.get("type") or param.get("type") or "string"),
            required=bool(param.get("required", False)),
            description=param.get("description"),
        ))

    request_body = _mapping(operation.get("requestBody"))
    json_schema = _mapping(_mapping(_mapping(request_body.get("content")).get("application/json")).get("schema"))
    if json_schema.get("properties"):
        parameters.extend(_schema_properties(json_schema))

    return parameters


def extract_responses(operation: Dict[str, Any]) -> List[EndpointResponse]:
    responses: List[EndpointResponse] = []
    for status_code, response in (operation.get("responses") or {}).items():
        if not str(status_code).isdigit():
            continue
        response = response if isinstance(response, dict) else {}
        schema = (((response.get("content") or {}).get("application/json") or {}).get("schema")
                  or response.get("schema"))
        responses.append(EndpointResponse(
            status_code=int(status_code),
            description=response.get("description") or "",
            schema=schema if isinstance(schema, dict) else None,
        ))
    return responses


def extract_endpoints(document: Dict[str, Any]) -> List[Endpoint]:
    endpoints: List[Endpoint] = []
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            endpoints.append(Endpoint(
                path=path,
                method=method.upper(),
                purpose=infer_purpose(path, method, operation),
                parameters=extract_parameters(operation),
                responses=extract_responses(operation),
            ))
    return endpoints


def extract_authentication(document: Dict[str, Any]) -> Authentication:
    """First matching security scheme in declaration order wins."""
    schemes = (_mapping(_mapping(document.get("components")).get("securitySchemes"))
               or _mapping(document.get("securityDefinitions")))

    for scheme in schemes.values():
        if not isinstance(scheme, dict):
            continue
        scheme_type = scheme.get("type")
        http_scheme = str(scheme.get("scheme", "")).lower()
        description = scheme.get("description")

        if scheme_type == "http" and http_scheme == "bearer":
            return Authentication(type=AuthType.BEARER, location="header",
                                  parameter_name="Authorization", description=description)
        if scheme_type == "apiKey":
            location = scheme.get("in")
            return Authentication(type=AuthType.API_KEY,
                                  location=location if location in _AUTH_LOCATIONS else None,
                                  parameter_name=scheme.get("name"), description=description)
        if scheme_type == "oauth2":
            return Authentication(type=AuthType.OAUTH, location="header",
                                  parameter_name="Authorization", description=description)
        if scheme_type == "basic" or (scheme_type == "http" and http_scheme == "basic"):
            return Authentication(type=AuthType.BASIC, location="header",
                                  parameter_name="Authorization", description=description)

    return Authentication(type=AuthType.UNKNOWN)


def infer_provider_type(document: Dict[str, Any], endpoints: List[Endpoint]) -> ProviderType:
    combined = json.dumps(document, default=str) + " " + " ".join(e.path for e in endpoints)
    return detect_provider_type(combined)


def normalize_spec(raw: Union[bytes, str, Dict[str, Any]], source: Optional[str] = None) -> SpecDocument:
    """Parse a Swagger/OpenAPI document into endpoints, authentication and schemas."""
    document = parse_document(raw)
    try:
        endpoints = extract_endpoints(document)
        spec = SpecDocument(
            document=document,
            version=detect_version(document),
            info=extract_info(document),
            endpoints=endpoints,
            authentication=extract_authentication(document),
            schemas=extract_schemas(document),
            provider_type=infer_provider_type(document, endpoints),
        )
    except (AttributeError, TypeError, ValidationError) as e:
        raise InvalidSpec(f"Malformed Swagger/OpenAPI document: {e}") from e

    logger.info("Spec normalized",
               source=source,
               version=spec.version,
               endpoints=len(endpoints),
               auth_type=spec.authentication.type.value,
               provider_type=spec.provider_type.value)
    return spec
