from __future__ import annotations
from typing import Any, Dict, List
import fitz

PAYMENT_DOC_TEXT = """PAYMENTS API REFERENCE
Authentication: send a Bearer token in the Authorization header.
POST /api/payments creates a payment.
GET /api/payments/{id} returns payment details.
Example request:
{"amount": 1000, "currency": "USD"}
Refunds and checkout sessions are billed per transaction."""

PLAIN_DOC_TEXT = """Quarterly bulletin
Hello everyone, the office will be closed on Friday.
Thanks for reading."""


def build_pdf(*pages: str) -> bytes:
    """In-memory PDF with one page per text argument."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


class ScriptedAnalysisClient:
    """Analysis client replaying a fixed list of outcomes (strings or exceptions)."""

    enabled = True
    model = "scripted"

    def __init__(self, *outcomes: Any):
        self.outcomes: List[Any] = list(outcomes)
        self.calls = 0

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def openapi_document(security: bool = True) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "openapi": "3.0.1",
        "info": {"title": "Acme Payments", "version": "2.1"},
        "servers": [{"url": "https://api.acme.test/v1"}],
        "paths": {
            "/payments": {
                "post": {
                    "summary": "Create a payment",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "required": ["amount"],
                                    "properties": {
                                        "amount": {"type": "integer"},
                                        "currency": {"type": "string"},
                                    },
                                }
                            }
                        }
                    },
                    "responses": {"201": {"description": "Created"}, "default": {"description": "Error"}},
                },
            },
            "/payments/{id}": {
                "parameters": [{"name": "id", "in": "path", "required": True}],
                "get": {
                    "parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}],
                    "responses": {
                        "200": {
                            "description": "Payment",
                            "content": {"application/json": {"schema": {"type": "object"}}},
                        }
                    },
                },
                "delete": {"responses": {"204": {"description": "Cancelled"}}},
            },
        },
    }
    if security:
        doc["components"] = {
            "securitySchemes": {
                "bearerAuth": {"type": "http", "scheme": "bearer"},
                "apiKeyAuth": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
            }
        }
    return doc

