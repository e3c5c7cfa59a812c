from __future__ import annotations
import asyncio
import io
import json
import time
import zipfile
import pytest
from fastapi.testclient import TestClient
from sdkgen import app
from sdkgen.config import MAX_UPLOAD_BYTES
from sdkgen.documents import normalize_spec
from sdkgen.models.schemas import JobStatus, ProgressEvent
from sdkgen.obs import decorators
from sdkgen.routers.analysis import is_replayed_event
from sdkgen.services.job_manager import job_manager
from tests.helpers import openapi_document


@pytest.fixture
def client():
    # the context manager keeps one event loop alive for background jobs
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def spec_fetcher(monkeypatch):
    async def fetcher(url: str):
        await asyncio.sleep(0.05)
        return normalize_spec(openapi_document(), source=url)

    monkeypatch.setattr(job_manager, "fetcher", fetcher)
    return fetcher


def wait_for_terminal(client: TestClient, job_id: str, timeout: float = 10.0) -> dict:
    deadline = time.time() + timeout
    while time.time() < deadline:
        body = client.get(f"/api/analysis/{job_id}").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.05)
    raise AssertionError(f"job {job_id} did not finish")


def upload_pdf(client: TestClient, data: bytes, provider_name: str = "Acme Pay",
               content_type: str = "application/pdf"):
    return client.post(
        "/api/upload/pdf",
        files={"file": ("acme.pdf", data, content_type)},
        data={"providerName": provider_name},
    )


def test_root_and_health(client):
    root = client.get("/").json()
    assert root["service"] == "Integration SDK Generator"

    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["analysisClient"] == "disabled"
    assert client.get("/live").json()["status"] == "alive"


def test_pdf_upload_end_to_end(client, payment_pdf):
    response = upload_pdf(client, payment_pdf)
    assert response.status_code == 202
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "pending"
    job_id = body["jobId"]

    status = wait_for_terminal(client, job_id)
    assert status["status"] == "completed"
    assert status["progress"] == 100

    result = client.get(f"/api/analysis/{job_id}/result").json()
    assert result["analysis"]["isViable"] is True
    assert result["analysis"]["providerType"] == "payment"
    assert result["generatedSDK"]["providerName"] == "acme-pay"
    assert result["generatedSDK"]["manifest"]["name"] == "@sdkgen/acme-pay-sdk"

    download = client.get(f"/api/download/{job_id}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/zip"
    assert 'filename="acme-pay-sdk.zip"' in download.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(download.content)) as archive:
        assert "package.json" in archive.namelist()
        assert "src/services/checkout.service.ts" in archive.namelist()


def test_non_viable_job_has_no_download(client, plain_pdf):
    job_id = upload_pdf(client, plain_pdf, provider_name="bulletin").json()["jobId"]
    assert wait_for_terminal(client, job_id)["status"] == "completed"

    result = client.get(f"/api/analysis/{job_id}/result").json()
    assert result["analysis"]["isViable"] is False
    assert result["generatedSDK"] is None

    download = client.get(f"/api/download/{job_id}")
    assert download.status_code == 400
    assert download.json()["error"]["code"] == "SDK_NOT_AVAILABLE"


def test_invalid_pdf_content_fails_job(client):
    job_id = upload_pdf(client, b"not a pdf at all").json()["jobId"]
    status = wait_for_terminal(client, job_id)
    assert status["status"] == "failed"
    assert status["progress"] == 0
    assert status["error"] == "Invalid PDF file format"

    result = client.get(f"/api/analysis/{job_id}/result")
    assert result.status_code == 400
    assert result.json()["error"]["code"] == "JOB_NOT_COMPLETED"


@pytest.mark.parametrize("provider_name,content_type,code", [
    ("", "application/pdf", "MISSING_PROVIDER_NAME"),
    ("   ", "application/pdf", "MISSING_PROVIDER_NAME"),
    ("acme", "text/plain", "INVALID_FILE_TYPE"),
])
def test_upload_rejections(client, payment_pdf, provider_name, content_type, code):
    response = upload_pdf(client, payment_pdf, provider_name=provider_name, content_type=content_type)
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["message"]


def test_empty_upload_rejected(client):
    response = upload_pdf(client, b"")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "NO_FILE"


def test_oversized_upload_rejected(client):
    response = upload_pdf(client, b"%PDF" + b"0" * MAX_UPLOAD_BYTES)
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "FILE_TOO_LARGE"


def test_url_submission(client, spec_fetcher):
    response = client.post("/api/upload/url", json={"url": "https://api.acme.test/docs", "providerName": "acme"})
    assert response.status_code == 202
    job_id = response.json()["jobId"]

    assert wait_for_terminal(client, job_id)["status"] == "completed"
    result = client.get(f"/api/analysis/{job_id}/result").json()
    assert len(result["analysis"]["endpoints"]) == 3
    assert result["analysis"]["authentication"]["type"] == "bearer"


@pytest.mark.parametrize("payload", [
    {"url": "ftp://api.acme.test/docs", "providerName": "acme"},
    {"url": "https://api.acme.test/docs"},
    {"providerName": "acme"},
])
def test_url_validation(client, payload):
    response = client.post("/api/upload/url", json=payload)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_unknown_job_returns_404(client):
    for path in ("/api/analysis/nope", "/api/analysis/nope/result", "/api/analysis/nope/stream", "/api/download/nope"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "JOB_NOT_FOUND"


def parse_sse(text: str):
    events = []
    for block in text.strip().split("\n\n"):
        lines = block.split("\n")
        if lines[0].startswith(":"):
            continue
        event_type = lines[0][len("event: "):]
        data = json.loads(lines[1][len("data: "):])
        events.append((event_type, data))
    return events


def test_stream_of_finished_job_sends_snapshot_and_closes(client, plain_pdf):
    job_id = upload_pdf(client, plain_pdf, provider_name="bulletin").json()["jobId"]
    wait_for_terminal(client, job_id)

    response = client.get(f"/api/analysis/{job_id}/stream")
    assert response.headers["content-type"].startswith("text/event-stream")
    events = parse_sse(response.text)

    assert [event_type for event_type, _ in events] == ["progress", "close"]
    assert events[0][1]["jobId"] == job_id
    assert events[0][1]["status"] == "completed"


def test_stream_follows_live_job(client, spec_fetcher):
    job_id = client.post(
        "/api/upload/url", json={"url": "https://api.acme.test/docs", "providerName": "acme"}
    ).json()["jobId"]

    response = client.get(f"/api/analysis/{job_id}/stream")
    events = parse_sse(response.text)

    assert events[-1][0] == "close"
    progress = [data for event_type, data in events if event_type == "progress"]
    assert progress[-1]["status"] == "completed"
    assert progress[-1]["progress"] == 100
    values = [data["progress"] for data in progress]
    assert values == sorted(values)


def test_prometheus_metrics(client):
    response = client.get("/metrics/prometheus")
    assert response.status_code == 200
    assert "active_jobs" in response.text
    assert "process_memory_bytes" in response.text

    metrics = client.get("/metrics").json()
    assert "system" in metrics


def test_replayed_stream_events_are_skipped():
    def event(status: JobStatus, progress: int) -> ProgressEvent:
        return ProgressEvent(job_id="job", status=status, progress=progress, message="m", timestamp=0.0)

    assert is_replayed_event(event(JobStatus.ANALYZING, 10), last_progress=10)
    assert is_replayed_event(event(JobStatus.ANALYZING, 5), last_progress=10)
    assert not is_replayed_event(event(JobStatus.ANALYZING, 40), last_progress=10)
    assert not is_replayed_event(event(JobStatus.FAILED, 0), last_progress=10)


def test_route_handlers_are_traced(client, monkeypatch):
    recorded = []
    monkeypatch.setattr(decorators, "record_duration",
                        lambda name, value, labels=None: recorded.append((name, labels)))

    endpoints = {route.path: route.endpoint for route in app.routes if hasattr(route, "endpoint")}
    assert hasattr(endpoints["/api/analysis/{job_id}"], "__wrapped__")

    assert client.get("/api/analysis/nope").status_code == 404
    assert ("function_duration_ms", {"function": "get_job_status", "module": "sdkgen.routers.analysis"}) in recorded
