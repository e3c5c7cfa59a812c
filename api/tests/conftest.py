from __future__ import annotations
import os

# Tests run against the heuristic analysis path unless a client is injected
os.environ["OPENAI_API_KEY"] = ""
os.environ.pop("LANGFUSE_PUBLIC_KEY", None)
os.environ.pop("LANGFUSE_SECRET_KEY", None)
os.environ.pop("OTEL_EXPORTER_OTLP_ENDPOINT", None)

import pytest
from sdkgen.services.progress_broadcaster import ProgressBroadcaster
from sdkgen.utils.retry_backoff import RetryConfig
from tests.helpers import PAYMENT_DOC_TEXT, PLAIN_DOC_TEXT, build_pdf


@pytest.fixture
def payment_pdf() -> bytes:
    return build_pdf(PAYMENT_DOC_TEXT)


@pytest.fixture
def plain_pdf() -> bytes:
    return build_pdf(PLAIN_DOC_TEXT)


@pytest.fixture
def no_delay_retry() -> RetryConfig:
    return RetryConfig(max_retries=3, base_delay=0.0)


@pytest.fixture
def broadcaster() -> ProgressBroadcaster:
    return ProgressBroadcaster()
