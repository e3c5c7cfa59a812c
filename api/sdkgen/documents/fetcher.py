from __future__ import annotations
from typing import List, Optional
import httpx
from sdkgen.config import FETCH_TIMEOUT_SECONDS, FETCH_USER_AGENT
from sdkgen.documents.base import SpecDocument
from sdkgen.documents.openapi_document import normalize_spec
from sdkgen.errors import InvalidSpec, SpecNotFound
from sdkgen.obs.decorators import traced
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

SPEC_SUFFIXES = ("swagger.json", "openapi.json", "swagger.yaml", "openapi.yaml")

_HEADERS = {
    "Accept": "application/json, application/yaml, text/yaml, text/plain, */*",
    "User-Agent": FETCH_USER_AGENT,
}


def candidate_urls(url: str) -> List[str]:
    base = url if url.endswith("/") else url + "/"
    return [url] + [base + suffix for suffix in SPEC_SUFFIXES]


@traced("fetch_spec", include_args=True)
async def fetch_spec(url: str, client: Optional[httpx.AsyncClient] = None) -> SpecDocument:
    """Fetch the first Swagger/OpenAPI document found at the URL or its variants."""
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(FETCH_TIMEOUT_SECONDS),
            follow_redirects=True,
            headers=_HEADERS,
        )

    try:
        for try_url in candidate_urls(url):
            try:
                response = await client.get(try_url, timeout=FETCH_TIMEOUT_SECONDS)
                response.raise_for_status()
                spec = normalize_spec(response.content, source=try_url)
            except httpx.HTTPError as e:
                logger.warning("Spec fetch failed", url=try_url, error=str(e))
                continue
            except InvalidSpec as e:
                logger.info("Not a Swagger/OpenAPI document", url=try_url, error=e.message)
                continue

            logger.info("Fetched Swagger document", url=try_url)
            return spec
    finally:
        if owns_client:
            await client.aclose()

    raise SpecNotFound(f"No valid Swagger/OpenAPI document found at {url} or any URL variation")
