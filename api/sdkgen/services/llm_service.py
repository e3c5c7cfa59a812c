from __future__ import annotations
from typing import Optional, Protocol
import openai
from openai import AsyncOpenAI
from sdkgen.config import (
    OPENAI_API_KEY,
    LLM_MODEL,
    LLM_TEMPERATURE,
    LLM_MAX_TOKENS,
    LLM_TIMEOUT_SECONDS,
)
from sdkgen.errors import ExternalServiceFailure
from sdkgen.obs.decorators import traced
from sdkgen.obs.langfuse import log_llm_call
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

_PLACEHOLDER_KEYS = {"", "your_actual_openai_api_key_here"}


class AnalysisClient(Protocol):
    """Capability used by the analysis engine to reach an external model."""

    enabled: bool
    model: str

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class DisabledAnalysisClient:
    """Stand-in when no API key is configured; the engine goes straight to heuristics."""

    enabled = False
    model = "disabled"

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise ExternalServiceFailure("Analysis client is not configured", code="AI_DISABLED")


class OpenAIAnalysisClient:
    """Chat completion client returning a single JSON object per call."""

    enabled = True

    def __init__(
        self,
        api_key: str,
        model: str = LLM_MODEL,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
        timeout: float = LLM_TIMEOUT_SECONDS,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        # Retries are owned by the analysis engine's policy
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        logger.info(f"Analysis client initialized with OpenAI: {self.model}")

    @traced("llm_complete")
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.APITimeoutError as e:
            raise ExternalServiceFailure(f"OpenAI request timed out: {e}", code="AI_TIMEOUT") from e
        except openai.RateLimitError as e:
            raise ExternalServiceFailure(f"OpenAI rate limit exceeded: {e}", code="AI_RATE_LIMITED") from e
        except openai.APIError as e:
            raise ExternalServiceFailure(f"OpenAI API error: {e}", code="AI_API_ERROR") from e

        content = response.choices[0].message.content if response.choices else None
        usage = None
        if response.usage:
            usage = {
                "input": response.usage.prompt_tokens,
                "output": response.usage.completion_tokens,
                "total": response.usage.total_tokens,
            }

        log_llm_call(
            "viability_analysis",
            model=self.model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            output_text=content,
            usage=usage,
        )

        if not content:
            raise ExternalServiceFailure("No analysis received from OpenAI", code="AI_NO_RESPONSE")

        logger.info("LLM analysis received",
                   model=self.model,
                   response_length=len(content),
                   total_tokens=usage["total"] if usage else None)
        return content


def build_analysis_client(api_key: Optional[str] = OPENAI_API_KEY) -> AnalysisClient:
    """Decide once whether external analysis is available."""
    if api_key is None or api_key.strip() in _PLACEHOLDER_KEYS:
        logger.warning("OpenAI API key not configured, analysis will use heuristics only")
        return DisabledAnalysisClient()
    return OpenAIAnalysisClient(api_key=api_key)
