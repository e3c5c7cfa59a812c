from __future__ import annotations
from typing import Optional, Dict, Any
from sdkgen.config import LANGFUSE_PUBLIC_KEY, LANGFUSE_SECRET_KEY, LANGFUSE_HOST

_langfuse_client = None
_langfuse_checked = False

def get_langfuse_client():
    """Get Langfuse client instance."""
    global _langfuse_client, _langfuse_checked

    if _langfuse_checked:
        return _langfuse_client
    _langfuse_checked = True

    if not LANGFUSE_PUBLIC_KEY or not LANGFUSE_SECRET_KEY:
        print("⚠️  Langfuse not configured (missing API keys)")
        return None

    try:
        from langfuse import Langfuse
        _langfuse_client = Langfuse(
            public_key=LANGFUSE_PUBLIC_KEY,
            secret_key=LANGFUSE_SECRET_KEY,
            host=LANGFUSE_HOST
        )
        print(f"🔗 Langfuse client initialized: {LANGFUSE_HOST}")
    except Exception as e:
        print(f"⚠️  Langfuse initialization failed: {e}")
        _langfuse_client = None

    return _langfuse_client

def log_llm_call(
    name: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    output_text: Optional[str],
    usage: Optional[Dict[str, int]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """Log an LLM call to Langfuse as a generation."""
    client = get_langfuse_client()
    if not client:
        return

    try:
        generation = client.start_generation(
            name=name,
            model=model,
            input=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            metadata=metadata or {},
        )
        generation.update(output=output_text, usage_details=usage or {})
        generation.end()
    except Exception as e:
        print(f"⚠️  Failed to log LLM call: {e}")
