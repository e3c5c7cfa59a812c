from __future__ import annotations
import json
from typing import Dict, Any, Optional

def create_sse_message(data: Dict[str, Any], event_type: str = "progress", event_id: Optional[str] = None) -> str:
    """Create a Server-Sent Event formatted message."""
    json_data = json.dumps(data, ensure_ascii=False, default=str)
    prefix = f"id: {event_id}\n" if event_id else ""
    return f"{prefix}event: {event_type}\ndata: {json_data}\n\n"

def create_sse_heartbeat() -> str:
    """Heartbeat as an SSE comment line; clients ignore it."""
    return ": heartbeat\n\n"

def create_sse_close() -> str:
    """Create a close SSE message."""
    return "event: close\ndata: {\"type\":\"close\"}\n\n"
