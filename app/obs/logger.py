"""Structured JSON logging to stdout.

Low overhead, minimal dependencies, safe for production stdout collectors.
"""

from typing import Any, Dict
from datetime import datetime, timezone
import json
import sys

from app.obs.context import current_request_context


def log_event(event: str, **fields: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    ctx = current_request_context()
    payload: Dict[str, Any] = {
        "ts": now,
        "level": fields.pop("level", "INFO"),
        "event": event,
        "request_id": ctx.request_id,
    }
    # Attach request context unless provided explicitly
    if ctx.path:
        payload["client_ip"] = ctx.client_ip
        payload["path"] = ctx.path

    payload.update(fields)

    try:
        line = json.dumps(payload, separators=(",", ":"), default=str)
    except (TypeError, ValueError) as e:
        # As a last resort, keep the event name rather than crash the app
        sys.stderr.write(f"[log_event] {event}: unserializable fields ({e})\n")
        return
    print(line, flush=True)
