import hashlib
import uuid
from datetime import UTC, datetime
from typing import Any, Optional


def make_event_id(prefix: str, native_id: Any) -> Optional[str]:
    """
    Build a namespaced, deterministic event id.

    Returns None when ``native_id`` is not a usable key, so callers can drop
    the record instead of inventing an id.
    """
    if isinstance(native_id, bool) or native_id is None:
        return None
    if isinstance(native_id, (int, float)):
        native_id = str(native_id)
    if not isinstance(native_id, str) or not native_id.strip():
        return None
    return f"{prefix}-{native_id.strip()}"


def content_event_id(*parts: Any) -> str:
    """Deterministic id for hand-entered events, hashed from stable fields."""
    stable = "|".join("" if part is None else str(part) for part in parts)
    return f"evt-{hashlib.sha256(stable.encode('utf-8')).hexdigest()[:16]}"


def new_run_group_id() -> str:
    return f"RUN-{datetime.now(UTC).strftime('%Y%m%d')}-{uuid.uuid4().hex[:8]}"
