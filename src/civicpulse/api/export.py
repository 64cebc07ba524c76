"""Events wire format: ``{"events": [EventItem, ...]}``."""

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Sequence

from jsonschema import Draft202012Validator, FormatChecker, ValidationError
from jsonschema.validators import extend

from ..parsing.normalizer import normalize_event_records
from ..scoring.models import CATEGORIES, EventItem
from ..utils.logging import get_logger

logger = get_logger(__name__)

EVENTS_PAYLOAD_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "civicpulse events payload",
    "type": "object",
    "required": ["events"],
    "properties": {
        "events": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "date", "title", "category", "direction", "magnitude", "confidence"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "date": {"type": "string", "format": "date-time"},
                    "title": {"type": "string", "minLength": 1},
                    "summary": {"type": "string"},
                    "url": {"type": "string"},
                    "category": {"enum": list(CATEGORIES)},
                    "direction": {"enum": [1, -1]},
                    "magnitude": {"type": "number", "minimum": 0, "finite": True},
                    "confidence": {"type": "number", "minimum": 0, "maximum": 1, "finite": True},
                },
            },
        },
    },
}


def _finite(validator, finite, instance, schema):
    # json.loads accepts NaN and Infinity literals
    if finite and validator.is_type(instance, "number") and not math.isfinite(instance):
        yield ValidationError(f"{instance!r} is not a finite number")


EventsPayloadValidator = extend(Draft202012Validator, {"finite": _finite})


def events_payload(events: Sequence[EventItem]) -> Dict[str, List[Dict[str, Any]]]:
    return {"events": [event.to_wire() for event in events]}


def export_events_json(events: Sequence[EventItem], out: Path | None = None) -> str:
    """
    Serialize events to the wire payload.

    Args:
        events: Events to export (order is kept)
        out: Output file path (if None, returns the JSON string)

    Returns:
        JSON string, or a confirmation message when written to ``out``
    """
    output = json.dumps(events_payload(events), indent=2, ensure_ascii=False)
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(output, encoding="utf-8")
        return f"Exported {len(events)} events to {out}"
    return output


def parse_events_payload(payload: Any) -> List[EventItem]:
    """
    Validate a decoded payload into events.

    Accepts ``{"events": [...]}`` or a bare list. Records that fail
    validation are dropped; any other shape yields no events.
    """
    if isinstance(payload, dict):
        payload = payload.get("events")
    if not isinstance(payload, list):
        logger.error("Events payload must be an object with an 'events' list or a list")
        return []
    events = normalize_event_records(payload)
    dropped = len(payload) - len(events)
    if dropped:
        logger.warning(f"Dropped {dropped} invalid event records")
    return events


def load_events_json(path: Path) -> List[EventItem]:
    """
    Read events from a JSON file, degrading to an empty list on any failure.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        logger.error(f"Unable to read events file {path}: {e}")
        return []
    except json.JSONDecodeError as e:
        logger.error(f"Events file {path} is not valid JSON: {e}")
        return []
    return parse_events_payload(payload)


def _format_error_path(error: ValidationError) -> str:
    if not error.absolute_path:
        return "$"
    return ".".join(("$", *map(str, error.absolute_path)))


def validate_events_payload(payload: Any) -> List[str]:
    """
    Check a payload against EVENTS_PAYLOAD_SCHEMA.

    Returns:
        Human-readable issues, empty when the payload is valid
    """
    validator = EventsPayloadValidator(EVENTS_PAYLOAD_SCHEMA, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.absolute_path))
    return [f"{_format_error_path(error)}: {error.message}" for error in errors]
