"""Repository for events table operations."""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..scoring.models import EventItem
from ..utils.logging import get_logger
from ..utils.time import ensure_utc, utc_now_z
from .schema import Event

logger = get_logger(__name__)


def upsert_events(
    session: Session,
    events: Sequence[EventItem],
    source: Optional[str] = None,
    sources: Optional[Mapping[str, str]] = None,
    raw: Optional[Mapping[str, Any]] = None,
) -> int:
    """
    Insert or overwrite events by id (latest wins).

    Args:
        session: SQLAlchemy session
        events: Events to store
        source: Source label applied to every event
        sources: Per-event-id source labels (takes precedence over ``source``)
        raw: Optional original records keyed by event id

    Returns:
        Number of rows written
    """
    if not events:
        return 0

    latest = {event.id: event for event in events}
    updated_at_utc = utc_now_z()
    written = 0
    for event in latest.values():
        label = (sources or {}).get(event.id, source)
        raw_record = (raw or {}).get(event.id)
        values: Dict[str, Any] = {
            "date": event.date.replace(tzinfo=None),
            "title": event.title,
            "summary": event.summary,
            "url": event.url,
            "category": event.category,
            "direction": event.direction,
            "magnitude": event.magnitude,
            "confidence": event.confidence,
            "updated_at_utc": updated_at_utc,
        }
        if raw_record is not None:
            values["raw_json"] = json.dumps(raw_record, default=str)

        existing = session.get(Event, event.id)
        if existing:
            for column, value in values.items():
                setattr(existing, column, value)
            if label:
                existing.source = label
            logger.debug(f"Updated event: {event.id}")
        else:
            session.add(Event(id=event.id, source=label, **values))
            logger.debug(f"Created new event: {event.id}")
        written += 1

    return written


def _to_item(row: Event) -> Optional[EventItem]:
    try:
        return EventItem(
            id=row.id,
            date=ensure_utc(row.date),
            title=row.title,
            summary=row.summary,
            url=row.url,
            category=row.category,
            direction=row.direction,
            magnitude=row.magnitude,
            confidence=row.confidence,
        )
    except ValidationError as e:
        logger.warning(f"Skipping stored event {row.id} that no longer validates: {e.error_count()} errors")
        return None


def load_events(
    session: Session,
    limit: Optional[int] = None,
    category: Optional[str] = None,
    source: Optional[str] = None,
) -> List[EventItem]:
    """
    Load stored events, newest first.

    Args:
        session: SQLAlchemy session
        limit: Maximum number of events
        category: Filter by category
        source: Filter by source label

    Returns:
        List of EventItem
    """
    query = session.query(Event)
    if category:
        query = query.filter(Event.category == category)
    if source:
        query = query.filter(Event.source == source)
    query = query.order_by(Event.date.desc())
    if limit:
        query = query.limit(limit)
    return [item for item in (_to_item(row) for row in query.all()) if item is not None]


def get_event_by_id(session: Session, event_id: str) -> Optional[Event]:
    """Get event row by ID."""
    return session.get(Event, event_id)


def count_events(session: Session) -> int:
    return session.query(Event).count()
