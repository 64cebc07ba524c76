"""Deduplication and merge logic for event collections."""

from typing import Dict, Iterable, List, Sequence

from ..scoring.models import EventItem


def sort_events(items: Iterable[EventItem]) -> List[EventItem]:
    """Newest first. Stable, so equal dates keep their insertion order."""
    return sorted(items, key=lambda event: event.date, reverse=True)


def merge_events(previous: Sequence[EventItem], incoming: Sequence[EventItem]) -> List[EventItem]:
    """
    Merge a fresh batch onto an existing collection.

    For a shared id the incoming event replaces the stored one (latest wins),
    which lets a source correct a fact over time. The merge is therefore
    order-sensitive: callers must merge batches in arrival order.

    Args:
        previous: Events already known
        incoming: Newly normalized events

    Returns:
        New list of unique events sorted descending by date
    """
    by_id: Dict[str, EventItem] = {event.id: event for event in previous}
    for event in incoming:
        by_id[event.id] = event
    return sort_events(by_id.values())


def dedupe_events(items: Iterable[EventItem]) -> List[EventItem]:
    """
    Collapse repeated ids inside a single batch, keeping the first occurrence.

    Returns:
        Unique events sorted descending by date
    """
    by_id: Dict[str, EventItem] = {}
    for event in items:
        by_id.setdefault(event.id, event)
    return sort_events(by_id.values())
