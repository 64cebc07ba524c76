"""Runner for one refresh cycle: fetch -> normalize -> merge -> store."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database.event_repo import load_events, upsert_events
from ..database.source_run_repo import create_source_run
from ..parsing.normalizer import NORMALIZERS, KeywordConfig, normalize_records
from ..retrieval.dedupe import dedupe_events, merge_events
from ..retrieval.fetcher import FetchResult, SourceFetcher
from ..scoring.models import EventItem
from ..utils.id_generator import new_run_group_id
from ..utils.logging import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class SourceRefreshStats(BaseModel):
    source_id: str
    status: str
    records_fetched: int = 0
    events_normalized: int = 0
    error: Optional[str] = None


class RefreshResult(BaseModel):
    run_group_id: str
    events: List[EventItem] = Field(default_factory=list)
    fresh_events: int = 0
    stored: int = 0
    sources: List[SourceRefreshStats] = Field(default_factory=list)


def normalize_fetch_result(
    result: FetchResult,
    now: Optional[datetime] = None,
    keywords: Optional[KeywordConfig] = None,
) -> Tuple[List[EventItem], Dict[str, Any]]:
    """
    Normalize one source's records, keeping each event's original record.

    Records go through the normalizer one at a time so the raw payload can be
    stored next to the event it produced.

    Returns:
        (events, raw records keyed by event id)
    """
    if result.status != "SUCCESS" or result.source_type not in NORMALIZERS:
        if result.status == "SUCCESS":
            logger.warning(f"No normalizer for {result.source_id} (type {result.source_type})")
        return [], {}

    events: List[EventItem] = []
    raw_by_id: Dict[str, Any] = {}
    for record in result.records:
        for event in normalize_records(result.source_type, [record], now=now, keywords=keywords):
            events.append(event)
            raw_by_id.setdefault(event.id, record)
    return events, raw_by_id


def run_refresh(
    session: Session,
    fetcher: SourceFetcher,
    previous: Optional[Sequence[EventItem]] = None,
    now: Optional[datetime] = None,
    run_group_id: Optional[str] = None,
    max_items_per_source: Optional[int] = None,
    fail_fast: bool = False,
    keywords: Optional[KeywordConfig] = None,
) -> RefreshResult:
    """
    Run one refresh cycle across every configured source.

    1. Fetches all sources (failures become empty batches)
    2. Normalizes each batch with the normalizer for its source type
    3. Dedupes the fresh batch (first occurrence wins)
    4. Merges it onto ``previous`` or the stored events (latest wins)
    5. Upserts the fresh events and records a SourceRun per source

    The caller owns the transaction and must commit.

    Args:
        session: SQLAlchemy session
        fetcher: Fetcher holding the sources config
        previous: Known events; loaded from the store when None
        now: Clock used as fallback date for unparseable timestamps
        run_group_id: Optional id linking this refresh's source runs
        max_items_per_source: Override per-source record cap
        fail_fast: Propagate the first fetch failure
        keywords: Optional keyword override for the normalizers

    Returns:
        RefreshResult with the merged collection and per-source stats
    """
    run_group_id = run_group_id or new_run_group_id()
    now = now or utc_now()

    results = fetcher.fetch_all(max_items_per_source=max_items_per_source, fail_fast=fail_fast)

    fresh: List[EventItem] = []
    raw_by_id: Dict[str, Any] = {}
    source_by_id: Dict[str, str] = {}
    stats: List[SourceRefreshStats] = []

    for result in results:
        events, raw = normalize_fetch_result(result, now=now, keywords=keywords)
        fresh.extend(events)
        for event_id, record in raw.items():
            raw_by_id.setdefault(event_id, record)
            source_by_id.setdefault(event_id, result.source_type or result.source_id)

        create_source_run(
            session,
            run_group_id=run_group_id,
            source_id=result.source_id,
            run_at_utc=result.fetched_at_utc,
            status=result.status,
            status_code=result.status_code,
            error=result.error,
            duration_seconds=result.duration_seconds,
            items_fetched=len(result.records),
            items_normalized=len(events),
        )
        stats.append(
            SourceRefreshStats(
                source_id=result.source_id,
                status=result.status,
                records_fetched=len(result.records),
                events_normalized=len(events),
                error=result.error,
            )
        )
        logger.info(f"{result.source_id}: {len(result.records)} records -> {len(events)} events ({result.status})")

    fresh = dedupe_events(fresh)
    if previous is None:
        previous = load_events(session)
    merged = merge_events(previous, fresh)
    stored = upsert_events(session, fresh, sources=source_by_id, raw=raw_by_id)

    logger.info(f"Refresh {run_group_id}: {len(fresh)} fresh events, {len(merged)} total")
    return RefreshResult(
        run_group_id=run_group_id,
        events=merged,
        fresh_events=len(fresh),
        stored=stored,
        sources=stats,
    )
