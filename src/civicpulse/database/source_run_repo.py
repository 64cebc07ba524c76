"""Repository functions for source_runs table operations."""

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from ..utils.logging import get_logger
from .schema import SourceRun

logger = get_logger(__name__)


def create_source_run(
    session: Session,
    run_group_id: str,
    source_id: str,
    run_at_utc: str,  # ISO 8601
    status: str,  # SUCCESS | FAILURE | SKIPPED
    status_code: Optional[int] = None,
    error: Optional[str] = None,
    duration_seconds: Optional[float] = None,
    items_fetched: int = 0,
    items_normalized: int = 0,
) -> SourceRun:
    """
    Create a SourceRun record.

    Args:
        session: SQLAlchemy session
        run_group_id: Id shared by every source run of one refresh
        source_id: Source ID
        run_at_utc: ISO 8601 timestamp
        status: SUCCESS, FAILURE or SKIPPED
        status_code: HTTP status code (if applicable)
        error: Error message (if failed)
        duration_seconds: Duration of the fetch
        items_fetched: Raw records fetched
        items_normalized: Events produced by the normalizer

    Returns:
        SourceRun row
    """
    run_id = str(uuid.uuid4())
    source_run = SourceRun(
        run_id=run_id,
        run_group_id=run_group_id,
        source_id=source_id,
        run_at_utc=run_at_utc,
        status=status,
        status_code=status_code,
        error=error,
        duration_seconds=duration_seconds,
        items_fetched=items_fetched,
        items_normalized=items_normalized,
    )
    session.add(source_run)
    logger.debug(f"Created SourceRun {run_id} for {source_id} ({status})")
    return source_run


def list_recent_runs(
    session: Session,
    source_id: Optional[str] = None,
    limit: int = 50,
    run_group_id: Optional[str] = None,
) -> List[SourceRun]:
    """
    Query recent source runs, newest first.
    """
    query = session.query(SourceRun)
    if source_id:
        query = query.filter(SourceRun.source_id == source_id)
    if run_group_id:
        query = query.filter(SourceRun.run_group_id == run_group_id)
    return query.order_by(SourceRun.run_at_utc.desc()).limit(limit).all()
