"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from civicpulse.database.schema import Base
from civicpulse.scoring.models import EventItem

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_event():
    """Factory for EventItem with sensible defaults."""

    def _make(
        id="evt-1",
        days_ago=0.0,
        category="Elections",
        direction=1,
        magnitude=1.0,
        confidence=1.0,
        title="Example event",
        **extra,
    ):
        return EventItem(
            id=id,
            date=NOW - timedelta(days=days_ago),
            title=title,
            category=category,
            direction=direction,
            magnitude=magnitude,
            confidence=confidence,
            **extra,
        )

    return _make
