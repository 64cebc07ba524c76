from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Event(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True)  # "<prefix>-<native id>"
    source = Column(String, nullable=True, index=True)  # courtlistener, propublica, ..., manual
    date = Column(DateTime, nullable=False, index=True)  # naive UTC
    title = Column(String, nullable=False)
    summary = Column(Text, nullable=True)
    url = Column(String, nullable=True)
    category = Column(String, nullable=False, index=True)
    direction = Column(Integer, nullable=False)  # +1 | -1
    magnitude = Column(Float, nullable=False)
    confidence = Column(Float, nullable=False)
    raw_json = Column(Text, nullable=True)  # Original source record, if kept
    updated_at_utc = Column(String, nullable=False)  # ISO 8601


class SourceRun(Base):
    """One fetch + normalize pass over a single source."""
    __tablename__ = "source_runs"

    run_id = Column(String, primary_key=True)  # UUID
    run_group_id = Column(String, nullable=False, index=True)  # Links runs of one refresh
    source_id = Column(String, nullable=False, index=True)
    run_at_utc = Column(String, nullable=False, index=True)  # ISO 8601
    status = Column(String, nullable=False)  # SUCCESS | FAILURE | SKIPPED
    status_code = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    items_fetched = Column(Integer, nullable=False, default=0)
    items_normalized = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_source_runs_source_run_at", "source_id", "run_at_utc"),
    )


def create_all(engine_url: str) -> None:
    engine = create_engine(engine_url)
    Base.metadata.create_all(engine)
