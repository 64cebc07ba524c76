"""Canonical event model and score containers."""

import math
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from ..utils.time import ensure_utc, to_utc_z

CATEGORIES: Tuple[str, ...] = (
    "Legislative",
    "Executive",
    "Judicial",
    "Elections",
    "Rights & Liberties",
    "Civil Society",
    "Political Violence",
)

Category = Literal[
    "Legislative",
    "Executive",
    "Judicial",
    "Elections",
    "Rights & Liberties",
    "Civil Society",
    "Political Violence",
]

# Mappings keyed by category name
CategoryScores = Dict[str, float]
CategoryWeights = Dict[str, float]

UNTITLED_EVENT = "Untitled Event"

CATEGORY_META: Dict[str, Dict[str, str]] = {
    "Legislative": {"description": "Law-making, oversight, and checks on executive power."},
    "Executive": {"description": "Administrative actions, transparency, and rule implementation."},
    "Judicial": {"description": "Courts, judicial independence, and rule-of-law decisions."},
    "Elections": {"description": "Voting access, election integrity, and representation."},
    "Rights & Liberties": {"description": "Civil liberties, minority protections, and free expression."},
    "Civil Society": {"description": "Media, organizing, and civic participation."},
    "Political Violence": {"description": "Political intimidation, violence, and security of participants."},
}


class EventItem(BaseModel):
    """One discrete political development.

    Immutable once built. ``direction`` is +1 for movement toward democratic
    norms and -1 for movement toward autocratic drift.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime
    title: str
    summary: Optional[str] = None
    url: Optional[str] = None
    category: Category
    direction: Literal[1, -1]
    magnitude: float
    confidence: float

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("id must be non-empty")
        return value

    @field_validator("date")
    @classmethod
    def _date_utc(cls, value: datetime) -> datetime:
        try:
            return ensure_utc(value)
        except OverflowError as e:
            raise ValueError(f"date out of range in UTC: {value.isoformat()}") from e

    @field_validator("title", mode="before")
    @classmethod
    def _title_fallback(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNTITLED_EVENT
        return value.strip() if isinstance(value, str) else value

    @field_validator("direction", mode="before")
    @classmethod
    def _direction_not_bool(cls, value: Any) -> Any:
        # True == 1 in Python; reject it explicitly
        if isinstance(value, bool):
            raise ValueError("direction must be 1 or -1")
        return value

    @field_validator("magnitude")
    @classmethod
    def _magnitude_non_negative(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("magnitude must be finite")
        if value < 0:
            raise ValueError("magnitude must be non-negative")
        return value

    @field_validator("confidence")
    @classmethod
    def _confidence_in_unit_range(cls, value: float) -> float:
        if not math.isfinite(value) or not 0.0 <= value <= 1.0:
            raise ValueError("confidence must be within [0, 1]")
        return value

    @field_serializer("date")
    def _serialize_date(self, value: datetime) -> str:
        return to_utc_z(value)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict using the wire field names; absent optionals omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class EventStats(BaseModel):
    total: int = 0
    positive: int = 0
    negative: int = 0
    net_impact: float = 0.0
    average_confidence: float = 0.0
    latest_event_date: Optional[datetime] = None

    @field_serializer("latest_event_date")
    def _serialize_latest(self, value: Optional[datetime]) -> Optional[str]:
        return to_utc_z(value) if value is not None else None


class ScoreHistoryPoint(BaseModel):
    ts: datetime
    value: float

    @field_serializer("ts")
    def _serialize_ts(self, value: datetime) -> str:
        return to_utc_z(value)


def create_default_weights() -> CategoryWeights:
    return {category: 1.0 for category in CATEGORIES}


def empty_scores() -> CategoryScores:
    return {category: 0.0 for category in CATEGORIES}
