"""Time-decayed category scoring and weighted index aggregation.

Every function here is pure: no I/O, no hidden clock other than the
``now`` default, and no mutation of the events passed in.
"""

import math
from datetime import datetime, timedelta
from typing import Iterable, List, Mapping, Optional, Sequence

from ..utils.time import ensure_utc, utc_now
from .models import (
    CATEGORIES,
    CategoryScores,
    CategoryWeights,
    EventItem,
    EventStats,
    ScoreHistoryPoint,
    empty_scores,
)

HALF_LIFE_DAYS = 365
DECAY_LAMBDA = math.log(2) / HALF_LIFE_DAYS
SATURATION_SCALE = 10.0
SECONDS_PER_DAY = 24 * 60 * 60
_SCORE_CEILING = math.nextafter(100.0, 0.0)


def event_age_days(event: EventItem, now: datetime) -> float:
    """Age of an event in days; future-dated events count as age 0."""
    delta = ensure_utc(now) - event.date
    return max(0.0, delta.total_seconds() / SECONDS_PER_DAY)


def decay_factor(age_days: float) -> float:
    return math.exp(-DECAY_LAMBDA * age_days)


def signed_impact(event: EventItem, now: datetime) -> float:
    """direction x magnitude x confidence x decay for a single event."""
    decay = decay_factor(event_age_days(event, now))
    return event.direction * event.magnitude * event.confidence * decay


def raw_category_totals(events: Iterable[EventItem], now: datetime) -> CategoryScores:
    """Unbounded per-category accumulators of signed impact."""
    totals = empty_scores()
    for event in events:
        totals[event.category] += signed_impact(event, now)
    return totals


def score_categories(events: Iterable[EventItem], now: Optional[datetime] = None) -> CategoryScores:
    """
    Score each category from its decayed event history.

    Raw sums are squashed through ``tanh(raw / 10) * 100`` so a category
    saturates toward +/-100 instead of growing with event volume.

    Args:
        events: Events to score
        now: Clock reading used for decay (defaults to current UTC time)

    Returns:
        Mapping of every category to a score in (-100, 100)
    """
    now = ensure_utc(now) if now is not None else utc_now()
    totals = raw_category_totals(events, now)
    return {category: _saturate(totals[category]) for category in CATEGORIES}


def _saturate(raw: float) -> float:
    score = math.tanh(raw / SATURATION_SCALE) * 100
    # tanh rounds to exactly 1.0 for large inputs; keep the bound open
    return math.copysign(min(abs(score), _SCORE_CEILING), score)


def weighted_index(scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """
    Combine category scores into the headline index.

    Weights are relative: scaling all of them by the same positive factor
    leaves the result unchanged. A zero total weight yields 0.
    """
    total_weight = sum(weights.get(category, 0.0) for category in CATEGORIES) or 1.0
    weighted_sum = sum(
        scores.get(category, 0.0) * weights.get(category, 0.0) for category in CATEGORIES
    )
    return weighted_sum / total_weight


def compute_event_stats(events: Sequence[EventItem]) -> EventStats:
    if not events:
        return EventStats()

    positive = 0
    negative = 0
    net_impact = 0.0
    confidence_sum = 0.0
    latest: Optional[datetime] = None

    for event in events:
        if event.direction == 1:
            positive += 1
        else:
            negative += 1
        net_impact += event.direction * event.magnitude * event.confidence
        confidence_sum += event.confidence
        if latest is None or event.date > latest:
            latest = event.date

    return EventStats(
        total=len(events),
        positive=positive,
        negative=negative,
        net_impact=net_impact,
        average_confidence=confidence_sum / len(events),
        latest_event_date=latest,
    )


def generate_index_series(
    events: Sequence[EventItem],
    weights: CategoryWeights,
    days: int = 90,
    points: int = 60,
    now: Optional[datetime] = None,
) -> List[ScoreHistoryPoint]:
    """
    Reconstruct the headline index over a trailing window.

    Each point only sees events dated at or before it, and decays them
    against the point's own timestamp.

    Args:
        events: Full event history
        weights: Category weights applied at every point
        days: Length of the trailing window
        points: Number of evenly spaced samples (the last one is ``now``)
        now: End of the window (defaults to current UTC time)

    Returns:
        Chronologically ordered history points
    """
    now = ensure_utc(now) if now is not None else utc_now()
    if points < 2:
        timestamps = [now]
    else:
        start = now - timedelta(days=days)
        step = timedelta(days=days) / (points - 1)
        timestamps = [start + step * i for i in range(points - 1)] + [now]

    series: List[ScoreHistoryPoint] = []
    for ts in timestamps:
        visible = [event for event in events if event.date <= ts]
        value = weighted_index(score_categories(visible, ts), weights)
        series.append(ScoreHistoryPoint(ts=ts, value=value))
    return series


def filter_events(
    events: Sequence[EventItem],
    category: Optional[str] = None,
    direction: Optional[str] = None,
    search: Optional[str] = None,
) -> List[EventItem]:
    """Deep-dive filter by category, direction (positive/negative/all) and text."""
    needle = search.lower() if search else None
    filtered: List[EventItem] = []
    for event in events:
        if category and category != "All" and event.category != category:
            continue
        if direction == "positive" and event.direction != 1:
            continue
        if direction == "negative" and event.direction != -1:
            continue
        if needle and needle not in f"{event.title} {event.summary or ''}".lower():
            continue
        filtered.append(event)
    return filtered
