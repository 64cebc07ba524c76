"""Dashboard read model: headline index, category gauges, stats and history."""

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..scoring.engine import (
    compute_event_stats,
    filter_events,
    generate_index_series,
    score_categories,
    weighted_index,
)
from ..scoring.models import CATEGORIES, CATEGORY_META, CategoryWeights, EventItem, create_default_weights
from ..utils.time import ensure_utc, to_utc_z, utc_now


def get_dashboard(
    events: Sequence[EventItem],
    weights: Optional[CategoryWeights] = None,
    now: Optional[datetime] = None,
    history_days: int = 90,
    history_points: int = 60,
    recent_limit: int = 10,
    category: Optional[str] = None,
    direction: Optional[str] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the JSON-ready dashboard summary.

    Args:
        events: Event collection (any order)
        weights: Category weights (defaults to 1 for every category)
        now: Scoring clock (defaults to current UTC time)
        history_days: Trailing window for the index history
        history_points: Number of history samples
        recent_limit: Number of newest events to include
        category: Only list recent events in this category
        direction: Only list positive or negative recent events
        search: Only list recent events whose title or summary contains this text

    Returns:
        Dict with index, categories, weights, stats, history, recent_events
    """
    now = ensure_utc(now) if now is not None else utc_now()
    weights = weights or create_default_weights()
    listed = filter_events(events, category=category, direction=direction, search=search)
    scores = score_categories(events, now)
    total_weight = sum(weights.get(category, 0.0) for category in CATEGORIES)

    categories = []
    for category in CATEGORIES:
        weight = weights.get(category, 0.0)
        categories.append(
            {
                "category": category,
                "score": scores[category],
                "weight": weight,
                "share": weight / total_weight if total_weight > 0 else 0.0,
                "event_count": sum(1 for event in events if event.category == category),
                "description": CATEGORY_META[category]["description"],
            }
        )

    recent = sorted(listed, key=lambda event: event.date, reverse=True)[:recent_limit]
    history = generate_index_series(events, weights, days=history_days, points=history_points, now=now)

    return {
        "generated_at_utc": to_utc_z(now),
        "index": weighted_index(scores, weights),
        "category_scores": scores,
        "categories": categories,
        "weights": dict(weights),
        "stats": compute_event_stats(events).model_dump(mode="json"),
        "history": [point.model_dump(mode="json") for point in history],
        "recent_events": [event.to_wire() for event in recent],
    }
