"""Scoring core: event model, decayed category scores and weighted index."""

from .engine import (
    compute_event_stats,
    decay_factor,
    generate_index_series,
    score_categories,
    weighted_index,
)
from .models import CATEGORIES, EventItem, create_default_weights

__all__ = [
    "CATEGORIES",
    "EventItem",
    "compute_event_stats",
    "create_default_weights",
    "decay_factor",
    "generate_index_series",
    "score_categories",
    "weighted_index",
]
