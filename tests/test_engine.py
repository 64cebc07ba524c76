"""Tests for category scoring and index aggregation."""

import math
from datetime import timedelta

import pytest

from civicpulse.scoring.engine import (
    HALF_LIFE_DAYS,
    compute_event_stats,
    decay_factor,
    event_age_days,
    filter_events,
    generate_index_series,
    raw_category_totals,
    score_categories,
    signed_impact,
    weighted_index,
)
from civicpulse.scoring.models import CATEGORIES, create_default_weights


class TestDecay:
    def test_event_dated_now_has_no_decay(self, make_event, now):
        event = make_event(days_ago=0)
        assert event_age_days(event, now) == 0
        assert decay_factor(event_age_days(event, now)) == 1.0

    def test_event_one_half_life_old_decays_to_half(self, make_event, now):
        event = make_event(days_ago=HALF_LIFE_DAYS)
        assert decay_factor(event_age_days(event, now)) == pytest.approx(0.5)

    def test_future_event_counts_as_age_zero(self, make_event, now):
        event = make_event(days_ago=-30)
        assert event_age_days(event, now) == 0
        assert signed_impact(event, now) == pytest.approx(event.magnitude * event.confidence)

    def test_signed_impact_uses_direction(self, make_event, now):
        event = make_event(direction=-1, magnitude=2.0, confidence=0.5)
        assert signed_impact(event, now) == pytest.approx(-1.0)


class TestScoreCategories:
    def test_empty_events_score_zero_everywhere(self, now):
        scores = score_categories([], now)
        assert set(scores) == set(CATEGORIES)
        assert all(value == 0 for value in scores.values())

    def test_category_without_events_scores_zero(self, make_event, now):
        scores = score_categories([make_event(category="Judicial", magnitude=3.0)], now)
        assert scores["Judicial"] > 0
        assert scores["Elections"] == 0
        assert scores["Political Violence"] == 0

    def test_end_to_end_elections_example(self, make_event, now):
        events = [
            make_event(id="a", direction=1, magnitude=2.5, confidence=0.9),
            make_event(id="b", direction=-1, magnitude=2.0, confidence=0.8),
        ]
        totals = raw_category_totals(events, now)
        assert totals["Elections"] == pytest.approx(0.65)

        scores = score_categories(events, now)
        assert scores["Elections"] == pytest.approx(math.tanh(0.065) * 100)
        assert scores["Elections"] == pytest.approx(6.49, abs=0.01)

    def test_scores_stay_strictly_bounded(self, make_event, now):
        positive = [make_event(id=f"p{i}", category="Executive", magnitude=5.0) for i in range(500)]
        negative = [
            make_event(id=f"n{i}", category="Civil Society", direction=-1, magnitude=5.0) for i in range(500)
        ]
        scores = score_categories(positive + negative, now)
        for value in scores.values():
            assert -100 < value < 100
        assert scores["Executive"] > 99
        assert scores["Civil Society"] < -99

    def test_is_deterministic_for_fixed_clock(self, make_event, now):
        events = [make_event(id="a", days_ago=10), make_event(id="b", days_ago=400, direction=-1)]
        assert score_categories(events, now) == score_categories(list(events), now)

    def test_naive_now_is_treated_as_utc(self, make_event, now):
        events = [make_event(days_ago=100)]
        assert score_categories(events, now.replace(tzinfo=None)) == score_categories(events, now)

    def test_older_events_weigh_less(self, make_event, now):
        recent = score_categories([make_event(days_ago=1)], now)["Elections"]
        old = score_categories([make_event(days_ago=700)], now)["Elections"]
        assert recent > old > 0


class TestWeightedIndex:
    def test_uniform_scaling_leaves_index_unchanged(self):
        scores = {category: float(i * 10 - 30) for i, category in enumerate(CATEGORIES)}
        ones = {category: 1.0 for category in CATEGORIES}
        twos = {category: 2.0 for category in CATEGORIES}
        assert weighted_index(scores, ones) == pytest.approx(weighted_index(scores, twos))

    def test_arbitrary_weights_scale_invariant(self):
        scores = {category: 50.0 - i * 7 for i, category in enumerate(CATEGORIES)}
        weights = {category: 0.25 + i for i, category in enumerate(CATEGORIES)}
        scaled = {category: value * 3.7 for category, value in weights.items()}
        assert weighted_index(scores, weights) == pytest.approx(weighted_index(scores, scaled))

    def test_zero_weights_give_zero(self):
        scores = {category: 42.0 for category in CATEGORIES}
        zeros = {category: 0.0 for category in CATEGORIES}
        assert weighted_index(scores, zeros) == 0

    def test_default_weights_average_scores(self):
        scores = {category: 0.0 for category in CATEGORIES}
        scores["Elections"] = 70.0
        assert weighted_index(scores, create_default_weights()) == pytest.approx(10.0)

    def test_single_weighted_category_dominates(self):
        scores = {category: -20.0 for category in CATEGORIES}
        scores["Judicial"] = 80.0
        weights = {category: 0.0 for category in CATEGORIES}
        weights["Judicial"] = 2.0
        assert weighted_index(scores, weights) == pytest.approx(80.0)


def test_compute_event_stats(make_event, now):
    events = [
        make_event(id="a", direction=1, magnitude=2.0, confidence=0.5, days_ago=3),
        make_event(id="b", direction=-1, magnitude=1.0, confidence=1.0, days_ago=1),
    ]
    stats = compute_event_stats(events)
    assert stats.total == 2
    assert stats.positive == 1
    assert stats.negative == 1
    assert stats.net_impact == pytest.approx(0.0)
    assert stats.average_confidence == pytest.approx(0.75)
    assert stats.latest_event_date == now - timedelta(days=1)


def test_compute_event_stats_empty():
    stats = compute_event_stats([])
    assert stats.total == 0
    assert stats.latest_event_date is None


class TestIndexSeries:
    def test_series_spans_window_and_ends_at_now(self, make_event, now):
        series = generate_index_series([make_event()], create_default_weights(), days=90, points=60, now=now)
        assert len(series) == 60
        assert series[-1].ts == now
        assert series[0].ts == now - timedelta(days=90)
        assert all(a.ts < b.ts for a, b in zip(series, series[1:]))

    def test_points_only_see_past_events(self, make_event, now):
        event = make_event(days_ago=10, magnitude=3.0)
        series = generate_index_series([event], create_default_weights(), days=30, points=4, now=now)
        assert series[0].value == 0
        assert series[-1].value > 0

    def test_single_point(self, make_event, now):
        series = generate_index_series([make_event()], create_default_weights(), points=1, now=now)
        assert len(series) == 1
        assert series[0].ts == now


def test_filter_events(make_event):
    events = [
        make_event(id="a", category="Elections", direction=1, title="Fair maps adopted"),
        make_event(id="b", category="Judicial", direction=-1, title="Court stays injunction"),
        make_event(id="c", category="Elections", direction=-1, title="Polling places closed", summary="rural"),
    ]
    assert [e.id for e in filter_events(events, category="Elections")] == ["a", "c"]
    assert [e.id for e in filter_events(events, category="All", direction="negative")] == ["b", "c"]
    assert [e.id for e in filter_events(events, search="RURAL")] == ["c"]
    assert len(filter_events(events, direction="all")) == 3


def test_overflowing_totals_stay_bounded(make_event, now):
    events = [make_event(id=f"big{i}", magnitude=1e308) for i in range(3)]
    score = score_categories(events, now)["Elections"]
    assert -100 < score < 100
