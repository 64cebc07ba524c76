"""Tests for EventItem validation and wire serialization."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from civicpulse.scoring.models import UNTITLED_EVENT, EventItem

BASE = {
    "id": "evt-1",
    "date": "2025-01-15T12:00:00Z",
    "title": "Court upholds voting map",
    "category": "Judicial",
    "direction": 1,
    "magnitude": 2.0,
    "confidence": 0.9,
}


def _event(**overrides):
    return EventItem(**{**BASE, **overrides})


def test_blank_title_becomes_untitled():
    assert _event(title="   ").title == UNTITLED_EVENT
    assert _event(title=None).title == UNTITLED_EVENT


def test_title_is_trimmed():
    assert _event(title="  Court ruling  ").title == "Court ruling"


@pytest.mark.parametrize("direction", [0, 2, True, False])
def test_direction_must_be_plus_or_minus_one(direction):
    with pytest.raises(ValidationError):
        _event(direction=direction)


def test_negative_magnitude_rejected():
    with pytest.raises(ValidationError):
        _event(magnitude=-0.1)


def test_zero_magnitude_allowed():
    assert _event(magnitude=0).magnitude == 0


@pytest.mark.parametrize("confidence", [-0.01, 1.01])
def test_confidence_outside_unit_range_rejected(confidence):
    with pytest.raises(ValidationError):
        _event(confidence=confidence)


def test_unknown_category_rejected():
    with pytest.raises(ValidationError):
        _event(category="Economy")


def test_blank_id_rejected():
    with pytest.raises(ValidationError):
        _event(id="  ")


def test_naive_date_is_treated_as_utc():
    event = _event(date=datetime(2025, 1, 15, 12, 0, 0))
    assert event.date.tzinfo is not None
    assert event.date == datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def test_offset_date_is_converted_to_utc():
    event = _event(date="2025-01-15T02:00:00+02:00")
    assert event.date == datetime(2025, 1, 15, 0, 0, 0, tzinfo=timezone.utc)
    assert event.date.utcoffset() == timedelta(0)


def test_event_is_immutable():
    event = _event()
    with pytest.raises(ValidationError):
        event.magnitude = 5.0


def test_to_wire_omits_absent_optionals_and_uses_z_suffix():
    wire = _event().to_wire()
    assert "summary" not in wire
    assert "url" not in wire
    assert wire["date"] == "2025-01-15T12:00:00Z"
    assert wire["category"] == "Judicial"
    assert wire["direction"] == 1


def test_to_wire_keeps_present_optionals():
    wire = _event(summary="5-4 decision", url="https://example.org/x").to_wire()
    assert wire["summary"] == "5-4 decision"
    assert wire["url"] == "https://example.org/x"


def test_wire_record_validates_back_to_equal_event():
    event = _event(summary="s")
    assert EventItem.model_validate(event.to_wire()) == event


@pytest.mark.parametrize("magnitude", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_magnitude_rejected(magnitude):
    with pytest.raises(ValidationError):
        _event(magnitude=magnitude)


@pytest.mark.parametrize("confidence", [float("nan"), float("inf")])
def test_non_finite_confidence_rejected(confidence):
    with pytest.raises(ValidationError):
        _event(confidence=confidence)


def test_date_out_of_range_in_utc_rejected():
    with pytest.raises(ValidationError):
        _event(date="0001-01-01T00:00:00+05:00")
