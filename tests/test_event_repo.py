"""Tests for the events repository."""

import json

from civicpulse.database.event_repo import count_events, get_event_by_id, load_events, upsert_events
from civicpulse.database.schema import Event
from civicpulse.database.source_run_repo import create_source_run, list_recent_runs


def test_upsert_and_load_round_trip(session, make_event):
    event = make_event(id="cl-1", category="Judicial", summary="opinion", url="https://x")
    assert upsert_events(session, [event], source="courtlistener") == 1
    session.commit()

    [loaded] = load_events(session)
    assert loaded == event
    assert get_event_by_id(session, "cl-1").source == "courtlistener"


def test_upsert_overwrites_existing(session, make_event):
    upsert_events(session, [make_event(id="x", confidence=0.5)], source="gdelt")
    session.commit()
    upsert_events(session, [make_event(id="x", confidence=0.9)])
    session.commit()

    assert count_events(session) == 1
    row = get_event_by_id(session, "x")
    assert row.confidence == 0.9
    assert row.source == "gdelt"


def test_upsert_repeated_ids_in_one_call_keeps_last(session, make_event):
    written = upsert_events(session, [make_event(id="x", title="one"), make_event(id="x", title="two")])
    session.commit()

    assert written == 1
    assert count_events(session) == 1
    assert get_event_by_id(session, "x").title == "two"


def test_upsert_stores_raw_record_and_per_event_source(session, make_event):
    events = [make_event(id="gd-a"), make_event(id="os-b")]
    upsert_events(
        session,
        events,
        sources={"gd-a": "gdelt", "os-b": "openstates"},
        raw={"gd-a": {"url": "a"}},
    )
    session.commit()

    assert json.loads(get_event_by_id(session, "gd-a").raw_json) == {"url": "a"}
    assert get_event_by_id(session, "os-b").raw_json is None
    assert get_event_by_id(session, "os-b").source == "openstates"


def test_load_events_orders_and_filters(session, make_event):
    upsert_events(
        session,
        [
            make_event(id="old", days_ago=20, category="Judicial"),
            make_event(id="new", days_ago=1, category="Elections"),
            make_event(id="mid", days_ago=5, category="Judicial"),
        ],
        source="manual",
    )
    session.commit()

    assert [e.id for e in load_events(session)] == ["new", "mid", "old"]
    assert [e.id for e in load_events(session, category="Judicial")] == ["mid", "old"]
    assert [e.id for e in load_events(session, limit=1)] == ["new"]
    assert load_events(session, source="gdelt") == []


def test_load_events_skips_rows_that_no_longer_validate(session, make_event):
    upsert_events(session, [make_event(id="good")])
    session.commit()
    session.query(Event).filter(Event.id == "good").update({"confidence": 7.0})
    upsert_events(session, [make_event(id="also-good", days_ago=1)])
    session.commit()

    assert [e.id for e in load_events(session)] == ["also-good"]


def test_upsert_empty_is_noop(session):
    assert upsert_events(session, []) == 0


def test_source_runs_are_listed_newest_first(session):
    create_source_run(session, "RUN-1", "gdelt", "2025-01-01T00:00:00Z", "SUCCESS", items_fetched=3)
    create_source_run(session, "RUN-2", "gdelt", "2025-01-02T00:00:00Z", "FAILURE", error="boom")
    create_source_run(session, "RUN-2", "propublica", "2025-01-02T00:00:00Z", "SKIPPED")
    session.commit()

    runs = list_recent_runs(session, source_id="gdelt")
    assert [r.run_group_id for r in runs] == ["RUN-2", "RUN-1"]
    assert runs[0].error == "boom"
    assert len(list_recent_runs(session, run_group_id="RUN-2")) == 2
