"""CLI entrypoint for civicpulse."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from civicpulse.api.export import export_events_json, load_events_json, validate_events_payload
from civicpulse.api.index_api import get_dashboard
from civicpulse.config.loader import (
    get_all_sources,
    load_config,
    load_sources_config,
    load_weights_config,
    parse_weights,
)
from civicpulse.database.event_repo import load_events, upsert_events
from civicpulse.database.sqlite_client import session_context
from civicpulse.output.brief import render_json, render_markdown
from civicpulse.parsing.normalizer import manual_event
from civicpulse.retrieval.dedupe import merge_events
from civicpulse.retrieval.fetcher import SourceFetcher
from civicpulse.scoring.engine import filter_events
from civicpulse.runners.refresh import run_refresh
from civicpulse.scoring.models import CATEGORIES, CategoryWeights
from civicpulse.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SQLITE_PATH = "civicpulse.db"
DEFAULT_EVENTS_JSON = "public/data/events.json"


def _runtime_config() -> Dict[str, Any]:
    try:
        return load_config()
    except FileNotFoundError:
        logger.debug("No civicpulse.config.yaml found, using defaults")
        return {}


def _sqlite_path(config: Dict[str, Any]) -> str:
    return config.get("storage", {}).get("sqlite_path", DEFAULT_SQLITE_PATH)


def _events_json_path(config: Dict[str, Any], override: Optional[str] = None) -> Path:
    return Path(override or config.get("output", {}).get("events_json", DEFAULT_EVENTS_JSON))


def _resolve_weights(config: Dict[str, Any], weights_path: Optional[str]) -> CategoryWeights:
    if weights_path:
        return load_weights_config(Path(weights_path))
    return parse_weights(config.get("weights"))


def cmd_sources_list(args: argparse.Namespace) -> int:
    """List configured sources."""
    try:
        all_sources = get_all_sources(load_sources_config())
    except FileNotFoundError as e:
        logger.error(f"Sources config not found: {e}")
        print("Error: Sources config file not found. Create config/sources.yaml")
        return 1

    if not all_sources:
        print("No sources configured.")
        return 0

    print(f"{'ID':<24} {'Type':<15} {'Enabled':<9} {'API key':<20}")
    print("-" * 70)
    for source in all_sources:
        enabled = "Yes" if source.get("enabled", True) else "No"
        api_key = source.get("api_key_env") or "-"
        print(f"{source.get('id', 'unknown'):<24} {source.get('type', 'unknown'):<15} {enabled:<9} {api_key:<20}")
    return 0


def cmd_refresh(args: argparse.Namespace) -> int:
    """Fetch all sources, normalize, merge and store; then write the events JSON."""
    config = _runtime_config()
    out = _events_json_path(config, args.out)
    fetcher = SourceFetcher()

    with session_context(_sqlite_path(config)) as session:
        result = run_refresh(
            session,
            fetcher,
            max_items_per_source=args.max_items_per_source,
            fail_fast=args.fail_fast,
        )
        session.commit()

    for source in result.sources:
        suffix = f" ({source.error})" if source.error else ""
        print(f"  {source.source_id:<24} {source.status:<8} {source.records_fetched:>4} records -> {source.events_normalized:>4} events{suffix}")
    print(export_events_json(result.events, out))
    print(f"Refresh complete: {result.fresh_events} fresh events, {len(result.events)} total")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Merge an events JSON file into the store (latest wins)."""
    path = Path(args.file)
    incoming = load_events_json(path)
    if not incoming:
        print(f"No valid events found in {path}")
        return 1

    config = _runtime_config()
    with session_context(_sqlite_path(config)) as session:
        merged = merge_events(load_events(session), incoming)
        stored = upsert_events(session, incoming, source=args.source)
        session.commit()

    print(f"Imported {stored} events ({len(merged)} total)")
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    """Add a hand-entered event."""
    try:
        event = manual_event(
            title=args.title,
            category=args.category,
            direction=args.direction,
            magnitude=args.magnitude,
            confidence=args.confidence,
            url=args.url,
            summary=args.summary,
        )
    except ValidationError as e:
        print(f"Error: invalid event: {e}")
        return 1

    config = _runtime_config()
    with session_context(_sqlite_path(config)) as session:
        upsert_events(session, [event], source="manual")
        session.commit()

    print(f"Added {event.id}: {event.title}")
    return 0


def cmd_score(args: argparse.Namespace) -> int:
    """Print the dashboard (index, category scores, stats, recent events)."""
    config = _runtime_config()
    try:
        weights = _resolve_weights(config, args.weights)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if args.events:
        events = load_events_json(Path(args.events))
    else:
        with session_context(_sqlite_path(config)) as session:
            events = load_events(session)

    dashboard = get_dashboard(
        events,
        weights,
        recent_limit=args.limit,
        category=args.category,
        direction=args.direction,
        search=args.search,
    )
    if args.format == "json":
        print(render_json(dashboard))
    else:
        print(render_markdown(dashboard))
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Write ``{events: [...]}`` from the store."""
    config = _runtime_config()
    with session_context(_sqlite_path(config)) as session:
        events = load_events(session)
    events = filter_events(events, category=args.category, direction=args.direction, search=args.search)
    out = Path(args.out) if args.out else None
    print(export_events_json(events, out))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate an events JSON file against the wire schema."""
    path = Path(args.file)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"[FAIL] {path}: {e}", file=sys.stderr)
        return 1

    issues = validate_events_payload(payload)
    if issues:
        print(f"[FAIL] {path}", file=sys.stderr)
        for issue in issues:
            print(f"  - {issue}", file=sys.stderr)
        return 1

    print(f"[OK] {path}: {len(payload['events'])} events")
    return 0


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--category", type=str, choices=["All", *CATEGORIES], help="Only events in this category")
    parser.add_argument(
        "--direction",
        type=str,
        choices=["positive", "negative", "all"],
        help="Only events toward democracy (positive) or autocracy (negative)",
    )
    parser.add_argument("--search", type=str, help="Case-insensitive text match on title and summary")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="civicpulse",
        description="Decayed, confidence-weighted democracy index from political events",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # sources command
    sources_parser = subparsers.add_parser("sources", help="Source management commands")
    sources_subparsers = sources_parser.add_subparsers(dest="sources_subcommand", help="Sources subcommands", required=True)
    sources_list_parser = sources_subparsers.add_parser("list", help="List configured sources")
    sources_list_parser.set_defaults(func=cmd_sources_list)

    # refresh command
    refresh_parser = subparsers.add_parser("refresh", help="Fetch, normalize, merge and store events")
    refresh_parser.add_argument(
        "--max-items-per-source",
        type=int,
        default=None,
        help="Maximum records per source (default: source config)",
    )
    refresh_parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop on first source error (default: continue on errors)",
    )
    refresh_parser.add_argument(
        "--out",
        type=str,
        help=f"Events JSON output path (default: {DEFAULT_EVENTS_JSON})",
    )
    refresh_parser.set_defaults(func=cmd_refresh)

    # import command
    import_parser = subparsers.add_parser("import", help="Merge an events JSON file into the store")
    import_parser.add_argument("file", help="JSON file: {\"events\": [...]} or a bare list")
    import_parser.add_argument("--source", type=str, default="import", help="Source label (default: import)")
    import_parser.set_defaults(func=cmd_import)

    # add command
    add_parser = subparsers.add_parser("add", help="Add a hand-entered event")
    add_parser.add_argument("--title", required=True)
    add_parser.add_argument("--category", required=True, choices=list(CATEGORIES))
    add_parser.add_argument("--direction", type=int, choices=[1, -1], default=1)
    add_parser.add_argument("--magnitude", type=float, default=1.0)
    add_parser.add_argument("--confidence", type=float, default=0.8)
    add_parser.add_argument("--url", type=str)
    add_parser.add_argument("--summary", type=str)
    add_parser.set_defaults(func=cmd_add)

    # score command
    score_parser = subparsers.add_parser("score", help="Print the index and category scores")
    score_parser.add_argument(
        "--format",
        type=str,
        choices=["md", "json"],
        default="md",
        help="Output format: md or json (default: md)",
    )
    score_parser.add_argument("--weights", type=str, help="YAML file with category weights")
    score_parser.add_argument("--events", type=str, help="Score an events JSON file instead of the store")
    score_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of recent events to list (default: 10)",
    )
    _add_filter_arguments(score_parser)
    score_parser.set_defaults(func=cmd_score)

    # export command
    export_parser = subparsers.add_parser("export", help="Export stored events as JSON")
    export_parser.add_argument("--out", type=str, help="Output file (default: stdout)")
    _add_filter_arguments(export_parser)
    export_parser.set_defaults(func=cmd_export)

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate an events JSON file")
    validate_parser.add_argument("file")
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    sys.exit(main())
