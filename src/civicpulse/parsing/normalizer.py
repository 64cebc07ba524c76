"""Per-source normalizers mapping raw third-party records to EventItem.

Each ``normalize_<source>`` is a pure function over its input list. Records
that cannot be given a stable id are dropped; a record that fails
validation never takes the rest of its batch down with it.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from ..config.loader import load_keywords_config
from ..scoring.models import EventItem
from ..utils.id_generator import content_event_id, make_event_id
from ..utils.logging import get_logger
from ..utils.time import parse_timestamp, utc_now
from .raw_records import (
    CourtListenerOpinion,
    GdeltArticle,
    OpenStatesBill,
    ProPublicaVote,
    parse_raw_record,
)

logger = get_logger(__name__)

COURTLISTENER_BASE_URL = "https://www.courtlistener.com"

# Per-source reliability, not computed per record
SOURCE_CONFIDENCE: Dict[str, float] = {
    "courtlistener": 0.9,
    "propublica": 0.9,
    "openstates": 0.85,
    "gdelt": 0.75,
}

SOURCE_PREFIX: Dict[str, str] = {
    "courtlistener": "cl",
    "propublica": "pp",
    "openstates": "os",
    "gdelt": "gd",
}

DEFAULT_DIRECTION_KEYWORDS: Dict[str, List[str]] = {
    "courtlistener": ["protect", "expand", "enjoin", "strike", "invalidate"],
    "openstates": ["expand", "access", "registration", "mail", "drop box", "preclearance", "independent"],
    "gdelt": ["protest", "march", "rally", "press freedom", "journalist"],
}

DEFAULT_MAGNITUDE_TIERS: List[Tuple[float, List[str]]] = [
    (3.0, ["final", "enacted", "signed", "opinion"]),
    (2.5, ["vote", "pass"]),
    (1.5, ["introduced", "hearing"]),
]
DEFAULT_MAGNITUDE = 1.0


@dataclass(frozen=True)
class KeywordConfig:
    """Tunable word lists behind the direction and magnitude heuristics."""

    direction_keywords: Dict[str, List[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_DIRECTION_KEYWORDS.items()}
    )
    magnitude_tiers: List[Tuple[float, List[str]]] = field(
        default_factory=lambda: [(m, list(t)) for m, t in DEFAULT_MAGNITUDE_TIERS]
    )

    def direction_pattern(self, source_type: str) -> Optional[re.Pattern]:
        terms = self.direction_keywords.get(source_type) or []
        if not terms:
            return None
        return re.compile("|".join(re.escape(term) for term in terms), re.IGNORECASE)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "KeywordConfig":
        """Overlay a loaded keywords config onto the built-in defaults."""
        direction = {k: list(v) for k, v in DEFAULT_DIRECTION_KEYWORDS.items()}
        direction.update(config.get("direction_keywords") or {})
        tiers = [(tier["magnitude"], tier["terms"]) for tier in config.get("magnitude_tiers") or []]
        return cls(
            direction_keywords=direction,
            magnitude_tiers=tiers or [(m, list(t)) for m, t in DEFAULT_MAGNITUDE_TIERS],
        )


@lru_cache(maxsize=1)
def load_keyword_config() -> KeywordConfig:
    """
    Load keyword lists from config with fallback defaults.
    """
    try:
        return KeywordConfig.from_config(load_keywords_config())
    except FileNotFoundError:
        pass
    except (ValueError, yaml.YAMLError) as e:
        logger.warning(f"Invalid keywords config, using defaults: {e}")
    return KeywordConfig()


def magnitude_from_action(kind: Optional[str], keywords: Optional[KeywordConfig] = None) -> float:
    """
    Map an action description to a magnitude tier.

    Tiers are checked in order, so "final passage vote" lands in the top tier.
    """
    if not kind:
        return DEFAULT_MAGNITUDE
    keywords = keywords or load_keyword_config()
    lowered = kind.lower()
    for magnitude, terms in keywords.magnitude_tiers:
        if any(term in lowered for term in terms):
            return magnitude
    return DEFAULT_MAGNITUDE


def classify_direction(text: str, pattern: Optional[re.Pattern]) -> int:
    """+1 when the text matches the rights-expanding word list, otherwise -1."""
    if pattern is not None and pattern.search(text):
        return 1
    return -1


def _join_text(*parts: Optional[str]) -> str:
    return " ".join(part for part in parts if part)


def normalize_courtlistener(
    records: Sequence[Any],
    now: Optional[datetime] = None,
    keywords: Optional[KeywordConfig] = None,
) -> List[EventItem]:
    """Court opinions from the CourtListener search API."""
    keywords = keywords or load_keyword_config()
    pattern = keywords.direction_pattern("courtlistener")
    events: List[EventItem] = []

    for raw in records:
        opinion = parse_raw_record(CourtListenerOpinion, raw)
        if opinion is None:
            continue
        event_id = make_event_id(SOURCE_PREFIX["courtlistener"], opinion.id) or make_event_id(
            SOURCE_PREFIX["courtlistener"], opinion.absolute_url
        )
        if event_id is None:
            logger.debug("Dropping CourtListener opinion without id")
            continue

        opinion_text = opinion.cluster.opinion_text if opinion.cluster else None
        text = _join_text(opinion.caseName, opinion.citation, opinion_text)
        _append(
            events,
            id=event_id,
            date=parse_timestamp(opinion.date_filed, now),
            title=opinion.caseName or opinion.absolute_url or "Court opinion",
            summary=opinion.citation,
            url=f"{COURTLISTENER_BASE_URL}{opinion.absolute_url}" if opinion.absolute_url else None,
            category="Judicial",
            direction=classify_direction(text, pattern),
            magnitude=3.0,
            confidence=SOURCE_CONFIDENCE["courtlistener"],
        )

    return events


def normalize_propublica(
    records: Sequence[Any],
    now: Optional[datetime] = None,
    keywords: Optional[KeywordConfig] = None,
) -> List[EventItem]:
    """Congressional roll-call votes from the ProPublica Congress API."""
    keywords = keywords or load_keyword_config()
    events: List[EventItem] = []

    for raw in records:
        vote = parse_raw_record(ProPublicaVote, raw)
        if vote is None:
            continue

        fallback_parts = [
            part for part in (vote.chamber, vote.congress, vote.session, vote.roll_call) if part
        ]
        native_id = vote.vote_id or ("-".join(fallback_parts) if fallback_parts else None)
        event_id = make_event_id(SOURCE_PREFIX["propublica"], native_id)
        if event_id is None:
            logger.debug("Dropping ProPublica vote without vote_id or roll-call fields")
            continue

        chamber = vote.chamber.upper() if vote.chamber else "CONGRESS"
        bill = vote.bill
        result = vote.result or ""
        latest_action = (bill.latest_action if bill else None) or result or "vote"
        date_value = f"{vote.date}T{vote.time or '00:00'}Z" if vote.date else None
        bill_urls = [bill.govtrack_url, bill.congressdotgov_url] if bill else []

        _append(
            events,
            id=event_id,
            date=parse_timestamp(date_value, now),
            title=f"{chamber} vote: {vote.description or vote.question or 'Measure'}",
            summary=(bill.title if bill else None) or vote.description or vote.question,
            url=vote.url or next((url for url in bill_urls if url), None),
            category="Legislative",
            direction=1 if "passed" in result.lower() else -1,
            magnitude=magnitude_from_action(latest_action, keywords),
            confidence=SOURCE_CONFIDENCE["propublica"],
        )

    return events


def normalize_openstates(
    records: Sequence[Any],
    now: Optional[datetime] = None,
    keywords: Optional[KeywordConfig] = None,
) -> List[EventItem]:
    """State election bills from the OpenStates v3 API."""
    keywords = keywords or load_keyword_config()
    pattern = keywords.direction_pattern("openstates")
    events: List[EventItem] = []

    for raw in records:
        bill = parse_raw_record(OpenStatesBill, raw)
        if bill is None:
            continue
        event_id = make_event_id(SOURCE_PREFIX["openstates"], bill.id)
        if event_id is None:
            logger.debug("Dropping OpenStates bill without id")
            continue

        jurisdiction = (bill.jurisdiction.name if bill.jurisdiction else None) or "State"
        title = bill.title or f"{jurisdiction} bill"
        latest = bill.latest_action_date or bill.updated_at or bill.created_at
        source_url = next((source.url for source in bill.sources if source.url), None)

        _append(
            events,
            id=event_id,
            date=parse_timestamp(latest, now),
            title=title,
            summary=bill.latest_action_description,
            url=bill.openstates_url or source_url,
            category="Elections",
            direction=classify_direction(_join_text(title, *bill.subjects), pattern),
            magnitude=magnitude_from_action(bill.latest_action_description or "bill", keywords),
            confidence=SOURCE_CONFIDENCE["openstates"],
        )

    return events


def normalize_gdelt(
    records: Sequence[Any],
    now: Optional[datetime] = None,
    keywords: Optional[KeywordConfig] = None,
) -> List[EventItem]:
    """News articles from the GDELT DOC 2.0 ArtList endpoint."""
    keywords = keywords or load_keyword_config()
    pattern = keywords.direction_pattern("gdelt")
    events: List[EventItem] = []

    for raw in records:
        article = parse_raw_record(GdeltArticle, raw)
        if article is None:
            continue
        event_id = make_event_id(SOURCE_PREFIX["gdelt"], article.url) or make_event_id(
            SOURCE_PREFIX["gdelt"], article.guid
        )
        if event_id is None:
            logger.debug("Dropping GDELT article without url or guid")
            continue

        title = article.title or "Civic action"
        summary = None
        if article.sourcecountry:
            summary = f"{article.sourcecountry} · {article.source or ''}".strip(" ·")

        _append(
            events,
            id=event_id,
            date=parse_timestamp(article.seendate, now),
            title=title,
            summary=summary,
            url=article.url,
            category="Civil Society",
            direction=classify_direction(title, pattern),
            magnitude=1.5,
            confidence=SOURCE_CONFIDENCE["gdelt"],
        )

    return events


def _append(events: List[EventItem], **fields: Any) -> None:
    try:
        events.append(EventItem(**fields))
    except ValidationError as e:
        logger.debug(f"Dropping record {fields.get('id')}: {e.error_count()} validation errors")


NORMALIZERS: Dict[str, Callable[..., List[EventItem]]] = {
    "courtlistener": normalize_courtlistener,
    "propublica": normalize_propublica,
    "openstates": normalize_openstates,
    "gdelt": normalize_gdelt,
}


def normalize_records(
    source_type: str,
    records: Any,
    now: Optional[datetime] = None,
    keywords: Optional[KeywordConfig] = None,
) -> List[EventItem]:
    """
    Normalize one source's raw records, degrading to an empty list on failure.

    Args:
        source_type: Key into NORMALIZERS (courtlistener, propublica, ...)
        records: Raw record list as fetched
        now: Fallback timestamp for unparseable dates
        keywords: Optional keyword override

    Returns:
        Normalized events; never raises
    """
    normalizer = NORMALIZERS.get(source_type)
    if normalizer is None:
        logger.warning(f"No normalizer for source type: {source_type}")
        return []
    if not isinstance(records, list):
        logger.warning(f"Expected a list of records for {source_type}, got {type(records).__name__}")
        return []
    try:
        return normalizer(records, now=now, keywords=keywords)
    except Exception as e:
        logger.warning(f"Normalizer for {source_type} failed, treating source as empty: {e}", exc_info=True)
        return []


def normalize_event_records(records: Any) -> List[EventItem]:
    """
    Validate records that are already EventItem-shaped (manual JSON import).

    Invalid records are dropped; a ``summary`` or ``url`` of the wrong type is
    discarded rather than failing the record.
    """
    if not isinstance(records, list):
        return []
    events: List[EventItem] = []
    for raw in records:
        if not isinstance(raw, dict):
            continue
        candidate = dict(raw)
        for optional in ("summary", "url"):
            if not isinstance(candidate.get(optional), str) or not candidate.get(optional):
                candidate.pop(optional, None)
        # Only string dates cross the wire; bare numbers would parse as epoch
        if not isinstance(candidate.get("date"), str) or not isinstance(candidate.get("id"), str):
            continue
        try:
            events.append(EventItem.model_validate(candidate))
        except ValidationError as e:
            logger.debug(f"Dropping imported record {candidate.get('id')}: {e.error_count()} validation errors")
    return events


def manual_event(
    title: str,
    category: str,
    direction: int = 1,
    magnitude: float = 1.0,
    confidence: float = 0.8,
    url: Optional[str] = None,
    summary: Optional[str] = None,
    date: Optional[datetime] = None,
) -> EventItem:
    """
    Build a hand-entered event.

    The id is hashed from title, category and date, so entering the same
    event twice collapses to one record.

    Raises:
        pydantic.ValidationError: If the fields break EventItem invariants
    """
    date = date or utc_now()
    clean_title = (title or "").strip()
    return EventItem(
        id=content_event_id(clean_title, category, date.isoformat()),
        date=date,
        title=clean_title,
        summary=(summary or "").strip() or None,
        url=(url or "").strip() or None,
        category=category,
        direction=direction,
        magnitude=magnitude,
        confidence=confidence,
    )
