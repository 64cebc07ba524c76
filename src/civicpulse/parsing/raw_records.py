"""Boundary models for third-party payload records.

Each model lists the optional fields one source may send. Fields of the
wrong JSON type are coerced to ``None`` instead of failing the record, so a
noisy upstream value only loses that field.
"""

from typing import Annotated, Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _key_or_none(value: Any) -> Optional[str]:
    """Identifier fields: strings or integers (never booleans)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return value if isinstance(value, str) else None


def _dict_or_none(value: Any) -> Any:
    return value if isinstance(value, dict) else None


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _dict_list(value: Any) -> List[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


Text = Annotated[Optional[str], BeforeValidator(_str_or_none)]
Key = Annotated[Optional[str], BeforeValidator(_key_or_none)]
TextList = Annotated[List[str], BeforeValidator(_str_list)]


class RawRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CourtListenerCluster(RawRecord):
    opinion_text: Text = None


class CourtListenerOpinion(RawRecord):
    id: Key = None
    date_filed: Text = None
    caseName: Text = None
    absolute_url: Text = None
    citation: Text = None
    cluster: Annotated[Optional[CourtListenerCluster], BeforeValidator(_dict_or_none)] = None


class ProPublicaBill(RawRecord):
    title: Text = None
    latest_action: Text = None
    govtrack_url: Text = None
    congressdotgov_url: Text = None


class ProPublicaVote(RawRecord):
    vote_id: Text = None
    chamber: Text = None
    congress: Key = None
    session: Key = None
    roll_call: Key = None
    date: Text = None
    time: Text = None
    description: Text = None
    question: Text = None
    result: Text = None
    url: Text = None
    bill: Annotated[Optional[ProPublicaBill], BeforeValidator(_dict_or_none)] = None


class OpenStatesSource(RawRecord):
    url: Text = None


class OpenStatesJurisdiction(RawRecord):
    name: Text = None


class OpenStatesBill(RawRecord):
    id: Key = None
    title: Text = None
    latest_action_date: Text = None
    updated_at: Text = None
    created_at: Text = None
    latest_action_description: Text = None
    subjects: TextList = []
    openstates_url: Text = None
    sources: Annotated[List[OpenStatesSource], BeforeValidator(_dict_list)] = []
    jurisdiction: Annotated[Optional[OpenStatesJurisdiction], BeforeValidator(_dict_or_none)] = None


class GdeltArticle(RawRecord):
    url: Text = None
    guid: Text = None
    seendate: Text = None
    title: Text = None
    sourcecountry: Text = None
    source: Text = None


RecordT = TypeVar("RecordT", bound=RawRecord)


def parse_raw_record(model: Type[RecordT], raw: Any) -> Optional[RecordT]:
    """
    Validate one raw payload entry against a source model.

    Returns:
        The parsed record, or None when ``raw`` is not a JSON object
    """
    if not isinstance(raw, dict):
        return None
    try:
        return model.model_validate(raw)
    except ValidationError:
        return None
