"""Source normalizers: raw third-party payloads in, EventItem lists out."""

from .normalizer import (
    NORMALIZERS,
    normalize_courtlistener,
    normalize_event_records,
    normalize_gdelt,
    normalize_openstates,
    normalize_propublica,
    normalize_records,
)

__all__ = [
    "NORMALIZERS",
    "normalize_courtlistener",
    "normalize_event_records",
    "normalize_gdelt",
    "normalize_openstates",
    "normalize_propublica",
    "normalize_records",
]
