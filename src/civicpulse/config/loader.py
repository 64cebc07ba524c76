import math
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from ..scoring.models import CATEGORIES, CategoryWeights, create_default_weights

DEFAULT_CONFIG_PATH = Path("civicpulse.config.yaml")
DEFAULT_SOURCES_PATH = Path("config/sources.yaml")
DEFAULT_KEYWORDS_PATH = Path("config/keywords.yaml")
DEFAULT_WEIGHTS_PATH = Path("config/weights.yaml")


def load_config(path: Path | None = None) -> Dict[str, Any]:
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_sources_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load sources configuration from YAML file.

    Args:
        path: Optional path to sources.yaml file. Defaults to config/sources.yaml

    Returns:
        Dictionary with sources configuration

    Raises:
        FileNotFoundError: If sources config file doesn't exist
        ValueError: If the structure is invalid
    """
    cfg_path = path or DEFAULT_SOURCES_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Sources config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError("Sources config must be a dictionary")
    if "version" not in config:
        raise ValueError("Sources config must have 'version' field")
    if "sources" not in config:
        raise ValueError("Sources config must have 'sources' field")

    sources = config.get("sources") or []
    if not isinstance(sources, list):
        raise ValueError("Sources config 'sources' must be a list")
    for source in sources:
        if not isinstance(source, dict):
            raise ValueError("Each source must be a dictionary")
        for field in ["id", "type", "url"]:
            if field not in source:
                raise ValueError(f"Source {source.get('id', '?')} missing required field: {field}")

    config["sources"] = sources
    config.setdefault("defaults", {})
    return config


def get_all_sources(config: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
    """
    Get all sources from config.

    Args:
        config: Optional sources config dict. If None, loads from default path.

    Returns:
        List of source dictionaries
    """
    if config is None:
        config = load_sources_config()
    return list(config.get("sources") or [])


def get_enabled_sources(config: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
    return [source for source in get_all_sources(config) if source.get("enabled", True)]


def load_keywords_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load direction keywords and magnitude tiers from YAML.

    Expected shape::

        direction_keywords:
          courtlistener: [protect, expand]
        magnitude_tiers:
          - magnitude: 3.0
            terms: [enacted, signed]

    Returns:
        Dict with lower-cased ``direction_keywords`` and ``magnitude_tiers``.
    """
    cfg_path = path or DEFAULT_KEYWORDS_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Keywords config file not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Keywords config must be a dictionary")

    direction = config.get("direction_keywords", {}) or {}
    if not isinstance(direction, dict):
        raise ValueError("Keywords config 'direction_keywords' must be a mapping")

    normalized_direction: Dict[str, List[str]] = {}
    for source_type, terms in direction.items():
        normalized_direction[str(source_type)] = _normalize_terms(terms, f"direction_keywords.{source_type}")

    tiers = config.get("magnitude_tiers", []) or []
    if not isinstance(tiers, list):
        raise ValueError("Keywords config 'magnitude_tiers' must be a list")

    normalized_tiers: List[Dict[str, Any]] = []
    for entry in tiers:
        if not isinstance(entry, dict):
            raise ValueError("Each magnitude tier must be a dictionary")
        magnitude = entry.get("magnitude")
        if (
            isinstance(magnitude, bool)
            or not isinstance(magnitude, (int, float))
            or not math.isfinite(magnitude)
            or magnitude < 0
        ):
            raise ValueError("Magnitude tier 'magnitude' must be a non-negative finite number")
        normalized_tiers.append(
            {
                "magnitude": float(magnitude),
                "terms": _normalize_terms(entry.get("terms"), "magnitude_tiers.terms"),
            }
        )

    return {
        "direction_keywords": normalized_direction,
        "magnitude_tiers": normalized_tiers,
    }


def _normalize_terms(terms: Any, label: str) -> List[str]:
    if not isinstance(terms, list):
        raise ValueError(f"Keywords config '{label}' must be a list")
    normalized = []
    for term in terms:
        if not term or not isinstance(term, str):
            raise ValueError(f"Keywords config '{label}' entries must be non-empty strings")
        normalized.append(term.strip().lower())
    return normalized


def parse_weights(raw: Mapping[str, Any] | None) -> CategoryWeights:
    """
    Validate a category -> weight mapping.

    Missing categories keep the default weight of 1.

    Raises:
        ValueError: On unknown categories or negative/non-numeric weights
    """
    weights = create_default_weights()
    if not raw:
        return weights
    if not isinstance(raw, Mapping):
        raise ValueError("Weights must be a mapping of category to number")

    for category, value in raw.items():
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category in weights: {category}")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Weight for {category} must be numeric")
        if not math.isfinite(value):
            raise ValueError(f"Weight for {category} must be finite")
        if value < 0:
            raise ValueError(f"Weight for {category} must be non-negative")
        weights[category] = float(value)
    return weights


def load_weights_config(path: Path | None = None) -> CategoryWeights:
    """Load category weights from a YAML file (a ``weights`` key or a bare mapping)."""
    cfg_path = path or DEFAULT_WEIGHTS_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Weights config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    if isinstance(config, dict) and "weights" in config:
        config = config["weights"]
    return parse_weights(config)
