"""Tests for YAML config loading and validation."""

from pathlib import Path

import pytest

from civicpulse.config.loader import (
    get_enabled_sources,
    load_config,
    load_keywords_config,
    load_sources_config,
    load_weights_config,
    parse_weights,
)
from civicpulse.scoring.models import CATEGORIES


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_load_config_empty_file(tmp_path):
    assert load_config(_write(tmp_path, "c.yaml", "")) == {}


def test_load_sources_config(tmp_path):
    path = _write(
        tmp_path,
        "sources.yaml",
        """
version: 1
sources:
  - id: gdelt_civic_news
    type: gdelt
    url: https://api.gdeltproject.org/api/v2/doc/doc
  - id: courtlistener_opinions
    type: courtlistener
    url: https://www.courtlistener.com/api/rest/v4/search/
    enabled: false
""",
    )
    config = load_sources_config(path)
    assert config["defaults"] == {}
    assert [s["id"] for s in config["sources"]] == ["gdelt_civic_news", "courtlistener_opinions"]
    assert [s["id"] for s in get_enabled_sources(config)] == ["gdelt_civic_news"]


@pytest.mark.parametrize(
    "text,message",
    [
        ("sources: []", "version"),
        ("version: 1", "sources"),
        ("version: 1\nsources: {a: 1}", "must be a list"),
        ("version: 1\nsources:\n  - id: x\n    type: gdelt", "url"),
    ],
)
def test_load_sources_config_rejects_bad_structure(tmp_path, text, message):
    with pytest.raises(ValueError, match=message):
        load_sources_config(_write(tmp_path, "sources.yaml", text))


def test_shipped_sources_config_is_valid():
    config = load_sources_config(Path(__file__).resolve().parents[1] / "config" / "sources.yaml")
    types = {source["type"] for source in config["sources"]}
    assert types == {"courtlistener", "propublica", "openstates", "gdelt"}


def test_load_keywords_config_normalizes_terms(tmp_path):
    path = _write(
        tmp_path,
        "keywords.yaml",
        """
direction_keywords:
  gdelt: [" Rally ", MARCH]
magnitude_tiers:
  - magnitude: 3
    terms: [Signed]
""",
    )
    config = load_keywords_config(path)
    assert config["direction_keywords"] == {"gdelt": ["rally", "march"]}
    assert config["magnitude_tiers"] == [{"magnitude": 3.0, "terms": ["signed"]}]


def test_load_keywords_config_rejects_negative_magnitude(tmp_path):
    path = _write(tmp_path, "keywords.yaml", "magnitude_tiers:\n  - magnitude: -1\n    terms: [x]\n")
    with pytest.raises(ValueError, match="non-negative"):
        load_keywords_config(path)


class TestWeights:
    def test_missing_categories_default_to_one(self):
        weights = parse_weights({"Elections": 2})
        assert weights["Elections"] == 2.0
        assert weights["Judicial"] == 1.0
        assert set(weights) == set(CATEGORIES)

    def test_none_gives_defaults(self):
        assert parse_weights(None) == {category: 1.0 for category in CATEGORIES}

    @pytest.mark.parametrize(
        "raw",
        [{"Economy": 1}, {"Elections": -1}, {"Elections": "high"}, {"Elections": True}],
    )
    def test_invalid_weights_rejected(self, raw):
        with pytest.raises(ValueError):
            parse_weights(raw)

    def test_load_weights_config_accepts_weights_key(self, tmp_path):
        path = _write(tmp_path, "w.yaml", "weights:\n  Judicial: 0.5\n")
        assert load_weights_config(path)["Judicial"] == 0.5

    def test_load_weights_config_accepts_bare_mapping(self, tmp_path):
        path = _write(tmp_path, "w.yaml", "Judicial: 0\n")
        assert load_weights_config(path)["Judicial"] == 0.0


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_weights_rejected(value):
    with pytest.raises(ValueError, match="finite"):
        parse_weights({"Elections": value})


def test_non_finite_weights_rejected_from_yaml(tmp_path):
    path = _write(tmp_path, "w.yaml", "weights:\n  Elections: .nan\n")
    with pytest.raises(ValueError, match="finite"):
        load_weights_config(path)


def test_load_keywords_config_rejects_infinite_magnitude(tmp_path):
    path = _write(tmp_path, "keywords.yaml", "magnitude_tiers:\n  - magnitude: .inf\n    terms: [x]\n")
    with pytest.raises(ValueError, match="finite"):
        load_keywords_config(path)
