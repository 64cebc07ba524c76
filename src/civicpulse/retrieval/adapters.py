"""Source adapters for fetching raw records from external APIs."""

import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, Field

from ..utils.logging import get_logger

logger = get_logger(__name__)


class AdapterFetchResponse(BaseModel):
    """Raw records pulled out of a source's payload envelope, plus diagnostics."""

    records: List[Any] = Field(default_factory=list)
    status_code: Optional[int] = None
    bytes_downloaded: int = 0
    skipped_reason: Optional[str] = None


class SourceAdapter(ABC):
    """Abstract base class for source adapters."""

    api_key_header: Optional[str] = None

    def __init__(self, source_config: Dict, defaults: Dict):
        self.source_config = source_config
        self.defaults = defaults
        self.source_id = source_config["id"]
        self.url = source_config["url"]
        self.timeout = defaults.get("timeout_seconds", 20)
        self.user_agent = defaults.get("user_agent", "civicpulse/0.3")
        self.max_items = source_config.get("max_items_per_fetch") or defaults.get("max_items_per_fetch", 50)
        api_key_env = source_config.get("api_key_env")
        self.api_key = os.environ.get(api_key_env) if api_key_env else None

    @abstractmethod
    def extract_records(self, payload: Any) -> List[Any]:
        """Pull the record list out of a decoded JSON payload."""

    def fetch(self) -> AdapterFetchResponse:
        """
        Fetch raw records from the source.

        Returns:
            AdapterFetchResponse with at most ``max_items`` records

        Raises:
            RuntimeError: On HTTP or decoding failure (chained to the cause)
        """
        if self.api_key_header and not self.api_key:
            logger.info(f"Skipping {self.source_id}: no API key configured")
            return AdapterFetchResponse(skipped_reason="missing_api_key")

        try:
            response = requests.get(
                self.url,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to fetch {self.source_id} from {self.url}: {e}") from e
        except (json.JSONDecodeError, ValueError) as e:
            raise RuntimeError(f"Failed to parse {self.source_id} response from {self.url}: {e}") from e

        records = self.extract_records(payload)
        return AdapterFetchResponse(
            records=records[: self.max_items],
            status_code=response.status_code,
            bytes_downloaded=len(response.content or b""),
        )

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers for requests."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        if self.api_key_header and self.api_key:
            headers[self.api_key_header] = self.api_key
        return headers


def _list_at(payload: Any, *path: str) -> List[Any]:
    """Walk nested dict keys; anything other than a list at the end is empty."""
    current = payload
    for key in path:
        if not isinstance(current, dict):
            return []
        current = current.get(key)
    return current if isinstance(current, list) else []


class CourtListenerAdapter(SourceAdapter):
    """Federal court opinions (CourtListener REST search)."""

    def extract_records(self, payload: Any) -> List[Any]:
        return _list_at(payload, "results")


class ProPublicaAdapter(SourceAdapter):
    """Recent roll-call votes (ProPublica Congress API, key required)."""

    api_key_header = "X-API-Key"

    def extract_records(self, payload: Any) -> List[Any]:
        return _list_at(payload, "results", "votes")


class OpenStatesAdapter(SourceAdapter):
    """State bills (OpenStates v3, key required)."""

    api_key_header = "X-API-KEY"

    def extract_records(self, payload: Any) -> List[Any]:
        return _list_at(payload, "results")


class GdeltAdapter(SourceAdapter):
    """News article list (GDELT DOC 2.0, ArtList mode)."""

    def extract_records(self, payload: Any) -> List[Any]:
        return _list_at(payload, "articles")


ADAPTERS = {
    "courtlistener": CourtListenerAdapter,
    "propublica": ProPublicaAdapter,
    "openstates": OpenStatesAdapter,
    "gdelt": GdeltAdapter,
}


def create_adapter(source_config: Dict, defaults: Dict) -> SourceAdapter:
    """
    Factory function to create appropriate adapter based on source type.

    Args:
        source_config: Source configuration dict
        defaults: Default configuration values

    Returns:
        SourceAdapter instance

    Raises:
        ValueError: If the source type is unknown
    """
    source_type = source_config.get("type")
    adapter_cls = ADAPTERS.get(source_type)
    if adapter_cls is None:
        raise ValueError(f"Unknown source type: {source_type}")
    return adapter_cls(source_config, defaults)
