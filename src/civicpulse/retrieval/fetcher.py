"""Source fetcher with rate limiting and per-source failure isolation."""

import random
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, Field

from ..config.loader import get_all_sources, load_sources_config
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from .adapters import create_adapter

logger = get_logger(__name__)


class FetchResult(BaseModel):
    """Result of fetching from one source."""

    source_id: str
    source_type: Optional[str] = None
    fetched_at_utc: str  # ISO 8601
    status: str  # SUCCESS | FAILURE | SKIPPED
    status_code: Optional[int] = None
    error: Optional[str] = None
    duration_seconds: Optional[float] = None
    records: List[Any] = Field(default_factory=list)
    bytes_downloaded: int = 0


class SourceFetcher:
    """Fetches raw records from configured sources with per-host rate limiting."""

    def __init__(
        self,
        sources_config: Optional[Dict] = None,
        *,
        strict: bool = False,
        rng_seed: Optional[int] = None,
    ):
        """
        Initialize fetcher.

        Args:
            sources_config: Optional sources config dict. If None, loads from default path.
            strict: Disable jitter so waits are reproducible
            rng_seed: Seed for jitter
        """
        if sources_config is None:
            sources_config = load_sources_config()

        self.config = sources_config
        self.defaults = sources_config.get("defaults", {})
        rate_limit_config = self.defaults.get("rate_limit", {})
        self.per_host_min_seconds = rate_limit_config.get("per_host_min_seconds", 2)
        configured_jitter = rate_limit_config.get("jitter_seconds", 1)
        self.strict = strict
        self.jitter_seconds = 0 if strict else configured_jitter
        self._rng = random.Random(rng_seed if rng_seed is not None else 0 if strict else None)

        # Track last fetch time per host
        self._last_fetch_time: Dict[str, float] = {}

    def _get_host_from_url(self, url: str) -> str:
        """Extract host from URL for rate limiting."""
        parsed = urlparse(url)
        return parsed.netloc or parsed.path.split("/")[0]

    def _wait_for_rate_limit(self, url: str) -> None:
        """Wait if necessary to respect rate limit for this host."""
        host = self._get_host_from_url(url)
        last_time = self._last_fetch_time.get(host, 0)
        elapsed = time.time() - last_time

        if elapsed < self.per_host_min_seconds:
            wait_time = self.per_host_min_seconds - elapsed
            jitter = self._rng.uniform(0, self.jitter_seconds) if self.jitter_seconds > 0 else 0
            total_wait = wait_time + jitter
            logger.debug(f"Rate limiting: waiting {total_wait:.2f}s for host {host}")
            time.sleep(total_wait)

        self._last_fetch_time[host] = time.time()

    def _fetch_source(self, source: Dict, max_items: Optional[int]) -> FetchResult:
        """Fetch one source. Raises on failure; callers decide whether to isolate it."""
        source_id = source["id"]
        fetched_at_utc = utc_now_z()
        start_time = time.monotonic()

        self._wait_for_rate_limit(source["url"])
        adapter = create_adapter(source, self.defaults)
        if max_items:
            adapter.max_items = max_items

        logger.info(f"Fetching from {source_id} ({source.get('type')})")
        response = adapter.fetch()
        status = "SKIPPED" if response.skipped_reason else "SUCCESS"
        logger.info(f"Fetched {len(response.records)} records from {source_id}")

        return FetchResult(
            source_id=source_id,
            source_type=source.get("type"),
            fetched_at_utc=fetched_at_utc,
            status=status,
            status_code=response.status_code,
            error=response.skipped_reason,
            duration_seconds=time.monotonic() - start_time,
            records=response.records,
            bytes_downloaded=response.bytes_downloaded,
        )

    def _failure(self, source: Dict, error: Exception, start_time: float) -> FetchResult:
        status_code = None
        cause = error if isinstance(error, requests.RequestException) else error.__cause__
        if isinstance(cause, requests.RequestException) and cause.response is not None:
            status_code = cause.response.status_code
        return FetchResult(
            source_id=source["id"],
            source_type=source.get("type"),
            fetched_at_utc=utc_now_z(),
            status="FAILURE",
            status_code=status_code,
            error=str(error),
            duration_seconds=time.monotonic() - start_time,
        )

    def fetch_all(
        self,
        enabled_only: bool = True,
        max_items_per_source: Optional[int] = None,
        fail_fast: bool = False,
    ) -> List[FetchResult]:
        """
        Fetch records from all configured sources.

        A failing source yields a FAILURE result with no records and does not
        stop the others (unless ``fail_fast``).

        Args:
            enabled_only: Only fetch from enabled sources
            max_items_per_source: Override max items per source
            fail_fast: If True, stop on first error. If False, continue on errors.

        Returns:
            List of FetchResult objects, one per source
        """
        sources = [
            source
            for source in get_all_sources(self.config)
            if not enabled_only or source.get("enabled", True)
        ]
        logger.info(f"Fetching from {len(sources)} sources")

        results: List[FetchResult] = []
        for source in sources:
            start_time = time.monotonic()
            try:
                results.append(self._fetch_source(source, max_items_per_source))
            except Exception as e:
                logger.error(f"Failed to fetch from {source['id']}: {e}", exc_info=not fail_fast)
                if fail_fast:
                    raise RuntimeError(f"Failed to fetch from {source['id']}: {e}") from e
                results.append(self._failure(source, e, start_time))

        failed_count = sum(1 for r in results if r.status == "FAILURE")
        if failed_count > 0:
            logger.warning(f"Failed to fetch from {failed_count} sources")

        return results

    def fetch_one(self, source_id: str, max_items: Optional[int] = None) -> FetchResult:
        """
        Fetch from a single source by ID.

        Raises:
            ValueError: If source_id not found in config
            RuntimeError: If the fetch fails
        """
        source = next((s for s in get_all_sources(self.config) if s["id"] == source_id), None)
        if source is None:
            raise ValueError(f"Source '{source_id}' not found in configuration")

        try:
            return self._fetch_source(source, max_items)
        except Exception as e:
            logger.error(f"Failed to fetch from {source_id}: {e}")
            raise RuntimeError(f"Failed to fetch from {source_id}: {e}") from e
