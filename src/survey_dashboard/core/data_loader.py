from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from survey_dashboard.config import (
    DATA_BASE_URL,
    DATA_DIR,
    HTTP_TIMEOUT_SECONDS,
    METADATA_FILENAME,
    SUMMARIES_FILENAME,
)
from survey_dashboard.core.models import OVERALL_DEMOGRAPHIC, Metadata, SummaryRecord

logger = logging.getLogger(__name__)

LOAD_FAILURE_MESSAGE = "Failed to load data. Please run the R scripts first."

# Shown to whoever runs the dashboard; the data files come from the R pipeline.
REMEDIATION_STEPS = [
    "Open R or RStudio",
    "Set working directory to the project folder",
    'Run: source("run_all.R")',
    'Run: source("scripts/05_export_dashboard_data.R")',
    "Refresh this page",
]


class LoadFailure(Exception):
    """Raised when either data file is unreachable or not a usable payload."""

    def __init__(self, detail: str = "", *, source: Optional[str] = None) -> None:
        super().__init__(LOAD_FAILURE_MESSAGE)
        self.detail = detail
        self.source = source
        self.remediation: List[str] = list(REMEDIATION_STEPS)


@dataclass(frozen=True)
class RecordStore:
    """Loaded once per session, read-only afterwards."""
    records: Tuple[SummaryRecord, ...]
    metadata: Metadata


# ---------------------------------------------------------------------------
# HTTP session
# ---------------------------------------------------------------------------

def _build_retry_session() -> requests.Session:
    """
    Build a requests Session with conservative retries for static file hosts.
    """
    session = requests.Session()

    retry = Retry(
        total=3,
        connect=3,
        read=3,
        status=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry, pool_connections=2, pool_maxsize=2)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


_SESSION: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _build_retry_session()
    return _SESSION


# ---------------------------------------------------------------------------
# Source resolution + raw reads
# ---------------------------------------------------------------------------

def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def resolve_source(
    filename: str,
    base_url: Optional[str] = None,
    data_dir: Optional[Path] = None,
) -> str:
    """
    Resolve a data file name against the configured base URL or data directory.
    """
    base = DATA_BASE_URL if base_url is None else base_url.strip()
    if base:
        return base.rstrip("/") + "/" + filename
    return str((data_dir or DATA_DIR) / filename)


def _read_json(location: str, timeout_seconds: int) -> Any:
    if _is_url(location):
        try:
            resp = _get_session().get(location, timeout=timeout_seconds)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise LoadFailure(f"HTTP error while fetching {location}: {exc}", source=location) from exc
        try:
            return resp.json()
        except ValueError as exc:
            preview = (resp.text or "")[:200]
            raise LoadFailure(f"Non-JSON response from {location}. Preview: {preview}", source=location) from exc

    try:
        text = Path(location).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadFailure(f"Could not read {location}: {exc}", source=location) from exc
    try:
        return json.loads(text)
    except ValueError as exc:
        raise LoadFailure(f"Invalid JSON in {location}: {exc}", source=location) from exc


# ---------------------------------------------------------------------------
# Typed fetches
# ---------------------------------------------------------------------------

def fetch_summaries(location: str, timeout_seconds: int = HTTP_TIMEOUT_SECONDS) -> Tuple[SummaryRecord, ...]:
    payload = _read_json(location, timeout_seconds)
    if not isinstance(payload, list):
        raise LoadFailure(f"Expected a JSON array in {location}, got {type(payload).__name__}", source=location)

    try:
        records = tuple(SummaryRecord.from_mapping(row) for row in payload)
    except (KeyError, TypeError, AttributeError) as exc:
        raise LoadFailure(f"Malformed summary record in {location}: {exc!r}", source=location) from exc

    logger.info("Loaded %d summary record(s) from %s", len(records), location)
    return records


def fetch_metadata(location: str, timeout_seconds: int = HTTP_TIMEOUT_SECONDS) -> Metadata:
    payload = _read_json(location, timeout_seconds)
    if not isinstance(payload, dict):
        raise LoadFailure(f"Expected a JSON object in {location}, got {type(payload).__name__}", source=location)

    try:
        metadata = Metadata.from_mapping(payload)
    except (KeyError, TypeError, AttributeError) as exc:
        raise LoadFailure(f"Malformed metadata in {location}: {exc!r}", source=location) from exc

    if OVERALL_DEMOGRAPHIC not in metadata.demographics:
        logger.warning(
            "Metadata demographics %s do not include %r; the default selection will be empty.",
            list(metadata.demographics),
            OVERALL_DEMOGRAPHIC,
        )

    logger.info(
        "Loaded metadata from %s: %d demographic(s), %d item(s), %d scale(s)",
        location,
        len(metadata.demographics),
        len(metadata.score_types.items),
        len(metadata.score_types.scales),
    )
    return metadata


# ---------------------------------------------------------------------------
# Store loading
# ---------------------------------------------------------------------------

async def load_record_store_async(
    summaries_location: Optional[str] = None,
    metadata_location: Optional[str] = None,
    timeout_seconds: int = HTTP_TIMEOUT_SECONDS,
) -> RecordStore:
    """
    Fetch both data files concurrently and build the store.

    The store only exists once both reads succeed; any failure surfaces as a
    single LoadFailure.
    """
    summaries_location = summaries_location or resolve_source(SUMMARIES_FILENAME)
    metadata_location = metadata_location or resolve_source(METADATA_FILENAME)

    t0 = time.perf_counter()
    records, metadata = await asyncio.gather(
        asyncio.to_thread(fetch_summaries, summaries_location, timeout_seconds),
        asyncio.to_thread(fetch_metadata, metadata_location, timeout_seconds),
    )
    logger.info("Record store loaded in %0.2fs", time.perf_counter() - t0)

    return RecordStore(records=records, metadata=metadata)


def load_record_store(
    summaries_location: Optional[str] = None,
    metadata_location: Optional[str] = None,
    timeout_seconds: int = HTTP_TIMEOUT_SECONDS,
) -> RecordStore:
    """
    Blocking convenience wrapper around load_record_store_async.
    """
    return asyncio.run(
        load_record_store_async(
            summaries_location=summaries_location,
            metadata_location=metadata_location,
            timeout_seconds=timeout_seconds,
        )
    )


class RecordStoreHolder:
    """
    Owns the RecordStore for one page session.

    States: "loading" until a load finishes, then "ready" or "error".
    A load that finishes after teardown(), or after a newer load was started,
    is discarded without touching the holder. A failed load drops any store
    an earlier load published.
    """

    def __init__(self) -> None:
        self.store: Optional[RecordStore] = None
        self.error: Optional[LoadFailure] = None
        self._generation = 0
        self._destroyed = False

    @property
    def state(self) -> str:
        if self.store is not None:
            return "ready"
        if self.error is not None:
            return "error"
        return "loading"

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def _is_stale(self, generation: int) -> bool:
        return self._destroyed or generation != self._generation

    async def load(self, **kwargs: Any) -> Optional[RecordStore]:
        if self._destroyed:
            return None

        self._generation += 1
        generation = self._generation

        try:
            store = await load_record_store_async(**kwargs)
        except LoadFailure as exc:
            if self._is_stale(generation):
                logger.info("Discarding failed load #%d: holder is stale.", generation)
                return None
            logger.error("Data load failed: %s", exc.detail)
            self.store = None
            self.error = exc
            return None

        if self._is_stale(generation):
            logger.info("Discarding completed load #%d: holder is stale.", generation)
            return None

        self.store = store
        self.error = None
        return store

    def load_blocking(self, **kwargs: Any) -> Optional[RecordStore]:
        return asyncio.run(self.load(**kwargs))

    def teardown(self) -> None:
        self._destroyed = True
