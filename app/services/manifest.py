"""Readers for the seed manifest, a JSON array of raw catalog records."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

from ..errors import ManifestFetchError

logger = logging.getLogger(__name__)


class ManifestFetcher(Protocol):
    """Anything able to produce the raw manifest records."""

    async def fetch(self) -> list[Any]:
        ...


class HttpManifestFetcher:
    """Fetch the manifest with a single bounded HTTP GET."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        *,
        timeout: float = 15.0,
    ) -> None:
        self._client = http_client
        self._url = url
        self._timeout = timeout

    @property
    def location(self) -> str:
        return self._url

    async def fetch(self) -> list[Any]:
        try:
            response = await asyncio.wait_for(
                self._client.get(self._url), timeout=self._timeout
            )
            response.raise_for_status()
        except asyncio.TimeoutError as exc:
            raise ManifestFetchError(
                f"Manifest request to {self._url} timed out after {self._timeout:g}s"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise ManifestFetchError(
                f"Manifest request to {self._url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ManifestFetchError(
                f"Manifest request to {self._url} failed: {exc}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ManifestFetchError(
                f"Manifest at {self._url} is not valid JSON"
            ) from exc
        return _ensure_record_list(payload, self._url)


class FileManifestFetcher:
    """Read the manifest from a local JSON file such as ``catalog.json``."""

    def __init__(self, path: Path, *, timeout: float = 15.0) -> None:
        self._path = path
        self._timeout = timeout

    @property
    def location(self) -> str:
        return str(self._path)

    async def fetch(self) -> list[Any]:
        try:
            content = await asyncio.wait_for(
                asyncio.to_thread(self._path.read_text, encoding="utf-8"),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ManifestFetchError(
                f"Reading manifest {self._path} timed out after {self._timeout:g}s"
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestFetchError(
                f"Manifest file {self._path} could not be read: {exc}"
            ) from exc

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ManifestFetchError(
                f"Manifest file {self._path} is not valid JSON"
            ) from exc
        return _ensure_record_list(payload, str(self._path))


def build_manifest_fetcher(
    location: str,
    http_client: httpx.AsyncClient | None = None,
    *,
    timeout: float = 15.0,
) -> HttpManifestFetcher | FileManifestFetcher:
    """Return the fetcher matching ``location`` (URL or filesystem path)."""

    if location.lower().startswith(("http://", "https://")):
        if http_client is None:
            raise ValueError("An HTTP client is required for remote manifests")
        return HttpManifestFetcher(http_client, location, timeout=timeout)
    return FileManifestFetcher(Path(location), timeout=timeout)


def _ensure_record_list(payload: Any, location: str) -> list[Any]:
    if not isinstance(payload, list):
        raise ManifestFetchError(
            f"Manifest at {location} must be a JSON array, got {type(payload).__name__}"
        )
    logger.debug("Manifest at %s returned %d records", location, len(payload))
    return payload
