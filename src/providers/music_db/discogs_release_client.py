"""Discogs release/image HTTP client.

Resolves a release id to its primary image URL through
``GET /releases/{id}`` and downloads images.  Every API request goes
through a run-scoped :class:`ThrottleState` that enforces a minimum gap
between requests (1.2 s by default, under Discogs' 60 req/min cap) and
caches resolved URLs so a release is looked up at most once per run.

A 429 response is retried exactly once after the ``Retry-After`` delay
(default 2 s, floor 1 s).  Any other error status, or a second failure,
is cached as "no image" and reported as an empty URL.  Transport errors
and malformed JSON propagate to the caller.

The ``httpx.AsyncClient``, clock, and sleep function are injected via the
constructor for testability.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from src.config.settings import Settings
from src.models.imports import ThrottleState
from src.utils.logging import get_logger
from src.utils.text_normalizer import to_text

_DEFAULT_RETRY_AFTER = 2.0  # seconds, when a 429 carries no usable hint
_MIN_RETRY_DELAY = 1.0  # seconds
_IMAGE_ACCEPT = "image/*,*/*"


@dataclass(frozen=True)
class ImageDownload:
    """Raw bytes of a downloaded image plus the server's content type."""

    content: bytes
    content_type: str = ""


class DiscogsReleaseClient:
    """Thin Discogs API client for cover lookups.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    settings:
        Supplies the API base URL, headers, and minimum request interval.
    clock:
        Monotonic clock in seconds; ``time.monotonic`` by default.
    sleep:
        Async sleep taking seconds; ``asyncio.sleep`` by default.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._clock = clock
        self._sleep = sleep
        self._min_interval = max(0, settings.discogs_min_interval_ms) / 1000.0
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    async def _throttle(self, state: ThrottleState) -> None:
        """Wait until the minimum interval since the last request has elapsed."""
        if state.last_request_at is not None:
            elapsed = self._clock() - state.last_request_at
            if elapsed < self._min_interval:
                await self._sleep(self._min_interval - elapsed)
        state.last_request_at = self._clock()

    def _release_url(self, release_id: str) -> str:
        base = self._settings.discogs_api_base.rstrip("/")
        return f"{base}/releases/{quote(release_id, safe='')}"

    async def _request_release(self, release_id: str, state: ThrottleState) -> httpx.Response:
        await self._throttle(state)
        return await self._http.get(
            self._release_url(release_id),
            headers=self._settings.discogs_headers(),
        )

    @staticmethod
    def _retry_after_seconds(response: httpx.Response) -> float:
        """Seconds to wait after a 429, from ``Retry-After`` (floor 1 s)."""
        raw = response.headers.get("Retry-After")
        try:
            seconds = float(raw) if raw is not None and raw.strip() else _DEFAULT_RETRY_AFTER
        except ValueError:
            seconds = _DEFAULT_RETRY_AFTER
        if seconds != seconds:  # NaN
            seconds = _DEFAULT_RETRY_AFTER
        return max(_MIN_RETRY_DELAY, seconds)

    @staticmethod
    def extract_image_url(payload: Any) -> str:
        """Return ``images[0].uri`` (or ``uri150``) from a release payload."""
        if not isinstance(payload, dict):
            return ""
        images = payload.get("images")
        if not isinstance(images, list) or not images:
            return ""
        first = images[0]
        if not isinstance(first, dict):
            return ""
        return to_text(first.get("uri") or first.get("uri150"))

    # -- Public API ------------------------------------------------------------

    async def fetch_release_image_url(self, release_id: str, state: ThrottleState) -> str:
        """Resolve the primary image URL for *release_id*.

        Returns ``""`` when the release has no image or the API refused the
        request.  Results, including ``""``, are cached in
        ``state.image_url_cache``.
        """
        key = to_text(release_id)
        if not key:
            return ""
        if key in state.image_url_cache:
            self._logger.debug("discogs_image_url_cache_hit", release_id=key)
            return state.image_url_cache[key]

        response = await self._request_release(key, state)

        if response.status_code == 429:
            delay = self._retry_after_seconds(response)
            self._logger.warning(
                "discogs_rate_limited",
                release_id=key,
                retry_after=delay,
            )
            await self._sleep(delay)
            response = await self._request_release(key, state)

        if response.status_code >= 400:
            self._logger.warning(
                "discogs_release_lookup_failed",
                release_id=key,
                status=response.status_code,
            )
            state.image_url_cache[key] = ""
            return ""

        payload = json.loads(response.text or "{}")
        url = self.extract_image_url(payload)
        state.image_url_cache[key] = url
        self._logger.info(
            "discogs_image_url_resolved",
            release_id=key,
            found=bool(url),
        )
        return url

    async def download_image(self, url: str) -> ImageDownload | None:
        """Download *url*; ``None`` when the server answers with an error status."""
        response = await self._http.get(
            url,
            headers={
                "Accept": _IMAGE_ACCEPT,
                "User-Agent": self._settings.discogs_user_agent,
            },
            follow_redirects=True,
        )
        if response.status_code >= 400:
            self._logger.warning("cover_download_failed", url=url, status=response.status_code)
            return None
        return ImageDownload(
            content=response.content,
            content_type=response.headers.get("Content-Type", ""),
        )
