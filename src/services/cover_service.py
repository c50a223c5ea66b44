"""Cover resolution: Discogs release id → downloaded image → linked in metadata.

# ─── HOW A COVER GETS ATTACHED ─────────────────────────────────────────
#
#   resolve_and_attach(path, release_id, state)
#     1. read metadata          → cover already set?  return False (no HTTP)
#     2. image URL              → state cache, else throttled API lookup
#                                 (one retry on 429)
#     3. download               → covers/discogs-<id>.<ext>; an existing
#                                 file with that name is reused as-is
#     4. link                   → re-read metadata, set cover only if it
#                                 is still empty
#
# Steps 1 and 4 both check the cover so that re-running an import or a
# backfill never overwrites a cover a user set by hand.  Between the
# re-read and the write in step 4 there is a small check-then-act window;
# runs are sequential and single-threaded, so nothing else writes the note
# in that window.
#
# HTTP error statuses resolve to False.  Transport and JSON errors
# propagate so the calling pipeline can record them against the row.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import structlog

from src.config.settings import Settings
from src.interfaces.catalog_store import ICatalogStore
from src.models.imports import ThrottleState
from src.providers.music_db.discogs_release_client import DiscogsReleaseClient
from src.utils.cover_reference import has_cover_value, make_cover_link
from src.utils.logging import get_logger
from src.utils.text_normalizer import (
    ext_from_content_type,
    ext_from_url,
    sanitize_name,
    slugify,
    to_text,
)

_DEFAULT_EXT = "jpg"


def cover_stem(release_id: str) -> str:
    """Deterministic file stem for a release's cover, e.g. ``discogs-249504``."""
    safe = sanitize_name(release_id).replace(" ", "-") or slugify(release_id)
    return f"discogs-{safe}"


class CoverService:
    """Fetches Discogs covers into the vault and links them on catalog notes.

    Parameters
    ----------
    store:
        Catalog store holding the notes and the covers folder.
    release_client:
        Discogs client used for image URL lookups and downloads.
    settings:
        Supplies ``covers_folder``.
    """

    def __init__(
        self,
        store: ICatalogStore,
        release_client: DiscogsReleaseClient,
        settings: Settings,
    ) -> None:
        self._store = store
        self._client = release_client
        self._covers_folder = settings.covers_folder
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def _cover_path(self, stem: str, ext: str) -> str:
        if self._covers_folder:
            return f"{self._covers_folder}/{stem}.{ext}"
        return f"{stem}.{ext}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve_and_attach(
        self,
        entry_path: str,
        release_id: str,
        state: ThrottleState,
    ) -> bool:
        """Attach the Discogs cover for *release_id* to the note at *entry_path*.

        Returns ``True`` only when a cover was newly linked.
        """
        key = to_text(release_id)
        if not key:
            return False

        metadata = await self._store.read_metadata(entry_path)
        if has_cover_value(metadata.get("cover")):
            return False

        image_url = await self._client.fetch_release_image_url(key, state)
        if not image_url:
            return False

        cover_path = await self.download_cover(image_url, cover_stem(key))
        if not cover_path:
            return False

        attached = await self.ensure_cover_linked(entry_path, cover_path)
        if attached:
            self._logger.info(
                "cover_attached",
                path=entry_path,
                release_id=key,
                cover=cover_path,
            )
        return attached

    async def download_cover(self, url: str, stem: str) -> str:
        """Download *url* to ``<covers>/<stem>.<ext>`` and return the vault path.

        The extension comes from the URL path, replaced by the response
        content type when the server sends a recognizable one.  If a file
        with the resulting name already exists it is reused without
        writing.  Returns ``""`` when the server refuses the download.
        """
        image_url = to_text(url)
        if not image_url:
            return ""

        await self._store.ensure_folder(self._covers_folder)

        ext = ext_from_url(image_url) or _DEFAULT_EXT
        target = self._cover_path(stem, ext)
        if await self._store.exists(target):
            self._logger.debug("cover_file_reused", cover=target)
            return target

        download = await self._client.download_image(image_url)
        if download is None:
            return ""

        by_content_type = ext_from_content_type(download.content_type)
        if by_content_type and by_content_type != ext:
            target = self._cover_path(stem, by_content_type)
            if await self._store.exists(target):
                self._logger.debug("cover_file_reused", cover=target)
                return target

        await self._store.write_binary(target, download.content)
        self._logger.debug("cover_file_written", cover=target, size=len(download.content))
        return target

    async def ensure_cover_linked(self, entry_path: str, cover_path: str) -> bool:
        """Set ``cover`` on the note to *cover_path* unless a cover is already present."""
        if not cover_path:
            return False

        metadata = await self._store.read_metadata(entry_path)
        if has_cover_value(metadata.get("cover")):
            return False

        linked = False

        def _link(current: dict) -> None:
            nonlocal linked
            if not has_cover_value(current.get("cover")):
                current["cover"] = make_cover_link(cover_path)
                linked = True

        await self._store.update_metadata(entry_path, _link)
        return linked
