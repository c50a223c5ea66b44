"""Catalog service — everyday operations on the vinyl collection.

Outer surfaces (CLI and HTTP API) go through this service for everything
that is not an import or a backfill: bootstrapping the folder layout,
listing the visible records, hiding and unhiding a record, and adding a
record by hand with an optional cover URL.
"""

from __future__ import annotations

import httpx
import structlog

from src.config.settings import Settings
from src.interfaces.catalog_store import ICatalogStore
from src.models.catalog import CatalogEntry
from src.providers.music_db.discogs_release_client import DiscogsReleaseClient
from src.services.record_builder import (
    build_manual_body,
    build_manual_metadata,
    record_note_path,
)
from src.utils.cover_reference import is_external_cover
from src.utils.errors import CatalogStoreError, CoverFetchError
from src.utils.logging import get_logger
from src.utils.text_normalizer import ext_from_content_type, ext_from_url, slugify, to_text

_DEFAULT_EXT = "jpg"


class CatalogService:
    """Listing, visibility and manual creation of catalog records.

    Parameters
    ----------
    store:
        Catalog store holding the notes.
    settings:
        Supplies the collection, artists and covers folders.
    release_client:
        Used to download a cover when a record is added with a cover URL.
        Without one, cover URLs are ignored.
    """

    def __init__(
        self,
        store: ICatalogStore,
        settings: Settings,
        release_client: DiscogsReleaseClient | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._client = release_client
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def ensure_structure(self) -> None:
        """Create the collection, artists and covers folders if missing."""
        for folder in (
            self._settings.collection_folder,
            self._settings.artists_folder,
            self._settings.covers_folder,
        ):
            await self._store.ensure_folder(folder)
        self._logger.info(
            "catalog_structure_ready",
            collection=self._settings.collection_folder,
            artists=self._settings.artists_folder,
            covers=self._settings.covers_folder,
        )

    async def list_records(self, *, include_hidden: bool = False) -> list[CatalogEntry]:
        """Return catalog records that have an artist, sorted by artist then title.

        Hidden records are left out unless *include_hidden* is set.  Notes
        whose frontmatter cannot be read are skipped with a warning.
        """
        entries: list[CatalogEntry] = []
        for path in await self._store.list_records(self._settings.artists_folder):
            try:
                metadata = await self._store.read_metadata(path)
            except CatalogStoreError as exc:
                self._logger.warning("record_read_failed", path=path, error=str(exc))
                continue
            entry = CatalogEntry(path=path, metadata=metadata)
            if not entry.artist:
                continue
            if entry.hidden and not include_hidden:
                continue
            entries.append(entry)
        entries.sort(key=lambda e: (e.artist.casefold(), e.title.casefold(), e.path))
        return entries

    async def resolve_cover(self, entry: CatalogEntry) -> str:
        """Return a displayable cover reference for *entry*, or ``""``.

        External URLs are returned as-is; vault paths only when the file
        exists.
        """
        target = entry.cover_target
        if not target:
            return ""
        if is_external_cover(target):
            return target
        if await self._store.exists(target):
            return target
        return ""

    async def set_hidden(self, path: str, hidden: bool) -> CatalogEntry:
        """Set or clear the ``hidden`` flag on the note at *path*.

        Raises
        ------
        src.utils.errors.NoteNotFoundError
            If there is no note at *path*.
        """

        def _apply(metadata: dict) -> None:
            if hidden:
                metadata["hidden"] = True
            else:
                metadata.pop("hidden", None)

        metadata = await self._store.update_metadata(path, _apply)
        self._logger.info("record_visibility_changed", path=path, hidden=hidden)
        return CatalogEntry(path=path, metadata=metadata)

    async def add_record(
        self,
        artist: str,
        title: str,
        year: str | int | None = None,
        price: str | float | None = None,
        cover_url: str = "",
    ) -> CatalogEntry:
        """Create a record note by hand.

        A cover URL is downloaded into the covers folder first.  A refused or
        failed download is logged and the record is created without a cover.
        """
        artist = to_text(artist)
        title = to_text(title)
        await self.ensure_structure()

        initial_path = record_note_path(self._settings.artists_folder, artist, title)
        await self._store.ensure_folder(initial_path.rsplit("/", 1)[0])

        cover_path = ""
        if to_text(cover_url):
            try:
                cover_path = await self._download_cover(to_text(cover_url), f"{artist} {title}")
            except (CoverFetchError, httpx.HTTPError) as exc:
                self._logger.warning("record_cover_download_failed", url=cover_url, error=str(exc))

        metadata = build_manual_metadata(artist, title, year=year, price=price, cover_path=cover_path)
        note_path = await self._store.unique_path(initial_path)
        created = await self._store.create_note(note_path, metadata, build_manual_body(artist, cover_path))
        self._logger.info("record_created", path=created, cover=bool(cover_path))
        return CatalogEntry(path=created, metadata=metadata)

    async def _download_cover(self, url: str, name: str) -> str:
        """Download *url* to a slug-named file; never overwrites an existing cover."""
        if self._client is None:
            return ""

        await self._store.ensure_folder(self._settings.covers_folder)
        download = await self._client.download_image(url)
        if download is None:
            raise CoverFetchError(message=f"Cover download refused: {url}", provider_name="discogs")

        ext = ext_from_content_type(download.content_type) or ext_from_url(url) or _DEFAULT_EXT
        folder = self._settings.covers_folder
        stem = slugify(name)
        initial = f"{folder}/{stem}.{ext}" if folder else f"{stem}.{ext}"
        target = await self._store.unique_path(initial)
        await self._store.write_binary(target, download.content)
        return target
