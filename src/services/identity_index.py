"""In-memory identity index used to resolve upsert targets during an import.

Two lookup tables are built from the catalog once per run:

    by_release_id    release id               → CatalogEntry
    by_artist_title  "artist::title" (folded)  → CatalogEntry

A CSV row resolves first by release id (a strong, pressing-level key) and
falls back to the normalized artist+title pair.  Entries created or updated
during the run are written back with :meth:`IdentityIndex.remember`, so a
later duplicate row in the same file lands on the same note.

When two notes share a key, the one listed last wins.  Listing order comes
from the store and is not a stable contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from src.interfaces.catalog_store import ICatalogStore
from src.models.catalog import CatalogEntry
from src.models.imports import ImportRecord
from src.utils.errors import CatalogStoreError
from src.utils.logging import get_logger
from src.utils.text_normalizer import make_artist_title_key


@dataclass
class IdentityIndex:
    """Release-id and artist+title lookups over catalog entries."""

    by_release_id: dict[str, CatalogEntry] = field(default_factory=dict)
    by_artist_title: dict[str, CatalogEntry] = field(default_factory=dict)

    def add(self, entry: CatalogEntry) -> None:
        """Index *entry* under every key it carries."""
        if entry.artist and entry.title:
            self.by_artist_title[make_artist_title_key(entry.artist, entry.title)] = entry
        if entry.release_id:
            self.by_release_id[entry.release_id] = entry

    def resolve(self, record: ImportRecord) -> CatalogEntry | None:
        """Return the upsert target for *record*: release id first, then artist+title."""
        if record.release_id:
            match = self.by_release_id.get(record.release_id)
            if match is not None:
                return match
        return self.by_artist_title.get(make_artist_title_key(record.artist, record.title))

    def remember(self, record: ImportRecord, entry: CatalogEntry) -> None:
        """Point both of *record*'s keys at *entry* (last write wins)."""
        if record.release_id:
            self.by_release_id[record.release_id] = entry
        self.by_artist_title[make_artist_title_key(record.artist, record.title)] = entry

    def __len__(self) -> int:
        paths = {e.path for e in self.by_release_id.values()}
        paths.update(e.path for e in self.by_artist_title.values())
        return len(paths)


async def build_identity_index(store: ICatalogStore, artists_folder: str) -> IdentityIndex:
    """Read every catalog record under *artists_folder* and index it.

    A record whose metadata cannot be read is skipped with a warning; it
    simply cannot be an upsert target in this run.
    """
    logger: structlog.BoundLogger = get_logger(__name__)
    index = IdentityIndex()
    paths = await store.list_records(artists_folder)

    for path in paths:
        try:
            metadata = await store.read_metadata(path)
        except CatalogStoreError as exc:
            logger.warning("identity_index_read_failed", path=path, error=str(exc))
            continue
        index.add(CatalogEntry(path=path, metadata=metadata))

    logger.info(
        "identity_index_built",
        records=len(paths),
        release_ids=len(index.by_release_id),
        artist_titles=len(index.by_artist_title),
    )
    return index
