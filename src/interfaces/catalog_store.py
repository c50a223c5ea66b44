"""Abstract base class for catalog storage providers.

Defines the contract the import engine uses to read and write catalog
notes: list notes under a folder, read a note's metadata, create a note,
rewrite a note's metadata wholesale, check existence, create folders, and
write binary files (downloaded covers).  The import pipeline, backfill
pipeline, and catalog service only ever talk to this interface, so the
Markdown vault on disk can be swapped for an in-memory fake in tests or
another document store later.

All paths are vault-relative POSIX strings, e.g.
``"Vinyl/Artists/Burial/Burial — Untrue.md"``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Any

# A mutator receives the current metadata and either mutates it in place
# (returning None) or returns a replacement mapping.  Coroutine mutators
# are awaited.
MetadataMutator = Callable[[dict[str, Any]], Any]


class ICatalogStore(ABC):
    """Contract for the structured-document store that holds catalog notes."""

    @abstractmethod
    async def list_notes(self, folder: str) -> list[str]:
        """Return the paths of every note anywhere below *folder*.

        Parameters
        ----------
        folder:
            Vault-relative folder; ``""`` means the whole vault.

        Returns
        -------
        list[str]
            Note paths.  Order is implementation-defined.
        """

    @abstractmethod
    async def read_metadata(self, path: str) -> dict[str, Any]:
        """Return the note's frontmatter as a fresh dict (``{}`` if it has none).

        Raises
        ------
        src.utils.errors.CatalogStoreError
            If the note does not exist or its frontmatter cannot be parsed.
        """

    @abstractmethod
    async def create_note(self, path: str, metadata: dict[str, Any], body: str) -> str:
        """Create a new note at *path* and return its path.

        Raises
        ------
        src.utils.errors.CatalogStoreError
            If *path* already exists or cannot be written.
        """

    @abstractmethod
    async def update_metadata(self, path: str, mutator: MetadataMutator) -> dict[str, Any]:
        """Read the note's metadata, apply *mutator*, and write it back.

        The note body is preserved.  Returns the metadata that was written.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Return ``True`` if a file or folder exists at *path*."""

    @abstractmethod
    async def ensure_folder(self, path: str) -> None:
        """Create *path* and any missing parents (no-op when it exists)."""

    @abstractmethod
    async def write_binary(self, path: str, data: bytes) -> None:
        """Write *data* to *path*, creating parent folders as needed."""

    # ------------------------------------------------------------------
    # Shared helpers built on the abstract operations
    # ------------------------------------------------------------------

    async def list_records(self, artists_folder: str) -> list[str]:
        """Return catalog record paths: notes at least one folder below *artists_folder*.

        Notes lying directly in the artists folder are not records; every
        record lives in its artist's subfolder.
        """
        prefix = artists_folder.rstrip("/")
        prefix = f"{prefix}/" if prefix else ""
        records: list[str] = []
        for path in await self.list_notes(artists_folder):
            if not path.startswith(prefix):
                continue
            if "/" in path[len(prefix):]:
                records.append(path)
        return records

    async def unique_path(self, path: str) -> str:
        """Return *path*, or ``"<stem> N<ext>"`` for the first free N ≥ 2."""
        if not await self.exists(path):
            return path

        pure = PurePosixPath(path)
        base = str(pure.with_suffix("")) if pure.suffix else path
        counter = 2
        while True:
            candidate = f"{base} {counter}{pure.suffix}"
            if not await self.exists(candidate):
                return candidate
            counter += 1
