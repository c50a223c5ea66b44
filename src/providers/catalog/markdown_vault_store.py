"""Markdown vault catalog store.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing ICatalogStore).
# Pattern: Adapter — wraps a folder of Markdown notes behind the
#          ICatalogStore ABC so the import engine never touches the
#          filesystem directly.
#
# Note format:
#
#     ---
#     artist: Burial
#     title: Untrue
#     tags:
#     - vinyl
#     ---
#
#     **Artist:** Burial
#     ...
#
# Frontmatter is YAML (PyYAML safe_load / safe_dump).  Key order is
# preserved on write and unknown keys round-trip untouched.  Blocking
# file I/O runs in a worker thread via ``asyncio.to_thread``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import inspect
import os
import re
import tempfile
from pathlib import Path
from typing import Any

import structlog
import yaml

from src.interfaces.catalog_store import ICatalogStore, MetadataMutator
from src.utils.errors import CatalogStoreError, NoteNotFoundError
from src.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

_PROVIDER_NAME = "vault"
_NOTE_SUFFIX = ".md"
_FRONTMATTER_RE = re.compile(r"\A---\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split a note into ``(frontmatter_yaml, body)``.

    ``frontmatter_yaml`` is ``None`` when the note has no frontmatter block;
    the body is then the whole content.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None, content
    return match.group(1) or "", content[match.end():]


def render_note(metadata: dict[str, Any], body: str) -> str:
    """Serialize metadata and body into note text."""
    dumped = yaml.safe_dump(
        metadata,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
    ).rstrip()
    if dumped == "{}":
        dumped = ""
    header = f"---\n{dumped}\n---" if dumped else "---\n---"
    return f"{header}\n\n{body.lstrip()}"


class MarkdownVaultStore(ICatalogStore):
    """Catalog store backed by a folder of Markdown notes.

    Parameters
    ----------
    root:
        Vault root directory.  Every path handled by the store is relative
        to it and may not escape it.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    # -- Private helpers -------------------------------------------------------

    def _resolve(self, path: str) -> Path:
        """Map a vault-relative path onto the filesystem, rejecting escapes."""
        relative = path.replace("\\", "/").lstrip("/")
        target = (self._root / relative).resolve()
        if target != self._root and self._root not in target.parents:
            raise CatalogStoreError(
                message=f"Path escapes the vault: {path}",
                provider_name=_PROVIDER_NAME,
            )
        return target

    def _relative(self, target: Path) -> str:
        return target.relative_to(self._root).as_posix()

    def _read_text(self, path: str) -> str:
        target = self._resolve(path)
        if not target.is_file():
            raise NoteNotFoundError(
                message=f"Note not found: {path}",
                provider_name=_PROVIDER_NAME,
            )
        return target.read_text(encoding="utf-8")

    @staticmethod
    def _parse_metadata(path: str, raw: str | None) -> dict[str, Any]:
        if raw is None or not raw.strip():
            return {}
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise CatalogStoreError(
                message=f"Invalid frontmatter in {path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CatalogStoreError(
                message=f"Frontmatter in {path} is not a mapping",
                provider_name=_PROVIDER_NAME,
            )
        return data

    @staticmethod
    def _atomic_write(target: Path, data: bytes) -> None:
        """Write via a temp file in the same folder, then rename over *target*."""
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-", suffix=target.suffix)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # -- Sync helpers (executed via asyncio.to_thread) -------------------------

    def _list_notes_sync(self, folder: str) -> list[str]:
        base = self._resolve(folder) if folder else self._root
        if not base.is_dir():
            return []
        return sorted(
            self._relative(p)
            for p in base.rglob(f"*{_NOTE_SUFFIX}")
            if p.is_file() and not any(part.startswith(".") for part in p.relative_to(base).parts)
        )

    def _read_metadata_sync(self, path: str) -> dict[str, Any]:
        raw, _body = split_frontmatter(self._read_text(path))
        return self._parse_metadata(path, raw)

    def _create_note_sync(self, path: str, metadata: dict[str, Any], body: str) -> str:
        target = self._resolve(path)
        if target.exists():
            raise CatalogStoreError(
                message=f"Note already exists: {path}",
                provider_name=_PROVIDER_NAME,
            )
        self._atomic_write(target, render_note(metadata, body).encode("utf-8"))
        return self._relative(target)

    def _write_note_sync(self, path: str, metadata: dict[str, Any], body: str) -> None:
        self._atomic_write(self._resolve(path), render_note(metadata, body).encode("utf-8"))

    def _write_binary_sync(self, path: str, data: bytes) -> None:
        self._atomic_write(self._resolve(path), data)

    def _ensure_folder_sync(self, path: str) -> None:
        target = self._resolve(path)
        if target.exists() and not target.is_dir():
            raise CatalogStoreError(
                message=f"Not a folder: {path}",
                provider_name=_PROVIDER_NAME,
            )
        target.mkdir(parents=True, exist_ok=True)

    # -- ICatalogStore implementation ------------------------------------------

    async def list_notes(self, folder: str) -> list[str]:
        """Return every ``.md`` note below *folder*, sorted by path.

        Hidden files and folders (dot-prefixed) are skipped.
        """
        return await asyncio.to_thread(self._list_notes_sync, folder)

    async def read_metadata(self, path: str) -> dict[str, Any]:
        return await asyncio.to_thread(self._read_metadata_sync, path)

    async def create_note(self, path: str, metadata: dict[str, Any], body: str) -> str:
        created = await asyncio.to_thread(self._create_note_sync, path, metadata, body)
        logger.debug("vault_note_created", path=created)
        return created

    async def update_metadata(self, path: str, mutator: MetadataMutator) -> dict[str, Any]:
        """Rewrite the note's frontmatter through *mutator*, keeping the body.

        The note is read immediately before the mutator runs so the mutator
        always sees the latest metadata on disk.
        """
        content = await asyncio.to_thread(self._read_text, path)
        raw, body = split_frontmatter(content)
        metadata = self._parse_metadata(path, raw)

        result = mutator(metadata)
        if inspect.isawaitable(result):
            result = await result
        if result is not None:
            metadata = result

        await asyncio.to_thread(self._write_note_sync, path, metadata, body)
        logger.debug("vault_note_updated", path=path)
        return metadata

    async def exists(self, path: str) -> bool:
        target = self._resolve(path)
        return await asyncio.to_thread(target.exists)

    async def ensure_folder(self, path: str) -> None:
        if not path:
            return
        await asyncio.to_thread(self._ensure_folder_sync, path)

    async def write_binary(self, path: str, data: bytes) -> None:
        await asyncio.to_thread(self._write_binary_sync, path, data)
        logger.debug("vault_binary_written", path=path, size=len(data))
