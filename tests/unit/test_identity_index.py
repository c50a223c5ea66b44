"""Unit tests for the import identity index."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.models.catalog import CatalogEntry
from src.models.imports import ImportRecord
from src.providers.catalog.markdown_vault_store import MarkdownVaultStore
from src.services.identity_index import IdentityIndex, build_identity_index
from tests.conftest import ARTISTS, write_note


def _entry(path: str, **metadata: object) -> CatalogEntry:
    return CatalogEntry(path=path, metadata=metadata)


class TestIdentityIndex:
    def test_release_id_takes_precedence_over_artist_title(self) -> None:
        index = IdentityIndex()
        by_id = _entry("a.md", artist="Someone", title="Else", discogs_release_id="42")
        by_name = _entry("b.md", artist="Burial", title="Untrue")
        index.add(by_id)
        index.add(by_name)

        record = ImportRecord(artist="Burial", title="Untrue", release_id="42")

        assert index.resolve(record) == by_id

    def test_falls_back_to_artist_title_when_release_id_unknown(self) -> None:
        index = IdentityIndex()
        entry = _entry("b.md", artist="Burial", title="Untrue")
        index.add(entry)

        assert index.resolve(ImportRecord(artist="BURIAL ", title=" untrue", release_id="99")) == entry

    def test_no_match(self) -> None:
        index = IdentityIndex()
        index.add(_entry("b.md", artist="Burial", title="Untrue"))
        assert index.resolve(ImportRecord(artist="Burial", title="Rival Dealer")) is None

    def test_legacy_release_id_key_is_indexed(self) -> None:
        index = IdentityIndex()
        entry = _entry("old.md", artist="Burial", title="Untrue", release_id="7")
        index.add(entry)
        assert index.by_release_id == {"7": entry}

    def test_entry_without_artist_only_indexed_by_release_id(self) -> None:
        index = IdentityIndex()
        index.add(_entry("x.md", discogs_release_id="5"))
        assert index.by_artist_title == {}
        assert "5" in index.by_release_id

    def test_last_added_wins_on_shared_key(self) -> None:
        index = IdentityIndex()
        index.add(_entry("first.md", artist="A", title="B"))
        second = _entry("second.md", artist="a", title="b")
        index.add(second)
        assert index.resolve(ImportRecord(artist="A", title="B")) == second

    def test_remember_points_both_keys_at_entry(self) -> None:
        index = IdentityIndex()
        record = ImportRecord(artist="Burial", title="Untrue", release_id="42")
        entry = _entry("new.md", artist="Burial", title="Untrue")

        index.remember(record, entry)

        assert index.resolve(ImportRecord(artist="x", title="y", release_id="42")) == entry
        assert index.resolve(ImportRecord(artist="burial", title="untrue")) == entry
        assert len(index) == 1


class TestBuildIdentityIndex:
    @pytest.mark.asyncio
    async def test_indexes_record_notes(self, store: MarkdownVaultStore, vault_root: Path) -> None:
        write_note(
            vault_root,
            f"{ARTISTS}/Burial/Burial — Untrue.md",
            {"artist": "Burial", "title": "Untrue", "discogs_release_id": "1105012"},
        )
        write_note(vault_root, f"{ARTISTS}/Kode9/Kode9 — Memories.md", {"artist": "Kode9"})

        index = await build_identity_index(store, ARTISTS)

        assert set(index.by_release_id) == {"1105012"}
        assert set(index.by_artist_title) == {"burial::untrue", "kode9::kode9 — memories"}
        assert len(index) == 2

    @pytest.mark.asyncio
    async def test_unreadable_note_is_skipped(self, store: MarkdownVaultStore, vault_root: Path) -> None:
        write_note(vault_root, f"{ARTISTS}/Burial/Burial — Untrue.md", {"artist": "Burial", "title": "Untrue"})
        broken = vault_root / ARTISTS / "Broken" / "Broken.md"
        broken.parent.mkdir(parents=True)
        broken.write_text("---\nartist: [oops\n---\n", encoding="utf-8")

        index = await build_identity_index(store, ARTISTS)

        assert list(index.by_artist_title) == ["burial::untrue"]

    @pytest.mark.asyncio
    async def test_empty_catalog(self, store: MarkdownVaultStore) -> None:
        index = await build_identity_index(store, ARTISTS)
        assert len(index) == 0
