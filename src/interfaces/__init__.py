"""Public interface definitions for storage backends.

The import and backfill pipelines never touch the filesystem directly.
They talk to an ``ICatalogStore``, and a concrete adapter is injected at
runtime (see ``src/main.py`` and ``src/cli``).

ADAPTER PATTERN EXPLAINED (for junior developers):
    Instead of calling ``open(path).read()`` and parsing YAML in the
    pipeline, you call ``store.read_metadata(path)`` where ``store`` is any
    object implementing ``ICatalogStore``.  This means:
        - Tests can run the whole import against a temporary vault or an
          in-memory fake without touching a real catalog.
        - Another document store can replace the Markdown vault by changing
          ONE line (the store instantiation) instead of every pipeline.

CONCRETE PROVIDER MAP:
    Interface        →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    ICatalogStore    →  MarkdownVaultStore
"""

from src.interfaces.catalog_store import ICatalogStore, MetadataMutator

__all__ = [
    "ICatalogStore",
    "MetadataMutator",
]
