"""Catalog store providers.

MarkdownVaultStore keeps one Markdown note per record with YAML
frontmatter, the layout Obsidian-style vaults use.  Any other document
store can be plugged in by implementing ICatalogStore.
"""

from src.providers.catalog.markdown_vault_store import MarkdownVaultStore

__all__ = ["MarkdownVaultStore"]
