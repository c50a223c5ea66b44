"""Utility modules for the vinyl catalog.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at
  VinylCatalogError.  Import input failures, catalog store failures and
  configuration problems each have their own subclass so callers can
  handle them without broad ``except Exception`` blocks.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- CSV cell coercion, identity keys for artist+title
  matching, file-name sanitizing and image extension detection.
- **cover_reference** -- Parsing the many shapes a ``cover`` frontmatter
  value can take (wiki link, markdown image, URL, mapping).
"""

# -- Cover reference parsing -----------------------------------------------
from src.utils.cover_reference import has_cover_value, make_cover_link, normalize_cover_target

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    CatalogStoreError,
    ConfigurationError,
    CoverFetchError,
    EmptyInputError,
    ImportInputError,
    NoValidRowsError,
    NoteNotFoundError,
    VinylCatalogError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

# -- Text normalization (CSV values, identity keys, file names) ------------
from src.utils.text_normalizer import make_artist_title_key, sanitize_name, to_text

__all__ = [
    "CatalogStoreError",
    "ConfigurationError",
    "CoverFetchError",
    "EmptyInputError",
    "ImportInputError",
    "NoValidRowsError",
    "NoteNotFoundError",
    "VinylCatalogError",
    "configure_logging",
    "get_logger",
    "has_cover_value",
    "make_artist_title_key",
    "make_cover_link",
    "normalize_cover_target",
    "sanitize_name",
    "to_text",
]
