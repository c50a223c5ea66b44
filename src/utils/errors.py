"""Custom exception hierarchy for the vinyl catalog.

All application exceptions inherit from :class:`VinylCatalogError`, which
carries an optional ``provider_name`` so error handlers can tell which
collaborator (e.g. "discogs", "vault") caused the failure.

The hierarchy is organized by concern:

    VinylCatalogError  (base -- catch-all for any catalog error)
    +-- ImportInputError        (CSV input rejected before any mutation)
    |   +-- EmptyInputError     (no rows could be read)
    |   +-- NoValidRowsError    (no row carried both Artist and Title)
    +-- CatalogStoreError       (vault read/write failure)
    |   +-- NoteNotFoundError   (no note at the requested path)
    +-- CoverFetchError         (Discogs cover lookup or download failure)
    +-- ConfigurationError      (startup / invalid settings)

Only the two ImportInputError subclasses abort an import run.  Everything
else raised while processing a single row is caught by the orchestrator and
recorded in the run summary.
"""


class VinylCatalogError(Exception):
    """Base exception for all vinyl catalog errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[discogs] Release lookup failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Import input errors (fail-fast)
# ---------------------------------------------------------------------------

class ImportInputError(VinylCatalogError):
    """Raised when CSV input is rejected as a whole, before the catalog is touched."""

    def __init__(
        self,
        message: str = "CSV input was rejected",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyInputError(ImportInputError):
    """Raised when the CSV is empty or no data rows could be read."""

    def __init__(
        self,
        message: str = "CSV is empty or rows could not be read",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoValidRowsError(ImportInputError):
    """Raised when every parsed row lacks an Artist or a Title."""

    def __init__(
        self,
        message: str = "No valid rows with Artist and Title were found in CSV",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Collaborator errors (per-row recoverable)
# ---------------------------------------------------------------------------

class CatalogStoreError(VinylCatalogError):
    """Raised when a catalog note cannot be read, parsed, or written."""

    def __init__(
        self,
        message: str = "Catalog store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoteNotFoundError(CatalogStoreError):
    """Raised when a catalog note does not exist at the requested path."""

    def __init__(
        self,
        message: str = "Note not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CoverFetchError(VinylCatalogError):
    """Raised when a cover lookup or download fails in a way callers must see."""

    def __init__(
        self,
        message: str = "Cover fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(VinylCatalogError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
