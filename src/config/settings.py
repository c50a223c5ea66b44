"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# Values are read from two sources (in priority order):
#
#   1. **Environment variables** — e.g. VAULT_ROOT=/home/me/notes
#   2. **.env file** — key=value lines in the project root
#
# Field ``discogs_token`` maps to env var ``DISCOGS_TOKEN`` and so on;
# pydantic-settings uppercases and matches automatically.  Defaults apply
# when neither source defines a value.
#
# All folder settings are POSIX paths relative to ``vault_root``.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _normalize_folder(value: str) -> str:
    parts = [part for part in value.replace("\\", "/").split("/") if part not in ("", ".")]
    return "/".join(parts)


class Settings(BaseSettings):
    """Vinyl catalog settings.

    Environment variables override defaults. Loaded from .env when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Vault layout ===
    vault_root: str = "."
    collection_folder: str = "Vinyl"
    artists_folder: str = "Vinyl/Artists"
    covers_folder: str = "Vinyl/covers"

    # === Discogs ===
    discogs_api_base: str = "https://api.discogs.com"
    discogs_user_agent: str = "VinylCatalog/0.5.0 (+https://www.discogs.com/developers)"
    # Optional personal access token; anonymous requests work but get a
    # lower rate limit.
    discogs_token: str = ""
    discogs_min_interval_ms: int = 1200
    http_timeout_seconds: float = 30.0

    # === App Config ===
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("collection_folder", "artists_folder", "covers_folder")
    @classmethod
    def _strip_folder(cls, value: str) -> str:
        return _normalize_folder(value)

    def discogs_headers(self) -> dict[str, str]:
        """Default headers for Discogs API requests."""
        headers = {
            "Accept": "application/json",
            "User-Agent": self.discogs_user_agent,
        }
        if self.discogs_token:
            headers["Authorization"] = f"Discogs token={self.discogs_token}"
        return headers
