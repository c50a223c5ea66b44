"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  — static defaults checked into the repo
#   2. .env file           — local overrides (not committed)
#   3. Environment vars    — set per machine / deployment
#
# load_config() reads the YAML file, then deep-merges the values resolved
# by Settings on top, so every key Settings knows about reflects the
# environment.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is used if omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "vault": {
            "root": settings.vault_root,
            "collection_folder": settings.collection_folder,
            "artists_folder": settings.artists_folder,
            "covers_folder": settings.covers_folder,
        },
        "discogs": {
            "api_base": settings.discogs_api_base,
            "user_agent": settings.discogs_user_agent,
            "min_interval_ms": settings.discogs_min_interval_ms,
            "token_configured": bool(settings.discogs_token),
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge *overrides* into *base* in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
