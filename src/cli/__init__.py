# =============================================================================
# src/cli/__init__.py — CLI Module Overview
# =============================================================================
#
# Command-line access to the vinyl catalog for people who do not run the
# HTTP API.  ``python -m src.cli`` dispatches to catalog.py, which covers:
#
#   1. SETUP     (init)      — create the vault folder layout
#   2. IMPORT    (import)    — Discogs collection CSV → catalog notes
#   3. COVERS    (backfill)  — Discogs covers for existing records
#   4. BROWSING  (list, add, hide)
#
# Architecture Notes:
#   - argparse only (not Click/Typer).
#   - Each run builds its own store, HTTP client and services rather than
#     going through main.py's application state, because a CLI run is a
#     one-shot script, not a long-lived server.
# =============================================================================

"""CLI tools for the vinyl catalog.

- ``python -m src.cli`` — catalog commands (init, import, backfill, list,
  add, hide).
"""
