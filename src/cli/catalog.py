# =============================================================================
# src/cli/catalog.py — Vinyl Catalog CLI
# =============================================================================
#
# Command-line front end for the catalog.  Every subcommand builds its own
# store, Discogs client and services from Settings (environment / .env),
# runs one operation inside a single asyncio.run(), prints a summary to
# stdout and exits.  Structured logs go to stderr.
#
# Subcommands:
#
#   init      — Create the collection, artists and covers folders
#   import    — Import a Discogs collection CSV export
#   backfill  — Attach Discogs covers to records that have a release id
#   list      — Print the visible records (or all with --include-hidden)
#   add       — Add a record by hand, optionally downloading a cover URL
#   hide      — Hide a record from listings (or --unhide it)
#
# Exit codes:
#   0  success (an import may still report per-row errors in its summary)
#   1  the CSV was rejected as a whole, the file could not be read,
#      or a catalog operation failed
#
# Usage examples:
#   python -m src.cli init
#   python -m src.cli import ~/Downloads/collection.csv --covers
#   python -m src.cli import collection.csv --no-upsert
#   python -m src.cli backfill
#   python -m src.cli list --include-hidden
# =============================================================================

"""Command-line interface for the vinyl catalog.

Usage::

    python -m src.cli import /path/to/discogs-collection.csv --covers
    python -m src.cli backfill
    python -m src.cli list
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

from src.config.settings import Settings
from src.models.imports import BackfillSummary, ImportSummary
from src.pipeline.backfill_orchestrator import CoverBackfillPipeline
from src.pipeline.import_orchestrator import DiscogsImportPipeline
from src.providers.catalog.markdown_vault_store import MarkdownVaultStore
from src.providers.music_db.discogs_release_client import DiscogsReleaseClient
from src.services.catalog_service import CatalogService
from src.services.cover_service import CoverService
from src.utils.errors import VinylCatalogError
from src.utils.logging import configure_logging


def _print_progress(label: str):  # noqa: ANN202
    def _report(current: int, total: int) -> None:
        end = "\n" if current == total else "\r"
        print(f"{label}: {current}/{total}", end=end, file=sys.stderr, flush=True)

    return _report


def _print_import_summary(summary: ImportSummary) -> None:
    print(f"Total rows: {summary.total}")
    print(f"Created:    {summary.created}")
    print(f"Updated:    {summary.updated}")
    print(f"Covers:     +{summary.covers_attached}")
    print(f"Skipped:    {summary.skipped}")
    print(f"Errors:     {len(summary.errors)}")
    for error in summary.errors:
        print(f"  - {error}")


def _print_backfill_summary(summary: BackfillSummary) -> None:
    print(f"Scanned:    {summary.scanned}")
    print(f"Candidates: {summary.candidates}")
    print(f"Covers:     +{summary.attached}")
    print(f"Skipped:    {summary.skipped}")
    print(f"Errors:     {len(summary.errors)}")
    for error in summary.errors:
        print(f"  - {error}")


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_init(app_settings: Settings) -> int:
    catalog = CatalogService(MarkdownVaultStore(app_settings.vault_root), app_settings)
    await catalog.ensure_structure()
    print(f"Catalog folders ready under {app_settings.vault_root}")
    return 0


async def _handle_import(args: argparse.Namespace, app_settings: Settings) -> int:
    csv_path = Path(args.csv_file)
    try:
        csv_bytes = csv_path.read_bytes()
    except OSError as exc:
        print(f"Error: cannot read {csv_path}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    store = MarkdownVaultStore(app_settings.vault_root)
    async with httpx.AsyncClient(timeout=app_settings.http_timeout_seconds) as http_client:
        client = DiscogsReleaseClient(http_client, app_settings)
        pipeline = DiscogsImportPipeline(
            store,
            app_settings,
            cover_service=CoverService(store, client, app_settings),
        )
        summary = await pipeline.run(
            csv_bytes,
            upsert=not args.no_upsert,
            auto_fetch_covers=args.covers,
            on_progress=_print_progress("Import"),
        )

    _print_import_summary(summary)
    return 0


async def _handle_backfill(app_settings: Settings) -> int:
    store = MarkdownVaultStore(app_settings.vault_root)
    async with httpx.AsyncClient(timeout=app_settings.http_timeout_seconds) as http_client:
        client = DiscogsReleaseClient(http_client, app_settings)
        pipeline = CoverBackfillPipeline(store, CoverService(store, client, app_settings), app_settings)
        summary = await pipeline.run(on_progress=_print_progress("Cover backfill"))

    _print_backfill_summary(summary)
    return 0


async def _handle_list(args: argparse.Namespace, app_settings: Settings) -> int:
    catalog = CatalogService(MarkdownVaultStore(app_settings.vault_root), app_settings)
    entries = await catalog.list_records(include_hidden=args.include_hidden)
    for entry in entries:
        year = f" ({entry.year})" if entry.year else ""
        price = f"  {entry.price:g}" if entry.price else ""
        hidden = "  [hidden]" if entry.hidden else ""
        print(f"{entry.artist} — {entry.title}{year}{price}{hidden}")
    print(f"\n{len(entries)} record(s)")
    return 0


async def _handle_add(args: argparse.Namespace, app_settings: Settings) -> int:
    store = MarkdownVaultStore(app_settings.vault_root)
    async with httpx.AsyncClient(timeout=app_settings.http_timeout_seconds) as http_client:
        catalog = CatalogService(store, app_settings, DiscogsReleaseClient(http_client, app_settings))
        entry = await catalog.add_record(
            artist=args.artist,
            title=args.title,
            year=args.year,
            price=args.price,
            cover_url=args.cover_url or "",
        )
    print(f"Created {entry.path}")
    return 0


async def _handle_hide(args: argparse.Namespace, app_settings: Settings) -> int:
    catalog = CatalogService(MarkdownVaultStore(app_settings.vault_root), app_settings)
    hidden = not args.unhide
    await catalog.set_hidden(args.path, hidden)
    print(f"{'Hidden' if hidden else 'Unhidden'}: {args.path}")
    return 0


async def _dispatch(args: argparse.Namespace, app_settings: Settings) -> int:
    try:
        if args.command == "init":
            return await _handle_init(app_settings)
        if args.command == "import":
            return await _handle_import(args, app_settings)
        if args.command == "backfill":
            return await _handle_backfill(app_settings)
        if args.command == "list":
            return await _handle_list(args, app_settings)
        if args.command == "add":
            return await _handle_add(args, app_settings)
        if args.command == "hide":
            return await _handle_hide(args, app_settings)
    except VinylCatalogError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Manage a Markdown vinyl catalog and import Discogs collection exports.",
    )
    parser.add_argument(
        "--vault",
        default=None,
        help="Vault root directory (default: VAULT_ROOT or the current directory)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Catalog commands")

    subparsers.add_parser("init", help="Create the catalog folders")

    import_parser = subparsers.add_parser("import", help="Import a Discogs collection CSV")
    import_parser.add_argument("csv_file", help="Path to the Discogs CSV export")
    import_parser.add_argument(
        "--no-upsert",
        action="store_true",
        dest="no_upsert",
        help="Always create new records instead of updating matches",
    )
    import_parser.add_argument(
        "--covers",
        action="store_true",
        help="Fetch Discogs covers for imported records without one",
    )

    subparsers.add_parser("backfill", help="Attach Discogs covers to existing records")

    list_parser = subparsers.add_parser("list", help="List catalog records")
    list_parser.add_argument(
        "--include-hidden",
        action="store_true",
        dest="include_hidden",
        help="Also list hidden records",
    )

    add_parser = subparsers.add_parser("add", help="Add a record by hand")
    add_parser.add_argument("artist")
    add_parser.add_argument("title")
    add_parser.add_argument("--year", default=None)
    add_parser.add_argument("--price", default=None)
    add_parser.add_argument("--cover-url", dest="cover_url", default=None)

    hide_parser = subparsers.add_parser("hide", help="Hide a record from listings")
    hide_parser.add_argument("path", help="Vault-relative note path")
    hide_parser.add_argument("--unhide", action="store_true", help="Make the record visible again")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Parse *argv*, run the subcommand, and exit with its status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    overrides = {"vault_root": args.vault} if args.vault else {}
    app_settings = Settings(**overrides)
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    sys.exit(asyncio.run(_dispatch(args, app_settings)))


if __name__ == "__main__":
    main()
