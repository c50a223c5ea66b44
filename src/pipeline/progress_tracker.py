"""Per-row progress reporting for import and backfill runs.

# ─── HOW PROGRESS REPORTING WORKS ──────────────────────────────────────
#
#   Pipeline ──report(i, total)──→ ProgressReporter ──callback(i, total)──→ CLI / API
#
#   - The callback is optional; without one, report() only logs at DEBUG.
#   - Both sync and async callbacks are supported (a returned coroutine is
#     awaited).
#   - A callback that raises is logged and ignored: progress display must
#     never change the outcome of an import row.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import structlog

from src.utils.logging import get_logger

ProgressCallback = Callable[[int, int], Any]


class ProgressReporter:
    """Forwards ``(current, total)`` updates to an optional observer callback.

    Parameters
    ----------
    callback:
        Called as ``callback(current, total)`` with ``current`` starting at 1.
    run_name:
        Label for log lines, e.g. ``"discogs_import"``.
    """

    def __init__(self, callback: ProgressCallback | None, run_name: str) -> None:
        self._callback = callback
        self._run_name = run_name
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def report(self, current: int, total: int) -> None:
        """Notify the callback that item *current* of *total* has been processed."""
        self._logger.debug(
            "progress_update",
            run=self._run_name,
            current=current,
            total=total,
        )
        if self._callback is None:
            return
        try:
            result = self._callback(current, total)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            self._logger.warning(
                "progress_callback_error",
                run=self._run_name,
                error=str(exc),
                callback=getattr(self._callback, "__name__", repr(self._callback)),
            )
