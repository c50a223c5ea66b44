"""Unit tests for ProgressReporter."""

from __future__ import annotations

import pytest

from src.pipeline.progress_tracker import ProgressReporter


class TestProgressReporter:
    @pytest.mark.asyncio
    async def test_without_callback_is_noop(self) -> None:
        await ProgressReporter(None, "test").report(1, 3)  # should not raise

    @pytest.mark.asyncio
    async def test_sync_callback(self) -> None:
        calls: list[tuple[int, int]] = []
        reporter = ProgressReporter(lambda i, total: calls.append((i, total)), "test")

        await reporter.report(1, 2)
        await reporter.report(2, 2)

        assert calls == [(1, 2), (2, 2)]

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self) -> None:
        calls: list[tuple[int, int]] = []

        async def _on_progress(i: int, total: int) -> None:
            calls.append((i, total))

        await ProgressReporter(_on_progress, "test").report(3, 5)

        assert calls == [(3, 5)]

    @pytest.mark.asyncio
    async def test_callback_error_is_swallowed(self) -> None:
        def _broken(i: int, total: int) -> None:
            raise RuntimeError("display went away")

        await ProgressReporter(_broken, "test").report(1, 1)  # should not raise

    @pytest.mark.asyncio
    async def test_async_callback_error_is_swallowed(self) -> None:
        async def _broken(i: int, total: int) -> None:
            raise ValueError("boom")

        await ProgressReporter(_broken, "test").report(1, 1)  # should not raise
