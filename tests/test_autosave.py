"""Tests for debounced background saving."""
import asyncio

import pytest
from unittest.mock import AsyncMock

from pocketpro.state.autosave import SaveScheduler


class TestSaveScheduler:
    """Test SaveScheduler coalescing and failure handling."""

    @pytest.mark.asyncio
    async def test_rapid_changes_coalesce_into_one_save(self):
        """Test several marks inside the quiet period cause a single save."""
        save = AsyncMock(return_value=True)
        saver = SaveScheduler(save, delay=0.02)

        saver.mark_dirty()
        saver.mark_dirty()
        saver.mark_dirty()
        assert saver.dirty is True

        await asyncio.sleep(0.1)

        save.assert_awaited_once()
        assert saver.dirty is False
        assert saver.pending is False
        assert saver.last_saved_at is not None

    @pytest.mark.asyncio
    async def test_mark_during_wait_extends_deadline(self):
        """Test a later mark pushes the save back."""
        save = AsyncMock(return_value=True)
        saver = SaveScheduler(save, delay=0.2)

        saver.mark_dirty()
        await asyncio.sleep(0.12)
        saver.mark_dirty()
        await asyncio.sleep(0.12)

        save.assert_not_awaited()

        await asyncio.sleep(0.3)
        save.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_save_stays_dirty(self):
        """Test a failed save keeps changes marked and reports an error."""
        save = AsyncMock(return_value=False)
        saver = SaveScheduler(save, delay=0)

        saver.mark_dirty()
        await asyncio.sleep(0.05)

        save.assert_awaited_once()
        assert saver.dirty is True
        assert saver.last_error is not None
        assert saver.pending is False

    @pytest.mark.asyncio
    async def test_raising_save_counts_as_failure(self):
        """Test an exception from the save callback is treated as a failure."""
        save = AsyncMock(side_effect=RuntimeError("connection refused"))
        saver = SaveScheduler(save, delay=0)

        assert await saver.flush(force=True) is False
        assert saver.dirty is True
        assert saver.last_error is not None

    @pytest.mark.asyncio
    async def test_success_after_failure_clears_error(self):
        """Test the next successful save clears the notice."""
        save = AsyncMock(side_effect=[False, True])
        saver = SaveScheduler(save, delay=10)

        saver.mark_dirty()
        assert await saver.flush() is False
        assert await saver.flush() is True

        assert saver.dirty is False
        assert saver.last_error is None
        await saver.close()

    @pytest.mark.asyncio
    async def test_flush_without_changes_skips_save(self):
        """Test flushing a clean state does nothing unless forced."""
        save = AsyncMock(return_value=True)
        saver = SaveScheduler(save, delay=0)

        assert await saver.flush() is True
        save.assert_not_awaited()

        assert await saver.flush(force=True) is True
        save.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_saves_pending_changes(self):
        """Test closing stops the timer and saves right away."""
        save = AsyncMock(return_value=True)
        saver = SaveScheduler(save, delay=10)

        saver.mark_dirty()
        assert saver.pending is True

        assert await saver.close() is True

        save.assert_awaited_once()
        assert saver.pending is False
        assert saver.dirty is False
