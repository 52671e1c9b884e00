"""Debounced background persistence."""
import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from pocketpro.utils.logger import get_logger

logger = get_logger(__name__)


class SaveScheduler:
    """Coalesces state changes into background saves.

    Callers mark the state dirty after each local mutation. A single timer
    task waits until no mutation has happened for ``delay`` seconds and then
    runs the save callback once. ``flush`` saves right away.

    A failed save keeps the state dirty and records ``last_error``; the
    scheduler does not retry on its own. The next ``mark_dirty`` or ``flush``
    tries again.
    """

    def __init__(
        self,
        save: Callable[[], Awaitable[bool]],
        delay: float = 1.0,
        name: str = "autosave",
    ):
        """Initialize the scheduler.

        Args:
            save: Coroutine function persisting the current state. Returns
                True on success.
            delay: Quiet period in seconds before a scheduled save runs.
            name: Label used in log messages.
        """
        self._save = save
        self.delay = delay
        self.name = name
        self._dirty = False
        self._deadline = 0.0
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.last_error: Optional[str] = None
        self.last_saved_at: Optional[datetime] = None

    @property
    def dirty(self) -> bool:
        """True while there are changes that have not been saved."""
        return self._dirty

    @property
    def pending(self) -> bool:
        """True while a timer task is scheduled or running."""
        return self._task is not None and not self._task.done()

    def mark_dirty(self) -> None:
        """Record a local change and (re)start the quiet-period timer.

        Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        self._dirty = True
        self._deadline = loop.time() + self.delay
        if not self.pending:
            self._task = loop.create_task(self._run())

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while self._dirty:
            remaining = self._deadline - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)
                continue
            if not await self.flush():
                break

    async def flush(self, force: bool = False) -> bool:
        """Save now if there are unsaved changes.

        Args:
            force: Save even when nothing is marked dirty.

        Returns:
            True if the state is saved (or nothing needed saving).
        """
        async with self._lock:
            if not self._dirty and not force:
                return True
            self._dirty = False

            try:
                ok = await self._save()
            except asyncio.CancelledError:
                self._dirty = True
                raise
            except Exception as e:
                logger.error(f"{self.name}: save raised {e!r}")
                ok = False

            if not ok:
                self._dirty = True
                self.last_error = "Changes are not saved yet; they are kept in memory."
                logger.warning(f"{self.name}: save failed, keeping changes in memory")
                return False

            self.last_error = None
            self.last_saved_at = datetime.now(timezone.utc)
            logger.debug(f"{self.name}: saved")
            return True

    async def close(self) -> bool:
        """Stop the timer and make a final save attempt.

        Returns:
            Result of the final flush.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        return await self.flush()
