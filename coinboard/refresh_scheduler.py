"""Background task that refreshes market data on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

RefreshFn = Callable[[], Awaitable[bool]]
# Called after every cycle with the refresh outcome
CycleCallback = Callable[[bool], None]


class RefreshScheduler:
    """Runs refresh cycles on a fixed interval."""

    def __init__(
        self,
        refresh: RefreshFn,
        interval_seconds: float = 30,
        on_cycle: Optional[CycleCallback] = None,
    ) -> None:
        self.refresh = refresh
        self.interval_seconds = interval_seconds
        self.on_cycle = on_cycle

        self._task: Optional[asyncio.Task[None]] = None
        self._running = False
        self._cycle_count = 0
        self._consecutive_failures = 0
        self._last_error: Optional[str] = None
        self._last_cycle: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._running and self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Refresh scheduler started ({self.interval_seconds}s)")

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Refresh scheduler stopped")

    async def run_now(self) -> bool:
        """Run one cycle immediately, outside the interval."""
        return await self._run_cycle()

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break

            try:
                await self._run_cycle()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.error(f"Refresh cycle callback failed: {exc}")

    async def _run_cycle(self) -> bool:
        self._cycle_count += 1
        self._last_cycle = datetime.now(timezone.utc)
        logger.debug(f"Starting refresh cycle #{self._cycle_count}")

        try:
            ok = await self.refresh()
        except Exception as exc:
            self._record_failure(str(exc))
            ok = False
        else:
            if ok:
                self._consecutive_failures = 0
                self._last_error = None
            else:
                self._record_failure("refresh returned no data")

        if self.on_cycle:
            self.on_cycle(ok)
        return ok

    def _record_failure(self, error: str) -> None:
        self._consecutive_failures += 1
        self._last_error = error
        logger.warning(
            f"Refresh cycle failed (attempt {self._consecutive_failures}): {error}"
        )
        if self._consecutive_failures >= 3:
            logger.error(
                f"Refresh has failed {self._consecutive_failures} consecutive times. "
                f"Last error: {error}"
            )

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "cycle_count": self._cycle_count,
            "consecutive_failures": self._consecutive_failures,
            "last_error": self._last_error,
            "last_cycle": self._last_cycle.isoformat() if self._last_cycle else None,
        }
