"""
Restock refresh scheduler.

Keeps the restocking display sets fresh while the screen is active:
- one refresh immediately on activation
- one every `interval_seconds` after that
- extra refreshes on focus and after successful submit/deliver

Single-flight: at most one refresh cycle is in flight. A trigger that
arrives while a cycle is running does not start a second request; it
schedules exactly one follow-up cycle so the caller still sees data that
was fetched after its trigger.

The scheduler is owned by the workflow and bound to its activation scope.
After stop() the timer is gone and no timer-driven cycle fires again.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RefreshScheduler:
    def __init__(self, cycle: Callable[[str], Awaitable[object]], interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cycle = cycle
        self.interval_seconds = interval_seconds
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._rerun_reason: Optional[str] = None
        self.cycles_run = 0

    @property
    def is_active(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def start(self):
        """Start the timer. Must be called from a running event loop."""
        if self.is_active:
            logger.debug("[RefreshScheduler] Already running")
            return
        self._timer = asyncio.get_running_loop().create_task(self._run_timer())
        logger.info(f"[RefreshScheduler] Started. Interval: {self.interval_seconds}s")

    async def stop(self):
        """Cancel the timer. An in-flight cycle is allowed to finish but gets no follow-up."""
        timer, self._timer = self._timer, None
        self._rerun_reason = None
        if timer is None:
            return
        timer.cancel()
        try:
            await timer
        except asyncio.CancelledError:
            pass
        logger.info("[RefreshScheduler] Stopped")

    def trigger(self, reason: str = "manual") -> asyncio.Task:
        """
        Request a refresh and return the task that will satisfy it.

        If a cycle is already running, the same task is returned and one
        follow-up cycle is queued on it.
        """
        if self.is_refreshing:
            logger.debug(f"[RefreshScheduler] Refresh in flight; queued follow-up ({reason})")
            self._rerun_reason = reason
            return self._inflight
        self._inflight = asyncio.get_running_loop().create_task(self._run_cycles(reason))
        return self._inflight

    async def refresh_now(self, reason: str = "manual"):
        """Trigger and wait for the result of the cycle that covers this trigger."""
        return await asyncio.shield(self.trigger(reason))

    async def _run_cycles(self, reason: str):
        while True:
            try:
                result = await self._cycle(reason)
            except Exception as e:
                # The cycle reports its own failures; this is a bug guard for the loop
                logger.error(f"[RefreshScheduler] Refresh cycle error ({reason}): {e}", exc_info=True)
                result = None
            self.cycles_run += 1

            if self._rerun_reason is None:
                return result
            reason, self._rerun_reason = self._rerun_reason, None

    async def _run_timer(self):
        while True:
            self.trigger("interval")
            await asyncio.sleep(self.interval_seconds)
