"""
Energy Refill Scheduler

Purpose
-------
Periodic background trigger for energy regeneration. Every
``poll_seconds`` it asks the engine to credit whatever whole intervals have
elapsed.

Because regeneration advances its reference by whole intervals only, the
poll rate affects how soon energy shows up, never how much accrues. The
engine also catches up before each exploration, so the scheduler is a
convenience for idle displays rather than a correctness requirement.

Usage Example
-------------
>>> scheduler = EnergyRefillScheduler(engine, poll_seconds=60)
>>> scheduler.start()
>>> # ... game runs ...
>>> await scheduler.stop()
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

from stargazer.core.logging.logger import get_logger

if TYPE_CHECKING:
    from stargazer.modules.exploration.service import ProgressionEngine

logger = get_logger(__name__)


class EnergyRefillScheduler:
    """
    Background task that polls ``engine.regenerate()``.

    Public API
    ----------
    - start() -> schedule the loop on the running event loop
    - stop() -> signal and await shutdown
    - run_forever(stop_event) -> the loop itself, for callers managing tasks
    """

    def __init__(self, engine: ProgressionEngine, poll_seconds: float = 60.0) -> None:
        if poll_seconds <= 0:
            raise ValueError(f"poll_seconds must be positive, got {poll_seconds}")
        self._engine = engine
        self._poll_seconds = poll_seconds
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self.run_forever(stop_event=self._stop_event),
            name="stargazer-energy-refill",
        )

    async def stop(self) -> None:
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None

    async def run_forever(self, *, stop_event: asyncio.Event) -> None:
        """
        Poll until ``stop_event`` is set.

        A failing tick is logged and the loop keeps going.
        """
        logger.info(
            "EnergyRefillScheduler started",
            extra={"poll_seconds": self._poll_seconds},
        )
        try:
            while not stop_event.is_set():
                await self._tick_once()

                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self._poll_seconds)
                except asyncio.TimeoutError:
                    continue
        finally:
            logger.info("EnergyRefillScheduler stopped", extra={"ticks": self.ticks})

    async def _tick_once(self) -> None:
        self.ticks += 1
        try:
            credited = await self._engine.regenerate()
        except Exception as exc:
            logger.error(
                "Energy refill tick failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            return

        logger.debug("Energy refill tick", extra={"credited": credited, "tick": self.ticks})
