"""Generation Guard - Mutual exclusion and throttling for horizon passes.

Horizon generation is requested opportunistically (every coordinator refresh,
every service call), so the guard makes repeated requests cheap:
- A request while a pass is running is dropped, not queued
- A request within `min_interval` seconds of the last start is dropped
- A pass exceeding `timeout` seconds is cancelled and the guard released

State lives on the instance only; a restarted Home Assistant starts unlocked
and unthrottled.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Coroutine


class GenerationGuard:
    """Runs a horizon generation coroutine at most once at a time."""

    def __init__(
        self,
        runner: Callable[[], Awaitable[Any]],
        *,
        create_task: Callable[[Coroutine[Any, Any, None]], asyncio.Task[None]]
        | None = None,
        clock: Callable[[], float] = time.monotonic,
        min_interval: float = const.GENERATION_THROTTLE_SECONDS,
        timeout: float = const.GENERATION_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the guard.

        Args:
            runner: Coroutine function performing one generation pass.
            create_task: Schedules the pass in the background
                (defaults to asyncio.create_task).
            clock: Monotonic seconds source used for throttling.
            min_interval: Minimum seconds between two pass starts.
            timeout: Seconds after which a running pass is abandoned.
        """
        self._runner = runner
        self._create_task = create_task or asyncio.create_task
        self._clock = clock
        self._min_interval = min_interval
        self._timeout = timeout
        self._is_generating = False
        self._last_run: float | None = None

    @property
    def is_generating(self) -> bool:
        """True while a pass is running."""
        return self._is_generating

    @property
    def last_run(self) -> float | None:
        """Clock reading when the last pass started, if any."""
        return self._last_run

    def request_horizon_generation(self) -> asyncio.Task[None] | None:
        """Start a generation pass unless one is running or ran recently.

        Returns:
            The background task running the pass, or None when skipped.
        """
        if self._is_generating:
            const.LOGGER.debug("DEBUG: Generation Guard - Pass already running")
            return None

        now = self._clock()
        if self._last_run is not None and now - self._last_run < self._min_interval:
            const.LOGGER.debug(
                "DEBUG: Generation Guard - Throttled (%.1fs since last pass)",
                now - self._last_run,
            )
            return None

        self._is_generating = True
        self._last_run = now
        return self._create_task(self._async_run())

    async def _async_run(self) -> None:
        try:
            async with asyncio.timeout(self._timeout):
                await self._runner()
        except TimeoutError:
            const.LOGGER.error(
                "ERROR: Generation Guard - Pass exceeded %ss and was cancelled",
                self._timeout,
            )
        except Exception as err:  # pylint: disable=broad-exception-caught
            # Runs as a background task; the next request retries the pass
            const.LOGGER.error("ERROR: Generation Guard - Pass failed: %s", err)
        finally:
            self._is_generating = False
