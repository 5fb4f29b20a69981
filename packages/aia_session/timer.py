import asyncio
from typing import Awaitable, Callable, Optional

from packages.aia_core.logging import get_logger

logger = get_logger("aia.session.timer")

# Returns the remaining seconds after the tick, or None when the question is no longer counting down
TickHandler = Callable[[int], Awaitable[Optional[int]]]
ExpireHandler = Callable[[int], Awaitable[None]]

class CountdownTimer:
    """
    Cancellable periodic countdown bound to one pending question at a time.

    Every `interval` seconds the tick handler is awaited; it decrements the
    session's remaining time and reports the new value. When it reaches zero
    the expire handler is awaited exactly once and the countdown ends.
    start() always cancels the previous countdown, so no orphaned task survives
    a pause, a completion or a reset.
    """
    def __init__(self, on_tick: TickHandler, on_expire: ExpireHandler, interval: float = 1.0):
        if interval <= 0:
            raise ValueError("Timer interval must be positive")
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self._question_id: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def question_id(self) -> Optional[int]:
        return self._question_id if self.running else None

    def start(self, question_id: int) -> None:
        """Begin counting down for question_id. Requires a running event loop."""
        self.stop()
        self._question_id = question_id
        self._task = asyncio.get_running_loop().create_task(
            self._run(question_id), name=f"countdown-q{question_id}"
        )
        logger.debug(f"Countdown started for question {question_id}")

    def stop(self) -> None:
        task = self._task
        self._task = None
        self._question_id = None
        if task is None or task.done():
            return
        # The expire path detaches itself before calling out, so this never cancels the caller
        if task is not asyncio.current_task():
            task.cancel()
            logger.debug("Countdown cancelled")

    async def _run(self, question_id: int) -> None:
        while True:
            await asyncio.sleep(self.interval)
            remaining = await self.on_tick(question_id)
            if remaining is None:
                self._detach()
                return
            if remaining <= 0:
                break

        self._detach()
        logger.info(f"Countdown expired for question {question_id}")
        try:
            await self.on_expire(question_id)
        except Exception:
            # No automatic retry; the question stays pending for a manual submission
            logger.exception(f"Timeout submission for question {question_id} failed")

    def _detach(self) -> None:
        if self._task is asyncio.current_task():
            self._task = None
            self._question_id = None
