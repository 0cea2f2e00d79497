import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable

logger = logging.getLogger(__name__)


class RequestGenerationTracker:
    """
    Tracks in-flight requests per key with a generation counter.

    Starting a request for a key cancels the previous in-flight request for
    that key. A response whose generation is no longer current is discarded
    by the caller.
    """

    def __init__(self):
        self._generations: dict[Hashable, int] = {}
        self._tasks: dict[Hashable, asyncio.Task] = {}

    def next_generation(self, key: Hashable) -> int:
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        return generation

    def current_generation(self, key: Hashable) -> int:
        return self._generations.get(key, 0)

    def is_current(self, key: Hashable, generation: int) -> bool:
        return self._generations.get(key, 0) == generation

    def cancel(self, key: Hashable) -> None:
        """Cancel the in-flight request for key and invalidate its generation."""
        task = self._tasks.pop(key, None)
        if task is not None and not task.done():
            task.cancel()
            logger.debug(f"Cancelled superseded request {key!r}")
        self.next_generation(key)

    async def run(self, key: Hashable, request: Callable[[], Awaitable[Any]]) -> tuple[bool, Any]:
        """
        Run request() as the newest request for key.

        Returns:
            (True, result) when this request is still current on completion,
            (False, None) when a newer request superseded it
        """
        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            previous.cancel()
            logger.debug(f"Cancelled superseded request {key!r}")

        generation = self.next_generation(key)
        task = asyncio.ensure_future(request())
        self._tasks[key] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and not self.is_current(key, generation):
                return False, None
            raise
        except Exception:
            if not self.is_current(key, generation):
                logger.debug(f"Discarded stale failure for {key!r} (generation {generation})")
                return False, None
            raise
        finally:
            if self._tasks.get(key) is task:
                del self._tasks[key]

        if not self.is_current(key, generation):
            logger.debug(f"Discarded stale response for {key!r} (generation {generation})")
            return False, None
        return True, result
