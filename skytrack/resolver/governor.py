"""
Admission control and request deduplication for resolutions.

Two mechanisms:
- A pending map of in-flight resolutions keyed by identifier. A second
  caller for the same key joins the running task instead of starting a
  duplicate. The entry is removed the moment the task settles.
- A counting semaphore capping how many resolutions run at once. Callers
  over the cap wait for a slot; nothing queues beyond the waiting callers
  themselves.

A started resolution is shielded from its caller's cancellation and runs to
completion, since its result is cached for everyone else.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ConcurrencyGovernor(Generic[T]):
    """
    Deduplicates concurrent resolutions and bounds how many run at once.

    Args:
        max_concurrent: Maximum number of resolutions admitted at a time.
    """

    def __init__(self, max_concurrent: int = 20):
        if max_concurrent < 1:
            raise ValueError('max_concurrent must be at least 1')
        self.max_concurrent = max_concurrent
        self._slots = asyncio.Semaphore(max_concurrent)
        self._pending: Dict[str, 'asyncio.Task[T]'] = {}

        self._outstanding = 0
        self._started = 0
        self._deduplicated = 0

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def run(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        """
        Run factory() for key, or join the resolution already in flight.

        The originating caller sees the task's own exception, if any. A
        caller that joined an existing task gets fallback() instead when
        the wait fails.
        """
        # No await between the lookup and the insert below
        existing = self._pending.get(key)
        if existing is not None:
            self._deduplicated += 1
            logger.debug(f'Joining in-flight resolution for {key}')
            try:
                return await asyncio.shield(existing)
            except Exception as e:
                logger.warning(f'In-flight resolution for {key} failed, using fallback: {e}')
                return fallback()

        task = asyncio.ensure_future(self._admit(key, factory))
        self._pending[key] = task
        task.add_done_callback(lambda finished: self._settle(key, finished))
        self._started += 1

        return await asyncio.shield(task)

    async def _admit(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        if self._slots.locked():
            logger.debug(f'At capacity ({self.max_concurrent}), {key} waiting for a slot')
        async with self._slots:
            self._outstanding += 1
            try:
                return await factory()
            finally:
                self._outstanding -= 1

    def _settle(self, key: str, task: 'asyncio.Task[T]') -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    @property
    def stats(self) -> dict:
        return {
            'max_concurrent': self.max_concurrent,
            'outstanding': self._outstanding,
            'pending': len(self._pending),
            'started': self._started,
            'deduplicated': self._deduplicated,
        }
