"""
Pairs waiting sessions two at a time.

A pass runs as a background task on the event loop. Only one pass may be
active per engine: the lock is checked without waiting, so a trigger that
arrives while a pass is running does nothing and the running pass picks the
new entries up before it finishes.
"""
import asyncio
import logging
from typing import Optional, Set

from app.domain import events
from app.services.chat.registry import ClientRegistry
from app.services.chat.waiting_queue import WaitingQueue

logger = logging.getLogger(__name__)


class MatchingEngine:
    def __init__(
        self,
        registry: ClientRegistry,
        queue: WaitingQueue,
        batch_size: int = 100,
        backoff_seconds: float = 0.1,
    ):
        self.registry = registry
        self.queue = queue
        self.batch_size = max(1, batch_size)
        self.backoff_seconds = backoff_seconds
        self._lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def is_processing(self) -> bool:
        return self._lock.locked()

    def enqueue(self, session_id: str) -> Optional[asyncio.Task]:
        """Queue a session for matching.

        Returns the scheduled pass task, or None when no new pass was started.
        """
        self.queue.add(session_id)
        logger.info(f"Clients waiting {len(self.queue)}")

        if len(self.queue) >= 2:
            return self.trigger()
        return None

    def remove(self, session_id: Optional[str]) -> None:
        self.queue.remove(session_id)

    def trigger(self) -> Optional[asyncio.Task]:
        if self._lock.locked():
            logger.info("Queue already being processed")
            return None

        task = asyncio.create_task(self.process_queue())
        self._tasks.add(task)
        task.add_done_callback(self._on_pass_done)
        return task

    def _on_pass_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Error processing queue: {error}", exc_info=error)

    async def process_queue(self) -> bool:
        """Run one pass. Returns False when another pass was already active."""
        if self._lock.locked():
            logger.info("Queue already being processed")
            return False

        async with self._lock:
            logger.info("Start process queue")
            iterations = 0

            while len(self.queue) >= 2:
                try:
                    self._match_head()
                except Exception as e:
                    logger.error(f"Error building match: {e}", exc_info=True)

                iterations += 1
                if iterations % self.batch_size == 0:
                    await asyncio.sleep(self.backoff_seconds)

            logger.info("Queue was processed")
        return True

    async def wait_idle(self) -> None:
        """Wait for every scheduled pass to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _match_head(self) -> bool:
        first_id, second_id = self.queue.head_pair()

        # Existence is re-checked in the step that commits the pairing
        first = self.registry.get(first_id)
        second = self.registry.get(second_id)

        if first is not None and second is not None:
            first.peer = second_id
            second.peer = first_id
            self.queue.remove(first_id)
            self.queue.remove(second_id)

            first.push(events.matched())
            second.push(events.matched())

            logger.info(f"New match between users: {first_id} <-> {second_id}")
            return True

        # Stale ids are dropped; a live one stays at the head for the next round
        if first is None:
            self.queue.remove(first_id)
        if second is None:
            self.queue.remove(second_id)
        return False
