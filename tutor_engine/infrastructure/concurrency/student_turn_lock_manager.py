import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import structlog

logger = structlog.get_logger(__name__)


class StudentTurnLockManager:
    """
    Serializes tutoring turns per (student, course) inside one process.
    Turns of the same student run one at a time in arrival order; other
    students are never blocked. Idle locks are dropped.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}
        self._locks_guard = asyncio.Lock()

    @staticmethod
    def resolve_key(student_id: str, course_id: str) -> str:
        return f"{student_id}:{course_id}"

    async def _checkout(self, key: str) -> asyncio.Lock:
        async with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[key] = lock
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    async def _checkin(self, key: str) -> None:
        async with self._locks_guard:
            current = self._holders.get(key, 0)
            if current <= 1:
                self._holders.pop(key, None)
                self._locks.pop(key, None)
            else:
                self._holders[key] = current - 1

    async def active_keys_count(self) -> int:
        async with self._locks_guard:
            return len(self._locks)

    @asynccontextmanager
    async def turn_slot(self, student_id: str, course_id: str) -> AsyncIterator[None]:
        key = self.resolve_key(student_id, course_id)
        lock = await self._checkout(key)
        try:
            if lock.locked():
                logger.info("student_turn_queued", student_id=student_id, course_id=course_id)
            async with lock:
                yield
        finally:
            await self._checkin(key)
