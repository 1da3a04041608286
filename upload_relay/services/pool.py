from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5


class Session(Protocol):
    def close(self) -> None: ...


@dataclass(eq=False)
class PoolSlot:
    session: Any
    pool: "ConnectionPool"
    closed: bool = False


class ConnectionPool:
    """
    Ограничивает число одновременных исходящих сессий.

    Idle -> Lent -> Closed: сессии не переиспользуются, на release
    слот выбрасывается, а его сессия закрывается. Ожидание свободного
    слота - очередь future, которую будит release (без FIFO-гарантий).
    Корректность держится на однопоточном event loop, без локов.
    """

    def __init__(
        self, factory: Callable[[], Session], capacity: int = DEFAULT_CAPACITY
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._factory = factory
        self._capacity = capacity
        self._lent: set[PoolSlot] = set()
        self._waiters: deque[asyncio.Future] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def live(self) -> int:
        return len(self._lent)

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    async def acquire(self) -> PoolSlot:
        while len(self._lent) >= self._capacity:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                # нас разбудили, но мы уходим - передаём пробуждение дальше
                if waiter.done() and not waiter.cancelled():
                    self._wake_one()
                raise
            finally:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass

        slot = PoolSlot(session=self._factory(), pool=self)
        self._lent.add(slot)
        logger.debug("pool slot acquired (%d/%d)", self.live, self._capacity)
        return slot

    def release(self, slot: PoolSlot) -> None:
        """Never raises. Повторный release того же слота - no-op."""
        # после drain_all слота уже нет в учёте, но сессию всё равно закрываем
        if slot in self._lent:
            self._lent.discard(slot)
            self._wake_one()
            logger.debug("pool slot released (%d/%d)", self.live, self._capacity)

        if slot.closed:
            return
        slot.closed = True
        try:
            slot.session.close()
        except Exception as e:
            logger.debug("session teardown failed: %s", e)

    def drain_all(self) -> None:
        """Shutdown only: сбрасывает учёт, in-flight сессии не трогает."""
        self._lent.clear()
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)

    def _wake_one(self) -> None:
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(None)
                return
