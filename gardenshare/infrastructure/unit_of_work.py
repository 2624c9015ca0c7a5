"""Unit of work: one transaction around a group of repositories.

Usage:

    async with uow_factory() as uow:
        garden = await uow.gardens.get_for_update(garden_id)
        ...
        await uow.commit()

Leaving the block without commit() rolls everything back. Garden row
locks taken through gardens.get_for_update() are held until the block
exits, which serializes every operation touching the same garden.
"""

import abc
import asyncio
from collections.abc import Callable
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gardenshare.domain.entities import Garden, LandRequest, Notification
from gardenshare.infrastructure.repositories import (
    GardenRepository,
    InMemoryGardenRepository,
    InMemoryLandRequestRepository,
    InMemoryNotificationRepository,
    LandRequestRepository,
    NotificationRepository,
    SqlAlchemyGardenRepository,
    SqlAlchemyLandRequestRepository,
    SqlAlchemyNotificationRepository,
)

# ============================================================================
# Abstract Unit of Work
# ============================================================================


class AbstractUnitOfWork(abc.ABC):
    """Groups the repositories under a single transactional boundary."""

    gardens: GardenRepository
    land_requests: LandRequestRepository
    notifications: NotificationRepository

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.rollback()

    @abc.abstractmethod
    async def commit(self) -> None: ...

    @abc.abstractmethod
    async def rollback(self) -> None:
        """Discard uncommitted work. A no-op after commit()."""


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


# ============================================================================
# SQLAlchemy Unit of Work
# ============================================================================


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """Unit of work over one AsyncSession.

    Garden locks are SELECT ... FOR UPDATE row locks and are released by
    the commit or rollback that ends the transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.gardens = SqlAlchemyGardenRepository(self.session)
        self.land_requests = SqlAlchemyLandRequestRepository(self.session)
        self.notifications = SqlAlchemyNotificationRepository(self.session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    async def commit(self) -> None:
        if self.session is None:
            raise RuntimeError("Unit of work used outside its async with block")
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()


def sqlalchemy_uow_factory(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> UnitOfWorkFactory:
    """Build a factory of SQLAlchemy units of work.

    Args:
        session_factory: Session factory to use; defaults to the configured
            database.

    Returns:
        Zero-argument callable returning a fresh unit of work.
    """
    if session_factory is None:
        from gardenshare.infrastructure.database import async_session_factory

        session_factory = async_session_factory

    return lambda: SqlAlchemyUnitOfWork(session_factory)


# ============================================================================
# In-Memory Unit of Work
# ============================================================================


class InMemoryStore:
    """Process-local tables plus one asyncio.Lock per garden."""

    def __init__(self) -> None:
        self.gardens: dict[str, Garden] = {}
        self.land_requests: dict[str, LandRequest] = {}
        self.notifications: dict[str, Notification] = {}
        self._garden_locks: dict[str, asyncio.Lock] = {}

    def garden_lock(self, garden_id: str) -> asyncio.Lock:
        lock = self._garden_locks.get(garden_id)
        if lock is None:
            lock = self._garden_locks[garden_id] = asyncio.Lock()
        return lock

    def unit_of_work(self) -> "InMemoryUnitOfWork":
        """Factory method, usable wherever a UnitOfWorkFactory is expected."""
        return InMemoryUnitOfWork(self)


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """Unit of work staging writes in memory until commit()."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._held_locks: dict[str, asyncio.Lock] = {}
        self.gardens = InMemoryGardenRepository(store, self)
        self.land_requests = InMemoryLandRequestRepository(store, self)
        self.notifications = InMemoryNotificationRepository(store, self)
        self.committed = False

    async def lock_garden(self, garden_id: str) -> None:
        """Acquire the garden lock once per unit of work."""
        if garden_id in self._held_locks:
            return
        lock = self.store.garden_lock(garden_id)
        await lock.acquire()
        self._held_locks[garden_id] = lock

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            for lock in self._held_locks.values():
                lock.release()
            self._held_locks.clear()

    async def commit(self) -> None:
        for repo in self._repositories():
            repo.flush_to_store()
        self.committed = True

    async def rollback(self) -> None:
        for repo in self._repositories():
            repo.discard()

    def _repositories(self):
        return (self.gardens, self.land_requests, self.notifications)
