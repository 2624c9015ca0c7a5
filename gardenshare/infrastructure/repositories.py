"""Repositories for gardens, land requests and notifications.

Each repository exists in two flavours sharing one interface:

- SQLAlchemy repositories work on the AsyncSession of a unit of work and
  convert rows to domain entities through the models.
- In-memory repositories work on an InMemoryStore, staging writes until
  the unit of work commits. They back the service tests and local runs.

Repositories never commit; the unit of work owns the transaction.
"""

import asyncio
import copy
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gardenshare.domain.entities import Garden, LandRequest, Notification
from gardenshare.domain.state_machines import SWEEP_EXPIRABLE_STATUSES, LandRequestStatus
from gardenshare.infrastructure.models import GardenModel, LandRequestModel, NotificationModel

if TYPE_CHECKING:
    from gardenshare.infrastructure.unit_of_work import InMemoryStore, InMemoryUnitOfWork


# ============================================================================
# Repository Interfaces
# ============================================================================


class GardenRepository(ABC):
    """Access to gardens and their land ledger."""

    @abstractmethod
    async def get(self, garden_id: str) -> Garden | None:
        """Load a garden without locking it."""

    @abstractmethod
    async def get_for_update(self, garden_id: str) -> Garden | None:
        """Load a garden and hold its row lock until the unit of work ends."""

    @abstractmethod
    async def add(self, garden: Garden) -> None: ...

    @abstractmethod
    async def save(self, garden: Garden) -> None: ...


class LandRequestRepository(ABC):
    """Access to land requests."""

    @abstractmethod
    async def get(self, request_id: str) -> LandRequest | None: ...

    @abstractmethod
    async def add(self, request: LandRequest) -> None: ...

    @abstractmethod
    async def save(self, request: LandRequest) -> None: ...

    @abstractmethod
    async def find_overlapping(
        self,
        garden_id: str,
        requester_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LandRequestStatus],
        exclude_id: str | None = None,
    ) -> list[LandRequest]:
        """Requests of one requester on one garden sharing at least a day
        with start_date..end_date, restricted to the given statuses."""

    @abstractmethod
    async def list_by_requester(
        self,
        requester_id: str,
        statuses: Iterable[LandRequestStatus],
    ) -> list[LandRequest]: ...

    @abstractmethod
    async def list_due_for_activation(self, today: date) -> list[LandRequest]:
        """Approved requests whose range contains today."""

    @abstractmethod
    async def list_due_for_expiration(self, today: date) -> list[LandRequest]:
        """Approved or active requests whose end date is before today."""


class NotificationRepository(ABC):
    """Access to land allocation notifications."""

    @abstractmethod
    async def get(self, notification_id: str) -> Notification | None: ...

    @abstractmethod
    async def add(self, notification: Notification) -> None: ...

    @abstractmethod
    async def save(self, notification: Notification) -> None: ...

    @abstractmethod
    async def list_for_user(self, user_id: str, limit: int) -> list[Notification]:
        """Latest notifications addressed to user_id, newest first."""


# ============================================================================
# SQLAlchemy Repositories
# ============================================================================


class SqlAlchemyGardenRepository(GardenRepository):
    """Garden repository backed by the gardens table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, garden_id: str) -> Garden | None:
        model = await self.session.get(GardenModel, garden_id)
        return model.to_entity() if model else None

    async def get_for_update(self, garden_id: str) -> Garden | None:
        stmt = (
            select(GardenModel)
            .where(GardenModel.id == garden_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def add(self, garden: Garden) -> None:
        self.session.add(GardenModel.from_entity(garden))
        await self.session.flush()

    async def save(self, garden: Garden) -> None:
        model = await self.session.get(GardenModel, garden.id)
        if model is None:
            await self.add(garden)
            return
        model.apply(garden)
        await self.session.flush()


class SqlAlchemyLandRequestRepository(LandRequestRepository):
    """Land request repository backed by the land_requests table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, request_id: str) -> LandRequest | None:
        stmt = (
            select(LandRequestModel)
            .where(LandRequestModel.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def add(self, request: LandRequest) -> None:
        self.session.add(LandRequestModel.from_entity(request))
        await self.session.flush()

    async def save(self, request: LandRequest) -> None:
        model = await self.session.get(LandRequestModel, request.id)
        if model is None:
            await self.add(request)
            return
        model.apply(request)
        await self.session.flush()

    async def find_overlapping(
        self,
        garden_id: str,
        requester_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LandRequestStatus],
        exclude_id: str | None = None,
    ) -> list[LandRequest]:
        conditions = [
            LandRequestModel.garden_id == garden_id,
            LandRequestModel.user_id == requester_id,
            LandRequestModel.status.in_([s.value for s in statuses]),
            # Inclusive on both ends: sharing a boundary day is an overlap
            LandRequestModel.start_date <= end_date,
            LandRequestModel.end_date >= start_date,
        ]
        if exclude_id:
            conditions.append(LandRequestModel.id != exclude_id)

        stmt = select(LandRequestModel).where(and_(*conditions)).order_by(LandRequestModel.start_date)
        return await self._fetch(stmt)

    async def list_by_requester(
        self,
        requester_id: str,
        statuses: Iterable[LandRequestStatus],
    ) -> list[LandRequest]:
        stmt = (
            select(LandRequestModel)
            .where(
                and_(
                    LandRequestModel.user_id == requester_id,
                    LandRequestModel.status.in_([s.value for s in statuses]),
                )
            )
            .order_by(LandRequestModel.start_date, LandRequestModel.id)
        )
        return await self._fetch(stmt)

    async def list_due_for_activation(self, today: date) -> list[LandRequest]:
        stmt = (
            select(LandRequestModel)
            .where(
                and_(
                    LandRequestModel.status == LandRequestStatus.APPROVED.value,
                    LandRequestModel.start_date <= today,
                    LandRequestModel.end_date >= today,
                )
            )
            .order_by(LandRequestModel.garden_id, LandRequestModel.id)
        )
        return await self._fetch(stmt)

    async def list_due_for_expiration(self, today: date) -> list[LandRequest]:
        stmt = (
            select(LandRequestModel)
            .where(
                and_(
                    LandRequestModel.status.in_([s.value for s in SWEEP_EXPIRABLE_STATUSES]),
                    LandRequestModel.end_date < today,
                )
            )
            .order_by(LandRequestModel.garden_id, LandRequestModel.id)
        )
        return await self._fetch(stmt)

    async def _fetch(self, stmt) -> list[LandRequest]:
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return [model.to_entity() for model in result.scalars().all()]


class SqlAlchemyNotificationRepository(NotificationRepository):
    """Notification repository backed by land_allocation_notifications."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, notification_id: str) -> Notification | None:
        model = await self.session.get(NotificationModel, notification_id)
        return model.to_entity() if model else None

    async def add(self, notification: Notification) -> None:
        self.session.add(NotificationModel.from_entity(notification))
        await self.session.flush()

    async def save(self, notification: Notification) -> None:
        model = await self.session.get(NotificationModel, notification.id)
        if model is None:
            await self.add(notification)
            return
        model.apply(notification)
        await self.session.flush()

    async def list_for_user(self, user_id: str, limit: int) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [model.to_entity() for model in result.scalars().all()]


# ============================================================================
# In-Memory Repositories
# ============================================================================


def _detached(entity):
    """Copy an entity so callers never share state with the store."""
    clone = copy.deepcopy(entity)
    if hasattr(clone, "collect_events"):
        clone.collect_events()
    return clone


class _InMemoryRepository:
    """Common staging logic over one table of the store.

    Reads see the unit of work's own staged writes first; writes only
    reach the store when the unit of work commits.
    """

    table: str

    def __init__(self, store: "InMemoryStore", uow: "InMemoryUnitOfWork") -> None:
        self.store = store
        self.uow = uow
        self.staged: dict = {}

    def _rows(self) -> dict:
        return getattr(self.store, self.table)

    async def _get(self, entity_id: str):
        # Yield so concurrent units of work interleave like real I/O would
        await asyncio.sleep(0)
        if entity_id in self.staged:
            return _detached(self.staged[entity_id])
        entity = self._rows().get(entity_id)
        return _detached(entity) if entity is not None else None

    async def _put(self, entity) -> None:
        await asyncio.sleep(0)
        self.staged[entity.id] = _detached(entity)

    def _all(self) -> list:
        merged = {**self._rows(), **self.staged}
        return [_detached(entity) for entity in merged.values()]

    def flush_to_store(self) -> None:
        self._rows().update(self.staged)
        self.staged.clear()

    def discard(self) -> None:
        self.staged.clear()


class InMemoryGardenRepository(_InMemoryRepository, GardenRepository):
    table = "gardens"

    async def get(self, garden_id: str) -> Garden | None:
        return await self._get(garden_id)

    async def get_for_update(self, garden_id: str) -> Garden | None:
        await self.uow.lock_garden(garden_id)
        return await self._get(garden_id)

    async def add(self, garden: Garden) -> None:
        await self._put(garden)

    async def save(self, garden: Garden) -> None:
        await self._put(garden)


class InMemoryLandRequestRepository(_InMemoryRepository, LandRequestRepository):
    table = "land_requests"

    async def get(self, request_id: str) -> LandRequest | None:
        return await self._get(request_id)

    async def add(self, request: LandRequest) -> None:
        await self._put(request)

    async def save(self, request: LandRequest) -> None:
        await self._put(request)

    async def find_overlapping(
        self,
        garden_id: str,
        requester_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LandRequestStatus],
        exclude_id: str | None = None,
    ) -> list[LandRequest]:
        await asyncio.sleep(0)
        wanted = set(statuses)
        matches = [
            r
            for r in self._all()
            if r.garden_id == garden_id
            and r.requester_id == requester_id
            and r.status in wanted
            and r.id != exclude_id
            and r.start_date <= end_date
            and r.end_date >= start_date
        ]
        return sorted(matches, key=lambda r: r.start_date)

    async def list_by_requester(
        self,
        requester_id: str,
        statuses: Iterable[LandRequestStatus],
    ) -> list[LandRequest]:
        await asyncio.sleep(0)
        wanted = set(statuses)
        matches = [r for r in self._all() if r.requester_id == requester_id and r.status in wanted]
        return sorted(matches, key=lambda r: (r.start_date, r.id))

    async def list_due_for_activation(self, today: date) -> list[LandRequest]:
        await asyncio.sleep(0)
        matches = [r for r in self._all() if r.is_due_for_activation(today)]
        return sorted(matches, key=lambda r: (r.garden_id, r.id))

    async def list_due_for_expiration(self, today: date) -> list[LandRequest]:
        await asyncio.sleep(0)
        matches = [r for r in self._all() if r.is_due_for_expiration(today)]
        return sorted(matches, key=lambda r: (r.garden_id, r.id))


class InMemoryNotificationRepository(_InMemoryRepository, NotificationRepository):
    table = "notifications"

    async def get(self, notification_id: str) -> Notification | None:
        return await self._get(notification_id)

    async def add(self, notification: Notification) -> None:
        await self._put(notification)

    async def save(self, notification: Notification) -> None:
        await self._put(notification)

    async def list_for_user(self, user_id: str, limit: int) -> list[Notification]:
        await asyncio.sleep(0)
        matches = [n for n in self._all() if n.recipient_id == user_id]
        matches.sort(key=lambda n: n.created_at, reverse=True)
        return matches[:limit]
