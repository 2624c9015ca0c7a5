"""Land request application service.

Orchestrates the land allocation lifecycle:
- Creating requests against a garden's availability
- Owner decisions, with land reservation and supersession
- Extension requests and decisions
- Reads for requesters and garden owners

Every mutating call runs in one unit of work that locks the garden row
before it reads request status or ledger totals. Notifications go out
only after that unit of work has committed.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

import structlog

from gardenshare.application.ledger import GardenCapacityLedger
from gardenshare.application.notifications import NotificationSink, publish_notifications
from gardenshare.domain.base import DomainEvent
from gardenshare.domain.entities import Garden, LandRequest
from gardenshare.domain.exceptions import (
    CapacityExceededError,
    DomainError,
    GardenNotFoundError,
    InsufficientLandError,
    InvalidStateTransitionError,
    LandRequestNotFoundError,
    OverlappingRequestError,
    UnauthorizedError,
)
from gardenshare.domain.state_machines import (
    OVERLAP_BLOCKING_STATUSES,
    Decision,
    LandRequestStatus,
)
from gardenshare.domain.value_objects import DateRange, positive_land
from gardenshare.infrastructure.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory

logger = structlog.get_logger()

STORAGE_ERROR = "STORAGE_ERROR"


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class LandRequestResult:
    """Result of an operation on one land request."""

    request: LandRequest | None = None
    garden: Garden | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class DecideLandRequestResult(LandRequestResult):
    """Result of an owner decision.

    superseded holds the ids of older active requests that the approval
    expired.
    """

    superseded: list[str] = field(default_factory=list)


@dataclass
class ListAllocationsResult:
    """Result of listing a requester's current allocations."""

    allocations: list[LandRequest] = field(default_factory=list)
    gardens: dict[str, Garden] = field(default_factory=dict)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


ResultT = TypeVar("ResultT", LandRequestResult, DecideLandRequestResult, ListAllocationsResult)


# ============================================================================
# Land Request Service
# ============================================================================


class LandRequestService:
    """Application service for the land request lifecycle."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        sink: NotificationSink,
        clock: Callable[[], date] = date.today,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            uow_factory: Creates a unit of work per operation.
            sink: Receives notifications after commit.
            clock: Returns today's date.
            request_id: Request ID for correlation.
        """
        self.uow_factory = uow_factory
        self.sink = sink
        self.clock = clock
        self.request_id = request_id

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def create_land_request(
        self,
        garden_id: str,
        requester_id: str,
        requested_land: Decimal | int | str,
        start_date: date,
        end_date: date,
        contact_info: str | None = None,
        message: str | None = None,
    ) -> LandRequestResult:
        """Ask for land in a garden.

        Args:
            garden_id: Garden to request land in.
            requester_id: Caller identity.
            requested_land: Land quantity, positive.
            start_date: First day of the allocation.
            end_date: Last day of the allocation, after start_date.
            contact_info: How the owner can reach the requester.
            message: Note for the owner.

        Returns:
            LandRequestResult with the pending request.
        """
        try:
            DateRange.of(start_date, end_date)
            amount = positive_land(requested_land)

            async with self.uow_factory() as uow:
                garden = await self._lock_garden(uow, garden_id)

                conflicts = await uow.land_requests.find_overlapping(
                    garden_id=garden.id,
                    requester_id=requester_id,
                    start_date=start_date,
                    end_date=end_date,
                    statuses=OVERLAP_BLOCKING_STATUSES,
                )
                if conflicts:
                    raise OverlappingRequestError(garden.id, requester_id, conflicts[0].id)

                available = await GardenCapacityLedger(uow).available(garden.id)
                if amount > available:
                    raise InsufficientLandError(garden.id, amount, available)

                request = LandRequest.create(
                    garden,
                    requester_id=requester_id,
                    requested_land=amount,
                    start_date=start_date,
                    end_date=end_date,
                    contact_info=contact_info,
                    message=message,
                )
                await uow.land_requests.add(request)
                await uow.commit()

        except DomainError as e:
            return self._failed(LandRequestResult, e, "create", garden_id=garden_id)
        except Exception as e:
            return self._storage_failed(LandRequestResult, e, "create", garden_id=garden_id)

        logger.info(
            "Land request created",
            request_id=request.id,
            garden_id=garden.id,
            requester_id=requester_id,
            requested_land=str(request.requested_land),
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            correlation_id=self.request_id,
        )
        await self._publish(request.collect_events())
        return LandRequestResult(request=request, garden=garden)

    async def decide_land_request(
        self,
        request_id: str,
        decider_id: str,
        decision: Decision | str,
    ) -> DecideLandRequestResult:
        """Approve or reject a pending request as the garden owner.

        Approval reserves the land under the garden lock. When today falls
        within the request's dates it starts ACTIVE right away, and any
        other active request of the same requester on the garden that
        overlaps it is expired and its land released.

        Args:
            request_id: Request to decide.
            decider_id: Caller identity, must own the garden.
            decision: "approved" or "rejected".

        Returns:
            DecideLandRequestResult with the decided request.
        """
        superseded: list[LandRequest] = []
        try:
            verdict = Decision.parse(decision)
            today = self.clock()

            async with self.uow_factory() as uow:
                request, garden = await self._load_locked(uow, request_id)
                garden.ensure_owner(decider_id, request.id, "decide")
                self._ensure_pending(request, verdict, today)

                if verdict == Decision.REJECTED:
                    request.reject(garden)
                else:
                    ledger = GardenCapacityLedger(uow)
                    previous_allocated = garden.allocated_land
                    try:
                        garden = await ledger.reserve(garden.id, request.requested_land)
                    except CapacityExceededError as e:
                        raise InsufficientLandError(garden.id, e.requested, e.max_available) from e
                    request.approve(garden, today, previous_allocated)

                    if request.status == LandRequestStatus.ACTIVE:
                        garden, superseded = await self._supersede(
                            uow, ledger, garden, request, decider_id
                        )

                await uow.land_requests.save(request)
                await uow.commit()

        except DomainError as e:
            return self._failed(DecideLandRequestResult, e, "decide", request_id=request_id)
        except Exception as e:
            return self._storage_failed(DecideLandRequestResult, e, "decide", request_id=request_id)

        logger.info(
            "Land request decided",
            request_id=request.id,
            garden_id=garden.id,
            decision=verdict.value,
            status=request.status.value,
            allocated_land=str(garden.allocated_land),
            superseded=[r.id for r in superseded],
            correlation_id=self.request_id,
        )

        events: list[DomainEvent] = []
        for old in superseded:
            events.extend(old.collect_events())
        events.extend(request.collect_events())
        await self._publish(events)

        return DecideLandRequestResult(
            request=request,
            garden=garden,
            superseded=[r.id for r in superseded],
        )

    async def request_extension(
        self,
        request_id: str,
        requester_id: str,
        proposed_end_date: date,
        message: str | None = None,
    ) -> LandRequestResult:
        """Ask the garden owner to push back the end date.

        Land-neutral: the allocation keeps its land while the owner
        decides.

        Args:
            request_id: Approved or active request to extend.
            requester_id: Caller identity, must have made the request.
            proposed_end_date: New end date, after the current one.
            message: Note for the owner.

        Returns:
            LandRequestResult with the request in pending_extension.
        """
        try:
            async with self.uow_factory() as uow:
                request, garden = await self._load_locked(uow, request_id)
                request.request_extension(garden, requester_id, proposed_end_date, message)
                await uow.land_requests.save(request)
                await uow.commit()

        except DomainError as e:
            return self._failed(LandRequestResult, e, "request extension", request_id=request_id)
        except Exception as e:
            return self._storage_failed(
                LandRequestResult, e, "request extension", request_id=request_id
            )

        logger.info(
            "Extension requested",
            request_id=request.id,
            garden_id=garden.id,
            current_end_date=request.end_date.isoformat(),
            proposed_end_date=proposed_end_date.isoformat(),
            correlation_id=self.request_id,
        )
        await self._publish(request.collect_events())
        return LandRequestResult(request=request, garden=garden)

    async def decide_extension(
        self,
        request_id: str,
        decider_id: str,
        decision: Decision | str,
    ) -> LandRequestResult:
        """Approve or reject a pending extension as the garden owner.

        Args:
            request_id: Request in pending_extension.
            decider_id: Caller identity, must own the garden.
            decision: "approved" or "rejected".

        Returns:
            LandRequestResult with the request back in its prior status.
        """
        try:
            verdict = Decision.parse(decision)
            today = self.clock()

            async with self.uow_factory() as uow:
                request, garden = await self._load_locked(uow, request_id)
                garden.ensure_owner(decider_id, request.id, "decide extension of")
                if verdict == Decision.APPROVED:
                    request.approve_extension(garden, today)
                else:
                    request.reject_extension(garden, today)
                await uow.land_requests.save(request)
                await uow.commit()

        except DomainError as e:
            return self._failed(LandRequestResult, e, "decide extension", request_id=request_id)
        except Exception as e:
            return self._storage_failed(
                LandRequestResult, e, "decide extension", request_id=request_id
            )

        logger.info(
            "Extension decided",
            request_id=request.id,
            garden_id=garden.id,
            decision=verdict.value,
            status=request.status.value,
            end_date=request.end_date.isoformat(),
            correlation_id=self.request_id,
        )
        await self._publish(request.collect_events())
        return LandRequestResult(request=request, garden=garden)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_land_request(self, request_id: str, caller_id: str) -> LandRequestResult:
        """Get a request visible to its requester or the garden owner."""
        try:
            async with self.uow_factory() as uow:
                request = await uow.land_requests.get(request_id)
                if request is None:
                    raise LandRequestNotFoundError(request_id)
                garden = await uow.gardens.get(request.garden_id)
                if garden is None:
                    raise GardenNotFoundError(request.garden_id)
                if not request.is_visible_to(caller_id, garden):
                    raise UnauthorizedError(caller_id, request.id, "view")
        except DomainError as e:
            return self._failed(LandRequestResult, e, "get", request_id=request_id)
        except Exception as e:
            return self._storage_failed(LandRequestResult, e, "get", request_id=request_id)

        return LandRequestResult(request=request, garden=garden)

    async def list_allocations(self, user_id: str) -> ListAllocationsResult:
        """List a requester's pending, approved, active and extending requests."""
        try:
            async with self.uow_factory() as uow:
                allocations = await uow.land_requests.list_by_requester(
                    user_id, OVERLAP_BLOCKING_STATUSES
                )
                gardens: dict[str, Garden] = {}
                for allocation in allocations:
                    if allocation.garden_id not in gardens:
                        garden = await uow.gardens.get(allocation.garden_id)
                        if garden is not None:
                            gardens[garden.id] = garden
        except Exception as e:
            return self._storage_failed(ListAllocationsResult, e, "list allocations", user_id=user_id)

        return ListAllocationsResult(allocations=allocations, gardens=gardens)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _lock_garden(self, uow: AbstractUnitOfWork, garden_id: str) -> Garden:
        garden = await uow.gardens.get_for_update(garden_id)
        if garden is None:
            raise GardenNotFoundError(garden_id)
        return garden

    async def _load_locked(
        self, uow: AbstractUnitOfWork, request_id: str
    ) -> tuple[LandRequest, Garden]:
        """Load a request and lock its garden, then re-read the request.

        The second read sees whatever a concurrent operation committed
        while this one waited for the lock.
        """
        request = await uow.land_requests.get(request_id)
        if request is None:
            raise LandRequestNotFoundError(request_id)
        garden = await self._lock_garden(uow, request.garden_id)
        request = await uow.land_requests.get(request_id)
        if request is None:
            raise LandRequestNotFoundError(request_id)
        return request, garden

    @staticmethod
    def _ensure_pending(request: LandRequest, verdict: Decision, today: date) -> None:
        if request.status == LandRequestStatus.PENDING:
            return
        if verdict == Decision.REJECTED:
            target = LandRequestStatus.REJECTED
        elif request.date_range.contains(today):
            target = LandRequestStatus.ACTIVE
        else:
            target = LandRequestStatus.APPROVED
        raise InvalidStateTransitionError(
            entity_type="LandRequest",
            entity_id=request.id,
            current_state=request.status.value,
            target_state=target.value,
            allowed_transitions=[s.value for s in request.status.allowed_transitions()],
        )

    async def _supersede(
        self,
        uow: AbstractUnitOfWork,
        ledger: GardenCapacityLedger,
        garden: Garden,
        request: LandRequest,
        decider_id: str,
    ) -> tuple[Garden, list[LandRequest]]:
        """Expire the requester's other active allocations overlapping request."""
        older = await uow.land_requests.find_overlapping(
            garden_id=garden.id,
            requester_id=request.requester_id,
            start_date=request.start_date,
            end_date=request.end_date,
            statuses=[LandRequestStatus.ACTIVE],
            exclude_id=request.id,
        )
        for old in older:
            old.expire(garden, reason="superseded", superseded_by=request.id, expired_by=decider_id)
            garden = await ledger.release(garden.id, old.requested_land)
            await uow.land_requests.save(old)
            logger.info(
                "Land request superseded",
                request_id=old.id,
                superseded_by=request.id,
                garden_id=garden.id,
                released_land=str(old.requested_land),
            )
        return garden, older

    async def _publish(self, events: list[DomainEvent]) -> None:
        await publish_notifications(self.sink, events)

    def _failed(self, result_cls: type[ResultT], error: DomainError, action: str, **context) -> ResultT:
        logger.info(
            "Land request operation refused",
            action=action,
            error_code=error.error_code,
            error=error.message,
            correlation_id=self.request_id,
            **context,
        )
        return result_cls(
            success=False,
            error=error.message,
            error_code=error.error_code,
            details=error.details,
        )

    def _storage_failed(
        self, result_cls: type[ResultT], error: Exception, action: str, **context
    ) -> ResultT:
        logger.exception(
            "Land request operation failed",
            action=action,
            error=str(error),
            correlation_id=self.request_id,
            **context,
        )
        return result_cls(
            success=False,
            error="Storage unavailable, retry later",
            error_code=STORAGE_ERROR,
        )
