"""Scheduled land request sweep.

run_sweep() is one pass over all land requests for a given day:

1. Approved requests whose range contains today become ACTIVE.
2. Approved and active requests whose end date is before today become
   EXPIRED and their land is released. A request waiting on an extension
   decision is left for the owner.

The whole pass is one unit of work: either every transition and ledger
change is committed or none is. Gardens are locked in ascending id
order. Expiration notices go out after commit. A second pass for the
same day finds nothing left to do.

SweepScheduler runs run_sweep() on an interval inside the API process.
"""

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

import structlog

from gardenshare.application.ledger import GardenCapacityLedger
from gardenshare.application.notifications import NotificationSink, publish_notifications
from gardenshare.domain.base import DomainEvent
from gardenshare.domain.entities import Garden
from gardenshare.domain.exceptions import GardenNotFoundError, SweepFailedError
from gardenshare.infrastructure.unit_of_work import UnitOfWorkFactory

logger = structlog.get_logger()


@dataclass
class SweepResult:
    """Outcome of one sweep pass.

    Attributes:
        today: Day the sweep ran for.
        activated: Ids of requests moved from approved to active.
        expired: Ids of requests moved to expired.
    """

    today: date
    activated: list[str] = field(default_factory=list)
    expired: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.activated or self.expired)


async def run_sweep(
    uow_factory: UnitOfWorkFactory,
    today: date,
    sink: NotificationSink,
) -> SweepResult:
    """Activate and expire land requests for today.

    Args:
        uow_factory: Creates the unit of work for the pass.
        today: Day to sweep for.
        sink: Receives the expiration notifications.

    Returns:
        SweepResult listing what changed.

    Raises:
        SweepFailedError: If anything failed; nothing was changed.
    """
    result = SweepResult(today=today)
    events: list[DomainEvent] = []

    try:
        async with uow_factory() as uow:
            ledger = GardenCapacityLedger(uow)
            to_activate = await uow.land_requests.list_due_for_activation(today)
            to_expire = await uow.land_requests.list_due_for_expiration(today)

            gardens: dict[str, Garden] = {}
            for garden_id in sorted({r.garden_id for r in to_activate + to_expire}):
                garden = await uow.gardens.get_for_update(garden_id)
                if garden is None:
                    raise GardenNotFoundError(garden_id)
                gardens[garden_id] = garden

            for candidate in to_activate:
                # Re-read under the garden lock; a concurrent decision may have moved it
                request = await uow.land_requests.get(candidate.id)
                if request is None or not request.is_due_for_activation(today):
                    continue
                request.activate(gardens[request.garden_id])
                await uow.land_requests.save(request)
                result.activated.append(request.id)
                events.extend(request.collect_events())

            for candidate in to_expire:
                request = await uow.land_requests.get(candidate.id)
                if request is None or not request.is_due_for_expiration(today):
                    continue
                request.expire(gardens[request.garden_id])
                gardens[request.garden_id] = await ledger.release(
                    request.garden_id, request.requested_land
                )
                await uow.land_requests.save(request)
                result.expired.append(request.id)
                events.extend(request.collect_events())

            await uow.commit()

    except Exception as e:
        logger.exception(
            "Land request sweep rolled back",
            today=today.isoformat(),
            error=str(e),
        )
        raise SweepFailedError(today, str(e)) from e

    logger.info(
        "Land request sweep complete",
        today=today.isoformat(),
        activated=len(result.activated),
        expired=len(result.expired),
    )
    await publish_notifications(sink, events)
    return result


class SweepScheduler:
    """Runs the sweep every interval_seconds as a background asyncio task.

    The first pass runs as soon as the scheduler starts. A failed pass is
    logged and the next tick tries again.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        sink: NotificationSink,
        interval_seconds: float,
        clock: Callable[[], date] = date.today,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.uow_factory = uow_factory
        self.sink = sink
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task. Calling it twice is a no-op."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="land-request-sweep")
        logger.info("Sweep scheduler started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Sweep scheduler stopped")

    async def run_once(self) -> SweepResult | None:
        """Run one pass for today; None when it failed and was rolled back."""
        today = self.clock()
        try:
            return await run_sweep(self.uow_factory, today, self.sink)
        except SweepFailedError as e:
            logger.error(
                "Scheduled sweep failed, retrying next tick",
                today=today.isoformat(),
                error=e.message,
                next_run_in_seconds=self.interval_seconds,
            )
            return None

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)
