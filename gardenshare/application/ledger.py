"""Garden capacity ledger.

Keeps 0 <= allocated_land <= total_land on every garden. The ledger
works inside a caller's unit of work and takes the garden row lock
before touching the totals, so concurrent reservations on one garden
are serialized by the database (or the in-memory store).
"""

from decimal import Decimal

import structlog

from gardenshare.domain.entities import Garden
from gardenshare.domain.exceptions import GardenNotFoundError
from gardenshare.infrastructure.unit_of_work import AbstractUnitOfWork

logger = structlog.get_logger()


class GardenCapacityLedger:
    """Reserve and release land on gardens within one unit of work.

    Nothing here commits; the owning unit of work decides whether the
    ledger changes are kept.
    """

    def __init__(self, uow: AbstractUnitOfWork) -> None:
        """Initialize ledger.

        Args:
            uow: Active unit of work the ledger writes through.
        """
        self.uow = uow

    async def reserve(self, garden_id: str, amount: Decimal) -> Garden:
        """Allocate land on a garden.

        Args:
            garden_id: Garden to allocate on.
            amount: Land to allocate, positive.

        Returns:
            The garden after the reservation.

        Raises:
            GardenNotFoundError: If the garden does not exist.
            CapacityExceededError: If allocated + amount would exceed the
                total. Carries max_available.
        """
        garden = await self._locked(garden_id)
        previous = garden.allocated_land
        garden.reserve(amount)
        await self.uow.gardens.save(garden)

        logger.info(
            "Land reserved",
            garden_id=garden_id,
            amount=str(amount),
            previous_allocated=str(previous),
            allocated_land=str(garden.allocated_land),
            total_land=str(garden.total_land),
        )
        return garden

    async def release(self, garden_id: str, amount: Decimal) -> Garden:
        """Give land back to a garden.

        allocated_land never drops below zero. Releasing more than is
        allocated means the books were already off; that is logged, not
        raised, so an expiration is never blocked by it.

        Args:
            garden_id: Garden to release on.
            amount: Land to release.

        Returns:
            The garden after the release.

        Raises:
            GardenNotFoundError: If the garden does not exist.
        """
        garden = await self._locked(garden_id)
        previous = garden.allocated_land
        shortfall = garden.release(amount)
        await self.uow.gardens.save(garden)

        if shortfall > 0:
            logger.warning(
                "Ledger release underflow",
                garden_id=garden_id,
                amount=str(amount),
                previous_allocated=str(previous),
                shortfall=str(shortfall),
            )
        else:
            logger.info(
                "Land released",
                garden_id=garden_id,
                amount=str(amount),
                previous_allocated=str(previous),
                allocated_land=str(garden.allocated_land),
            )
        return garden

    async def available(self, garden_id: str) -> Decimal:
        """Land that can still be allocated on a garden.

        Raises:
            GardenNotFoundError: If the garden does not exist.
        """
        garden = await self.uow.gardens.get(garden_id)
        if garden is None:
            raise GardenNotFoundError(garden_id)
        return garden.available_land

    async def _locked(self, garden_id: str) -> Garden:
        garden = await self.uow.gardens.get_for_update(garden_id)
        if garden is None:
            raise GardenNotFoundError(garden_id)
        return garden
