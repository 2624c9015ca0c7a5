"""Garden application service.

Creates gardens and reads their ledger. Land totals only change through
the land request lifecycle and the sweep.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog

from gardenshare.domain.entities import Garden
from gardenshare.domain.exceptions import DomainError, GardenNotFoundError
from gardenshare.infrastructure.unit_of_work import UnitOfWorkFactory

logger = structlog.get_logger()


@dataclass
class GardenResult:
    """Result of a garden operation."""

    garden: Garden | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


class GardenService:
    """Application service for gardens."""

    def __init__(self, uow_factory: UnitOfWorkFactory, request_id: str | None = None) -> None:
        self.uow_factory = uow_factory
        self.request_id = request_id

    async def create_garden(
        self,
        owner_id: str,
        name: str,
        total_land: Decimal | int | str,
        description: str | None = None,
        address: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        type: str = "community",
    ) -> GardenResult:
        """Register a garden owned by owner_id with nothing allocated.

        Returns:
            GardenResult with the new garden, or INVALID_LAND_AMOUNT when
            total_land is negative or not a number.
        """
        try:
            garden = Garden.create(
                owner_id=owner_id,
                name=name,
                total_land=total_land,
                description=description,
                address=address,
                latitude=latitude,
                longitude=longitude,
                type=type,
            )
            async with self.uow_factory() as uow:
                await uow.gardens.add(garden)
                await uow.commit()
        except DomainError as e:
            return GardenResult(success=False, error=e.message, error_code=e.error_code)
        except Exception as e:
            logger.exception(
                "Failed to create garden",
                owner_id=owner_id,
                error=str(e),
                request_id=self.request_id,
            )
            return GardenResult(
                success=False,
                error="Storage unavailable, retry later",
                error_code="STORAGE_ERROR",
            )

        logger.info(
            "Garden created",
            garden_id=garden.id,
            owner_id=owner_id,
            total_land=str(garden.total_land),
            request_id=self.request_id,
        )
        return GardenResult(garden=garden)

    async def get_garden(self, garden_id: str) -> GardenResult:
        """Get a garden by ID."""
        try:
            async with self.uow_factory() as uow:
                garden = await uow.gardens.get(garden_id)
        except Exception as e:
            logger.exception(
                "Failed to load garden",
                garden_id=garden_id,
                error=str(e),
                request_id=self.request_id,
            )
            return GardenResult(
                success=False,
                error="Storage unavailable, retry later",
                error_code="STORAGE_ERROR",
            )

        if garden is None:
            error = GardenNotFoundError(garden_id)
            return GardenResult(success=False, error=error.message, error_code=error.error_code)
        return GardenResult(garden=garden)
