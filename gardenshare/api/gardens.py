"""Garden API endpoints.

Provides:
- POST /gardens - register a garden owned by the caller
- GET /gardens/{id} - garden details and land ledger
- POST /gardens/{id}/requests - request land in a garden
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from gardenshare.api.dependencies import (
    get_current_user_id,
    get_garden_service,
    get_land_request_service,
    raise_for_result,
)
from gardenshare.api.land_requests import request_to_response
from gardenshare.api.schemas import (
    ErrorResponse,
    GardenCreateRequest,
    GardenResponse,
    LandRequestCreateRequest,
    LandRequestResponse,
)
from gardenshare.application.garden_service import GardenService
from gardenshare.application.land_request_service import LandRequestService
from gardenshare.domain.entities import Garden

router = APIRouter(prefix="/gardens", tags=["Gardens"])


def garden_to_response(garden: Garden) -> GardenResponse:
    """Convert Garden to GardenResponse."""
    return GardenResponse(
        id=garden.id,
        owner_id=garden.owner_id,
        name=garden.name,
        description=garden.description,
        address=garden.address,
        latitude=garden.latitude,
        longitude=garden.longitude,
        type=garden.type,
        total_land=garden.total_land,
        allocated_land=garden.allocated_land,
        available_land=garden.available_land,
        created_at=garden.created_at,
        updated_at=garden.updated_at,
    )


@router.post(
    "",
    response_model=GardenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Create garden",
)
async def create_garden(
    body: GardenCreateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[GardenService, Depends(get_garden_service)],
) -> GardenResponse:
    """Register a garden owned by the caller."""
    result = await service.create_garden(
        owner_id=user_id,
        name=body.name,
        total_land=body.total_land,
        description=body.description,
        address=body.address,
        latitude=body.latitude,
        longitude=body.longitude,
        type=body.type,
    )
    raise_for_result(result)
    return garden_to_response(result.garden)


@router.get(
    "/{garden_id}",
    response_model=GardenResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get garden",
)
async def get_garden(
    garden_id: str,
    service: Annotated[GardenService, Depends(get_garden_service)],
) -> GardenResponse:
    """Get a garden and its current land totals."""
    result = await service.get_garden(garden_id)
    raise_for_result(result)
    return garden_to_response(result.garden)


@router.post(
    "/{garden_id}/requests",
    response_model=LandRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Request land",
    description=(
        "Ask for land in a garden. Refused when the caller already has an "
        "overlapping request there or the garden lacks the land."
    ),
)
async def create_land_request(
    garden_id: str,
    body: LandRequestCreateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[LandRequestService, Depends(get_land_request_service)],
) -> LandRequestResponse:
    """Create a pending land request for the caller.

    Raises:
        HTTPException: 400 on invalid dates or land, 404 for an unknown
            garden, 409 on overlap or insufficient land.
    """
    result = await service.create_land_request(
        garden_id=garden_id,
        requester_id=user_id,
        requested_land=body.requested_land,
        start_date=body.start_date,
        end_date=body.end_date,
        contact_info=body.contact_info,
        message=body.message,
    )
    raise_for_result(result)
    return request_to_response(result.request, result.garden)
