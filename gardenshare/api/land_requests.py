"""Land request API endpoints.

Provides:
- GET /requests/{id} - request details (requester or garden owner)
- PATCH /requests/{id} - owner decision
- POST /requests/{id}/extension - requester asks for a later end date
- PATCH /requests/{id}/extension - owner decision on the extension
- GET /users/me/allocations - the caller's current allocations
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from gardenshare.api.dependencies import (
    get_current_user_id,
    get_land_request_service,
    raise_for_result,
)
from gardenshare.api.schemas import (
    AllocationSchema,
    AllocationsListResponse,
    DecisionRequest,
    DecisionResponse,
    ErrorResponse,
    ExtensionCreateRequest,
    LandRequestResponse,
    LandRequestStatusEnum,
)
from gardenshare.application.land_request_service import LandRequestService
from gardenshare.domain.entities import Garden, LandRequest

router = APIRouter(prefix="/requests", tags=["Land Requests"])
allocations_router = APIRouter(prefix="/users/me", tags=["Land Requests"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ============================================================================
# Converters
# ============================================================================


def request_to_response(request: LandRequest, garden: Garden | None = None) -> LandRequestResponse:
    """Convert LandRequest to LandRequestResponse."""
    return LandRequestResponse(**_request_fields(request, garden))


def _request_fields(request: LandRequest, garden: Garden | None) -> dict:
    return {
        "id": request.id,
        "garden_id": request.garden_id,
        "garden_name": garden.name if garden else None,
        "requester_id": request.requester_id,
        "requested_land": request.requested_land,
        "start_date": request.start_date,
        "end_date": request.end_date,
        "status": LandRequestStatusEnum(request.status.value),
        "message": request.message,
        "contact_info": request.contact_info,
        "previous_end_date": request.previous_end_date,
        "proposed_end_date": request.proposed_end_date,
        "extension_message": request.extension_message,
        "decided_at": request.decided_at,
        "created_at": request.created_at,
        "updated_at": request.updated_at,
    }


def allocation_to_schema(request: LandRequest, garden: Garden | None) -> AllocationSchema:
    return AllocationSchema(
        request_id=request.id,
        garden_id=request.garden_id,
        garden_name=garden.name if garden else None,
        requested_land=request.requested_land,
        start_date=request.start_date,
        end_date=request.displayed_end_date,
        status=LandRequestStatusEnum(request.status.value),
        proposed_end_date=request.proposed_end_date,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/{request_id}",
    response_model=LandRequestResponse,
    responses=_ERROR_RESPONSES,
    summary="Get land request",
)
async def get_land_request(
    request_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[LandRequestService, Depends(get_land_request_service)],
) -> LandRequestResponse:
    """Get a land request visible to the caller."""
    result = await service.get_land_request(request_id, user_id)
    raise_for_result(result)
    return request_to_response(result.request, result.garden)


@router.patch(
    "/{request_id}",
    response_model=DecisionResponse,
    responses=_ERROR_RESPONSES,
    summary="Decide land request",
    description=(
        "Garden owner approves or rejects a pending request. Approval "
        "reserves the land and activates the request when today is within "
        "its dates."
    ),
)
async def decide_land_request(
    request_id: str,
    body: DecisionRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[LandRequestService, Depends(get_land_request_service)],
) -> DecisionResponse:
    """Approve or reject a pending land request.

    Raises:
        HTTPException: 403 if the caller does not own the garden, 409 when
            the request is no longer pending or the land ran out.
    """
    result = await service.decide_land_request(request_id, user_id, body.status)
    raise_for_result(result)
    return DecisionResponse(
        **_request_fields(result.request, result.garden),
        allocated_land=result.garden.allocated_land if result.garden else None,
        superseded=result.superseded,
    )


@router.post(
    "/{request_id}/extension",
    response_model=LandRequestResponse,
    responses=_ERROR_RESPONSES,
    summary="Request extension",
)
async def request_extension(
    request_id: str,
    body: ExtensionCreateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[LandRequestService, Depends(get_land_request_service)],
) -> LandRequestResponse:
    """Ask the garden owner for a later end date."""
    result = await service.request_extension(
        request_id,
        requester_id=user_id,
        proposed_end_date=body.proposed_end_date,
        message=body.message,
    )
    raise_for_result(result)
    return request_to_response(result.request, result.garden)


@router.patch(
    "/{request_id}/extension",
    response_model=LandRequestResponse,
    responses=_ERROR_RESPONSES,
    summary="Decide extension",
)
async def decide_extension(
    request_id: str,
    body: DecisionRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[LandRequestService, Depends(get_land_request_service)],
) -> LandRequestResponse:
    """Approve or reject a pending extension."""
    result = await service.decide_extension(request_id, user_id, body.status)
    raise_for_result(result)
    return request_to_response(result.request, result.garden)


@allocations_router.get(
    "/allocations",
    response_model=AllocationsListResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="List my allocations",
)
async def list_allocations(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[LandRequestService, Depends(get_land_request_service)],
) -> AllocationsListResponse:
    """List the caller's pending, approved, active and extending requests."""
    result = await service.list_allocations(user_id)
    raise_for_result(result)
    items = [
        allocation_to_schema(allocation, result.gardens.get(allocation.garden_id))
        for allocation in result.allocations
    ]
    return AllocationsListResponse(items=items, total=len(items))
