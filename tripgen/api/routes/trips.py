"""Trip endpoints - POST /generate-trip and POST /update-trip."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tripgen.api.auth import get_optional_account
from tripgen.api.dependencies import get_pipeline
from tripgen.db.context import AuthContext
from tripgen.errors import EntitlementError, GenerationFailedError
from tripgen.models.trip import GenerateTripRequest, TripResponse, UpdateTripRequest
from tripgen.services.pipeline import TripPipeline

router = APIRouter(tags=["trips"])
logger = logging.getLogger(__name__)


def _to_http_error(error: EntitlementError | GenerationFailedError) -> HTTPException:
    if isinstance(error, EntitlementError):
        return HTTPException(status_code=error.status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


@router.post("/generate-trip", response_model=TripResponse)
async def generate_trip(
    request: GenerateTripRequest,
    ctx: Annotated[AuthContext, Depends(get_optional_account)],
    pipeline: Annotated[TripPipeline, Depends(get_pipeline)],
) -> TripResponse:
    """Generate a new itinerary.

    Returns:
        The itinerary and, if it was stored, its id

    Raises:
        HTTPException: 402 no credits, 403 trip too long, 500 generation failed
    """
    try:
        return await pipeline.generate(request, ctx)
    except (EntitlementError, GenerationFailedError) as e:
        if isinstance(e, GenerationFailedError):
            logger.error(f"Trip generation error: {e}")
        raise _to_http_error(e) from e


@router.post("/update-trip", response_model=TripResponse)
async def update_trip(
    request: UpdateTripRequest,
    ctx: Annotated[AuthContext, Depends(get_optional_account)],
    pipeline: Annotated[TripPipeline, Depends(get_pipeline)],
) -> TripResponse:
    """Revise an existing itinerary from a free-text request.

    Returns:
        The revised itinerary and the new revision's id (or the original id
        if the revision was not stored)

    Raises:
        HTTPException: 402 no credits, 500 generation failed
    """
    try:
        return await pipeline.update(request, ctx)
    except (EntitlementError, GenerationFailedError) as e:
        if isinstance(e, GenerationFailedError):
            logger.error(f"Trip update error: {e}")
        raise _to_http_error(e) from e
