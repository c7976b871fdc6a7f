"""Itinerary history - GET /itineraries and GET /itineraries?id=..."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tripgen.api.auth import require_account
from tripgen.api.dependencies import get_itinerary_repository
from tripgen.db.repositories import ItineraryRecord, ItineraryRepository
from tripgen.models.itinerary import ItineraryDetail, ItinerarySummary

router = APIRouter(tags=["itineraries"])


def _summary(record: ItineraryRecord) -> ItinerarySummary:
    return ItinerarySummary(
        id=str(record.itinerary_id),
        title=record.title,
        destination=record.destination,
        start_date=record.start_date,
        end_date=record.end_date,
        created_at=record.created_at,
        parent_id=str(record.parent_id) if record.parent_id else None,
    )


def _detail(record: ItineraryRecord) -> ItineraryDetail:
    return ItineraryDetail(
        **_summary(record).model_dump(),
        itinerary_data=record.data,
        preferences=record.preferences,
    )


@router.get("/itineraries", response_model=None)
async def get_itineraries(
    account_id: Annotated[uuid.UUID, Depends(require_account)],
    itineraries: Annotated[ItineraryRepository, Depends(get_itinerary_repository)],
    itinerary_id: Annotated[
        str | None, Query(alias="id", description="Fetch one itinerary")
    ] = None,
) -> list[ItinerarySummary] | ItineraryDetail:
    """List the caller's itineraries newest first, or fetch one by id.

    Raises:
        HTTPException: 401 anonymous, 404 unknown or not owned
    """
    if itinerary_id is None:
        records = await itineraries.list_itineraries(account_id)
        return [_summary(record) for record in records]

    try:
        wanted = uuid.UUID(itinerary_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Itinerary not found"
        ) from None

    # Not-owned and missing look the same to the caller
    record = await itineraries.get_itinerary(wanted, account_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Itinerary not found")
    return _detail(record)
