"""Ownership-scoped query helpers."""

from uuid import UUID

from sqlalchemy import Select, select

from tripgen.db.models import Itinerary


def select_owned_itineraries(account_id: UUID) -> Select[tuple[Itinerary]]:
    """Select itineraries with owner scoping enforced.

    Args:
        account_id: Authenticated caller's account id

    Returns:
        Select filtered by account_id
    """
    return select(Itinerary).where(Itinerary.account_id == account_id)


def select_owned_itinerary(itinerary_id: UUID, account_id: UUID) -> Select[tuple[Itinerary]]:
    """Select one itinerary by id, only if the caller owns it."""
    return select_owned_itineraries(account_id).where(Itinerary.itinerary_id == itinerary_id)
