"""Repository protocol interfaces for data access."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol
from uuid import UUID

from tripgen.models.common import Tier


@dataclass
class AccountRecord:
    """Account data record."""

    account_id: UUID
    email: str | None
    tier: Tier
    credits: int
    updated_at: datetime | None = None


@dataclass
class NewItinerary:
    """Values for a new itinerary row."""

    account_id: UUID
    title: str
    destination: str
    start_date: date
    end_date: date
    data: dict[str, Any]
    preferences: dict[str, Any] = field(default_factory=dict)
    parent_id: UUID | None = None


@dataclass
class ItineraryRecord:
    """Stored itinerary row."""

    itinerary_id: UUID
    account_id: UUID
    parent_id: UUID | None
    title: str
    destination: str
    start_date: date
    end_date: date
    data: dict[str, Any]
    preferences: dict[str, Any]
    created_at: datetime


class AccountRepository(Protocol):
    """Repository for account tier and credit operations."""

    async def get_account(self, account_id: UUID) -> AccountRecord | None:
        """Get account by ID.

        Returns:
            Account record or None if not found
        """
        ...

    async def create_account(
        self, account_id: UUID, *, email: str | None, tier: Tier, credits: int
    ) -> AccountRecord:
        """Create a new account with a starting credit grant.

        Accounts are provisioned by the external auth provider at signup; the
        service itself only calls this from the dev seed and tests.
        """
        ...

    async def deduct_credit(self, account_id: UUID) -> bool:
        """Decrement credits by one if the balance is positive.

        Returns:
            True if a credit was deducted
        """
        ...

    async def grant_plan(
        self, account_id: UUID, *, tier: Tier, credits: int, event_id: str | None = None
    ) -> bool:
        """Set tier and add credits.

        When event_id is given the grant is applied at most once per event id,
        so redelivered payment events do not add credits again.

        Returns:
            True if the account exists and was updated, False if it is unknown
            or the event was already applied
        """
        ...


class ItineraryRepository(Protocol):
    """Repository for itinerary operations.

    Reads are always scoped to the owning account.
    """

    async def insert_itinerary(self, itinerary: NewItinerary) -> UUID:
        """Insert a new itinerary row.

        Returns:
            Itinerary ID
        """
        ...

    async def get_itinerary(self, itinerary_id: UUID, account_id: UUID) -> ItineraryRecord | None:
        """Get itinerary by ID if owned by account_id."""
        ...

    async def list_itineraries(self, account_id: UUID) -> list[ItineraryRecord]:
        """List itineraries owned by account_id, newest first."""
        ...
