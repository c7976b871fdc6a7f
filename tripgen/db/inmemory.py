"""In-memory implementations of repository interfaces."""

import uuid
from dataclasses import replace
from datetime import UTC, datetime

from tripgen.db.repositories import AccountRecord, ItineraryRecord, NewItinerary
from tripgen.models.common import Tier


class InMemoryAccountRepository:
    """In-memory implementation of AccountRepository."""

    def __init__(self) -> None:
        self._accounts: dict[uuid.UUID, AccountRecord] = {}
        self._processed_events: set[str] = set()

    async def get_account(self, account_id: uuid.UUID) -> AccountRecord | None:
        """Get account by ID."""
        record = self._accounts.get(account_id)
        return replace(record) if record else None

    async def create_account(
        self, account_id: uuid.UUID, *, email: str | None, tier: Tier, credits: int
    ) -> AccountRecord:
        """Create a new account."""
        record = AccountRecord(
            account_id=account_id,
            email=email,
            tier=tier,
            credits=credits,
            updated_at=datetime.now(UTC),
        )
        self._accounts[account_id] = record
        return replace(record)

    async def deduct_credit(self, account_id: uuid.UUID) -> bool:
        """Decrement credits if positive."""
        record = self._accounts.get(account_id)
        if record is None or record.credits <= 0:
            return False
        record.credits -= 1
        record.updated_at = datetime.now(UTC)
        return True

    async def grant_plan(
        self, account_id: uuid.UUID, *, tier: Tier, credits: int, event_id: str | None = None
    ) -> bool:
        """Set tier and add credits, once per event id."""
        record = self._accounts.get(account_id)
        if record is None or event_id in self._processed_events:
            return False
        if event_id is not None:
            self._processed_events.add(event_id)
        record.tier = tier
        record.credits += credits
        record.updated_at = datetime.now(UTC)
        return True


class InMemoryItineraryRepository:
    """In-memory implementation of ItineraryRepository."""

    def __init__(self) -> None:
        self._itineraries: dict[uuid.UUID, ItineraryRecord] = {}

    async def insert_itinerary(self, itinerary: NewItinerary) -> uuid.UUID:
        """Insert a new itinerary row."""
        itinerary_id = uuid.uuid4()
        self._itineraries[itinerary_id] = ItineraryRecord(
            itinerary_id=itinerary_id,
            account_id=itinerary.account_id,
            parent_id=itinerary.parent_id,
            title=itinerary.title,
            destination=itinerary.destination,
            start_date=itinerary.start_date,
            end_date=itinerary.end_date,
            data=itinerary.data,
            preferences=itinerary.preferences,
            created_at=datetime.now(UTC),
        )
        return itinerary_id

    async def get_itinerary(
        self, itinerary_id: uuid.UUID, account_id: uuid.UUID
    ) -> ItineraryRecord | None:
        """Get itinerary by ID with owner scoping."""
        record = self._itineraries.get(itinerary_id)

        # Enforce ownership
        if record is None or record.account_id != account_id:
            return None

        return record

    async def list_itineraries(self, account_id: uuid.UUID) -> list[ItineraryRecord]:
        """List owned itineraries, newest first."""
        owned = [r for r in self._itineraries.values() if r.account_id == account_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    def count(self) -> int:
        """Total number of stored rows (test helper)."""
        return len(self._itineraries)
