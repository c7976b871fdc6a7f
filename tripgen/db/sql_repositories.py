"""SQL implementations of repository interfaces."""

import logging
import uuid
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tripgen.db.models import Account, Itinerary, ProcessedEvent
from tripgen.db.queries import select_owned_itineraries, select_owned_itinerary
from tripgen.db.repositories import AccountRecord, ItineraryRecord, NewItinerary
from tripgen.models.common import Tier

logger = logging.getLogger(__name__)


def _account_record(row: Account) -> AccountRecord:
    return AccountRecord(
        account_id=row.account_id,
        email=row.email,
        tier=Tier.parse(row.tier),
        credits=row.credits,
        updated_at=row.updated_at,
    )


def _itinerary_record(row: Itinerary) -> ItineraryRecord:
    return ItineraryRecord(
        itinerary_id=row.itinerary_id,
        account_id=row.account_id,
        parent_id=row.parent_id,
        title=row.title,
        destination=row.destination,
        start_date=row.start_date,
        end_date=row.end_date,
        data=row.data,
        preferences=row.preferences or {},
        created_at=row.created_at,
    )


class SqlAccountRepository:
    """SQL implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _execute_write(self, statement: Any) -> int:
        """Execute an UPDATE and commit, rolling back on failure.

        Returns:
            Number of rows matched
        """
        try:
            result = await self._session.execute(
                statement.execution_options(synchronize_session=False)
            )
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return result.rowcount

    async def get_account(self, account_id: uuid.UUID) -> AccountRecord | None:
        """Get account by ID."""
        result = await self._session.execute(
            select(Account)
            .where(Account.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return _account_record(row)

    async def create_account(
        self, account_id: uuid.UUID, *, email: str | None, tier: Tier, credits: int
    ) -> AccountRecord:
        """Create a new account."""
        row = Account(account_id=account_id, email=email, tier=tier.value, credits=credits)
        self._session.add(row)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        await self._session.refresh(row)
        return _account_record(row)

    async def deduct_credit(self, account_id: uuid.UUID) -> bool:
        """Conditionally decrement credits in a single UPDATE."""
        rowcount = await self._execute_write(
            update(Account)
            .where(Account.account_id == account_id)
            .where(Account.credits > 0)
            .values(credits=Account.credits - 1)
        )
        return rowcount == 1

    async def grant_plan(
        self, account_id: uuid.UUID, *, tier: Tier, credits: int, event_id: str | None = None
    ) -> bool:
        """Set tier and add credits.

        The processed_event insert and the credit update commit together; a
        duplicate event id fails the insert and leaves the balance untouched.
        """
        try:
            if event_id is not None:
                await self._session.execute(
                    insert(ProcessedEvent).values(event_id=event_id, account_id=account_id)
                )
            result = await self._session.execute(
                update(Account)
                .where(Account.account_id == account_id)
                .values(tier=tier.value, credits=Account.credits + credits)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await self._session.rollback()
                return False
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            logger.info(f"Payment event {event_id} not applied: duplicate or unknown account")
            return False
        except Exception:
            await self._session.rollback()
            raise
        return True


class SqlItineraryRepository:
    """SQL implementation of ItineraryRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_itinerary(self, itinerary: NewItinerary) -> uuid.UUID:
        """Insert a new itinerary row."""
        itinerary_id = uuid.uuid4()
        row = Itinerary(
            itinerary_id=itinerary_id,
            account_id=itinerary.account_id,
            parent_id=itinerary.parent_id,
            title=itinerary.title,
            destination=itinerary.destination,
            start_date=itinerary.start_date,
            end_date=itinerary.end_date,
            data=itinerary.data,
            preferences=itinerary.preferences,
        )
        self._session.add(row)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return itinerary_id

    async def get_itinerary(
        self, itinerary_id: uuid.UUID, account_id: uuid.UUID
    ) -> ItineraryRecord | None:
        """Get itinerary by ID with owner scoping."""
        result = await self._session.execute(select_owned_itinerary(itinerary_id, account_id))
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return _itinerary_record(row)

    async def list_itineraries(self, account_id: uuid.UUID) -> list[ItineraryRecord]:
        """List owned itineraries, newest first."""
        result = await self._session.execute(
            select_owned_itineraries(account_id).order_by(Itinerary.created_at.desc())
        )
        return [_itinerary_record(row) for row in result.scalars().all()]
