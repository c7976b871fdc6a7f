"""Entitlement resolver, settler and export gate.

The credit check and the decrement are separate operations. The decrement
itself is a conditional single-statement UPDATE, so a balance never goes
below zero even when two requests pass the check together.
"""

import logging
import uuid
from dataclasses import dataclass

from tripgen.db.context import AuthContext
from tripgen.db.repositories import AccountRecord, AccountRepository, ItineraryRepository, NewItinerary
from tripgen.errors import InsufficientCreditsError, TripTooLongError
from tripgen.llm.tiers import TierProfile
from tripgen.models.common import Tier
from tripgen.models.trip import DateRange
from tripgen.utils.logging import StageContext, StructuredStageLogger
from tripgen.utils.metrics import metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entitlement:
    """Caller's tier and remaining credits as seen at request start."""

    account_id: uuid.UUID | None
    tier: Tier
    credits: int

    @classmethod
    def anonymous(cls) -> "Entitlement":
        return cls(account_id=None, tier=Tier.TRIAL, credits=0)

    @classmethod
    def from_account(cls, account: AccountRecord) -> "Entitlement":
        return cls(account_id=account.account_id, tier=account.tier, credits=account.credits)


async def resolve_entitlement(ctx: AuthContext, accounts: AccountRepository) -> Entitlement:
    """Look up tier and credits for the caller.

    Never raises: anonymous callers, unknown accounts and lookup failures all
    resolve to TRIAL with zero credits.
    """
    if ctx.account_id is None:
        return Entitlement.anonymous()

    try:
        account = await accounts.get_account(ctx.account_id)
    except Exception:
        logger.exception(f"Account lookup failed for {ctx.account_id}")
        return Entitlement(account_id=ctx.account_id, tier=Tier.TRIAL, credits=0)

    if account is None:
        logger.warning(f"Account not found for ID: {ctx.account_id}")
        return Entitlement(account_id=ctx.account_id, tier=Tier.TRIAL, credits=0)

    return Entitlement.from_account(account)


def check_credits(entitlement: Entitlement, action: str) -> None:
    """Block the action when no credits remain.

    Raises:
        InsufficientCreditsError: If credits <= 0
    """
    if entitlement.credits <= 0:
        raise InsufficientCreditsError(
            f"You do not have enough credits to {action}. Please top up your account."
        )


def check_trip_length(dates: DateRange, profile: TierProfile) -> None:
    """Enforce the tier's day cap (inclusive day count).

    Raises:
        TripTooLongError: If the trip is longer than the tier allows
    """
    if profile.max_days is not None and dates.day_count > profile.max_days:
        raise TripTooLongError(
            f"Free trial users are limited to generating itineraries up to "
            f"{profile.max_days} days. Please upgrade your plan for longer trips."
        )


class EntitlementSettler:
    """Deducts one credit and stores the itinerary as two independent writes."""

    def __init__(
        self,
        accounts: AccountRepository,
        itineraries: ItineraryRepository,
        stage_logger: StructuredStageLogger | None = None,
    ) -> None:
        self._accounts = accounts
        self._itineraries = itineraries
        self._stage_logger = stage_logger or StructuredStageLogger()

    async def settle(
        self, entitlement: Entitlement, itinerary: NewItinerary, ctx: StageContext
    ) -> uuid.UUID | None:
        """Deduct a credit and insert the itinerary.

        A failed insert does not undo the deduction, and a failed deduction
        does not block the insert.

        Returns:
            The new itinerary id, or None if the insert failed
        """
        if entitlement.account_id is None:
            self._stage_logger.log_stage(ctx, "settle", "skipped")
            return None

        try:
            if await self._accounts.deduct_credit(entitlement.account_id):
                metrics.inc_credit_deducted(ctx.action)
            else:
                logger.error(f"Failed to deduct credits for {entitlement.account_id}: no row updated")
                metrics.inc_persistence_failure("deduct_credit")
        except Exception:
            logger.exception(f"Failed to deduct credits for {entitlement.account_id}")
            metrics.inc_persistence_failure("deduct_credit")

        try:
            itinerary_id = await self._itineraries.insert_itinerary(itinerary)
        except Exception:
            logger.exception("Failed to save itinerary to database")
            metrics.inc_persistence_failure("insert_itinerary")
            self._stage_logger.log_stage(ctx, "settle", "error", error_reason="insert failed")
            return None

        self._stage_logger.log_stage(ctx, "settle", "success", itinerary_id=str(itinerary_id))
        return itinerary_id


@dataclass(frozen=True)
class ExportDecision:
    """Outcome of the export gate."""

    charged: bool
    message: str


async def authorize_export(
    entitlement: Entitlement, profile: TierProfile, accounts: AccountRepository
) -> ExportDecision:
    """Gate an image export: members export free, others pay one credit.

    Raises:
        InsufficientCreditsError: If a paying tier has no credits left
    """
    if profile.free_export:
        return ExportDecision(charged=False, message="Free export for members.")

    if entitlement.credits < 1 or entitlement.account_id is None:
        raise InsufficientCreditsError("Insufficient credits to export.")

    if not await accounts.deduct_credit(entitlement.account_id):
        raise InsufficientCreditsError("Insufficient credits to export.")

    metrics.inc_credit_deducted("export")
    return ExportDecision(charged=True, message="1 credit deducted.")
