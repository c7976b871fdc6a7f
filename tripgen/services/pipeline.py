"""Generation and update pipelines.

Both run the same sequence: resolve entitlement, pick the tier profile, run
every gate before touching an upstream, compose the prompt, invoke the model
chain, then settle (deduct one credit and store the itinerary).
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any

from tripgen.config import Settings
from tripgen.db.context import AuthContext
from tripgen.db.repositories import AccountRepository, ItineraryRepository, NewItinerary
from tripgen.errors import EntitlementError
from tripgen.llm.client import GenerationInvoker
from tripgen.llm.normalizer import parse_itinerary
from tripgen.llm.prompts import compose_generation_prompt, compose_update_prompt
from tripgen.llm.tiers import TierProfile, profile_for
from tripgen.models.itinerary import ItineraryPayload
from tripgen.models.quotes import QuoteSet
from tripgen.models.trip import DateRange, GenerateTripRequest, TripResponse, UpdateTripRequest
from tripgen.services.entitlements import (
    Entitlement,
    EntitlementSettler,
    check_credits,
    check_trip_length,
    resolve_entitlement,
)
from tripgen.utils.logging import StageContext, StructuredStageLogger

logger = logging.getLogger(__name__)

QuoteFetcher = Callable[[str, str, DateRange], Awaitable[QuoteSet]]
InvokerFactory = Callable[[TierProfile], GenerationInvoker]


def _parse_uuid(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class TripPipeline:
    """Runs one generate or update request end to end."""

    def __init__(
        self,
        accounts: AccountRepository,
        itineraries: ItineraryRepository,
        quote_fetcher: QuoteFetcher,
        invoker_factory: InvokerFactory,
        settings: Settings,
        stage_logger: StructuredStageLogger | None = None,
    ) -> None:
        self._accounts = accounts
        self._itineraries = itineraries
        self._quote_fetcher = quote_fetcher
        self._invoker_factory = invoker_factory
        self._settings = settings
        self._stage_logger = stage_logger or StructuredStageLogger()
        self._settler = EntitlementSettler(accounts, itineraries, self._stage_logger)

    def _stage_context(self, auth: AuthContext, action: str) -> StageContext:
        return StageContext(
            request_id=str(uuid.uuid4()),
            account_id=str(auth.account_id) if auth.account_id else None,
            action=action,
        )

    async def _entitle(
        self, auth: AuthContext, ctx: StageContext, action_text: str, dates: DateRange | None
    ) -> tuple[Entitlement, TierProfile]:
        entitlement = await resolve_entitlement(auth, self._accounts)
        profile = profile_for(entitlement.tier, self._settings)
        try:
            check_credits(entitlement, action_text)
            if dates is not None:
                check_trip_length(dates, profile)
        except EntitlementError as e:
            self._stage_logger.log_stage(
                ctx, "entitlement", "rejected", error_reason=e.message, tier=entitlement.tier.value
            )
            raise
        self._stage_logger.log_stage(
            ctx,
            "entitlement",
            "success",
            tier=entitlement.tier.value,
            credits=entitlement.credits,
        )
        return entitlement, profile

    async def generate(self, request: GenerateTripRequest, auth: AuthContext) -> TripResponse:
        """Generate a new itinerary.

        Raises:
            InsufficientCreditsError: If the caller has no credits
            TripTooLongError: If the tier's day cap is exceeded
            GenerationFailedError: If both providers failed
        """
        ctx = self._stage_context(auth, "generate")
        entitlement, profile = await self._entitle(
            auth, ctx, "generate a trip", request.dates
        )

        quotes = await self._quote_fetcher(request.origin, request.destination, request.dates)
        self._stage_logger.log_stage(ctx, "quotes", "success", source=quotes.source.value)

        prompt = compose_generation_prompt(request, quotes, profile, self._settings)
        payload = await self._invoker_factory(profile).generate(prompt, ctx)
        itinerary = payload.to_wire()

        itinerary_id = None
        if entitlement.account_id is not None:
            itinerary_id = await self._settler.settle(
                entitlement,
                NewItinerary(
                    account_id=entitlement.account_id,
                    title=f"{payload.destination} Trip",
                    destination=payload.destination,
                    start_date=request.dates.start,
                    end_date=request.dates.end,
                    data=itinerary,
                    preferences=request.preferences.model_dump(mode="json"),
                ),
                ctx,
            )

        return TripResponse(
            itinerary=itinerary,
            itinerary_id=str(itinerary_id) if itinerary_id else None,
        )

    async def _owned_parent(
        self, itinerary_id: str | None, account_id: uuid.UUID
    ) -> uuid.UUID | None:
        """Return the parent id only if the caller owns that itinerary."""
        parent_id = _parse_uuid(itinerary_id)
        if parent_id is None:
            if itinerary_id:
                logger.warning(f"Ignoring malformed itinerary id: {itinerary_id}")
            return None
        try:
            parent = await self._itineraries.get_itinerary(parent_id, account_id)
        except Exception:
            logger.exception(f"Parent lookup failed for {parent_id}")
            return None
        if parent is None:
            logger.warning(f"Parent itinerary {parent_id} not found for {account_id}")
            return None
        return parent_id

    async def update(self, request: UpdateTripRequest, auth: AuthContext) -> TripResponse:
        """Revise an existing itinerary and store it as a child revision.

        Raises:
            InsufficientCreditsError: If the caller has no credits
            GenerationFailedError: If both providers failed
        """
        ctx = self._stage_context(auth, "update")
        entitlement, profile = await self._entitle(auth, ctx, "modify a trip", None)

        original: dict[str, Any] = request.current_itinerary
        prompt = compose_update_prompt(
            original, request.user_message, request.ui_language, request.currency, profile
        )

        def parse(text: str) -> ItineraryPayload:
            return parse_itinerary(text, carry_over=original)

        payload = await self._invoker_factory(profile).generate(prompt, ctx, parse=parse)
        itinerary = payload.to_wire()

        itinerary_id = None
        if entitlement.account_id is not None:
            first_day, last_day = payload.date_span()
            today = date.today()
            itinerary_id = await self._settler.settle(
                entitlement,
                NewItinerary(
                    account_id=entitlement.account_id,
                    parent_id=await self._owned_parent(
                        request.itinerary_id, entitlement.account_id
                    ),
                    title=f"{payload.destination or 'Updated'} Trip",
                    destination=payload.destination or "Unknown",
                    start_date=first_day or today,
                    end_date=last_day or first_day or today,
                    data=itinerary,
                    preferences={},
                ),
                ctx,
            )

        return TripResponse(
            itinerary=itinerary,
            itinerary_id=str(itinerary_id) if itinerary_id else request.itinerary_id,
        )
