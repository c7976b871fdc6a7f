"""FastAPI dependencies wiring repositories and upstream clients.

Tests replace `get_quote_fetcher` and `get_invoker_factory` through
`app.dependency_overrides`.
"""

from functools import partial
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tripgen.config import Settings, get_settings
from tripgen.db.engine import get_session
from tripgen.db.repositories import AccountRepository, ItineraryRepository
from tripgen.db.sql_repositories import SqlAccountRepository, SqlItineraryRepository
from tripgen.llm.client import build_invoker
from tripgen.pricing.travelpayouts import fetch_quotes
from tripgen.services.pipeline import InvokerFactory, QuoteFetcher, TripPipeline


def get_account_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AccountRepository:
    return SqlAccountRepository(session)


def get_itinerary_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ItineraryRepository:
    return SqlItineraryRepository(session)


def get_quote_fetcher(settings: Annotated[Settings, Depends(get_settings)]) -> QuoteFetcher:
    """Live Travelpayouts lookups with a per-call HTTP client."""
    return partial(fetch_quotes, settings=settings)


def get_invoker_factory(settings: Annotated[Settings, Depends(get_settings)]) -> InvokerFactory:
    """Build an invoker for the tier's model pair."""
    return partial(build_invoker, settings=settings)


def get_pipeline(
    accounts: Annotated[AccountRepository, Depends(get_account_repository)],
    itineraries: Annotated[ItineraryRepository, Depends(get_itinerary_repository)],
    quote_fetcher: Annotated[QuoteFetcher, Depends(get_quote_fetcher)],
    invoker_factory: Annotated[InvokerFactory, Depends(get_invoker_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TripPipeline:
    return TripPipeline(accounts, itineraries, quote_fetcher, invoker_factory, settings)
