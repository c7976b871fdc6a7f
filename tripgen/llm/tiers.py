"""Tier profiles - model pair and feature flags, selected once per request."""

from dataclasses import dataclass

from tripgen.config import Settings
from tripgen.models.common import Tier


@dataclass(frozen=True)
class TierProfile:
    """What a subscription tier unlocks."""

    tier: Tier
    primary_model: str
    fallback_model: str
    web_search: bool
    rich_activities: bool
    max_days: int | None
    free_export: bool


def profile_for(tier: Tier, settings: Settings) -> TierProfile:
    """Look up the profile for a tier."""
    if tier in (Tier.PASS, Tier.YEARLY):
        return TierProfile(
            tier=tier,
            primary_model=settings.premium_primary_model,
            fallback_model=settings.premium_fallback_model,
            web_search=True,
            rich_activities=True,
            max_days=None,
            free_export=True,
        )
    return TierProfile(
        tier=tier,
        primary_model=settings.standard_primary_model,
        fallback_model=settings.standard_fallback_model,
        web_search=False,
        rich_activities=False,
        max_days=settings.trial_max_days if tier == Tier.TRIAL else None,
        free_export=False,
    )
