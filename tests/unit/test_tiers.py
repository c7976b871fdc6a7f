"""Tests for the tier table."""

import pytest

from tripgen.config import Settings
from tripgen.llm.tiers import profile_for
from tripgen.models.common import Tier


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


def test_trial_is_capped_at_five_days(settings: Settings) -> None:
    profile = profile_for(Tier.TRIAL, settings)

    assert profile.max_days == 5
    assert profile.primary_model == settings.standard_primary_model
    assert profile.fallback_model == settings.standard_fallback_model
    assert not profile.web_search
    assert not profile.free_export


def test_topup_has_no_day_cap_but_pays_for_export(settings: Settings) -> None:
    profile = profile_for(Tier.TOPUP, settings)

    assert profile.max_days is None
    assert not profile.web_search
    assert not profile.free_export


@pytest.mark.parametrize("tier", [Tier.PASS, Tier.YEARLY])
def test_members_get_premium_models(settings: Settings, tier: Tier) -> None:
    profile = profile_for(tier, settings)

    assert profile.primary_model == settings.premium_primary_model
    assert profile.fallback_model == settings.premium_fallback_model
    assert profile.web_search
    assert profile.rich_activities
    assert profile.free_export
    assert profile.max_days is None


@pytest.mark.parametrize("stored", ["", None, "ENTERPRISE", "free"])
def test_unknown_tier_strings_resolve_to_trial(stored: str | None) -> None:
    assert Tier.parse(stored) == Tier.TRIAL


def test_tier_parse_is_case_insensitive() -> None:
    assert Tier.parse("pass") == Tier.PASS
    assert Tier.parse(" yearly ") == Tier.YEARLY
