"""Tests for plans, checkout sessions and webhook fulfillment."""

import hashlib
import hmac
import json
import time
import uuid
from types import SimpleNamespace
from typing import Any
from unittest.mock import patch

import pytest

from tripgen.config import Settings
from tripgen.db.inmemory import InMemoryAccountRepository
from tripgen.models.common import Tier
from tripgen.services.billing import (
    PLANS,
    BillingNotConfiguredError,
    InvalidWebhookError,
    apply_checkout_completed,
    create_checkout_session,
    plan_for,
    verify_webhook,
)

WEBHOOK_SECRET = "whsec_test"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        site_url="https://trips.example.com/",
    )


def sign(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Build a Stripe-Signature header for a payload."""
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def checkout_event(account_id: Any, plan: str | None = "PASS") -> dict[str, Any]:
    session: dict[str, Any] = {"id": "cs_test_1", "object": "checkout.session"}
    if account_id is not None:
        session["client_reference_id"] = str(account_id)
    if plan is not None:
        session["metadata"] = {"plan": plan}
    return {
        "id": f"evt_{uuid.uuid4().hex}",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": session},
    }


def test_plan_table() -> None:
    assert PLANS[Tier.PASS].credits == 50
    assert PLANS[Tier.YEARLY].credits == 600
    assert PLANS[Tier.TOPUP].credits == 10
    assert PLANS[Tier.TOPUP].mode == "payment"
    assert PLANS[Tier.PASS].mode == "subscription"
    assert plan_for("yearly") is PLANS[Tier.YEARLY]
    assert plan_for("TRIAL") is None
    assert plan_for("gold") is None
    assert plan_for(None) is None


def test_checkout_session_parameters(settings: Settings) -> None:
    account_id = uuid.uuid4()
    fake_session = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_1")

    with patch("stripe.checkout.Session.create", return_value=fake_session) as create:
        url = create_checkout_session(PLANS[Tier.TOPUP], account_id, "a@example.com", settings)

    assert url == fake_session.url
    kwargs = create.call_args.kwargs
    assert kwargs["api_key"] == "sk_test_123"
    assert kwargs["mode"] == "payment"
    assert kwargs["line_items"] == [{"price": settings.stripe_price_topup, "quantity": 1}]
    assert kwargs["success_url"] == (
        "https://trips.example.com/workspace?session_id={CHECKOUT_SESSION_ID}"
    )
    assert kwargs["cancel_url"] == "https://trips.example.com/pricing"
    assert kwargs["client_reference_id"] == str(account_id)
    assert kwargs["metadata"] == {"plan": "TOPUP"}
    assert kwargs["customer_email"] == "a@example.com"


def test_checkout_without_secret_key_is_not_configured() -> None:
    settings = Settings(_env_file=None, stripe_secret_key=None)

    with pytest.raises(BillingNotConfiguredError):
        create_checkout_session(PLANS[Tier.PASS], uuid.uuid4(), None, settings)


def test_verify_webhook_accepts_valid_signature(settings: Settings) -> None:
    payload = json.dumps(checkout_event(uuid.uuid4())).encode()

    event = verify_webhook(payload, sign(payload), settings)

    assert event["type"] == "checkout.session.completed"


@pytest.mark.parametrize("signature", ["", "t=1,v1=deadbeef", "garbage"])
def test_verify_webhook_rejects_bad_signature(settings: Settings, signature: str) -> None:
    payload = json.dumps(checkout_event(uuid.uuid4())).encode()

    with pytest.raises(InvalidWebhookError):
        verify_webhook(payload, signature, settings)


def test_verify_webhook_rejects_other_secret(settings: Settings) -> None:
    payload = json.dumps(checkout_event(uuid.uuid4())).encode()

    with pytest.raises(InvalidWebhookError):
        verify_webhook(payload, sign(payload, secret="whsec_other"), settings)


def test_verify_webhook_without_secret_rejects() -> None:
    payload = b"{}"

    with pytest.raises(InvalidWebhookError):
        verify_webhook(payload, sign(payload), Settings(_env_file=None, stripe_webhook_secret=None))


@pytest.mark.asyncio
async def test_completed_checkout_grants_plan() -> None:
    accounts = InMemoryAccountRepository()
    account_id = uuid.uuid4()
    await accounts.create_account(account_id, email=None, tier=Tier.TRIAL, credits=1)

    assert await apply_checkout_completed(checkout_event(account_id, "YEARLY"), accounts)

    account = await accounts.get_account(account_id)
    assert account is not None
    assert account.tier == Tier.YEARLY
    assert account.credits == 601


@pytest.mark.asyncio
async def test_missing_plan_defaults_to_pass() -> None:
    accounts = InMemoryAccountRepository()
    account_id = uuid.uuid4()
    await accounts.create_account(account_id, email=None, tier=Tier.TRIAL, credits=0)

    await apply_checkout_completed(checkout_event(account_id, plan=None), accounts)

    account = await accounts.get_account(account_id)
    assert account is not None
    assert (account.tier, account.credits) == (Tier.PASS, 50)


@pytest.mark.asyncio
async def test_topup_keeps_member_tier() -> None:
    accounts = InMemoryAccountRepository()
    member = uuid.uuid4()
    trial = uuid.uuid4()
    await accounts.create_account(member, email=None, tier=Tier.PASS, credits=5)
    await accounts.create_account(trial, email=None, tier=Tier.TRIAL, credits=0)

    await apply_checkout_completed(checkout_event(member, "TOPUP"), accounts)
    await apply_checkout_completed(checkout_event(trial, "TOPUP"), accounts)

    member_account = await accounts.get_account(member)
    trial_account = await accounts.get_account(trial)
    assert member_account is not None and trial_account is not None
    assert (member_account.tier, member_account.credits) == (Tier.PASS, 15)
    assert (trial_account.tier, trial_account.credits) == (Tier.TOPUP, 10)


@pytest.mark.asyncio
@pytest.mark.parametrize("account_id", [None, "not-a-uuid"])
async def test_checkout_without_usable_account_is_ignored(account_id: Any) -> None:
    accounts = InMemoryAccountRepository()

    assert await apply_checkout_completed(checkout_event(account_id), accounts) is False


@pytest.mark.asyncio
async def test_checkout_for_unknown_account_is_ignored() -> None:
    assert (
        await apply_checkout_completed(checkout_event(uuid.uuid4()), InMemoryAccountRepository())
        is False
    )


@pytest.mark.asyncio
async def test_redelivered_event_grants_once() -> None:
    accounts = InMemoryAccountRepository()
    account_id = uuid.uuid4()
    await accounts.create_account(account_id, email=None, tier=Tier.TRIAL, credits=0)
    event = checkout_event(account_id, "PASS")

    assert await apply_checkout_completed(event, accounts) is True
    assert await apply_checkout_completed(event, accounts) is False

    account = await accounts.get_account(account_id)
    assert account is not None
    assert (account.tier, account.credits) == (Tier.PASS, 50)


@pytest.mark.asyncio
async def test_distinct_events_for_same_account_both_grant() -> None:
    accounts = InMemoryAccountRepository()
    account_id = uuid.uuid4()
    await accounts.create_account(account_id, email=None, tier=Tier.PASS, credits=0)

    await apply_checkout_completed(checkout_event(account_id, "TOPUP"), accounts)
    await apply_checkout_completed(checkout_event(account_id, "TOPUP"), accounts)

    account = await accounts.get_account(account_id)
    assert account is not None
    assert account.credits == 20
