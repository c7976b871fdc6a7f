"""Purchasable plans, Stripe Checkout sessions and webhook fulfillment."""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any

import stripe

from tripgen.config import Settings
from tripgen.db.repositories import AccountRepository
from tripgen.models.common import Tier

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


@dataclass(frozen=True)
class Plan:
    """A purchasable plan and what it grants."""

    tier: Tier
    credits: int
    mode: str  # Stripe Checkout mode
    price_setting: str  # Settings attribute holding the Stripe price id


PLANS: dict[Tier, Plan] = {
    Tier.PASS: Plan(Tier.PASS, 50, "subscription", "stripe_price_pass"),
    Tier.YEARLY: Plan(Tier.YEARLY, 600, "subscription", "stripe_price_yearly"),
    Tier.TOPUP: Plan(Tier.TOPUP, 10, "payment", "stripe_price_topup"),
}


class BillingNotConfiguredError(Exception):
    """Stripe keys or price ids are missing."""


class InvalidWebhookError(Exception):
    """Webhook payload failed signature verification."""


def plan_for(name: str | None) -> Plan | None:
    """Look up a plan by tier name (case-insensitive)."""
    if not name:
        return None
    try:
        return PLANS.get(Tier(name.upper()))
    except ValueError:
        return None


def create_checkout_session(
    plan: Plan, account_id: uuid.UUID, email: str | None, settings: Settings
) -> str:
    """Create a Stripe Checkout session for a plan.

    Returns:
        The hosted checkout URL

    Raises:
        BillingNotConfiguredError: If the secret key or the plan's price id is missing
        stripe.StripeError: If Stripe rejects the request
    """
    price_id = getattr(settings, plan.price_setting)
    if settings.stripe_secret_key is None or not price_id:
        raise BillingNotConfiguredError(f"Checkout is not configured for {plan.tier.value}")

    site_url = settings.site_url.rstrip("/")
    params: dict[str, Any] = {
        "payment_method_types": ["card"],
        "mode": plan.mode,
        "line_items": [{"price": price_id, "quantity": 1}],
        "success_url": f"{site_url}/workspace?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{site_url}/pricing",
        "client_reference_id": str(account_id),
        "metadata": {"plan": plan.tier.value},
    }
    if email:
        params["customer_email"] = email

    session = stripe.checkout.Session.create(
        api_key=settings.stripe_secret_key.get_secret_value(), **params
    )
    logger.info(f"Created checkout session {session.id} for {account_id} ({plan.tier.value})")
    return str(session.url)


def verify_webhook(payload: bytes, signature: str, settings: Settings) -> dict[str, Any]:
    """Verify a webhook signature and return the decoded event.

    Raises:
        InvalidWebhookError: If the secret is unset or the signature does not match
    """
    if settings.stripe_webhook_secret is None:
        raise InvalidWebhookError("Webhook secret is not configured")

    try:
        stripe.Webhook.construct_event(
            payload, signature, settings.stripe_webhook_secret.get_secret_value()
        )
    except (ValueError, stripe.SignatureVerificationError) as e:
        raise InvalidWebhookError(str(e)) from e

    event: dict[str, Any] = json.loads(payload)
    return event


async def apply_checkout_completed(
    event: dict[str, Any], accounts: AccountRepository
) -> bool:
    """Grant the purchased plan for a completed checkout.

    Returns:
        True if an account was updated
    """
    session = event.get("data", {}).get("object", {})
    account_id = session.get("client_reference_id")
    if not account_id:
        logger.warning(f"Checkout session {session.get('id')} has no client_reference_id")
        return False

    try:
        account_uuid = uuid.UUID(str(account_id))
    except ValueError:
        logger.warning(f"Checkout session names an invalid account id: {account_id}")
        return False

    plan = plan_for((session.get("metadata") or {}).get("plan")) or PLANS[Tier.PASS]

    tier = plan.tier
    if plan.tier == Tier.TOPUP:
        account = await accounts.get_account(account_uuid)
        if account is not None and account.tier != Tier.TRIAL:
            tier = account.tier

    # At most one grant per event id
    event_id = event.get("id") or session.get("id")
    granted = await accounts.grant_plan(
        account_uuid, tier=tier, credits=plan.credits, event_id=event_id
    )
    if granted:
        logger.info(f"Granted {plan.tier.value} (+{plan.credits} credits) to {account_uuid}")
    else:
        logger.warning(f"Checkout {event_id} not applied: unknown account or already processed")
    return granted
