"""Billing endpoints - POST /checkout and POST /webhooks/stripe."""

import logging
import uuid
from typing import Annotated

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from tripgen.api.auth import require_account
from tripgen.api.dependencies import get_account_repository
from tripgen.config import Settings, get_settings
from tripgen.db.repositories import AccountRepository
from tripgen.services.billing import (
    CHECKOUT_COMPLETED,
    BillingNotConfiguredError,
    InvalidWebhookError,
    apply_checkout_completed,
    create_checkout_session,
    plan_for,
    verify_webhook,
)

router = APIRouter(tags=["billing"])
logger = logging.getLogger(__name__)


class CheckoutRequest(BaseModel):
    """Request body for POST /checkout."""

    plan: str


class CheckoutResponse(BaseModel):
    """Response for POST /checkout."""

    url: str


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    body: CheckoutRequest,
    account_id: Annotated[uuid.UUID, Depends(require_account)],
    accounts: Annotated[AccountRepository, Depends(get_account_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CheckoutResponse:
    """Create a hosted checkout session for a plan.

    Raises:
        HTTPException: 400 unknown plan, 401 anonymous, 500 Stripe failure
    """
    plan = plan_for(body.plan)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan")

    account = await accounts.get_account(account_id)
    email = account.email if account else None

    try:
        url = await run_in_threadpool(
            create_checkout_session, plan, account_id, email, settings
        )
    except (BillingNotConfiguredError, stripe.StripeError) as e:
        logger.error(f"Checkout failed for {account_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from e
    return CheckoutResponse(url=url)


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    accounts: Annotated[AccountRepository, Depends(get_account_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
    stripe_signature: Annotated[str, Header()] = "",
) -> dict[str, str]:
    """Verify and apply a payment-processor event.

    Raises:
        HTTPException: 400 if the signature does not verify
    """
    payload = await request.body()
    try:
        event = verify_webhook(payload, stripe_signature, settings)
    except InvalidWebhookError as e:
        logger.warning(f"Webhook Error: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Webhook Error: {e}"
        ) from e

    if event.get("type") == CHECKOUT_COMPLETED:
        await apply_checkout_completed(event, accounts)

    return {"status": "ok"}
