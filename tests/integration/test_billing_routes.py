"""API tests for /checkout and /webhooks/stripe."""

import hashlib
import hmac
import json
import time
import uuid
from collections.abc import AsyncGenerator
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import pytest_asyncio
import stripe
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from support import mint_token
from tripgen.config import Settings, get_settings
from tripgen.db.engine import get_session
from tripgen.db.models import Account
from tripgen.main import app


@pytest_asyncio.fixture
async def client(
    sqlite_engine: AsyncEngine, test_settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with AsyncSession(sqlite_engine, expire_on_commit=False) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: test_settings

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def create_account(engine: AsyncEngine, tier: str = "TRIAL", credits: int = 0) -> uuid.UUID:
    account_id = uuid.uuid4()
    async with AsyncSession(engine) as session:
        session.add(Account(account_id=account_id, email="a@example.com", tier=tier, credits=credits))
        await session.commit()
    return account_id


async def load_account(engine: AsyncEngine, account_id: uuid.UUID) -> Account:
    async with AsyncSession(engine) as session:
        account = await session.get(Account, account_id)
        assert account is not None
        return account


def signed(event: dict, secret: str) -> tuple[bytes, dict[str, str]]:
    payload = json.dumps(event).encode()
    timestamp = int(time.time())
    digest = hmac.new(
        secret.encode(), f"{timestamp}.{payload.decode()}".encode(), hashlib.sha256
    ).hexdigest()
    return payload, {"Stripe-Signature": f"t={timestamp},v1={digest}"}


def completed_event(account_id: uuid.UUID, plan: str) -> dict:
    return {
        "id": f"evt_{uuid.uuid4().hex}",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": "cs_test_1",
                "object": "checkout.session",
                "client_reference_id": str(account_id),
                "metadata": {"plan": plan},
            }
        },
    }


@pytest.mark.integration
@pytest.mark.asyncio
async def test_webhook_grants_plan(
    client: AsyncClient, sqlite_engine: AsyncEngine, test_settings: Settings
) -> None:
    account_id = await create_account(sqlite_engine, credits=1)
    payload, headers = signed(completed_event(account_id, "PASS"), "whsec_test")

    response = await client.post("/webhooks/stripe", content=payload, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    account = await load_account(sqlite_engine, account_id)
    assert (account.tier, account.credits) == ("PASS", 51)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_webhook_with_bad_signature_changes_nothing(
    client: AsyncClient, sqlite_engine: AsyncEngine
) -> None:
    account_id = await create_account(sqlite_engine, credits=1)
    payload, headers = signed(completed_event(account_id, "YEARLY"), "whsec_forged")

    response = await client.post("/webhooks/stripe", content=payload, headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Webhook Error:")
    account = await load_account(sqlite_engine, account_id)
    assert (account.tier, account.credits) == ("TRIAL", 1)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_webhook_ignores_other_event_types(
    client: AsyncClient, sqlite_engine: AsyncEngine
) -> None:
    account_id = await create_account(sqlite_engine, credits=1)
    event = completed_event(account_id, "PASS")
    event["type"] = "invoice.paid"
    payload, headers = signed(event, "whsec_test")

    response = await client.post("/webhooks/stripe", content=payload, headers=headers)

    assert response.status_code == 200
    assert (await load_account(sqlite_engine, account_id)).credits == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_checkout_returns_hosted_url(client: AsyncClient, sqlite_engine: AsyncEngine) -> None:
    account_id = await create_account(sqlite_engine)
    fake_session = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_1")

    with patch("stripe.checkout.Session.create", return_value=fake_session) as create:
        response = await client.post(
            "/checkout",
            json={"plan": "pass"},
            headers={"Authorization": f"Bearer {mint_token(account_id)}"},
        )

    assert response.status_code == 200
    assert response.json() == {"url": fake_session.url}
    assert create.call_args.kwargs["customer_email"] == "a@example.com"
    assert create.call_args.kwargs["client_reference_id"] == str(account_id)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_checkout_errors(client: AsyncClient, sqlite_engine: AsyncEngine) -> None:
    account_id = await create_account(sqlite_engine)
    headers = {"Authorization": f"Bearer {mint_token(account_id)}"}

    assert (await client.post("/checkout", json={"plan": "PASS"})).status_code == 401

    invalid = await client.post("/checkout", json={"plan": "gold"}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid plan"

    with patch(
        "stripe.checkout.Session.create",
        side_effect=stripe.InvalidRequestError("No such price", param="line_items"),
    ):
        failed = await client.post("/checkout", json={"plan": "YEARLY"}, headers=headers)
    assert failed.status_code == 500
    assert "No such price" in failed.json()["detail"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_redelivered_webhook_grants_once(
    client: AsyncClient, sqlite_engine: AsyncEngine
) -> None:
    account_id = await create_account(sqlite_engine, credits=0)
    payload, headers = signed(completed_event(account_id, "PASS"), "whsec_test")

    first = await client.post("/webhooks/stripe", content=payload, headers=headers)
    second = await client.post("/webhooks/stripe", content=payload, headers=headers)

    assert (first.status_code, second.status_code) == (200, 200)
    account = await load_account(sqlite_engine, account_id)
    assert (account.tier, account.credits) == ("PASS", 50)
