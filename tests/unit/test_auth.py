"""Unit tests for bearer-credential auth dependencies."""

import time
import uuid

import pytest
from fastapi import HTTPException
from jose import JWTError, jwt

from support import JWT_SECRET, mint_token
from tripgen.api.auth import ANONYMOUS, decode_account_id, get_optional_account, require_account
from tripgen.config import Settings
from tripgen.db.context import AuthContext


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, auth_jwt_secret=JWT_SECRET)


def test_decode_account_id_returns_subject(settings: Settings) -> None:
    account_id = uuid.uuid4()

    assert decode_account_id(mint_token(account_id), settings) == account_id


def test_decode_rejects_wrong_secret(settings: Settings) -> None:
    with pytest.raises(JWTError):
        decode_account_id(mint_token(uuid.uuid4(), secret="other-secret"), settings)


def test_decode_rejects_expired_token(settings: Settings) -> None:
    past = int(time.time()) - 3600
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "aud": "authenticated", "exp": past}, JWT_SECRET, "HS256"
    )

    with pytest.raises(JWTError):
        decode_account_id(token, settings)


def test_decode_rejects_non_uuid_subject(settings: Settings) -> None:
    token = jwt.encode({"sub": "user-42", "aud": "authenticated"}, JWT_SECRET, "HS256")

    with pytest.raises(ValueError):
        decode_account_id(token, settings)


def test_decode_without_secret_configured_fails() -> None:
    with pytest.raises(JWTError):
        decode_account_id(mint_token(uuid.uuid4()), Settings(_env_file=None, auth_jwt_secret=None))


@pytest.mark.asyncio
async def test_missing_header_is_anonymous(settings: Settings) -> None:
    assert await get_optional_account(settings, authorization=None) == ANONYMOUS


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["NotBearer token", "Bearer not-a-jwt", "Bearer "])
async def test_unusable_credentials_are_anonymous(settings: Settings, header: str) -> None:
    ctx = await get_optional_account(settings, authorization=header)

    assert ctx.account_id is None


@pytest.mark.asyncio
async def test_valid_credential_resolves_account(settings: Settings) -> None:
    account_id = uuid.uuid4()

    ctx = await get_optional_account(settings, authorization=f"Bearer {mint_token(account_id)}")

    assert ctx == AuthContext(account_id=account_id)
    assert ctx.is_authenticated


@pytest.mark.asyncio
async def test_require_account_rejects_anonymous() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await require_account(ANONYMOUS)

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_require_account_passes_authenticated() -> None:
    ctx = AuthContext(account_id=uuid.uuid4())

    assert await require_account(ctx) == ctx.account_id
