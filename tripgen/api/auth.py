"""Bearer-credential auth dependencies.

Credentials are HS256 JWTs issued by the external auth provider. The `sub`
claim is the account id. Verification failures never raise from
`get_optional_account`: the caller is treated as anonymous, which the
entitlement check then turns into "no credits".
"""

import logging
import uuid
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt

from tripgen.config import Settings, get_settings
from tripgen.db.context import AuthContext

logger = logging.getLogger(__name__)

ANONYMOUS = AuthContext(account_id=None)


def decode_account_id(token: str, settings: Settings) -> uuid.UUID:
    """Verify a bearer token and return the account id it names.

    Raises:
        JWTError: If the signature, expiry or audience check fails
        ValueError: If the subject is missing or not a UUID
    """
    if settings.auth_jwt_secret is None:
        raise JWTError("auth_jwt_secret is not configured")

    options = {"verify_aud": settings.auth_jwt_audience is not None}
    claims = jwt.decode(
        token,
        settings.auth_jwt_secret.get_secret_value(),
        algorithms=["HS256"],
        audience=settings.auth_jwt_audience,
        options=options,
    )
    subject = claims.get("sub")
    if not subject:
        raise ValueError("token has no subject")
    return uuid.UUID(str(subject))


async def get_optional_account(
    settings: Annotated[Settings, Depends(get_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthContext:
    """Resolve the caller from an optional Authorization header.

    Returns:
        AuthContext with account_id, or ANONYMOUS if no usable credential
    """
    if not authorization:
        return ANONYMOUS

    if not authorization.startswith("Bearer "):
        logger.warning("Ignoring malformed Authorization header")
        return ANONYMOUS

    token = authorization[7:]  # Strip "Bearer "

    try:
        return AuthContext(account_id=decode_account_id(token, settings))
    except (JWTError, ValueError) as e:
        logger.warning(f"Bearer credential rejected: {e}")
        return ANONYMOUS


async def require_account(
    ctx: Annotated[AuthContext, Depends(get_optional_account)],
) -> uuid.UUID:
    """Like get_optional_account, but 401 for anonymous callers.

    Returns:
        The caller's account id
    """
    if ctx.account_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ctx.account_id
