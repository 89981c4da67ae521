"""FastAPI dependencies: get_current_user, get_optional_user, require_cron_secret.

Usage in any protected router:
    from src.at_gateway.auth.dependencies import CurrentUser, get_current_user

    @router.post("/protected")
    async def protected(user: CurrentUser = Depends(get_current_user)):
        ...
"""

import hmac
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import settings
from src.at_common.errors import UnauthorizedError
from src.at_gateway.auth.jwt_handler import decode_access_token

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Signed-in identity as asserted by the auth service's token."""

    id: str
    email: str | None = None


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> CurrentUser | None:
    """Return the caller's identity, or None when no valid token was sent.

    The bidding protocol reports `Unauthorized` itself, so its route uses
    this variant instead of get_current_user.
    """
    if credentials is None:
        return None
    try:
        claims = decode_access_token(credentials.credentials)
    except UnauthorizedError:
        return None
    return CurrentUser(id=claims.sub, email=claims.email)


async def get_current_user(
    user: CurrentUser | None = Depends(get_optional_user),
) -> CurrentUser:
    """Raise HTTP 401 (UnauthorizedError) unless a valid bearer token was sent."""
    if user is None:
        raise UnauthorizedError()
    return user


async def require_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> None:
    """Guard for the external scheduler: `Authorization: Bearer <CRON_SECRET>`.

    An unset CRON_SECRET rejects every caller.
    """
    expected = settings.CRON_SECRET
    if not expected or credentials is None:
        raise UnauthorizedError()
    if not hmac.compare_digest(credentials.credentials.encode(), expected.encode()):
        raise UnauthorizedError()
