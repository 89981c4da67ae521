"""Access-token verification.

Tokens are issued by the external auth service (HS256, shared JWT_SECRET).
This service never mints tokens; it only checks signature, expiry, audience
and the presence of a subject.
"""

from dataclasses import dataclass

from jose import JWTError, jwt

from config.settings import settings
from src.at_common.errors import UnauthorizedError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


@dataclass(frozen=True)
class TokenClaims:
    sub: str
    email: str | None


def decode_access_token(token: str) -> TokenClaims:
    """Decode and validate a bearer token.

    Raises:
        UnauthorizedError: signature invalid, token expired, audience wrong,
                           or no subject claim.
    """
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        raise UnauthorizedError() from None

    sub = payload.get("sub")
    if not sub:
        raise UnauthorizedError()
    email = payload.get("email") or None
    return TokenClaims(sub=str(sub), email=email)
