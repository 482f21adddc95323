import logging
from typing import Optional

from fastapi import Depends, Header, Request
from jose import JWTError, jwt

from ingredient_extractor.config import Settings
from ingredient_extractor.errors import AuthError

log = logging.getLogger(__name__)

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def verify_token(token: str, secret: str, audience: Optional[str] = None) -> dict:
    """Check an HS256-signed JWT against the shared secret and return its claims.

    Raises AuthError for a bad signature, a malformed token or an expired one.
    The audience claim is only enforced when an audience is configured.
    """
    if not secret:
        raise AuthError("no signing secret configured")
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as e:
        raise AuthError(f"invalid token: {e}") from e


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError("missing or malformed Authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthError("empty bearer token")
    return token


# Get claims of the caller from the Authorization header
def get_current_claims(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    token = bearer_token(authorization)
    claims = verify_token(token, settings.jwt_secret, settings.jwt_audience)
    log.debug("authorized request for subject %s", claims.get("sub"))
    return claims
