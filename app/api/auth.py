"""Bearer token check for protected routes."""

import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def require_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str | None:
    """Require a configured bearer token when auth is enabled.

    Token issuance lives with the identity provider; this only checks that a
    known token accompanies the call.
    """
    if not settings.auth_enabled:
        return None

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    token = credentials.credentials
    if not any(secrets.compare_digest(token, accepted) for accepted in settings.accepted_tokens):
        logger.warning("Rejected request with unknown bearer token")
        raise unauthorized
    return token
