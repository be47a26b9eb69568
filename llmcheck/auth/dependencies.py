"""
FastAPI Authentication Dependencies

Resolves the caller from the bearer token. Endpoints decide what to do with
an anonymous or non-premium caller.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from llmcheck.auth.config import get_auth_config
from llmcheck.auth.jwt import verify_token, JWTError
from llmcheck.auth.models import CurrentUser

logger = logging.getLogger(__name__)

# HTTP Bearer token extraction
security = HTTPBearer(auto_error=False)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CurrentUser]:
    """
    Get the current user if authenticated, None otherwise.

    Invalid or expired tokens are treated as anonymous.
    """
    config = get_auth_config()

    # If auth is disabled (local dev), return a premium dev user
    if not config.auth_enabled:
        return _get_dev_user()

    if not credentials:
        return None

    try:
        payload = verify_token(credentials.credentials)
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        return None

    return CurrentUser.from_payload(payload, config.premium_claim)


def is_premium_user(user: Optional[CurrentUser]) -> bool:
    return user is not None and user.is_premium


def _get_dev_user() -> CurrentUser:
    """Development user when auth is disabled."""
    return CurrentUser(id="dev-user", email="dev@llmcheck.local", is_premium=True)
