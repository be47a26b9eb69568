"""
JWT Token Validation

Validates bearer tokens issued by the identity provider using the shared
secret (HS256 by default).
"""

import logging
from typing import Dict, Any

import jwt
from jwt import PyJWTError

from llmcheck.auth.config import get_auth_config

logger = logging.getLogger(__name__)


class JWTError(Exception):
    """Custom JWT validation error."""
    pass


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a bearer token.

    Args:
        token: The JWT token from the Authorization header

    Returns:
        Decoded token payload

    Raises:
        JWTError: If token is invalid, expired, or malformed
    """
    config = get_auth_config()

    if not config.jwt_secret:
        raise JWTError("JWT_SECRET not configured")

    try:
        payload = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            audience=config.jwt_audience,
            options={"verify_aud": bool(config.jwt_audience)},
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidAudienceError:
        raise JWTError("Invalid token audience")
    except jwt.InvalidSignatureError:
        raise JWTError("Invalid token signature")
    except jwt.DecodeError as e:
        raise JWTError(f"Token decode error: {str(e)}")
    except PyJWTError as e:
        raise JWTError(f"Token validation error: {str(e)}")

    # Validate required claims
    if not payload.get("sub"):
        raise JWTError("Token missing 'sub' claim (user ID)")

    return payload
