"""
LLM Check Authentication

Bearer JWT validation and the premium gate for paid endpoints.

Usage:
    from llmcheck.auth import get_current_user_optional, is_premium_user

    @router.get("/premium-thing")
    async def premium_thing(user = Depends(get_current_user_optional)):
        if not is_premium_user(user):
            ...
"""

from llmcheck.auth.config import AuthConfig, get_auth_config
from llmcheck.auth.jwt import JWTError, verify_token
from llmcheck.auth.models import CurrentUser
from llmcheck.auth.dependencies import get_current_user_optional, is_premium_user

__all__ = [
    "AuthConfig",
    "get_auth_config",
    "JWTError",
    "verify_token",
    "CurrentUser",
    "get_current_user_optional",
    "is_premium_user",
]
