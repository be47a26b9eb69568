"""
Authentication Models

The authenticated caller as seen by the API. Subscription state lives with
the identity provider; it arrives here as a token claim and is never stored.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity extracted from a verified token."""

    id: str
    email: Optional[str] = None
    is_premium: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], premium_claim: str) -> "CurrentUser":
        public_metadata = payload.get("public_metadata") or payload.get("publicMetadata")
        if not isinstance(public_metadata, dict):
            public_metadata = {}
        premium = public_metadata.get(premium_claim, payload.get(premium_claim, False))

        return cls(
            id=payload["sub"],
            email=payload.get("email"),
            is_premium=premium is True,
        )
