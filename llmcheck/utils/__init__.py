"""Utility modules for LLM Check."""

from .config import Settings, get_settings
from .domain import (
    DomainTokens,
    extract_domain_tokens,
    normalize_url,
)

__all__ = [
    "Settings",
    "get_settings",
    # URL handling
    "DomainTokens",
    "extract_domain_tokens",
    "normalize_url",
]
