"""
URL and Domain Utilities

Shared URL handling for the visibility scan:
- Domain token extraction (root domain + bare brand token) for mention matching
- URL normalization used as the cache/history key

Both functions accept arbitrary user input and never raise.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit


_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)
_SCHEME_WWW_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://(www\.)?", re.IGNORECASE)
_WWW_RE = re.compile(r"^www\.")

DEFAULT_PORTS = (80, 443)


@dataclass(frozen=True)
class DomainTokens:
    """Tokens used to detect a site inside free-form model output."""

    root_domain: str  # "acme.io"
    brand_name: str   # "acme"


def _with_scheme(raw: str) -> str:
    return raw if _SCHEME_RE.match(raw) else f"https://{raw}"


def extract_domain_tokens(url: str) -> DomainTokens:
    """
    Extract the normalized root domain and brand token from a URL.

    Examples:
        "https://WWW.Acme.IO/x" -> DomainTokens("acme.io", "acme")
        "monday.com"            -> DomainTokens("monday.com", "monday")

    Falls back to plain string stripping when the input has no parseable
    hostname. Non-blank input always yields non-empty tokens.
    """
    raw = (url or "").strip()

    try:
        hostname = urlsplit(_with_scheme(raw)).hostname
    except ValueError:
        hostname = None

    if hostname:
        root_domain = _WWW_RE.sub("", hostname.lower())
    else:
        root_domain = _SCHEME_WWW_RE.sub("", raw.lower())
        root_domain = _WWW_RE.sub("", root_domain).split("/")[0].split(":")[0]

    if not root_domain:
        root_domain = raw.lower()

    brand_name = root_domain.split(".")[0] or root_domain
    return DomainTokens(root_domain=root_domain, brand_name=brand_name)


def normalize_url(url: str) -> str:
    """
    Normalize a URL for consistent storage and querying.

    - Forces https
    - Lowercases hostname
    - Removes default ports (80, 443)
    - Removes trailing slash (except root)

    "http://Example.com/" and "https://example.com" both become
    "https://example.com/". Unparseable input is returned lowercased and trimmed.
    """
    raw = (url or "").strip()

    try:
        parsed = urlsplit(_with_scheme(raw))
        hostname = parsed.hostname
        port = parsed.port
    except ValueError:
        return raw.lower()

    if not hostname:
        return raw.lower()

    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if port and port not in DEFAULT_PORTS:
        netloc = f"{netloc}:{port}"

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return urlunsplit(("https", netloc, path, parsed.query, parsed.fragment))
