"""URL validation and normalization for scrape targets and image links."""

import re
from typing import Optional, Set
from urllib.parse import urlparse

from aom_scrape.config import SITE_ORIGIN

__all__ = [
    "validate_url",
    "absolutize_url",
    "sanitize_url",
    "URLValidationError",
    "ALLOWED_DOMAINS",
]


class URLValidationError(Exception):
    """Raised when URL validation fails."""
    pass


# Pages the extraction heuristics are written for
ALLOWED_DOMAINS: Set[str] = frozenset({
    "www.artofmen.de",
    "artofmen.de",
})

DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file"}

SUSPICIOUS_PATTERNS = [
    r"\.\./",
    r"%2e%2e",
    r"<script",
    r"javascript:",
]


def sanitize_url(url: str) -> str:
    """Strip whitespace, control characters and null bytes."""
    if not url:
        return ""
    url = url.strip()
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url)
    return url.replace("%00", "")


def validate_url(url: str, allowed_domains: Optional[Set[str]] = None) -> str:
    """Validate a page URL before handing it to the rendering proxy.

    Args:
        url: URL to validate
        allowed_domains: Set of allowed hosts (default: ALLOWED_DOMAINS)

    Returns:
        Sanitized URL

    Raises:
        URLValidationError: If URL is malformed, uses a bad scheme, or
            points outside the allowed domains
    """
    if not url or not isinstance(url, str):
        raise URLValidationError("URL is empty")

    url = sanitize_url(url)
    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme: {scheme}")
    if scheme not in ("http", "https"):
        raise URLValidationError(f"Invalid URL scheme: {scheme or 'none'}")

    host = (parsed.hostname or "").lower()
    if not host:
        raise URLValidationError("URL has no domain")

    domains = allowed_domains if allowed_domains is not None else ALLOWED_DOMAINS
    if domains and host not in domains:
        raise URLValidationError(
            f"URL domain '{host}' not in allowed domains: {sorted(domains)}"
        )

    url_lower = url.lower()
    for pattern in SUSPICIOUS_PATTERNS:
        if re.search(pattern, url_lower):
            raise URLValidationError(f"URL contains suspicious pattern: {pattern}")

    return url


def absolutize_url(src: Optional[str], origin: str = SITE_ORIGIN) -> Optional[str]:
    """Rewrite a site-relative image path to an absolute URL.

    "/media/x.jpg" becomes "<origin>/media/x.jpg", "//cdn/x.jpg" gets the
    https scheme, anything else is returned unchanged. Empty input gives None.
    """
    if not src:
        return None
    src = sanitize_url(src)
    if not src:
        return None
    if src.startswith("//"):
        return f"https:{src}"
    if src.startswith("/"):
        return f"{origin.rstrip('/')}{src}"
    return src

