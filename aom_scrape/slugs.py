"""URL slug normalization for product names."""

import re
from typing import Optional

__all__ = ["slugify", "TRANSLITERATIONS"]

# Fixed substitution table; no general Unicode folding
TRANSLITERATIONS = {
    "ä": "ae",
    "ö": "oe",
    "ü": "ue",
    "ß": "ss",
    # French/Italian loanwords common in the catalog (Café, Piqué, Façon)
    "à": "a",
    "á": "a",
    "â": "a",
    "é": "e",
    "è": "e",
    "ê": "e",
    "î": "i",
    "ô": "o",
    "ç": "c",
    "ñ": "n",
}

_TRANSLITERATION_RE = re.compile("[" + "".join(TRANSLITERATIONS) + "]")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: Optional[str], max_length: Optional[int] = None) -> str:
    """Turn a display name into a lowercase, hyphenated, URL-safe slug.

    Returns an empty string for empty or symbol-only input; callers decide
    whether that is an error.

    Args:
        name: Display name, e.g. "Der Klassische Anzug".
        max_length: Optional truncation length.

    Returns:
        Slug containing only [a-z0-9-], without leading/trailing hyphens.
    """
    if not name:
        return ""

    slug = name.lower()
    slug = _TRANSLITERATION_RE.sub(lambda m: TRANSLITERATIONS[m.group(0)], slug)
    slug = _NON_SLUG_RE.sub("-", slug).strip("-")

    if max_length is not None and len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")

    return slug
