"""
Storefront API — Slug Derivation
=================================

What:  Turns a human-readable title into a URL-safe, lowercase, hyphenated slug.
Who:   The ORM `before_insert` listeners on Product and Tag.
When:  First persistence of a row whose slug is still empty.

Rules:
    1. NFKD-normalize and drop anything that is not ASCII ("Café" → "Cafe")
    2. Lowercase
    3. Every run of characters outside [a-z0-9] becomes a single hyphen
    4. Leading/trailing hyphens are stripped
    5. Truncated to SLUG_MAX_LENGTH without leaving a trailing hyphen

The function is pure: the same title always yields the same slug. Uniqueness
is the database's job (unique constraint on the slug column).
"""

import re
import unicodedata
from typing import Optional

from storefront.constants import SLUG_MAX_LENGTH

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    Derive a slug from free text.

    >>> slugify("Cold Brew Coffee")
    'cold-brew-coffee'
    >>> slugify("  Crème Brûlée -- 100% Natural! ")
    'creme-brulee-100-natural'
    """
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM.sub("-", ascii_text).strip("-")
    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    return slug


def ensure_slug(current: Optional[str], source: Optional[str]) -> Optional[str]:
    """Keep an existing slug; otherwise derive one from `source`."""
    if current:
        return current
    if not source:
        return current
    return slugify(source) or None
