"""
URL-friendly slug helpers.
"""

import re
from typing import Iterable

from storefront.core.exceptions import ValidationError

_DISALLOWED = re.compile(r"[^a-z0-9_\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")
_VALID_SLUG = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


def generate_slug(text: str) -> str:
    """
    Convert a display name into a slug.

    ``"  Hello, World!  "`` becomes ``"hello-world"``. Characters outside
    ASCII letters, digits, whitespace, underscores and hyphens are dropped.
    """
    slug = text.lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return _EDGE_HYPHENS.sub("", slug)


def generate_unique_slug(base_slug: str, existing_slugs: Iterable[str]) -> str:
    """
    Return ``base_slug`` or the first ``base_slug-N`` (N >= 1) not in ``existing_slugs``.
    """
    taken = set(existing_slugs)
    unique_slug = base_slug
    counter = 1

    while unique_slug in taken:
        unique_slug = f"{base_slug}-{counter}"
        counter += 1

    return unique_slug


def is_valid_slug(slug: str) -> bool:
    return _VALID_SLUG.fullmatch(slug) is not None


def derive_slug(name: str) -> str:
    """Slug for a display name, rejecting names that leave nothing behind."""
    slug = generate_slug(name)
    if not slug:
        raise ValidationError(
            "Unable to derive a slug from the name",
            details={"name": "must contain at least one letter or digit"},
        )
    return slug
