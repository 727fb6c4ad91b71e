import re

import pytest

from storefront.core.exceptions import ValidationError
from storefront.services.slug import derive_slug, generate_slug, generate_unique_slug, is_valid_slug

SLUG_SHAPE = re.compile(r"^[a-z0-9-]*$")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Electronics", "electronics"),
        ("  Hello, World!  ", "hello-world"),
        ("Home & Garden", "home-garden"),
        ("snake_case_name", "snake-case-name"),
        ("multiple   spaces\tand\ttabs", "multiple-spaces-and-tabs"),
        ("--already--hyphenated--", "already-hyphenated"),
        ("iPhone 15 Pro", "iphone-15-pro"),
        ("", ""),
        ("!!!", ""),
    ],
)
def test_generate_slug(text, expected):
    assert generate_slug(text) == expected


@pytest.mark.parametrize(
    "text",
    ["Café Crème", "  _-_ ", "A--B__C  D", "Ünïcödé Ñame", "tabs\tand\nnewlines", "-x-", "100% Cotton!"],
)
def test_generate_slug_shape(text):
    slug = generate_slug(text)
    assert SLUG_SHAPE.match(slug)
    assert not slug.startswith("-")
    assert not slug.endswith("-")
    assert "--" not in slug


def test_generate_slug_is_deterministic():
    assert generate_slug("Summer Sale 2024") == generate_slug("Summer Sale 2024")


def test_generate_unique_slug_returns_base_when_free():
    assert generate_unique_slug("electronics", ["books", "toys"]) == "electronics"
    assert generate_unique_slug("electronics", []) == "electronics"


def test_generate_unique_slug_appends_first_free_suffix():
    assert generate_unique_slug("electronics", ["electronics"]) == "electronics-1"
    assert generate_unique_slug("electronics", ["electronics", "electronics-1"]) == "electronics-2"
    # Gaps are filled with the smallest free number
    assert generate_unique_slug("electronics", ["electronics", "electronics-2"]) == "electronics-1"


@pytest.mark.parametrize("slug", ["electronics", "iphone-15-pro", "a", "123"])
def test_is_valid_slug_accepts(slug):
    assert is_valid_slug(slug)


@pytest.mark.parametrize("slug", ["", "Electronics", "-lead", "trail-", "double--hyphen", "under_score", "sp ace", "ok\n"])
def test_is_valid_slug_rejects(slug):
    assert not is_valid_slug(slug)


def test_derive_slug_rejects_names_without_letters_or_digits():
    assert derive_slug("Electronics") == "electronics"
    with pytest.raises(ValidationError) as exc_info:
        derive_slug("!!!")
    assert exc_info.value.status_code == 400
