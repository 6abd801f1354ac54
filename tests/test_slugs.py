"""
Storefront API — Slug Derivation Tests
=======================================

What we test:
    ✅ Lowercase, hyphen-separated output from mixed text
    ✅ Accents folded to ASCII, punctuation runs collapsed
    ✅ Length cap never leaves a trailing hyphen
    ✅ Same input, same slug
    ✅ ensure_slug keeps an explicit slug
"""

import pytest

from storefront.constants import SLUG_MAX_LENGTH
from storefront.slugs import ensure_slug, slugify


class TestSlugify:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Cold Brew Coffee", "cold-brew-coffee"),
            ("  Crème Brûlée -- 100% Natural! ", "creme-brulee-100-natural"),
            ("Protein Bar (Chocolate)", "protein-bar-chocolate"),
            ("ALL CAPS", "all-caps"),
            ("already-a-slug", "already-a-slug"),
        ],
    )
    def test_slug_shape(self, text, expected):
        assert slugify(text) == expected

    def test_only_symbols_yields_empty(self):
        assert slugify("!!! ???") == ""

    def test_deterministic(self):
        assert slugify("Green Tea Matcha") == slugify("Green Tea Matcha")

    def test_truncation_strips_trailing_hyphen(self):
        text = "a" * (SLUG_MAX_LENGTH - 1) + " b"
        slug = slugify(text)
        assert len(slug) <= SLUG_MAX_LENGTH
        assert not slug.endswith("-")

    def test_output_alphabet(self):
        slug = slugify("Ünïcödé & Spaces\tand\nnewlines")
        assert all(c.isdigit() or ("a" <= c <= "z") or c == "-" for c in slug)
        assert "--" not in slug


class TestEnsureSlug:

    def test_keeps_existing(self):
        assert ensure_slug("custom-slug", "Cold Brew Coffee") == "custom-slug"

    def test_derives_when_empty(self):
        assert ensure_slug(None, "Cold Brew Coffee") == "cold-brew-coffee"
        assert ensure_slug("", "Cold Brew Coffee") == "cold-brew-coffee"

    def test_nothing_to_derive_from(self):
        assert ensure_slug(None, None) is None
        assert ensure_slug(None, "???") is None
