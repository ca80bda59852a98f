"""Tests for slug generation."""

import re

import pytest

from app.core import slug as slug_module
from app.core.slug import SUFFIX_LENGTH, slug_base, slug_suffix, slugify

_SUFFIX_RE = re.compile(r"^[a-z0-9]{8}$")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Mesa 01", "mesa-01"),
        ("  João   da  Silva ", "joo-da-silva"),
        ("--Table__7--", "table7"),
        ("a - - b", "a-b"),
        ("12", "12"),
    ],
)
def test_slug_base_transform(name, expected):
    assert slug_base(name) == expected


@pytest.mark.parametrize("name", ["!!!", "   ", "", "---"])
def test_slug_base_can_be_empty(name):
    assert slug_base(name) == ""


def test_slug_base_charset_and_hyphens():
    """Output is [a-z0-9-] only, no edge hyphens, no hyphen runs."""
    samples = [
        "  --Hello,   World!!--  ",
        "Mesa\t\t01\n",
        "a---b___c",
        "-x-",
        "Ünïcödé Tàblé 99",
        "$%^&*()",
        "mesa - 0 - 1",
    ]
    for name in samples:
        base = slug_base(name)
        assert re.fullmatch(r"[a-z0-9-]*", base), name
        assert not base.startswith("-") and not base.endswith("-"), name
        assert "--" not in base, name


def test_slug_suffix_format():
    suffix = slug_suffix()
    assert len(suffix) == SUFFIX_LENGTH
    assert _SUFFIX_RE.match(suffix)


def test_slug_suffix_falls_back_without_os_randomness(monkeypatch):
    def _no_urandom():
        raise NotImplementedError

    monkeypatch.setattr(slug_module.uuid, "uuid4", _no_urandom)
    suffix = slug_suffix()
    assert _SUFFIX_RE.match(suffix)


def test_slugify_joins_base_and_suffix():
    value = slugify("Mesa 01")
    base, _, suffix = value.rpartition("-")
    assert base == "mesa-01"
    assert _SUFFIX_RE.match(suffix)


def test_slugify_without_valid_characters_is_suffix_only():
    assert _SUFFIX_RE.match(slugify("!!!"))


def test_slugify_is_random_per_call():
    assert slugify("Mesa 01") != slugify("Mesa 01")
