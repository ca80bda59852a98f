"""
URL-safe slugs for QR deep links: ``"Mesa 01"`` -> ``"mesa-01-3f9a0c2e"``.
"""

from __future__ import annotations

import random
import re
import string
import uuid

SUFFIX_LENGTH = 8

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_RE = re.compile(r"[^a-z0-9-]")
_HYPHENS_RE = re.compile(r"-+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def slug_base(name: str) -> str:
    """Deterministic part of the slug. May be empty."""
    base = _WHITESPACE_RE.sub("-", name.strip().lower())
    base = _INVALID_RE.sub("", base)
    base = _HYPHENS_RE.sub("-", base)
    return base.strip("-")


def slug_suffix() -> str:
    try:
        return uuid.uuid4().hex[:SUFFIX_LENGTH]
    except NotImplementedError:
        # no OS randomness source
        return "".join(random.choices(_SUFFIX_ALPHABET, k=SUFFIX_LENGTH))


def slugify(name: str) -> str:
    base = slug_base(name)
    suffix = slug_suffix()
    return f"{base}-{suffix}" if base else suffix
