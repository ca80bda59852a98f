"""
Decoding of scanned QR payloads into a login target.

Two formats are printed on tables: deep links ending in the account slug,
and older cart codes carrying ``{"table": "<username>"}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass(frozen=True)
class QrTarget:
    slug: str | None = None
    username: str | None = None


def parse_qr_payload(raw: str) -> QrTarget:
    text = (raw or "").strip()
    if not text:
        raise ValueError("Empty QR payload")

    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ValueError("Malformed QR payload") from exc
        table = data.get("table") if isinstance(data, dict) else None
        if not table:
            raise ValueError("QR payload has no table")
        return QrTarget(username=str(table).strip())

    parsed = urlparse(text)
    if parsed.scheme in ("http", "https"):
        segment = parsed.path.rstrip("/").rsplit("/", 1)[-1]
        if not segment:
            raise ValueError("QR link has no slug")
        return QrTarget(slug=segment)

    return QrTarget(slug=text)
