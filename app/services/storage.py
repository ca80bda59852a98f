"""
Durable local storage for the current identity.

A JSON key/value file holding one signed record, read once at start-up,
written on each login and removed on logout.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from app.core.security import read_identity, sign_identity

logger = logging.getLogger(__name__)


class IdentityStore:
    def __init__(self, path: str | Path, key: str = "current_user"):
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable identity store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self.path)

    def load(self) -> dict[str, Any] | None:
        token = self._read_all().get(self.key)
        if not isinstance(token, str):
            return None
        claims = read_identity(token)
        if claims is None:
            logger.warning("Discarding identity record with an invalid signature")
        return claims

    def save(self, record: dict[str, Any]) -> None:
        data = self._read_all()
        data[self.key] = sign_identity(record)
        self._write_all(data)

    def clear(self) -> None:
        data = self._read_all()
        if data.pop(self.key, None) is not None:
            self._write_all(data)

    def __contains__(self, key: str) -> bool:
        return key in self._read_all()
