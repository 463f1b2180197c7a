"""Per-client key/value storage.

This plays the part of browser localStorage: each client gets its own
namespace, and values survive for as long as the backing medium does.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Dict, Optional


logger = logging.getLogger(__name__)


def _sanitize_for_filename(s: str) -> str:
    if not s:
        return "_"
    # letters, digits, _ . - only
    return re.sub(r"[^A-Za-z0-9_.-]", "_", s)


class LocalStore:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryLocalStore(LocalStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileLocalStore(LocalStore):
    """Stores one client's keys in ``<directory>/<client_id>-<hash>.json``.

    The hash is taken over the raw id so ids that sanitize alike stay apart.
    """

    def __init__(self, directory: Path, client_id: str):
        digest = hashlib.sha1(client_id.encode("utf-8")).hexdigest()[:10]
        self.path = Path(directory) / f"{_sanitize_for_filename(client_id)}-{digest}.json"

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable local store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, values: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(values, f)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self._write(values)

    def delete(self, key: str) -> None:
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)
