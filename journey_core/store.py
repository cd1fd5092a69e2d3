"""Key-value preference stores.

The session only needs ``get(key)`` / ``set(key, value)`` with string values.
``MemoryPreferenceStore`` backs tests and the terminal runner;
``JsonFilePreferenceStore`` keeps one JSON document per client under
``DATA_DIR`` so the API remembers language choice and the last result across
restarts.
"""

from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from . import config


class PreferenceStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryPreferenceStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


_LOCK = threading.Lock()
_SAFE_ID = re.compile(r"[^A-Za-z0-9_.-]")


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def data_root() -> Path:
    return Path(config.DATA_DIR).resolve()


class JsonFilePreferenceStore:
    """Preferences for one client in ``<root>/prefs/<client_id>.json``.

    Reads of a missing or corrupt file return ``None``; write errors
    (``OSError``) propagate so callers can decide how to degrade.
    """

    def __init__(self, client_id: str, root: Optional[Path] = None) -> None:
        safe = _SAFE_ID.sub("_", client_id or "anonymous")[:128] or "anonymous"
        self.client_id = client_id
        self.path = (root or data_root()) / "prefs" / f"{safe}.json"

    def _load(self) -> Dict[str, str]:
        data = _read_json(self.path, {})
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        val = self._load().get(key)
        return val if isinstance(val, str) else None

    def set(self, key: str, value: str) -> None:
        with _LOCK:
            data = self._load()
            data[key] = str(value)
            _write_json(self.path, data)
