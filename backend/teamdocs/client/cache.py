from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SNAPSHOT_FILE = "snapshot.json"
DOCUMENTATION_FILE = "documentation.json"
TOKEN_FILE = "github-token"


class SnapshotCache:
    """Local JSON files standing in for browser storage.

    Unreadable or corrupt files are treated as missing; the caller decides what
    to fall back to.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)

    def _path(self, name: str) -> Path:
        return self.cache_dir / name

    def _read_json(self, name: str) -> Optional[Dict[str, Any]]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("cache_read_failed file=%s error=%s", path, exc)
            return None
        return payload if isinstance(payload, dict) else None

    def _write_json(self, name: str, payload: Dict[str, Any]) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        tmp_path.replace(path)

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        return self._read_json(SNAPSHOT_FILE)

    def save_snapshot(self, payload: Dict[str, Any]) -> None:
        self._write_json(SNAPSHOT_FILE, payload)

    def load_documentation(self) -> Optional[Dict[str, Any]]:
        return self._read_json(DOCUMENTATION_FILE)

    def save_documentation(self, payload: Dict[str, Any]) -> None:
        self._write_json(DOCUMENTATION_FILE, payload)

    def load_token(self) -> Optional[str]:
        path = self._path(TOKEN_FILE)
        if not path.exists():
            return None
        token = path.read_text(encoding="utf-8").strip()
        return token or None

    def save_token(self, token: str) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(TOKEN_FILE)
        path.write_text(token.strip(), encoding="utf-8")
        path.chmod(0o600)
