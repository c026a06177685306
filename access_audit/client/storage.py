"""Durable storage of the last audited URL."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

LAST_URL_KEY = "extensionUrl"


class LastUrlStore:
    """Single key/value pair in a JSON file, passed explicitly to each screen."""

    def __init__(self, path: Path, key: str = LAST_URL_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def read(self) -> Optional[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("state file unreadable", path=str(self.path), error=str(exc))
            return None
        value = data.get(self.key) if isinstance(data, dict) else None
        return value if isinstance(value, str) and value else None

    def write(self, url: str) -> None:
        data = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(loaded, dict):
                    data = loaded
            except (OSError, ValueError):
                data = {}
        data[self.key] = url
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
