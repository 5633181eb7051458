from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def get_muted(self) -> bool: ...

    def set_muted(self, muted: bool) -> None: ...

    def get_high_score(self) -> int: ...

    def set_high_score(self, score: int) -> None: ...


@dataclass
class MemorySettingsStore:
    muted: bool = False
    high_score: int = 0

    def get_muted(self) -> bool:
        return self.muted

    def set_muted(self, muted: bool) -> None:
        self.muted = bool(muted)

    def get_high_score(self) -> int:
        return self.high_score

    def set_high_score(self, score: int) -> None:
        self.high_score = int(score)


class JsonSettingsStore:
    """Settings persisted as a small JSON document.

    A missing or unreadable file yields defaults; every setter rewrites the file.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._data = {"muted": False, "high_score": 0}
        self._load()

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected an object", self.path)
            return
        self._data["muted"] = bool(data.get("muted", False))
        try:
            self._data["high_score"] = int(data.get("high_score", 0))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid high score in %s", self.path)

    def _save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)

    def get_muted(self) -> bool:
        return bool(self._data["muted"])

    def set_muted(self, muted: bool) -> None:
        self._data["muted"] = bool(muted)
        self._save()

    def get_high_score(self) -> int:
        return int(self._data["high_score"])

    def set_high_score(self, score: int) -> None:
        self._data["high_score"] = int(score)
        self._save()
