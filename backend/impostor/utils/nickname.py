from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class MemoryNicknameCache:
    def __init__(self, nickname: str = "") -> None:
        self._nickname = nickname

    def load(self) -> str:
        return self._nickname

    def save(self, nickname: str) -> None:
        self._nickname = nickname


class FileNicknameCache:
    """Keeps the last used nickname in a small JSON file."""

    key = "impostorNickname"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> str:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return ""
        except (OSError, ValueError) as exc:
            logger.warning("nickname cache %s unreadable: %s", self.path, exc)
            return ""
        value = data.get(self.key) if isinstance(data, dict) else None
        return value if isinstance(value, str) else ""

    def save(self, nickname: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({self.key: nickname}), encoding="utf-8")
