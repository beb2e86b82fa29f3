import json
import logging
import os
from pathlib import Path

from app.interfaces.storage import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Durable key-value store kept as one JSON object in a file.

    Every ``set`` rewrites the whole file through a temporary sibling and an
    atomic rename, so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def _read(self) -> dict[str, object]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError:
            logger.warning("Ignoring undecodable store file %s", self._path)
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable store file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}
