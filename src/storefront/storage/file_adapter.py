"""File-backed key-value storage.

Each key maps to ``<directory>/<key>.json``. Writes go to a temporary file
in the same directory and are moved into place with ``os.replace`` so a
crash mid-write never leaves a truncated slot behind.
"""

import os
import re
import tempfile
from pathlib import Path

import structlog

from storefront.storage.port import KeyValueStorage, StorageError

logger = structlog.get_logger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileStorage(KeyValueStorage):
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unreadable storage slot", key=key, path=str(path), error=str(exc))
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Could not write storage slot {key!r}: {exc}") from exc

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not remove storage slot {key!r}: {exc}") from exc
