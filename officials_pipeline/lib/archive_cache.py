"""
Archive cache for raw upstream API responses.

One file per (jurisdiction, source, date) under ``{root}/{YYYY-MM-DD}/``.
A snapshot is written once and then read by every later run that day, which
is what makes a rerun after a crash free of network calls. Writes land in a
temp file and are renamed into place, so a half-written snapshot is never
visible under its final name.
"""

import logging
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

SOURCES = ("senate", "house", "openstates")


class ArchiveWriteError(Exception):
    """Raised when a snapshot could not be persisted."""

    pass


class ArchiveCache:
    """File-backed, write-once cache of raw API responses."""

    def __init__(self, root_dir: Union[str, Path] = "archives"):
        """
        Initialize archive cache.

        Args:
            root_dir: Directory holding one sub-directory per run date
        """
        self.root_dir = Path(root_dir)

    def _get_path(self, jurisdiction: str, source: str, on_date: date) -> Path:
        if source not in SOURCES:
            raise ValueError(f"Unknown archive source: {source}")
        return self.root_dir / on_date.isoformat() / f"{jurisdiction.upper()}-{source}.json"

    def get(self, jurisdiction: str, source: str, on_date: date) -> Optional[bytes]:
        """
        Get a cached snapshot.

        Returns:
            Raw response bytes, or None when no readable snapshot exists
            for the key
        """
        path = self._get_path(jurisdiction, source, on_date)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read snapshot {path}: {e}")
            return None

    def put(self, jurisdiction: str, source: str, on_date: date, data: bytes) -> Path:
        """
        Persist a snapshot. An existing snapshot for the key is left untouched.

        Raises:
            ArchiveWriteError: If the snapshot could not be written
        """
        path = self._get_path(jurisdiction, source, on_date)
        if path.exists():
            logger.debug(f"Snapshot already archived: {path}")
            return path

        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ArchiveWriteError(f"Failed to archive {path}: {e}") from e

        logger.info(f"Archived to: {path}")
        return path
