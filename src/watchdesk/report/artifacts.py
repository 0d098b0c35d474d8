"""ArtifactStore: report renditions on the local filesystem, named <report_id>.<ext>."""

import logging
from pathlib import Path
from typing import Optional

from watchdesk.exceptions import StorageError
from watchdesk.report.renderers import EXTENSIONS

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".json": "application/json",
    ".csv": "text/csv",
    ".pdf": "application/pdf",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def content_type_for(filename: str) -> str:
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def is_safe_filename(filename: str) -> bool:
    """Plain file names only: no directories, no traversal, no hidden files."""
    if not filename or "/" in filename or "\\" in filename or "\x00" in filename:
        return False
    return Path(filename).name == filename and not filename.startswith(".")


class ArtifactStore:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def write(self, report_id: str, renditions: dict[str, bytes]) -> list[Path]:
        """Write every rendition. On failure, already written files are removed and StorageError raised."""
        written: list[Path] = []
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            for ext, payload in renditions.items():
                path = self._root / f"{report_id}.{ext}"
                path.write_bytes(payload)
                written.append(path)
        except OSError as e:
            logger.error("Writing report files for %s failed: %s", report_id, e)
            for path in written:
                path.unlink(missing_ok=True)
            raise StorageError("Failed to write report files") from e
        return written

    def resolve(self, filename: str) -> Optional[Path]:
        """Path of an existing rendition, or None if missing or the name is not acceptable."""
        if not is_safe_filename(filename):
            return None
        path = self._root / filename
        return path if path.is_file() else None

    def remove(self, report_id: str) -> tuple[int, list[str]]:
        """Remove every rendition of a report; absent files are skipped silently."""
        deleted = 0
        errors: list[str] = []
        for ext in EXTENSIONS:
            path = self._root / f"{report_id}.{ext}"
            if not path.exists():
                continue
            try:
                path.unlink()
                deleted += 1
            except OSError as e:
                logger.warning("Could not delete %s: %s", path, e)
                errors.append(f"{path.name}: {e.strerror or e}")
        return deleted, errors
