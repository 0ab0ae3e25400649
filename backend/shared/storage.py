"""Storage abstraction for the persisted scoreboard document.

The session document is a single JSON file. Writes are atomic (temp file then
rename) so a crash mid-write leaves the previous document intact. The file is
written with owner-only permissions (0o600) inside an owner-only directory
(0o700).
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

_STATE_DIR_MODE = 0o700

_STATE_FILE_MODE = 0o600


class StateStorage(Protocol):
    """Protocol for reading and writing the serialized session document."""

    def load(self) -> str | None: ...

    def save(self, content: str) -> None: ...


class LocalStateStorage:
    """Keeps the session document in one JSON file on the local filesystem."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).resolve()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        """Return the stored document text, or None when nothing has been saved yet."""
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("no stored state", path=str(self._path))
            return None
        logger.debug("loaded state", path=str(self._path), size=len(content))
        return content

    def save(self, content: str) -> None:
        """Replace the stored document.

        Creates the parent directory lazily with owner-only permissions and
        writes via temp-file-then-rename with mode 0o600.
        """
        directory = self._path.parent
        directory.mkdir(mode=_STATE_DIR_MODE, parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=str(directory), suffix=".tmp", prefix=".state_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STATE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(self._path)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("saved state", path=str(self._path), size=len(content))

    def clear(self) -> None:
        """Remove the stored document if there is one."""
        self._path.unlink(missing_ok=True)
        logger.info("cleared stored state", path=str(self._path))
