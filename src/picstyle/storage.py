"""Artifact store: publishes encoded images under a root directory.

Artifacts are written to a temporary file next to their final location and
renamed into place, so a reader never sees a partially written file.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ArtifactStore:
    """Flat directory of published artifacts."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str) -> Path:
        """Return the path of artifact ``name``.

        Raises:
            ValueError: If ``name`` is not a plain file name.
        """
        if not _NAME_PATTERN.fullmatch(name) or ".." in name:
            raise ValueError(f"Invalid artifact name: {name!r}")
        return self._root / name

    def publish(self, name: str, data: bytes) -> Path:
        """Atomically write ``data`` as artifact ``name`` and return its path."""
        target = self.path_for(name)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Published %s (%d bytes)", target, len(data))
        return target

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def delete(self, name: str) -> bool:
        """Remove artifact ``name``; return False if it was not present."""
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Deleted %s", path)
        return True
