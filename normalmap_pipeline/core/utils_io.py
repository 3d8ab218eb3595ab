"""I/O helpers for writing generated normal maps."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, List

from .config import SUPPORTED_EXTENSIONS


def ensure_dir(path: Path) -> Path:
    """Ensure that *path* exists and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def list_images(path: Path, extensions: Iterable[str] = SUPPORTED_EXTENSIONS) -> List[Path]:
    """Return the image files under *path* (or *path* itself when it is a file)."""

    allowed = {ext.lower() for ext in extensions}
    if path.is_file():
        return [path]
    if not path.is_dir():
        return []
    return sorted(item for item in path.iterdir() if item.is_file() and item.suffix.lower() in allowed)


class SafeFileManager:
    """Write output files under :attr:`base_dir` without exposing partial writes."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = ensure_dir(Path(base_dir))

    def atomic_save_bytes(self, data: bytes, path: Path | str) -> Path:
        """Write *data* to a unique sibling temp file, then move it onto *path*.

        Each call owns its temp file, so concurrent writers never block one
        another; the last ``os.replace`` wins.
        """

        destination = Path(path)
        if not destination.is_absolute():
            destination = self.base_dir / destination
        ensure_dir(destination.parent)
        fd, temp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(temp_name, destination)
        except BaseException:
            try:
                os.remove(temp_name)
            except FileNotFoundError:
                pass
            raise
        return destination
