"""
Atomic file helpers for proxy artifacts.

Artifacts are read by the reverse proxy at any time, so a reader must see
either the old content or the new content, never a partial write.
"""

import os
from pathlib import Path
from typing import Union

from ..exceptions import ArtifactWriteError

PathLike = Union[str, Path]


def atomic_write(path: PathLike, content: str) -> None:
    """
    Replace the content of ``path`` atomically, creating it if absent.

    Raises:
        ArtifactWriteError: If the file could not be written
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ArtifactWriteError(
            f"Failed to write {path}: {e}",
            path=str(path),
            cause=e,
        ) from e


def remove_file(path: PathLike) -> bool:
    """
    Remove ``path`` if it exists.

    Returns:
        True if a file was removed, False if it was already absent

    Raises:
        ArtifactWriteError: If the file exists but could not be removed
    """
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise ArtifactWriteError(
            f"Failed to remove {path}: {e}",
            path=str(path),
            cause=e,
        ) from e
    return True


def read_text(path: PathLike) -> str:
    """Return the content of ``path``, or an empty string when it does not exist."""
    path = Path(path)
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")
