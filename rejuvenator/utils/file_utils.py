"""
Rejuvenator File Utilities

Common file operations with error handling and encoding support, plus the
directory-backed artifact writer used to persist run outputs.
"""

import re
from pathlib import Path, PurePosixPath
from typing import List, Protocol, Union

from rejuvenator.core.exceptions import RejuvenatorError
from rejuvenator.core.logging_config import get_logger

logger = get_logger("utils.file_utils")


def write_text(
    path: Union[str, Path],
    content: str,
    encoding: str = 'utf-8'
) -> None:
    """
    Write text to a file.

    Args:
        path: Path to text file
        content: Content to write
        encoding: File encoding (default: utf-8)
    """
    path = Path(path)
    ensure_directory(path.parent)

    try:
        with open(path, 'w', encoding=encoding) as f:
            f.write(content)
    except OSError as e:
        raise RejuvenatorError(f"Failed to write {path}: {e}")


def write_bytes(path: Union[str, Path], data: bytes) -> None:
    """Write binary data to a file, creating parent directories."""
    path = Path(path)
    ensure_directory(path.parent)

    try:
        path.write_bytes(data)
    except OSError as e:
        raise RejuvenatorError(f"Failed to write {path}: {e}")


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str, max_length: int = 100) -> str:
    """
    Convert a string to a safe filename.

    Args:
        name: Original name
        max_length: Maximum filename length

    Returns:
        Safe filename string
    """
    safe = re.sub(r'[<>:"/\\|?*]', '_', name)
    safe = re.sub(r'[\s_]+', '_', safe)
    safe = safe.strip('_')
    if len(safe) > max_length:
        safe = safe[:max_length].rstrip('_')
    return safe or "unnamed"


def safe_relative_path(name: str) -> Path:
    """
    Archive entry name -> relative output path.

    Keeps the archive's folder structure but drops empty, '.' and '..'
    components so nothing escapes the output root.
    """
    parts = [
        safe_filename(part, max_length=150)
        for part in PurePosixPath(name.replace("\\", "/")).parts
        if part not in ("", ".", "..", "/")
    ]
    return Path(*parts) if parts else Path("unnamed")


class ArtifactWriter(Protocol):
    """Persistence collaborator for run outputs."""

    def write_text(self, name: str, content: str) -> Path: ...

    def write_bytes(self, name: str, data: bytes) -> Path: ...


class DirectoryArtifactWriter:
    """Writes artifacts under a root directory, in the order they are produced."""

    def __init__(self, root: Union[str, Path]):
        self.root = ensure_directory(root)
        self._written: List[Path] = []

    def _target(self, name: str) -> Path:
        return self.root / safe_relative_path(name)

    def write_text(self, name: str, content: str) -> Path:
        target = self._target(name)
        write_text(target, content)
        self._written.append(target)
        logger.debug(f"Wrote {target}")
        return target

    def write_bytes(self, name: str, data: bytes) -> Path:
        target = self._target(name)
        write_bytes(target, data)
        self._written.append(target)
        logger.debug(f"Wrote {target}")
        return target

    @property
    def written(self) -> List[Path]:
        return list(self._written)
