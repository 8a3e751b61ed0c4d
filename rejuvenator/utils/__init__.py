"""
Rejuvenator Utilities Module

File helpers and the artifact writer.
"""

from .file_utils import (
    write_text,
    write_bytes,
    ensure_directory,
    safe_filename,
    safe_relative_path,
    ArtifactWriter,
    DirectoryArtifactWriter,
)

__all__ = [
    'write_text',
    'write_bytes',
    'ensure_directory',
    'safe_filename',
    'safe_relative_path',
    'ArtifactWriter',
    'DirectoryArtifactWriter',
]
