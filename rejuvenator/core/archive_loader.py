"""
Archive Loader

Unpacks uploaded archives-of-archives into flat image and text assets and
partitions them into avatars and processed frames by archive name.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .assets import AssetBundle, ImageAsset, TextAsset
from .constants import (
    ARCHIVE_EXTENSION,
    AVATAR_ARCHIVE_MARKER,
    FRAME_ARCHIVE_MARKER,
    IMAGE_EXTENSIONS,
    TEXT_EXTENSIONS,
)
from .exceptions import ArchiveReadError
from .logging_config import get_logger

logger = get_logger("core.archive_loader")


@dataclass
class ExtractedAssets:
    """Flat result of unpacking one archive (nested archives included)."""
    images: Dict[str, ImageAsset] = field(default_factory=dict)
    texts: List[TextAsset] = field(default_factory=list)

    def merge(self, other: "ExtractedAssets") -> None:
        self.images.update(other.images)
        self.texts.extend(other.texts)


def _extension(name: str) -> str:
    return name.lower().rsplit(".", 1)[-1] if "." in name else ""


def mime_type_for(name: str) -> str:
    ext = _extension(name)
    return f"image/{'jpeg' if ext == 'jpg' else ext}"


def extract_archive(data: bytes, label: str = "archive") -> ExtractedAssets:
    """
    Recursively unpack a zip archive.

    Nested ``.zip`` entries are unpacked in place; images and text files are
    collected by extension, everything else is ignored.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise ArchiveReadError(label, str(e))

    extracted = ExtractedAssets()
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = info.filename
            ext = _extension(name)
            if ext == ARCHIVE_EXTENSION:
                extracted.merge(extract_archive(archive.read(info), label=f"{label}/{name}"))
            elif ext in IMAGE_EXTENSIONS:
                extracted.images[name] = ImageAsset(
                    name=name, data=archive.read(info), mime_type=mime_type_for(name)
                )
            elif ext in TEXT_EXTENSIONS:
                content = archive.read(info).decode("utf-8", errors="replace")
                extracted.texts.append(TextAsset(name=name, content=content))
    return extracted


def load_bundle(archives: Iterable[Union[str, Path]]) -> AssetBundle:
    """
    Load uploaded archives into an AssetBundle.

    Archive file names containing ``avatars`` contribute avatars; names
    containing ``processed`` contribute frames and texts. Other archives are
    ignored with a warning.
    """
    avatars: Dict[str, ImageAsset] = {}
    frames: Dict[str, ImageAsset] = {}
    texts: List[TextAsset] = []

    logger.info("DECODING ARCHIVES...")
    for archive_path in archives:
        archive_path = Path(archive_path)
        name = archive_path.name.lower()
        try:
            data = archive_path.read_bytes()
        except OSError as e:
            raise ArchiveReadError(str(archive_path), str(e))

        extracted = extract_archive(data, label=archive_path.name)
        if AVATAR_ARCHIVE_MARKER in name:
            avatars.update(extracted.images)
        elif FRAME_ARCHIVE_MARKER in name:
            frames.update(extracted.images)
            texts.extend(extracted.texts)
        else:
            logger.warning(
                f"Ignoring {archive_path.name}: name contains neither "
                f"'{AVATAR_ARCHIVE_MARKER}' nor '{FRAME_ARCHIVE_MARKER}'"
            )

    logger.info(f"LOADED: {len(frames)} FRAMES, {len(avatars)} AVATARS.")
    return AssetBundle.from_parts(avatars=avatars, frames=frames, texts=texts)
