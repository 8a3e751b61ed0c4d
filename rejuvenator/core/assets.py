"""
Asset Data Model

Immutable image/text assets as produced by the archive collaborator, the
bundle that groups them, and the scene-text lookup shared by the script
assembler and the per-frame resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .constants import STORY_FILENAME, STYLE_FILENAME, TEXT_EXTENSION


@dataclass(frozen=True)
class ImageAsset:
    """An extracted image: name, raw bytes, media type."""
    name: str
    data: bytes = field(repr=False)
    mime_type: str = "image/png"


@dataclass(frozen=True)
class TextAsset:
    """An extracted text file."""
    name: str
    content: str

    @property
    def lines(self) -> List[str]:
        return self.content.split("\n")


@dataclass(frozen=True)
class SceneLookup:
    """
    Outcome of matching a frame to its per-frame text asset.

    Either ``text`` is set (found) or ``skip_reason`` explains why not.
    """
    frame_name: str
    base: str
    text: Optional[TextAsset] = None
    skip_reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.text is not None


def base_identifier(name: str) -> str:
    """Frame name up to its last '.' (the whole name when there is none)."""
    head, dot, _ = name.rpartition(".")
    return head if dot else name


def find_scene_text(
    frame_name: str,
    texts: Sequence[TextAsset],
    extension: str = TEXT_EXTENSION
) -> SceneLookup:
    """
    Locate the first text asset sharing the frame's base identifier.

    A text matches when its name starts with the base identifier and ends
    with ``extension``. The prefix rule is deliberately loose: ``001`` also
    matches ``0010.txt`` when that asset comes first.
    """
    base = base_identifier(frame_name)
    for text in texts:
        if text.name.startswith(base) and text.name.endswith(extension):
            return SceneLookup(frame_name=frame_name, base=base, text=text)
    return SceneLookup(
        frame_name=frame_name,
        base=base,
        skip_reason=f"no text asset starting with '{base}' and ending with '{extension}'"
    )


def scene_snippet(text: TextAsset, line_index: int) -> str:
    """Lines from ``line_index`` onward: the richer per-frame scene text."""
    return "\n".join(text.lines[line_index:])


@dataclass(frozen=True)
class AssetBundle:
    """
    Everything the extraction collaborator hands to the core.

    ``avatars`` and ``frames`` are read-only mappings keyed by asset name.
    """
    avatars: Mapping[str, ImageAsset] = field(default_factory=dict)
    frames: Mapping[str, ImageAsset] = field(default_factory=dict)
    texts: Tuple[TextAsset, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "avatars", MappingProxyType(dict(self.avatars)))
        object.__setattr__(self, "frames", MappingProxyType(dict(self.frames)))
        object.__setattr__(self, "texts", tuple(self.texts))

    @classmethod
    def from_parts(
        cls,
        avatars: Dict[str, ImageAsset],
        frames: Dict[str, ImageAsset],
        texts: Sequence[TextAsset]
    ) -> "AssetBundle":
        return cls(avatars=avatars, frames=frames, texts=tuple(texts))

    def find_text(self, filename: str) -> Optional[TextAsset]:
        """Case-insensitive exact-name lookup."""
        wanted = filename.lower()
        for text in self.texts:
            if text.name.lower() == wanted:
                return text
        return None

    @property
    def story_map(self) -> Optional[TextAsset]:
        return self.find_text(STORY_FILENAME)

    @property
    def style(self) -> Optional[TextAsset]:
        return self.find_text(STYLE_FILENAME)

    def sorted_frame_names(self) -> List[str]:
        return sorted(self.frames)

    def resolve_avatar(self, filename: Optional[str]) -> Optional[ImageAsset]:
        """Known avatar for ``filename``; anything unknown means no avatar."""
        if not filename:
            return None
        return self.avatars.get(filename)
