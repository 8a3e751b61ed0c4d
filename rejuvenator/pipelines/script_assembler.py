"""
Script Assembler

Builds the canonical narrative script from per-frame text assets: for each
frame in sorted name order, the scene line (index 3 by convention) of its
matching text asset, newline-joined.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from rejuvenator.core.assets import SceneLookup, TextAsset, find_scene_text
from rejuvenator.core.constants import ASSEMBLED_SCRIPT_FILENAME, SCENE_LINE_INDEX, TEXT_EXTENSION
from rejuvenator.core.logging_config import get_logger

logger = get_logger("pipelines.script_assembler")


@dataclass
class AssembledScript:
    """The assembled script plus how each frame contributed to it."""
    lines: List[str] = field(default_factory=list)
    lookups: List[SceneLookup] = field(default_factory=list)
    short_texts: List[str] = field(default_factory=list)
    name: str = ASSEMBLED_SCRIPT_FILENAME

    @property
    def content(self) -> str:
        return "\n".join(self.lines)

    @property
    def skipped(self) -> List[SceneLookup]:
        return [lookup for lookup in self.lookups if not lookup.found]

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    def as_text_asset(self) -> TextAsset:
        return TextAsset(name=self.name, content=self.content)


def assemble_script(
    frame_names: Iterable[str],
    texts: Sequence[TextAsset],
    extension: str = TEXT_EXTENSION,
    line_index: int = SCENE_LINE_INDEX
) -> AssembledScript:
    """
    Assemble the script.

    Frames without a matching text asset are skipped with a recorded reason.
    Texts with too few lines contribute nothing. The caller decides what an
    empty result means.
    """
    script = AssembledScript()

    for frame_name in sorted(frame_names):
        lookup = find_scene_text(frame_name, texts, extension)
        script.lookups.append(lookup)

        if not lookup.found:
            logger.debug(f"No scene text for {frame_name}: {lookup.skip_reason}")
            continue

        lines = lookup.text.lines
        if len(lines) > line_index:
            script.lines.append(lines[line_index])
        else:
            script.short_texts.append(lookup.text.name)
            logger.debug(f"{lookup.text.name} has {len(lines)} lines; no scene line at index {line_index}")

    logger.info(
        f"Assembled script: {len(script.lines)} lines from {len(script.lookups)} frames "
        f"({len(script.skipped)} without text)"
    )
    return script
