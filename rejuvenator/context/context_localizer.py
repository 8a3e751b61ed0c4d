"""
Context Localizer

Derives a local window of narrative context for one frame by anchoring the
frame's scene snippet inside the assembled script.
"""

from dataclasses import dataclass

from rejuvenator.core.constants import ANCHOR_LENGTH, CONTEXT_AFTER, CONTEXT_BEFORE


@dataclass(frozen=True)
class ContextWindow:
    """Where the anchor landed and the clamped window around it."""
    anchor: str
    position: int
    start: int
    end: int
    text: str

    @property
    def found(self) -> bool:
        return self.position >= 0


class ContextLocalizer:
    """
    String-anchored lookup into the assembled script.

    The anchor is the first ``anchor_length`` characters of the snippet; the
    window spans ``before`` characters ahead of the first match and ``after``
    characters from it, clamped to the script.
    """

    def __init__(
        self,
        anchor_length: int = ANCHOR_LENGTH,
        before: int = CONTEXT_BEFORE,
        after: int = CONTEXT_AFTER
    ):
        self.anchor_length = anchor_length
        self.before = before
        self.after = after

    def window(self, assembled_script: str, scene_snippet: str) -> ContextWindow:
        anchor = scene_snippet[:self.anchor_length]
        # An empty anchor would match at 0 and return unrelated context
        position = assembled_script.find(anchor) if anchor else -1
        if position < 0:
            return ContextWindow(anchor=anchor, position=-1, start=0, end=0, text="")

        start = max(0, position - self.before)
        end = min(len(assembled_script), position + self.after)
        return ContextWindow(
            anchor=anchor,
            position=position,
            start=start,
            end=end,
            text=assembled_script[start:end],
        )

    def localize(self, assembled_script: str, scene_snippet: str) -> str:
        """Context text around the snippet, or "" when the anchor is absent."""
        return self.window(assembled_script, scene_snippet).text


def localize(assembled_script: str, scene_snippet: str) -> str:
    """Module-level shortcut with the default budgets."""
    return ContextLocalizer().localize(assembled_script, scene_snippet)
