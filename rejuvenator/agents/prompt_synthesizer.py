"""
Prompt Synthesizer

Folds every per-frame signal (scene text, identity, bible traits, style,
visual analysis, localized script context, story map) into the instruction
consumed by the image model.
"""

from datetime import datetime
from typing import Optional, Sequence

from rejuvenator.core.constants import (
    DEFAULT_STORY_MAP,
    PROMPT_EMPTY_FALLBACK,
    PROMPT_ERROR_FALLBACK,
    SYNTHESIS_BIBLE_CAP,
    SYNTHESIS_CONTEXT_CAP,
    ModelTier,
)
from rejuvenator.core.logging_config import get_logger
from .base_agent import AgentConfig, BaseAgent, GenerativeClient, truncate
from .prompts import AgentPromptLibrary

logger = get_logger("agents.prompt_synthesizer")


class PromptSynthesizer(BaseAgent):
    """Writes the final generation prompt for one frame."""

    def __init__(
        self,
        client: GenerativeClient,
        model: str,
        bible_cap: int = SYNTHESIS_BIBLE_CAP,
        context_cap: int = SYNTHESIS_CONTEXT_CAP
    ):
        super().__init__(
            AgentConfig(
                name="prompt_synthesizer",
                description="Final image-generation instruction per frame",
                model=model,
                tier=ModelTier.PRO,
            ),
            client,
        )
        self.bible_cap = bible_cap
        self.context_cap = context_cap

    def build_prompt(
        self,
        scene_text: str,
        character_name: str,
        other_characters: Sequence[str],
        bible: str,
        style: str,
        visual_analysis: str,
        localized_context: str,
        story_map: Optional[str] = None
    ) -> str:
        return AgentPromptLibrary.render(
            "prompt_synthesis",
            story_map=story_map or DEFAULT_STORY_MAP,
            scene_text=scene_text,
            script_context=truncate(localized_context, self.context_cap),
            character_name=character_name,
            bible_excerpt=truncate(bible, self.bible_cap),
            other_characters=", ".join(other_characters) if other_characters else "None",
            visual_analysis=visual_analysis,
            style=style,
        )

    async def synthesize(
        self,
        scene_text: str,
        character_name: str,
        other_characters: Sequence[str],
        bible: str,
        style: str,
        visual_analysis: str,
        localized_context: str,
        story_map: Optional[str] = None
    ) -> str:
        """Return the trimmed prompt, or a generic cinematic fallback."""
        prompt = self.build_prompt(
            scene_text, character_name, other_characters, bible,
            style, visual_analysis, localized_context, story_map,
        )
        started = datetime.now()
        try:
            response = await self.client.generate_text(prompt, model=self.model)
        except Exception as e:
            logger.warning(f"Prompt synthesis failed: {e}")
            self._log_execution(len(prompt), 0, started, success=False)
            return PROMPT_ERROR_FALLBACK

        text = (response.text or "").strip()
        self._log_execution(len(prompt), len(text), started, success=True)
        return text or PROMPT_EMPTY_FALLBACK
