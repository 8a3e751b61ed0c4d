"""
Character Bible Builder

One large-context call over the avatar list and the assembled script that
produces the run's consistency reference. Runs once per run on the
high-capability tier.
"""

from datetime import datetime
from typing import Sequence

from rejuvenator.core.constants import (
    BIBLE_EMPTY_SENTINEL,
    BIBLE_ERROR_SENTINEL,
    BIBLE_SCRIPT_CAP,
    ModelTier,
)
from rejuvenator.core.logging_config import get_logger
from .base_agent import AgentConfig, BaseAgent, GenerativeClient, truncate
from .prompts import AgentPromptLibrary

logger = get_logger("agents.bible_builder")


class BibleBuilder(BaseAgent):
    """Builds the free-text character bible."""

    def __init__(
        self,
        client: GenerativeClient,
        model: str,
        script_cap: int = BIBLE_SCRIPT_CAP
    ):
        super().__init__(
            AgentConfig(
                name="bible_builder",
                description="Character bible from avatar list and full script",
                model=model,
                tier=ModelTier.PRO,
            ),
            client,
        )
        self.script_cap = script_cap

    def build_prompt(self, avatar_names: Sequence[str], script: str) -> str:
        return AgentPromptLibrary.render(
            "character_bible",
            avatar_list=", ".join(avatar_names),
            script_excerpt=truncate(script, self.script_cap),
        )

    async def build(self, avatar_names: Sequence[str], script: str) -> str:
        """
        Build the bible.

        Returns the sentinel failure string instead of raising; downstream
        stages treat whatever comes back as opaque context.
        """
        prompt = self.build_prompt(avatar_names, script)
        started = datetime.now()
        try:
            response = await self.client.generate_text(prompt, model=self.model)
        except Exception as e:
            logger.error(f"Error creating Bible: {e}")
            self._log_execution(len(prompt), 0, started, success=False)
            return BIBLE_ERROR_SENTINEL

        self._log_execution(len(prompt), len(response.text or ""), started, success=True)
        return response.text or BIBLE_EMPTY_SENTINEL
