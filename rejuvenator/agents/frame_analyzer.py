"""
Frame Visual Analyzer

Deconstructs a rough frame (lighting, lens, pose, environment, emotion) on
the fast vision tier. Runs once per frame.
"""

from datetime import datetime

from rejuvenator.core.constants import (
    ANALYSIS_EMPTY_SENTINEL,
    ANALYSIS_ERROR_SENTINEL,
    ModelTier,
)
from rejuvenator.core.logging_config import get_logger
from rejuvenator.llm.api_clients import ContentPart
from .base_agent import AgentConfig, BaseAgent, GenerativeClient
from .prompts import AgentPromptLibrary

logger = get_logger("agents.frame_analyzer")


class FrameAnalyzer(BaseAgent):
    """Visual analysis of a single frame."""

    def __init__(self, client: GenerativeClient, model: str):
        super().__init__(
            AgentConfig(
                name="frame_analyzer",
                description="Lighting, lens, pose, environment and emotion of a frame",
                model=model,
                tier=ModelTier.FLASH,
            ),
            client,
        )

    async def analyze(self, image_bytes: bytes, mime_type: str) -> str:
        """Describe the frame; a sentinel string stands in for any failure."""
        parts = [
            ContentPart.from_image(image_bytes, mime_type),
            ContentPart.from_text(AgentPromptLibrary.FRAME_ANALYSIS),
        ]
        started = datetime.now()
        try:
            response = await self.client.generate_text(parts, model=self.model)
        except Exception as e:
            logger.warning(f"Image analysis failed: {e}")
            self._log_execution(len(AgentPromptLibrary.FRAME_ANALYSIS), 0, started, success=False)
            return ANALYSIS_ERROR_SENTINEL

        self._log_execution(
            len(AgentPromptLibrary.FRAME_ANALYSIS), len(response.text or ""), started, success=True
        )
        return response.text or ANALYSIS_EMPTY_SENTINEL
