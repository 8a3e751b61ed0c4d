"""
Character Identifier

Cross-references scene text, the frame's visual analysis and the character
bible to decide who is on screen and which avatar represents them. The
response is schema-constrained JSON; anything unusable falls back to
``Unknown`` with no avatar. Fields are defaulted one at a time, so a
mistyped ``otherCharacters`` does not cost a valid name or avatar.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rejuvenator.core.constants import IDENTIFIER_BIBLE_CAP, UNKNOWN_CHARACTER, ModelTier
from rejuvenator.core.logging_config import get_logger
from .base_agent import AgentConfig, BaseAgent, GenerativeClient, truncate
from .prompts import AgentPromptLibrary

logger = get_logger("agents.character_identifier")


class CharacterIdentification(BaseModel):
    """Response schema for the identification call."""
    model_config = ConfigDict(populate_by_name=True)

    character_name: Optional[str] = Field(default=None, alias="characterName")
    avatar_filename: Optional[str] = Field(default=None, alias="avatarFilename")
    other_characters: Optional[List[str]] = Field(default=None, alias="otherCharacters")
    reasoning: Optional[str] = None

    @field_validator("character_name", "avatar_filename", "reasoning", mode="before")
    @classmethod
    def string_or_none(cls, value):
        return value if isinstance(value, str) else None

    @field_validator("other_characters", mode="before")
    @classmethod
    def string_entries(cls, value):
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str)]
        return None


@dataclass(frozen=True)
class CharacterMapping:
    """
    Who is on screen in one frame. Derived fresh per frame, never cached.

    ``fallback_reason`` is set when the mapping is the safe default rather
    than a parsed response.
    """
    character_name: str = UNKNOWN_CHARACTER
    avatar_filename: Optional[str] = None
    other_characters: List[str] = field(default_factory=list)
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    @classmethod
    def fallback(cls, reason: str) -> "CharacterMapping":
        return cls(fallback_reason=reason)

    @classmethod
    def from_identification(cls, result: CharacterIdentification) -> "CharacterMapping":
        return cls(
            character_name=result.character_name or UNKNOWN_CHARACTER,
            avatar_filename=result.avatar_filename or None,
            other_characters=list(result.other_characters or []),
        )


class CharacterIdentifier(BaseAgent):
    """Maps the on-screen subject to a bible character and avatar."""

    def __init__(
        self,
        client: GenerativeClient,
        model: str,
        bible_cap: int = IDENTIFIER_BIBLE_CAP
    ):
        super().__init__(
            AgentConfig(
                name="character_identifier",
                description="Scene text + visual analysis + bible -> character mapping",
                model=model,
                tier=ModelTier.FLASH,
            ),
            client,
        )
        self.bible_cap = bible_cap

    def build_prompt(self, scene_text: str, visual_analysis: str, bible: str) -> str:
        return AgentPromptLibrary.render(
            "character_identification",
            scene_text=scene_text,
            visual_analysis=visual_analysis,
            bible_excerpt=truncate(bible, self.bible_cap),
        )

    async def identify(self, scene_text: str, visual_analysis: str, bible: str) -> CharacterMapping:
        """Identify the primary subject. Never raises."""
        prompt = self.build_prompt(scene_text, visual_analysis, bible)
        started = datetime.now()
        try:
            response = await self.client.generate_structured(
                prompt, model=self.model, schema=CharacterIdentification
            )
        except Exception as e:
            logger.warning(f"Character identification request failed: {e}")
            self._log_execution(len(prompt), 0, started, success=False)
            return CharacterMapping.fallback(f"request failed: {e}")

        self._log_execution(len(prompt), len(response.text or ""), started, success=True)
        return self.parse_response(response.parsed)

    def parse_response(self, parsed) -> CharacterMapping:
        """Turn decoded JSON into a mapping, falling back on anything unusable."""
        if parsed is None:
            return CharacterMapping.fallback("response was not valid JSON")
        if not isinstance(parsed, dict):
            return CharacterMapping.fallback(f"expected a JSON object, got {type(parsed).__name__}")
        return CharacterMapping.from_identification(CharacterIdentification.model_validate(parsed))
