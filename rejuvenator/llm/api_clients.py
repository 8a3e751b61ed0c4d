"""
Rejuvenator API Clients

Async Gemini client used by every pipeline stage.

Supports:
- Text generation (bible, prompt synthesis)
- Vision analysis (image parts + instruction)
- Schema-constrained JSON output (character identification)
- Image generation with ordered multimodal payloads (Nano Banana)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple, Type, Union

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from rejuvenator.core.env_loader import get_google_api_key
from rejuvenator.core.exceptions import (
    ContentBlockedError,
    LLMProviderError,
    LLMResponseError,
    MissingConfigError,
)
from rejuvenator.core.logging_config import get_logger

logger = get_logger("llm.api_clients")

PROVIDER = "google"

# Finish reasons that indicate the candidate was withheld
BLOCKED_FINISH_REASONS = {"SAFETY", "RECITATION", "PROHIBITED_CONTENT", "BLOCKLIST", "IMAGE_SAFETY"}


# ============================================================================
#  CONTENT PARTS
# ============================================================================

@dataclass(frozen=True)
class ContentPart:
    """One ordered element of a multimodal request: text or inline image."""
    text: Optional[str] = None
    data: Optional[bytes] = field(default=None, repr=False)
    mime_type: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        return cls(text=text)

    @classmethod
    def from_image(cls, data: bytes, mime_type: str) -> "ContentPart":
        return cls(data=data, mime_type=mime_type)

    @property
    def is_image(self) -> bool:
        return self.data is not None


PromptInput = Union[str, Sequence[ContentPart]]


# ============================================================================
#  RESPONSE TYPES
# ============================================================================

@dataclass
class TextResponse:
    """Response from text generation API."""
    text: str
    model: str
    parsed: Optional[Any] = None
    raw_response: Optional[Any] = None


@dataclass
class ImageResponse:
    """Response from image generation API."""
    images: List[Tuple[bytes, str]]  # List of (image_data, mime_type)
    model: str
    text: str = ""
    raw_response: Optional[Any] = None

    @property
    def first_image(self) -> Optional[Tuple[bytes, str]]:
        return self.images[0] if self.images else None


def parse_json_from_text(text: str) -> Optional[Any]:
    """Parse JSON from text, handling markdown code blocks."""
    text = (text or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        return None


# ============================================================================
#  GEMINI CLIENT
# ============================================================================

class GeminiClient:
    """
    Client for the Google Gemini API on top of the google-genai SDK.

    Every call is awaited on the SDK's async surface; no timeout is imposed
    here. Failures surface as LLMProviderError / ContentBlockedError and are
    converted to sentinels by the calling component.
    """

    MODEL_DISPLAY_NAME = "Gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_key_env: str = "GOOGLE_API_KEY",
        client: Optional[genai.Client] = None
    ):
        if client is None:
            api_key = api_key or get_google_api_key(api_key_env)
            if not api_key:
                raise MissingConfigError(
                    f"{self.__class__.__name__} requires an API key ({api_key_env})",
                    {"env": api_key_env}
                )
            client = genai.Client(api_key=api_key)
        self._client = client

    @staticmethod
    def _to_contents(prompt: PromptInput) -> Union[str, List[types.Part]]:
        if isinstance(prompt, str):
            return prompt
        contents = []
        for part in prompt:
            if part.is_image:
                contents.append(types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
            else:
                contents.append(types.Part.from_text(text=part.text or ""))
        return contents

    async def _generate(
        self,
        model: str,
        prompt: PromptInput,
        config: Optional[types.GenerateContentConfig] = None
    ) -> types.GenerateContentResponse:
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=self._to_contents(prompt),
                config=config,
            )
        except genai_errors.APIError as e:
            error_msg = str(e)
            if "PROHIBITED_CONTENT" in error_msg or "block_reason" in error_msg:
                raise ContentBlockedError(PROVIDER, error_msg)
            raise LLMProviderError(PROVIDER, error_msg)

        self._check_blocked(response)
        return response

    @staticmethod
    def _check_blocked(response: types.GenerateContentResponse) -> None:
        """Raise ContentBlockedError when the prompt or candidate was withheld."""
        if not response.candidates:
            block_reason = "UNKNOWN"
            feedback = getattr(response, "prompt_feedback", None)
            if feedback is not None and getattr(feedback, "block_reason", None):
                block_reason = str(feedback.block_reason)
            logger.warning(f"Gemini returned no candidates: {block_reason}")
            raise ContentBlockedError(PROVIDER, f"block_reason: {block_reason}")

        finish_reason = response.candidates[0].finish_reason
        reason_name = getattr(finish_reason, "name", str(finish_reason or ""))
        if reason_name in BLOCKED_FINISH_REASONS:
            logger.warning(f"Gemini blocked content: finish_reason={reason_name}")
            raise ContentBlockedError(PROVIDER, f"finish_reason: {reason_name}")

    @staticmethod
    def _response_parts(response: types.GenerateContentResponse) -> List[types.Part]:
        candidate = response.candidates[0]
        if candidate.content is None or not candidate.content.parts:
            return []
        return list(candidate.content.parts)

    def _collect_text(self, response: types.GenerateContentResponse) -> str:
        return "".join(
            part.text for part in self._response_parts(response)
            if part.text and not getattr(part, "thought", False)
        )

    async def generate_text(self, prompt: PromptInput, model: str) -> TextResponse:
        """Generate free text from a prompt or an ordered list of parts."""
        response = await self._generate(model, prompt)
        return TextResponse(text=self._collect_text(response), model=model, raw_response=response)

    async def generate_structured(
        self,
        prompt: PromptInput,
        model: str,
        schema: Type[BaseModel]
    ) -> TextResponse:
        """
        Generate schema-constrained JSON.

        ``parsed`` holds the decoded JSON (or None); validating it against
        the schema is left to the caller.
        """
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await self._generate(model, prompt, config)
        text = self._collect_text(response)
        return TextResponse(
            text=text,
            model=model,
            parsed=parse_json_from_text(text),
            raw_response=response,
        )

    async def generate_image(
        self,
        parts: Sequence[ContentPart],
        model: str,
        aspect_ratio: str = "16:9"
    ) -> ImageResponse:
        """Generate an image from ordered parts; returns every inline image found."""
        if not parts:
            raise LLMResponseError("Image generation requires at least one content part")

        config = types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
        )
        response = await self._generate(model, parts, config)

        images: List[Tuple[bytes, str]] = []
        for part in self._response_parts(response):
            inline = part.inline_data
            if inline is not None and inline.data:
                images.append((inline.data, inline.mime_type or "image/png"))

        return ImageResponse(
            images=images,
            model=model,
            text=self._collect_text(response),
            raw_response=response,
        )
