"""
Image Handler - Identity Transplant / Cinematic Re-render

Builds the ordered multimodal payload for the image model and extracts the
first inline image from the response.

Two request shapes:
- With avatar: prompt, transplant instruction, avatar label, avatar image,
  scene label, scene image. Instructions precede the images they govern.
- Without avatar: cinematic re-render instruction, scene image.
"""

from __future__ import annotations

import io
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from rejuvenator.agents.prompts import AgentPromptLibrary
from rejuvenator.core.assets import ImageAsset
from rejuvenator.core.constants import DEFAULT_ASPECT_RATIO, DEFAULT_MODELS, ModelTier
from rejuvenator.core.logging_config import get_logger
from rejuvenator.llm.api_clients import ContentPart

if TYPE_CHECKING:
    from rejuvenator.agents.base_agent import GenerativeClient

logger = get_logger("core.image_handler")


@dataclass
class ImageRequest:
    """Image generation request."""
    prompt: str
    scene: ImageAsset
    avatar: Optional[ImageAsset] = None
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def uses_avatar(self) -> bool:
        return self.avatar is not None


@dataclass
class ImageResult:
    """Image generation result."""
    success: bool
    image_data: Optional[bytes] = None
    mime_type: Optional[str] = None
    model_used: str = ""
    error: Optional[str] = None
    generation_time_ms: int = 0


def build_parts(request: ImageRequest) -> List[ContentPart]:
    """Ordered payload for the request; the order is part of the contract."""
    if request.avatar is not None:
        return [
            ContentPart.from_text(AgentPromptLibrary.IDENTITY_PROMPT.format(prompt=request.prompt)),
            ContentPart.from_text(AgentPromptLibrary.IDENTITY_TRANSPLANT),
            ContentPart.from_text(AgentPromptLibrary.AVATAR_LABEL),
            ContentPart.from_image(request.avatar.data, request.avatar.mime_type),
            ContentPart.from_text(AgentPromptLibrary.SCENE_LABEL),
            ContentPart.from_image(request.scene.data, request.scene.mime_type),
        ]
    return [
        ContentPart.from_text(AgentPromptLibrary.CINEMATIC_RERENDER.format(prompt=request.prompt)),
        ContentPart.from_image(request.scene.data, request.scene.mime_type),
    ]


def ensure_png(image_data: bytes, mime_type: Optional[str]) -> bytes:
    """Re-encode non-PNG output as PNG so ``*_rejuvenated.png`` holds PNG data."""
    if mime_type == "image/png":
        return image_data
    try:
        with Image.open(io.BytesIO(image_data)) as img:
            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not re-encode {mime_type} output as PNG, keeping original bytes: {e}")
        return image_data


class ImageHandler:
    """
    Image generation against the configured image model.

    Usage:
        handler = ImageHandler(client, model="gemini-2.5-flash-image")
        image = await handler.generate(prompt, avatar, scene, "16:9")
    """

    def __init__(self, client: "GenerativeClient", model: str = DEFAULT_MODELS[ModelTier.IMAGE]):
        self.client = client
        self.model = model

    async def generate_result(self, request: ImageRequest) -> ImageResult:
        """Run one request. Every failure becomes an unsuccessful ImageResult."""
        start_time = time.time()
        parts = build_parts(request)
        mode = "identity transplant" if request.uses_avatar else "cinematic re-render"
        logger.debug(f"Generating {mode} for {request.scene.name} ({len(parts)} parts)")

        try:
            response = await self.client.generate_image(
                parts, model=self.model, aspect_ratio=request.aspect_ratio
            )
        except Exception as e:
            logger.error(f"Revision error for {request.scene.name}: {e}")
            return ImageResult(
                success=False,
                error=str(e),
                model_used=self.model,
                generation_time_ms=int((time.time() - start_time) * 1000)
            )

        elapsed = int((time.time() - start_time) * 1000)
        first = response.first_image
        if first is None:
            return ImageResult(
                success=False,
                error="No image in response",
                model_used=self.model,
                generation_time_ms=elapsed
            )

        image_data, mime_type = first
        return ImageResult(
            success=True,
            image_data=image_data,
            mime_type=mime_type,
            model_used=self.model,
            generation_time_ms=elapsed
        )

    async def generate(
        self,
        prompt: str,
        avatar: Optional[ImageAsset],
        scene: ImageAsset,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO
    ) -> Optional[bytes]:
        """Generated image bytes, or None when the service returned no image."""
        result = await self.generate_result(
            ImageRequest(prompt=prompt, scene=scene, avatar=avatar, aspect_ratio=aspect_ratio)
        )
        return result.image_data if result.success else None
