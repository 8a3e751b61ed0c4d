"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

import io
import json
import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from PIL import Image

from rejuvenator.core.assets import AssetBundle, ImageAsset, TextAsset
from rejuvenator.core.config import RejuvenatorConfig
from rejuvenator.llm.api_clients import ImageResponse, TextResponse


@dataclass
class FakeCall:
    """One recorded call against the fake client."""
    method: str
    model: str
    prompt: Any
    kwargs: Dict[str, Any] = field(default_factory=dict)


class FakeGeminiClient:
    """
    Canned stand-in for GeminiClient.

    Text calls are routed by what they carry: a list of parts is frame
    analysis, the bible and synthesis instructions are recognised by their
    headers. Each canned value may be an Exception, which is raised instead.
    """

    def __init__(self):
        self.bible_text: Any = "MARCUS: sharp jaw, scar over left brow. avatar_marcus.png\nELENA: silver bob. avatar_elena.png"
        self.analysis_text: Any = "Chiaroscuro lighting, 35mm lens, subject hunched over a desk, repressed anger."
        self.synthesis_text: Any = "  Anamorphic close-up of Marcus, twitching eye in repressed rage.  "
        self.other_text: Any = ""
        self.identification: Any = {
            "characterName": "Marcus",
            "avatarFilename": "avatar_marcus.png",
            "otherCharacters": ["Elena"],
            "reasoning": "He holds the ledger.",
        }
        self.image: Any = (b"\x89PNG\r\n\x1a\nfake", "image/png")
        self.calls: List[FakeCall] = []

    @staticmethod
    def _value(value):
        if isinstance(value, Exception):
            raise value
        return value

    def calls_for(self, method: str) -> List[FakeCall]:
        return [call for call in self.calls if call.method == method]

    async def generate_text(self, prompt, model: str) -> TextResponse:
        self.calls.append(FakeCall("generate_text", model, prompt))
        if not isinstance(prompt, str):
            text = self._value(self.analysis_text)
        elif "[CINEMATIC RECONSTRUCTION INSTRUCTION]" in prompt:
            text = self._value(self.synthesis_text)
        elif "Character Bible" in prompt:
            text = self._value(self.bible_text)
        else:
            text = self._value(self.other_text)
        return TextResponse(text=text, model=model)

    async def generate_structured(self, prompt, model: str, schema) -> TextResponse:
        self.calls.append(FakeCall("generate_structured", model, prompt, {"schema": schema}))
        parsed = self._value(self.identification)
        text = parsed if isinstance(parsed, str) else json.dumps(parsed)
        if isinstance(parsed, str):
            parsed = None
        return TextResponse(text=text, model=model, parsed=parsed)

    async def generate_image(self, parts, model: str, aspect_ratio: str = "16:9") -> ImageResponse:
        self.calls.append(FakeCall("generate_image", model, list(parts), {"aspect_ratio": aspect_ratio}))
        image = self._value(self.image)
        return ImageResponse(images=[image] if image else [], model=model)


def make_image_bytes(color=(200, 30, 30), fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_zip(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def scene_text(number: int, line: str, extra: Optional[str] = None) -> str:
    lines = [f"SCENE {number}", "INT. ACCOUNTING OFFICE - NIGHT", "", line]
    if extra:
        lines.append(extra)
    return "\n".join(lines)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_client() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def rejuvenator_config() -> RejuvenatorConfig:
    """Default configuration, independent of any config file on disk."""
    return RejuvenatorConfig()


@pytest.fixture
def sample_texts() -> List[TextAsset]:
    return [
        TextAsset("scene_002.txt", scene_text(2, "Elena pockets the key while Marcus is not looking.")),
        TextAsset("scene_001.txt", scene_text(1, "Marcus slams the ledger shut and glares at Elena.", "MARCUS: You lied to me.")),
        TextAsset("story.txt", "Act one: the embezzlement is discovered."),
    ]


@pytest.fixture
def sample_bundle(png_bytes, sample_texts) -> AssetBundle:
    """Two frames with scene texts, two avatars and a story map."""
    return AssetBundle.from_parts(
        avatars={
            "avatar_marcus.png": ImageAsset("avatar_marcus.png", make_image_bytes((10, 10, 200))),
            "avatar_elena.png": ImageAsset("avatar_elena.png", make_image_bytes((10, 200, 10))),
        },
        frames={
            "scene_002.png": ImageAsset("scene_002.png", png_bytes),
            "scene_001.png": ImageAsset("scene_001.png", png_bytes),
        },
        texts=sample_texts,
    )
