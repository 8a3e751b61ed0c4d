"""
Rejuvenator LLM Module

Gemini client and the backend-neutral request/response types.
"""

from .api_clients import (
    GeminiClient,
    ContentPart,
    TextResponse,
    ImageResponse,
    parse_json_from_text,
)

__all__ = [
    'GeminiClient',
    'ContentPart',
    'TextResponse',
    'ImageResponse',
    'parse_json_from_text',
]
