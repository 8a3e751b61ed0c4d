"""
Rejuvenator Constants

Global constants used throughout the rejuvenation pipeline.
"""

from enum import Enum

# =============================================================================
# VERSION INFO
# =============================================================================
VERSION = "1.0.0"
PROJECT_NAME = "Frame Rejuvenator"

# =============================================================================
# MODEL TIERS
# =============================================================================

class ModelTier(Enum):
    """Model tiers used by the pipeline stages."""
    PRO = "pro"        # High-capability text: bible, prompt synthesis
    FLASH = "flash"    # Fast vision/text: frame analysis, identification
    IMAGE = "image"    # Image generation

DEFAULT_MODELS = {
    ModelTier.PRO: "gemini-3-pro-preview",
    ModelTier.FLASH: "gemini-3-flash-preview",
    ModelTier.IMAGE: "gemini-2.5-flash-image",
}

# =============================================================================
# CONTEXT-WINDOW BUDGETS (characters)
# =============================================================================
BIBLE_SCRIPT_CAP = 15000        # Script excerpt embedded in the bible request
IDENTIFIER_BIBLE_CAP = 8000     # Bible embedded in the identification request
SYNTHESIS_BIBLE_CAP = 1000      # Bible traits embedded in prompt synthesis
SYNTHESIS_CONTEXT_CAP = 1500    # Localized script context in prompt synthesis

# Context localization
ANCHOR_LENGTH = 40
CONTEXT_BEFORE = 1000
CONTEXT_AFTER = 3000

# =============================================================================
# ASSET CONVENTIONS
# =============================================================================

# Per-frame text assets carry the canonical scene line at this index
SCENE_LINE_INDEX = 3
TEXT_EXTENSION = ".txt"

STORY_FILENAME = "story.txt"
STYLE_FILENAME = "style.txt"

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "webp")
TEXT_EXTENSIONS = ("txt", "md")
ARCHIVE_EXTENSION = "zip"

AVATAR_ARCHIVE_MARKER = "avatars"
FRAME_ARCHIVE_MARKER = "processed"

# =============================================================================
# OUTPUT ARTIFACTS
# =============================================================================
ASSEMBLED_SCRIPT_FILENAME = "hs4000.txt"
BIBLE_FILENAME = "bible.txt"
RUN_LOG_FILENAME = "run_log.txt"
OUTPUT_IMAGE_SUFFIX = "_rejuvenated.png"
META_SUFFIX = "_meta.txt"

# =============================================================================
# STYLE / IMAGE DEFAULTS
# =============================================================================
DEFAULT_STYLE = "cinematic film grain, high-key lighting, vibrant reds and deep blacks."
DEFAULT_ASPECT_RATIO = "16:9"
VALID_ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")
DEFAULT_STORY_MAP = "Standard narrative arc."

# =============================================================================
# SENTINEL / FALLBACK VALUES
# =============================================================================
BIBLE_ERROR_SENTINEL = "Error creating Character Bible."
BIBLE_EMPTY_SENTINEL = "Character Bible generation failed."

ANALYSIS_ERROR_SENTINEL = "Image analysis failed."
ANALYSIS_EMPTY_SENTINEL = "Visual analysis unavailable."

UNKNOWN_CHARACTER = "Unknown"

PROMPT_ERROR_FALLBACK = "Cinematic film frame, professional lighting."
PROMPT_EMPTY_FALLBACK = "Masterpiece film frame, cinematic lighting, ultra-detailed characters."
