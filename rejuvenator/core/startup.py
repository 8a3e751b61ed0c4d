"""
Startup validation and environment checks.

Validates the Gemini API key and configuration before a production run.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .config import RejuvenatorConfig
from .env_loader import LEGACY_KEY_VARIABLE, find_gemini_key, gemini_key_names
from .exceptions import InvalidConfigError


@dataclass
class ValidationResult:
    """Result of environment validation."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def validate_environment(config: Optional[RejuvenatorConfig] = None) -> ValidationResult:
    """
    Validate the environment configuration.

    Checks:
    - A Gemini API key is set (the configured variable or one of the fallbacks)
    - The configuration values are valid

    Returns:
        ValidationResult with validation status and any errors/warnings
    """
    errors = []
    warnings = []

    preferred = config.models.api_key_env if config else None
    found = find_gemini_key(preferred)
    if found is None:
        errors.append(
            "No Gemini API key found. Set at least one of: " + ", ".join(gemini_key_names(preferred))
        )
    elif found[0] == LEGACY_KEY_VARIABLE:
        warnings.append("Using generic API_KEY - prefer GOOGLE_API_KEY or GEMINI_API_KEY")

    if config:
        try:
            config.validate()
        except InvalidConfigError as e:
            errors.append(str(e))
        if not config.models.image_model:
            errors.append("No image model configured")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings
    )
