"""
Rejuvenator Custom Exceptions

Custom exception classes for error handling throughout the rejuvenation system.
"""


class RejuvenatorError(Exception):
    """Base exception for all Rejuvenator errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(RejuvenatorError):
    """Raised when there's an issue with configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration is missing."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""
    pass


# =============================================================================
# ASSET ERRORS
# =============================================================================

class AssetError(RejuvenatorError):
    """Base exception for asset loading errors."""
    pass


class ArchiveReadError(AssetError):
    """Raised when an uploaded archive cannot be decoded."""

    def __init__(self, archive: str, reason: str):
        message = f"Could not read archive '{archive}': {reason}"
        super().__init__(message, {"archive": archive, "reason": reason})


# =============================================================================
# PIPELINE ERRORS
# =============================================================================

class PipelineError(RejuvenatorError):
    """Base exception for pipeline errors."""
    pass


class EmptyScriptError(PipelineError):
    """Raised when the assembled script is empty; halts the run before any AI call."""

    def __init__(self, frame_count: int = 0, skipped: int = 0):
        message = "Generated script is empty. Cannot create bible. Process halted."
        super().__init__(message, {"frames": frame_count, "skipped": skipped})


# =============================================================================
# LLM ERRORS
# =============================================================================

class LLMError(RejuvenatorError):
    """Base exception for LLM-related errors."""
    pass


class LLMProviderError(LLMError):
    """Raised when there's an issue with an LLM provider."""

    def __init__(self, provider: str, reason: str):
        message = f"LLM provider '{provider}' error: {reason}"
        super().__init__(message, {"provider": provider, "reason": reason})


class LLMResponseError(LLMError):
    """Raised when LLM response is invalid or unexpected."""
    pass


class ContentBlockedError(LLMProviderError):
    """Raised when content is blocked by provider's safety filters."""

    def __init__(self, provider: str, reason: str):
        super().__init__(provider, reason)
        self.message = f"Content blocked by {provider}: {reason}"
        self.is_content_block = True
