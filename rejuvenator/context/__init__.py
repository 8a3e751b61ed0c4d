"""
Rejuvenator Context Module

Localized script context for per-frame resolution.
"""

from .context_localizer import ContextLocalizer, ContextWindow, localize

__all__ = [
    'ContextLocalizer',
    'ContextWindow',
    'localize',
]
