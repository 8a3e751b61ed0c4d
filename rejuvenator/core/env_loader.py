"""
Environment loading and Gemini key lookup.

A ``.env`` beside the project is read once, on package import. Keys are
then looked up in a fixed order: the configured variable first, then
``GOOGLE_API_KEY``, ``GEMINI_API_KEY`` and the legacy ``API_KEY``.
Blank values count as unset.
"""

import os
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

GEMINI_KEY_VARIABLES = ("GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY")
LEGACY_KEY_VARIABLE = "API_KEY"

_env_loaded = False


def get_project_root() -> Path:
    # rejuvenator/core/env_loader.py
    return Path(__file__).resolve().parents[2]


def ensure_env_loaded(env_path: Optional[Path] = None) -> bool:
    """
    Load ``.env`` into ``os.environ`` the first time it is called.

    Values from the file replace existing ones, so an empty variable
    exported by the shell does not hide the key in ``.env``.

    Returns:
        True if a file was loaded by this call
    """
    global _env_loaded

    if _env_loaded:
        return False

    env_path = Path(env_path) if env_path else get_project_root() / ".env"
    if not env_path.exists():
        return False

    load_dotenv(env_path, override=True)
    _env_loaded = True
    return True


def gemini_key_names(preferred: Optional[str] = None) -> List[str]:
    """Variable names to try, ``preferred`` first and without duplicates."""
    names = list(GEMINI_KEY_VARIABLES)
    if preferred:
        names = [preferred] + [name for name in names if name != preferred]
    return names


def find_gemini_key(preferred: Optional[str] = None) -> Optional[Tuple[str, str]]:
    """Return ``(variable, value)`` for the first non-blank key, or None."""
    ensure_env_loaded()
    for name in gemini_key_names(preferred):
        value = (os.getenv(name) or "").strip()
        if value:
            return name, value
    return None


def get_google_api_key(preferred: Optional[str] = None) -> Optional[str]:
    found = find_gemini_key(preferred)
    return found[1] if found else None
