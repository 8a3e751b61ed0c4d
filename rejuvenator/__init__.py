"""
Frame Rejuvenator - AI-Powered Film Frame Regeneration

Resolves which character appears in each rough film frame, builds a
character bible from the script, writes a per-frame generation prompt and
requests a replacement image that carries the avatar's identity over the
original composition.

Version: 1.0.0
"""

__version__ = "1.0.0"
__project__ = "Frame Rejuvenator"

# Load environment variables early - before any other imports that might need them
from rejuvenator.core.env_loader import ensure_env_loaded
ensure_env_loaded()

__all__ = [
    "__version__",
    "__project__",
]
