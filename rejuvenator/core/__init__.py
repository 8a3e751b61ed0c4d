"""
Rejuvenator Core Module

Contains core systems including configuration, constants, exceptions, logging
and the asset data model.
"""

from .config import RejuvenatorConfig, load_config, get_config, set_config
from .constants import *
from .exceptions import *
from .logging_config import setup_logging, get_logger
from .assets import (
    ImageAsset,
    TextAsset,
    AssetBundle,
    SceneLookup,
    base_identifier,
    find_scene_text,
    scene_snippet,
)

__all__ = [
    'RejuvenatorConfig',
    'load_config',
    'get_config',
    'set_config',
    'setup_logging',
    'get_logger',
    # Assets
    'ImageAsset',
    'TextAsset',
    'AssetBundle',
    'SceneLookup',
    'base_identifier',
    'find_scene_text',
    'scene_snippet',
]
