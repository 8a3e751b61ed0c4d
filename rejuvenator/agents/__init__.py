"""
Rejuvenator Agents Module

Generative pipeline stages: bible building, frame analysis, character
identification and prompt synthesis.
"""

from .base_agent import BaseAgent, AgentConfig, GenerativeClient, truncate
from .prompts import AgentPrompt, AgentPromptLibrary
from .bible_builder import BibleBuilder
from .frame_analyzer import FrameAnalyzer
from .character_identifier import (
    CharacterIdentifier,
    CharacterIdentification,
    CharacterMapping,
)
from .prompt_synthesizer import PromptSynthesizer

__all__ = [
    'BaseAgent',
    'AgentConfig',
    'GenerativeClient',
    'truncate',
    'AgentPrompt',
    'AgentPromptLibrary',
    'BibleBuilder',
    'FrameAnalyzer',
    'CharacterIdentifier',
    'CharacterIdentification',
    'CharacterMapping',
    'PromptSynthesizer',
]
