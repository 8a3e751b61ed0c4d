"""
Rejuvenator Pipelines Module

Main Pipeline:
- RejuvenationPipeline: archives -> script -> bible -> regenerated frames
  - Step 1: Script assembly (fatal when empty)
  - Step 2: Character bible
  - Step 3: Per-frame analyze / identify / localize / synthesize / generate
"""

from .base_pipeline import (
    BasePipeline,
    PipelineResult,
    PipelineStatus,
    PipelineStep,
)
from .script_assembler import AssembledScript, assemble_script
from .rejuvenation_pipeline import (
    RejuvenationPipeline,
    RejuvenationResult,
    FrameOutcome,
    FrameStatus,
    RunContext,
    RunReport,
    resolve_style,
)

__all__ = [
    'BasePipeline',
    'PipelineResult',
    'PipelineStatus',
    'PipelineStep',
    'AssembledScript',
    'assemble_script',
    'RejuvenationPipeline',
    'RejuvenationResult',
    'FrameOutcome',
    'FrameStatus',
    'RunContext',
    'RunReport',
    'resolve_style',
]
