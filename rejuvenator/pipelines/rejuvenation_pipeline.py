"""
Rejuvenation Pipeline

Orchestration driver for a full production run:

1. assemble_script - canonical script from per-frame texts (fatal if empty)
2. build_bible     - one character bible for the whole run
3. process_frames  - per frame, in sorted name order:
                     analyze -> identify -> localize -> synthesize -> generate

Frames run strictly one after another. Component failures degrade to
fallback values; an exception inside one frame is logged and recorded as a
failed outcome, and the run moves on to the next frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from rejuvenator.agents import (
    BibleBuilder,
    CharacterIdentifier,
    FrameAnalyzer,
    GenerativeClient,
    PromptSynthesizer,
)
from rejuvenator.context import ContextLocalizer
from rejuvenator.core.assets import AssetBundle, find_scene_text, scene_snippet
from rejuvenator.core.config import RejuvenatorConfig, get_config
from rejuvenator.core.constants import (
    BIBLE_FILENAME,
    META_SUFFIX,
    OUTPUT_IMAGE_SUFFIX,
)
from rejuvenator.core.exceptions import EmptyScriptError
from rejuvenator.core.image_handler import ImageHandler, ImageRequest, ensure_png
from rejuvenator.core.logging_config import get_logger
from rejuvenator.utils.file_utils import ArtifactWriter

from .base_pipeline import BasePipeline, PipelineStep
from .script_assembler import AssembledScript, assemble_script

logger = get_logger("pipelines.rejuvenation")


class FrameStatus(Enum):
    """How a single frame ended."""
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RejuvenationResult:
    """One successfully regenerated frame."""
    original_frame_name: str
    output_frame_name: str
    image_bytes: bytes = field(repr=False)
    prompt_text: str


@dataclass(frozen=True)
class FrameOutcome:
    """Per-frame record; ``reason`` explains skips and failures."""
    frame_name: str
    status: FrameStatus
    reason: Optional[str] = None
    character_name: Optional[str] = None
    avatar_filename: Optional[str] = None
    prompt_text: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == FrameStatus.COMPLETED


@dataclass(frozen=True)
class RunContext:
    """Run-wide state shared by every frame; fixed once the bible exists."""
    bundle: AssetBundle
    script: str
    bible: str
    style: str
    story_map: Optional[str] = None
    aspect_ratio: str = "16:9"


@dataclass
class RunReport:
    """Everything a run produced, in frame order."""
    script: AssembledScript
    bible: str
    results: List[RejuvenationResult] = field(default_factory=list)
    outcomes: List[FrameOutcome] = field(default_factory=list)

    def _count(self, status: FrameStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def completed_count(self) -> int:
        return self._count(FrameStatus.COMPLETED)

    @property
    def skipped_count(self) -> int:
        return self._count(FrameStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(FrameStatus.FAILED)

    def summary(self) -> Dict[str, Any]:
        return {
            'frames': len(self.outcomes),
            'completed': self.completed_count,
            'skipped': self.skipped_count,
            'failed': self.failed_count,
            'script_lines': len(self.script.lines),
        }


FrameCallback = Callable[[int, int, FrameOutcome], None]


def resolve_style(bundle: AssetBundle, override: Optional[str], default: str) -> str:
    """Explicit override, then the archive's style.txt, then the configured default."""
    if override:
        return override
    style = bundle.style
    if style is not None and style.content.strip():
        return style.content
    return default


class RejuvenationPipeline(BasePipeline[AssetBundle, RunReport]):
    """
    Full production run over an asset bundle.

    Usage:
        pipeline = RejuvenationPipeline(GeminiClient(), writer=DirectoryArtifactWriter("out"))
        result = await pipeline.run(bundle)
        if result.success:
            report = result.output
    """

    def __init__(
        self,
        client: GenerativeClient,
        config: Optional[RejuvenatorConfig] = None,
        writer: Optional[ArtifactWriter] = None,
        style_override: Optional[str] = None
    ):
        self.config = config or get_config()
        self.client = client
        self.writer = writer
        self.style_override = style_override
        self._frame_callback: Optional[FrameCallback] = None

        models = self.config.models
        budgets = self.config.budgets
        self.bible_builder = BibleBuilder(client, models.bible_model, budgets.bible_script_cap)
        self.analyzer = FrameAnalyzer(client, models.analysis_model)
        self.identifier = CharacterIdentifier(client, models.identify_model, budgets.identifier_bible_cap)
        self.synthesizer = PromptSynthesizer(
            client,
            models.synthesis_model,
            bible_cap=budgets.synthesis_bible_cap,
            context_cap=budgets.synthesis_context_cap,
        )
        self.localizer = ContextLocalizer(
            anchor_length=budgets.anchor_length,
            before=budgets.context_before,
            after=budgets.context_after,
        )
        self.image_handler = ImageHandler(client, models.image_model)

        super().__init__("Frame Rejuvenation")

    def _define_steps(self) -> None:
        self._steps = [
            PipelineStep("assemble_script", "Assemble the narrative script from per-frame texts"),
            PipelineStep("build_bible", "Build the character bible from avatars and script"),
            PipelineStep("process_frames", "Resolve, prompt and regenerate every frame"),
        ]

    async def _execute_step(
        self,
        step: PipelineStep,
        input_data: Any,
        context: Dict[str, Any]
    ) -> Any:
        if step.name == "assemble_script":
            return await self._assemble_script(input_data, context)
        elif step.name == "build_bible":
            return await self._build_bible(input_data, context)
        elif step.name == "process_frames":
            return await self._process_frames(input_data, context)
        return input_data

    def set_frame_callback(self, callback: Optional[FrameCallback]) -> None:
        """Called after each frame with (index, total, outcome)."""
        self._frame_callback = callback

    def _persist_text(self, name: str, content: str) -> None:
        if self.writer is not None:
            self.writer.write_text(name, content)
            logger.info(f"DOWNLOADED: {name}")

    def _persist_bytes(self, name: str, data: bytes) -> None:
        if self.writer is not None:
            self.writer.write_bytes(name, data)
            logger.info(f"DOWNLOADED: {name}")

    # =========================================================================
    # STEPS
    # =========================================================================

    async def _assemble_script(self, bundle: AssetBundle, context: Dict[str, Any]) -> AssembledScript:
        settings = self.config.pipeline
        script = assemble_script(
            bundle.frames.keys(),
            bundle.texts,
            extension=settings.text_extension,
            line_index=settings.scene_line_index,
        )
        context['bundle'] = bundle
        context['script'] = script

        self._persist_text(script.name, script.content)

        if script.is_empty:
            raise EmptyScriptError(frame_count=len(bundle.frames), skipped=len(script.skipped))
        return script

    async def _build_bible(self, script: AssembledScript, context: Dict[str, Any]) -> RunContext:
        bundle: AssetBundle = context['bundle']

        logger.info("GENERATING CHARACTER BIBLE FROM GENERATED SCRIPT...")
        bible = await self.bible_builder.build(list(bundle.avatars.keys()), script.content)
        self._persist_text(BIBLE_FILENAME, bible)
        logger.info("BIBLE READY. PROCEEDING TO FULL PRODUCTION.")

        story = bundle.story_map
        run_context = RunContext(
            bundle=bundle,
            script=script.content,
            bible=bible,
            style=resolve_style(bundle, self.style_override, self.config.pipeline.default_style),
            story_map=story.content if story is not None else None,
            aspect_ratio=self.config.pipeline.aspect_ratio,
        )
        context['run_context'] = run_context
        return run_context

    async def _process_frames(self, run_context: RunContext, context: Dict[str, Any]) -> RunReport:
        report = RunReport(script=context['script'], bible=run_context.bible)
        context['report'] = report

        logger.info("LAUNCHING FULL PRODUCTION SEQUENCE...")
        frame_names = run_context.bundle.sorted_frame_names()
        if not frame_names:
            logger.info("NO IMAGES TO PROCESS. PRODUCTION COMPLETE.")
            return report

        total = len(frame_names)
        for index, frame_name in enumerate(frame_names):
            if self._cancelled:
                logger.info(f"Run cancelled before {frame_name}")
                break

            outcome = await self._process_frame(run_context, report, index, total, frame_name)
            report.outcomes.append(outcome)
            self._notify(self._frame_callback, index + 1, total, outcome)

        logger.info("ALL SEQUENCES FINALIZED.")
        return report

    # =========================================================================
    # PER FRAME
    # =========================================================================

    async def _process_frame(
        self,
        run_context: RunContext,
        report: RunReport,
        index: int,
        total: int,
        frame_name: str
    ) -> FrameOutcome:
        settings = self.config.pipeline
        bundle = run_context.bundle

        lookup = find_scene_text(frame_name, bundle.texts, settings.text_extension)
        if not lookup.found:
            logger.info(f"SKIPPING: {frame_name} (NO CONTEXT)")
            return FrameOutcome(frame_name, FrameStatus.SKIPPED, reason=lookup.skip_reason)

        snippet = scene_snippet(lookup.text, settings.scene_line_index)
        script_context = self.localizer.localize(run_context.script, snippet)

        logger.info(f"PROCESS: [{index + 1}/{total}] - {frame_name}")

        try:
            frame = bundle.frames[frame_name]
            analysis = await self.analyzer.analyze(frame.data, frame.mime_type)
            mapping = await self.identifier.identify(snippet, analysis, run_context.bible)
            if mapping.is_fallback:
                logger.debug(f"Identification fallback for {frame_name}: {mapping.fallback_reason}")

            avatar = bundle.resolve_avatar(mapping.avatar_filename)
            if mapping.avatar_filename and avatar is None:
                logger.warning(f"Unknown avatar '{mapping.avatar_filename}' for {frame_name}; re-rendering without identity source")

            prompt = await self.synthesizer.synthesize(
                snippet,
                mapping.character_name,
                mapping.other_characters,
                run_context.bible,
                run_context.style,
                analysis,
                script_context,
                run_context.story_map,
            )

            generated = await self.image_handler.generate_result(
                ImageRequest(prompt=prompt, scene=frame, avatar=avatar, aspect_ratio=run_context.aspect_ratio)
            )
            if not generated.success:
                logger.info(f"REVISION FAILED FOR {frame_name}. SKIPPING.")
                return FrameOutcome(
                    frame_name,
                    FrameStatus.SKIPPED,
                    reason=generated.error or "no image generated",
                    character_name=mapping.character_name,
                    avatar_filename=mapping.avatar_filename if avatar else None,
                    prompt_text=prompt,
                )

            result = RejuvenationResult(
                original_frame_name=frame_name,
                output_frame_name=f"{lookup.base}{OUTPUT_IMAGE_SUFFIX}",
                image_bytes=ensure_png(generated.image_data, generated.mime_type),
                prompt_text=prompt,
            )

            meta = (
                f"ORIGINAL: {frame_name}\n"
                f"CHARACTER: {mapping.character_name}\n"
                f"PROMPT: {prompt}\n\n"
                f"SCENE DATA:\n{lookup.text.content}"
            )
            self._persist_text(f"{lookup.base}{META_SUFFIX}", meta)
            self._persist_bytes(result.output_frame_name, result.image_bytes)
            report.results.append(result)

            return FrameOutcome(
                frame_name,
                FrameStatus.COMPLETED,
                character_name=mapping.character_name,
                avatar_filename=mapping.avatar_filename if avatar else None,
                prompt_text=prompt,
            )
        except Exception as e:
            logger.error(f"CRITICAL ERROR [{frame_name}]: {e}")
            return FrameOutcome(frame_name, FrameStatus.FAILED, reason=str(e))
