"""
Tests for the orchestration driver.

Tests for rejuvenator/pipelines/rejuvenation_pipeline.py
"""

import dataclasses
import logging

import pytest

from rejuvenator.core.assets import AssetBundle, ImageAsset, TextAsset
from rejuvenator.core.constants import BIBLE_ERROR_SENTINEL, UNKNOWN_CHARACTER
from rejuvenator.pipelines import (
    FrameStatus,
    PipelineStatus,
    RejuvenationPipeline,
    RunContext,
    resolve_style,
)
from rejuvenator.utils.file_utils import DirectoryArtifactWriter


class FailingWriter(DirectoryArtifactWriter):
    """Raises when asked to write one particular artifact."""

    def __init__(self, root, fail_on):
        super().__init__(root)
        self.fail_on = fail_on

    def write_text(self, name, content):
        if name == self.fail_on:
            raise OSError(f"disk full writing {name}")
        return super().write_text(name, content)


@pytest.fixture
def writer(temp_dir):
    return DirectoryArtifactWriter(temp_dir)


@pytest.fixture
def pipeline(fake_client, rejuvenator_config, writer):
    return RejuvenationPipeline(fake_client, rejuvenator_config, writer=writer)


def image_calls(client):
    return client.calls_for("generate_image")


class TestProductionRun:
    """End-to-end behaviour over the fake client."""

    @pytest.mark.asyncio
    async def test_frames_processed_in_sorted_order(self, pipeline, sample_bundle):
        result = await pipeline.run(sample_bundle)

        assert result.success
        report = result.output
        assert [r.original_frame_name for r in report.results] == ["scene_001.png", "scene_002.png"]
        assert [r.output_frame_name for r in report.results] == [
            "scene_001_rejuvenated.png",
            "scene_002_rejuvenated.png",
        ]
        assert report.completed_count == 2

    @pytest.mark.asyncio
    async def test_stages_run_sequentially_per_frame(self, pipeline, sample_bundle, fake_client):
        await pipeline.run(sample_bundle)

        methods = [call.method for call in fake_client.calls]
        per_frame = ["generate_text", "generate_structured", "generate_text", "generate_image"]
        assert methods == ["generate_text"] + per_frame + per_frame

    @pytest.mark.asyncio
    async def test_bible_built_once_on_pro_model(self, pipeline, sample_bundle, fake_client, rejuvenator_config):
        await pipeline.run(sample_bundle)

        bible_calls = [
            call for call in fake_client.calls_for("generate_text")
            if isinstance(call.prompt, str) and "Character Bible" in call.prompt
            and "[CINEMATIC RECONSTRUCTION INSTRUCTION]" not in call.prompt
        ]
        assert len(bible_calls) == 1
        assert bible_calls[0].model == rejuvenator_config.models.bible_model
        assert "avatar_marcus.png" in bible_calls[0].prompt

    @pytest.mark.asyncio
    async def test_artifacts_written(self, pipeline, sample_bundle, temp_dir, fake_client):
        await pipeline.run(sample_bundle)

        assert (temp_dir / "hs4000.txt").read_text(encoding="utf-8").startswith("Marcus slams")
        assert (temp_dir / "bible.txt").read_text(encoding="utf-8") == fake_client.bible_text
        assert (temp_dir / "scene_001_rejuvenated.png").read_bytes() == fake_client.image[0]

        meta = (temp_dir / "scene_001_meta.txt").read_text(encoding="utf-8")
        scene_data = next(t.content for t in sample_bundle.texts if t.name == "scene_001.txt")
        assert meta == (
            "ORIGINAL: scene_001.png\n"
            "CHARACTER: Marcus\n"
            f"PROMPT: {fake_client.synthesis_text.strip()}\n\n"
            f"SCENE DATA:\n{scene_data}"
        )

    @pytest.mark.asyncio
    async def test_runs_without_writer(self, fake_client, rejuvenator_config, sample_bundle):
        pipeline = RejuvenationPipeline(fake_client, rejuvenator_config)

        result = await pipeline.run(sample_bundle)

        assert result.success
        assert len(result.output.results) == 2

    @pytest.mark.asyncio
    async def test_story_map_and_context_reach_synthesis(self, pipeline, sample_bundle, fake_client):
        await pipeline.run(sample_bundle)

        synthesis = [
            call.prompt for call in fake_client.calls_for("generate_text")
            if isinstance(call.prompt, str) and "[CINEMATIC RECONSTRUCTION INSTRUCTION]" in call.prompt
        ]
        assert len(synthesis) == 2
        assert "Act one: the embezzlement is discovered." in synthesis[0]
        assert "TARGET IDENTITY: Marcus" in synthesis[0]


class TestFatalPrecondition:

    @pytest.mark.asyncio
    async def test_empty_script_halts_before_any_call(self, pipeline, fake_client, png_bytes, temp_dir):
        bundle = AssetBundle.from_parts(
            avatars={},
            frames={"scene_001.png": ImageAsset("scene_001.png", png_bytes)},
            texts=[TextAsset("scene_001.txt", "only\nthree\nlines")],
        )

        result = await pipeline.run(bundle)

        assert result.status == PipelineStatus.FAILED
        assert "Generated script is empty" in result.error
        assert result.metadata["failed_step"] == "assemble_script"
        assert result.metadata["error_type"] == "EmptyScriptError"
        assert fake_client.calls == []
        assert not (temp_dir / "bible.txt").exists()


class TestAvatarResolution:
    """Identification result -> image payload."""

    @pytest.mark.asyncio
    async def test_known_avatar_uses_identity_transplant(self, pipeline, sample_bundle, fake_client):
        await pipeline.run(sample_bundle)

        parts = image_calls(fake_client)[0].prompt
        assert len(parts) == 6
        assert parts[3].data == sample_bundle.avatars["avatar_marcus.png"].data
        assert parts[5].data == sample_bundle.frames["scene_001.png"].data

    @pytest.mark.asyncio
    async def test_unknown_avatar_degrades_to_rerender(self, pipeline, sample_bundle, fake_client):
        fake_client.identification = {"characterName": "Marcus", "avatarFilename": "avatar_ghost.png"}

        result = await pipeline.run(sample_bundle)

        parts = image_calls(fake_client)[0].prompt
        assert len(parts) == 2
        assert "CINEMATIC RE-RENDER" in parts[0].text
        assert result.output.outcomes[0].avatar_filename is None

    @pytest.mark.asyncio
    async def test_unparseable_identification(self, pipeline, sample_bundle, fake_client, temp_dir):
        fake_client.identification = "not json at all"

        result = await pipeline.run(sample_bundle)

        assert result.output.outcomes[0].character_name == UNKNOWN_CHARACTER
        assert all(len(call.prompt) == 2 for call in image_calls(fake_client))
        meta = (temp_dir / "scene_001_meta.txt").read_text(encoding="utf-8")
        assert "CHARACTER: Unknown" in meta


class TestDegradedFrames:
    """Per-frame skips and failures never stop the run."""

    @pytest.mark.asyncio
    async def test_frame_without_text_is_skipped(self, pipeline, sample_bundle, fake_client, png_bytes, caplog):
        bundle = AssetBundle.from_parts(
            avatars=dict(sample_bundle.avatars),
            frames={**sample_bundle.frames, "scene_000.png": ImageAsset("scene_000.png", png_bytes)},
            texts=sample_bundle.texts,
        )
        caplog.set_level(logging.INFO, logger="rejuvenator")

        result = await pipeline.run(bundle)

        outcome = result.output.outcomes[0]
        assert outcome.frame_name == "scene_000.png"
        assert outcome.status == FrameStatus.SKIPPED
        assert "SKIPPING: scene_000.png (NO CONTEXT)" in caplog.text
        assert len(image_calls(fake_client)) == 2

    @pytest.mark.asyncio
    async def test_no_image_skips_frame(self, pipeline, sample_bundle, fake_client, temp_dir, caplog):
        fake_client.image = None
        caplog.set_level(logging.INFO, logger="rejuvenator")

        result = await pipeline.run(sample_bundle)

        assert result.success
        assert result.output.results == []
        assert result.output.skipped_count == 2
        assert "REVISION FAILED FOR scene_001.png. SKIPPING." in caplog.text
        assert not (temp_dir / "scene_001_meta.txt").exists()

    @pytest.mark.asyncio
    async def test_frame_exception_is_contained(self, fake_client, rejuvenator_config, sample_bundle, temp_dir, caplog):
        writer = FailingWriter(temp_dir, fail_on="scene_001_meta.txt")
        pipeline = RejuvenationPipeline(fake_client, rejuvenator_config, writer=writer)
        caplog.set_level(logging.INFO, logger="rejuvenator")

        result = await pipeline.run(sample_bundle)

        assert result.success
        first, second = result.output.outcomes
        assert first.status == FrameStatus.FAILED
        assert "disk full" in first.reason
        assert second.status == FrameStatus.COMPLETED
        assert "CRITICAL ERROR [scene_001.png]" in caplog.text
        assert "ALL SEQUENCES FINALIZED." in caplog.text

    @pytest.mark.asyncio
    async def test_bible_failure_is_not_fatal(self, pipeline, sample_bundle, fake_client, temp_dir):
        fake_client.bible_text = RuntimeError("quota")

        result = await pipeline.run(sample_bundle)

        assert result.success
        assert result.output.bible == BIBLE_ERROR_SENTINEL
        assert (temp_dir / "bible.txt").read_text(encoding="utf-8") == BIBLE_ERROR_SENTINEL


class TestRunState:

    def test_style_resolution_order(self):
        styled = AssetBundle.from_parts(avatars={}, frames={}, texts=[TextAsset("STYLE.txt", "noir")])
        plain = AssetBundle.from_parts(avatars={}, frames={}, texts=[])

        assert resolve_style(styled, "pastel", "default") == "pastel"
        assert resolve_style(styled, None, "default") == "noir"
        assert resolve_style(plain, None, "default") == "default"

    def test_run_context_is_immutable(self, sample_bundle):
        context = RunContext(bundle=sample_bundle, script="s", bible="b", style="noir")

        with pytest.raises(dataclasses.FrozenInstanceError):
            context.bible = "changed"

    @pytest.mark.asyncio
    async def test_callbacks(self, pipeline, sample_bundle):
        steps, frames = [], []
        pipeline.set_progress_callback(lambda update: steps.append(update["step"]))
        pipeline.set_frame_callback(lambda index, total, outcome: frames.append((index, total, outcome.frame_name)))

        await pipeline.run(sample_bundle)

        assert steps == ["assemble_script", "build_bible", "process_frames"]
        assert frames == [(1, 2, "scene_001.png"), (2, 2, "scene_002.png")]

    @pytest.mark.asyncio
    async def test_aspect_ratio_from_config(self, fake_client, rejuvenator_config, sample_bundle):
        rejuvenator_config.pipeline.aspect_ratio = "9:16"
        pipeline = RejuvenationPipeline(fake_client, rejuvenator_config)

        await pipeline.run(sample_bundle)

        assert {call.kwargs["aspect_ratio"] for call in image_calls(fake_client)} == {"9:16"}

    @pytest.mark.asyncio
    async def test_raising_frame_callback_does_not_stop_run(self, pipeline, sample_bundle, fake_client, caplog):
        def broken(index, total, outcome):
            raise ValueError("observer bug")

        pipeline.set_frame_callback(broken)
        caplog.set_level(logging.WARNING, logger="rejuvenator")

        result = await pipeline.run(sample_bundle)

        assert result.success
        assert result.output.completed_count == 2
        assert len(image_calls(fake_client)) == 2
        assert "observer bug" in caplog.text
