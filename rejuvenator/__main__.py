"""
Frame Rejuvenator Main Entry Point

Run a full production pass over one or more asset archives.
"""

import sys
import asyncio
import argparse
from pathlib import Path

from rejuvenator.core.logging_config import (
    LogLevel,
    setup_logging,
    create_session_log,
    get_logger,
    attach_run_log,
    detach_run_log,
)
from rejuvenator.core.config import load_config, set_config
from rejuvenator.core.constants import RUN_LOG_FILENAME, VALID_ASPECT_RATIOS
from rejuvenator.core.exceptions import RejuvenatorError
from rejuvenator.core.startup import validate_environment


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rejuvenator",
        description="Frame Rejuvenator - AI-Powered Film Frame Regeneration"
    )

    parser.add_argument(
        "archives",
        nargs="+",
        help="Asset archives (.zip); names containing 'avatars' or 'processed' are used"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Directory for generated artifacts (default: configured output_dir)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--style",
        type=str,
        help="Style directive; overrides style.txt and the configured default"
    )

    parser.add_argument(
        "--aspect-ratio",
        choices=VALID_ASPECT_RATIOS,
        help="Aspect ratio for generated images"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    parser.add_argument(
        "--session-log",
        action="store_true",
        help="Also write a timestamped log file under the configured logs_dir"
    )

    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip API key validation at startup"
    )

    return parser


def main(argv=None) -> int:
    """Main entry point for the Frame Rejuvenator."""
    args = build_parser().parse_args(argv)

    level = LogLevel.DEBUG if args.debug else LogLevel.INFO
    setup_logging(level=level)
    logger = get_logger("main")
    logger.info("Starting Frame Rejuvenator...")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path)
    except RejuvenatorError as e:
        logger.error(f"Could not load config: {e}")
        print(f"Configuration error: {e}")
        return 2

    if args.aspect_ratio:
        config.pipeline.aspect_ratio = args.aspect_ratio
    if args.output:
        config.output_dir = Path(args.output)
    set_config(config)

    if args.session_log:
        log_file = create_session_log(config.logs_dir, level=level, verbose=config.verbose_logging)
        logger.info(f"Session log: {log_file}")
    else:
        setup_logging(level=level, verbose=config.verbose_logging)

    # Validate environment (API keys, etc.)
    if not args.skip_validation:
        validation_result = validate_environment(config)
        if not validation_result.valid:
            for error in validation_result.errors:
                logger.error(f"  - {error}")
            print("\nEnvironment validation failed. Missing required configuration:")
            for error in validation_result.errors:
                print(f"  ✗ {error}")
            print("\nRun with --skip-validation to bypass (not recommended)")
            return 1

        for warning in validation_result.warnings:
            logger.warning(warning)

    return asyncio.run(run_production(args, config))


async def run_production(args, config) -> int:
    """Load archives, run the pipeline and write artifacts plus the run log."""
    from rejuvenator.core.archive_loader import load_bundle
    from rejuvenator.llm.api_clients import GeminiClient
    from rejuvenator.pipelines import RejuvenationPipeline
    from rejuvenator.utils.file_utils import DirectoryArtifactWriter

    logger = get_logger("main")
    run_log = attach_run_log()
    writer = DirectoryArtifactWriter(config.output_dir)

    try:
        try:
            bundle = load_bundle(args.archives)
        except RejuvenatorError as e:
            logger.error(f"ARCHIVE READ ERROR. {e}")
            return 1

        try:
            client = GeminiClient(api_key_env=config.models.api_key_env)
        except RejuvenatorError as e:
            logger.error(str(e))
            return 1

        pipeline = RejuvenationPipeline(client, config, writer=writer, style_override=args.style)
        pipeline.set_progress_callback(
            lambda p: logger.debug(f"[{p['current']}/{p['total']}] {p['step']}")
        )

        result = await pipeline.run(bundle)
        if not result.success:
            logger.error(f"Run halted: {result.error}")
            return 1

        report = result.output
        summary = report.summary()
        logger.info(
            f"{summary['completed']} of {summary['frames']} frames rejuvenated "
            f"({summary['skipped']} skipped, {summary['failed']} failed)"
        )
        return 0
    finally:
        detach_run_log(run_log)
        if config.write_run_log:
            writer.write_text(RUN_LOG_FILENAME, run_log.render())


if __name__ == "__main__":
    sys.exit(main())
