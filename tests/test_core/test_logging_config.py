"""
Tests for rejuvenator/core/logging_config.py
"""

import re

from rejuvenator.core.logging_config import (
    LogLevel,
    RunLogHandler,
    attach_run_log,
    detach_run_log,
    get_logger,
    setup_logging,
)


class TestGetLogger:

    def test_names_are_namespaced(self):
        assert get_logger("pipelines.test").name == "rejuvenator.pipelines.test"

    def test_already_namespaced_name_is_kept(self):
        assert get_logger("rejuvenator.main").name == "rejuvenator.main"


class TestRunLog:
    """The append-only operator log."""

    def test_entries_are_timestamped(self):
        handler = attach_run_log()
        try:
            get_logger("tests.run_log").info("LOADED: 2 FRAMES, 1 AVATARS.")
        finally:
            detach_run_log(handler)

        assert len(handler.entries) == 1
        assert re.fullmatch(r"\[\d{2}:\d{2}:\d{2}\] LOADED: 2 FRAMES, 1 AVATARS\.", handler.entries[0])

    def test_debug_records_are_not_captured(self):
        handler = attach_run_log(LogLevel.INFO)
        try:
            get_logger("tests.run_log").debug("noise")
        finally:
            detach_run_log(handler)

        assert handler.entries == []

    def test_detached_handler_stops_capturing(self):
        handler = attach_run_log()
        detach_run_log(handler)

        get_logger("tests.run_log").info("after detach")

        assert handler.render() == ""

    def test_handler_survives_reconfiguration(self):
        handler = attach_run_log()
        try:
            setup_logging(level=LogLevel.INFO, console_output=False)
            get_logger("tests.run_log").info("still here")
        finally:
            detach_run_log(handler)
            setup_logging()

        assert handler.entries[-1].endswith("still here")
        assert isinstance(handler, RunLogHandler)
