"""Tests for the loguru setup and the rotating file sink."""

import re

from loguru import logger

from display_env_wrapper.logging_setup import RotatingLogSink, get_logger, setup_logging

LINE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} - (.*)$")


def _messages(path):
    return [LINE_RE.match(line).group(1) for line in path.read_text().splitlines()]


class TestSwitch:

    def test_disabled_by_default_writes_nothing(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        setup_logging(log_file=log_file)

        logger.info("hello")

        assert not log_file.exists()

    def test_enabled_appends_timestamped_lines(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        setup_logging(enabled=True, log_file=log_file)

        logger.info("first")
        get_logger(__name__).debug("second {n}", n=2)

        assert _messages(log_file) == ["first", "second 2"]

    def test_switch_checked_on_every_call(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        sink = setup_logging(enabled=True, log_file=log_file)

        logger.info("kept")
        sink.enabled = False
        logger.info("dropped")
        sink.enabled = True
        logger.info("kept again")

        assert _messages(log_file) == ["kept", "kept again"]

    def test_no_log_file_no_sink(self):
        assert setup_logging(enabled=True, log_file=None) is None

    def test_level_filters(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        setup_logging(enabled=True, log_file=log_file, log_level="INFO")

        logger.debug("hidden")
        logger.info("shown")

        assert _messages(log_file) == ["shown"]


class TestRotation:

    def test_rotates_past_one_mebibyte(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        old_content = "x" * (1_048_576 + 1)
        log_file.write_text(old_content)
        setup_logging(enabled=True, log_file=log_file)

        logger.info("trigger")

        rotated = tmp_path / "wrapper.log.old"
        assert rotated.read_text() == old_content
        messages = _messages(log_file)
        assert len(messages) == 2
        assert "rotated" in messages[0]
        assert messages[1] == "trigger"

    def test_exact_limit_does_not_rotate(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        log_file.write_text("x" * 99 + "\n")
        setup_logging(enabled=True, log_file=log_file, max_bytes=100)

        logger.info("appended")

        assert not (tmp_path / "wrapper.log.old").exists()
        assert log_file.read_text().endswith(" - appended\n")

    def test_previous_rotation_is_overwritten(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        rotated = tmp_path / "wrapper.log.old"
        rotated.write_text("ancient\n")
        log_file.write_text("recent\n" * 50)
        setup_logging(enabled=True, log_file=log_file, max_bytes=100)

        logger.info("trigger")

        assert rotated.read_text() == "recent\n" * 50

    def test_only_one_rotation_per_overflow(self, tmp_path):
        log_file = tmp_path / "wrapper.log"
        log_file.write_text("y" * 200)
        setup_logging(enabled=True, log_file=log_file, max_bytes=150)

        logger.info("one")
        logger.info("two")

        assert _messages(log_file)[1:] == ["one", "two"]
        assert (tmp_path / "wrapper.log.old").read_text() == "y" * 200

    def test_sink_is_callable_without_loguru(self, tmp_path):
        sink = RotatingLogSink(tmp_path / "direct.log")
        sink("2024-01-01 00:00:00 - direct\n")
        assert (tmp_path / "direct.log").read_text() == "2024-01-01 00:00:00 - direct\n"
        assert sink.rotated_path == tmp_path / "direct.log.old"
