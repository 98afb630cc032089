# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for foldline.logging_config: structlog + stdlib bridge."""

from __future__ import annotations

import json
import logging
import sys

import pytest
import structlog

from foldline.logging_config import configure


@pytest.fixture(autouse=True)
def _reset_logging():
    """Ensure clean logging state before/after each test."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()


class TestConfigure:
    def test_single_stderr_handler(self):
        configure()
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_default_level_is_warning(self):
        configure()
        assert logging.getLogger().level == logging.WARNING

    def test_debug_level(self):
        configure(debug=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_nothing_on_stdout(self, capsys):
        configure(debug=True)
        logging.getLogger("test.stdout").warning("to stderr")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "to stderr" in captured.err

    def test_info_suppressed_without_debug(self, capsys):
        configure()
        logging.getLogger("test.quiet").info("hidden")
        assert "hidden" not in capsys.readouterr().err


class TestJsonRenderer:
    def test_json_lines(self, capsys):
        configure(json_output=True)
        logging.getLogger("test.json").warning("json message")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        data = json.loads(line)
        assert data["event"] == "json message"
        assert data["level"] == "warning"
        assert data["logger"] == "test.json"

    def test_exception_rendered(self, capsys):
        configure(json_output=True)
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logging.getLogger("test.exc").exception("failed")
        data = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert "RuntimeError: boom" in data["exception"]
        assert "timestamp" in data


class TestConsoleRenderer:
    def test_plain_text_without_color_codes(self, capsys):
        configure()
        logging.getLogger("test.console").warning("plain message")
        err = capsys.readouterr().err
        assert "plain message" in err
        assert "\x1b[" not in err

    def test_structlog_global_config_untouched(self):
        before = structlog.get_config()["processors"]
        configure(json_output=True)
        assert structlog.get_config()["processors"] == before
