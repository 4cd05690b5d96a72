"""Tests for structlog configuration."""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from mwchain.config.logging import configure_logging


def _mwchain_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if getattr(h, "_mwchain_handler", False)]


class TestConfigureLogging:
    def test_levels(self) -> None:
        configure_logging(verbose=False)
        assert logging.getLogger("mwchain").level == logging.WARNING
        configure_logging(verbose=True)
        assert logging.getLogger("mwchain").level == logging.DEBUG

    def test_reconfigure_replaces_own_handler_only(self) -> None:
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)

        first = configure_logging()
        second = configure_logging(log_json=True)

        assert _mwchain_handlers() == [second]
        assert first not in logging.getLogger().handlers
        assert foreign in logging.getLogger().handlers

    def test_json_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)

        structlog.get_logger("mwchain.services.telemetry").debug(
            "span.complete", span_name="BindingService.check", spans=3
        )

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["event"] == "span.complete"
        assert record["span_name"] == "BindingService.check"
        assert record["level"] == "debug"
        assert record["logger"] == "mwchain.services.telemetry"

    def test_stdlib_records_share_the_format(self) -> None:
        stream = io.StringIO()
        configure_logging(verbose=True, log_json=True, stream=stream)

        logging.getLogger("mwchain.services.chain").debug("Chain %s finished: %s", "Q", "ok")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "Chain Q finished: ok"
        assert record["logger"] == "mwchain.services.chain"

    def test_debug_filtered_when_quiet(self) -> None:
        stream = io.StringIO()
        configure_logging(verbose=False, log_json=True, stream=stream)

        structlog.get_logger("mwchain.services.telemetry").debug("span.complete")
        logging.getLogger("mwchain.services.chain").debug("dropped")

        assert stream.getvalue() == ""
