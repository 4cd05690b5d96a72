"""Tests for human and JSON rendering of ServiceResult."""

from __future__ import annotations

import json

from mwchain.output.console import create_console, get_output
from mwchain.output.formatters import OutputSettings, format_result
from mwchain.services.result import ServiceResult


def _show_result() -> ServiceResult:
    return ServiceResult(
        ok=True,
        op="show",
        data={
            "count": 2,
            "handlers": [
                {
                    "handler_id": "Query.user",
                    "interceptors": [
                        {"position": 0, "name": "log", "type": "LogInterceptor"},
                        {"position": 1, "name": "auth", "type": "FunctionInterceptor"},
                    ],
                },
                {"handler_id": "Query.health", "interceptors": []},
            ],
        },
    )


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console(no_color=True)
        console.print("[mw.ok]OK[/]: hello")
        assert get_output(console) == "OK: hello\n"


class TestFormatResult:
    def test_json(self) -> None:
        out = format_result(_show_result(), settings=OutputSettings(json_output=True))
        assert json.loads(out)["data"]["count"] == 2

    def test_show_table(self) -> None:
        out = format_result(_show_result())
        assert out.startswith("OK: show (2 handler(s))")
        assert "Query.user" in out
        assert "LogInterceptor" in out
        assert out.index("log") < out.index("auth")
        assert "(none: handler runs directly)" in out

    def test_check_summary(self) -> None:
        result = ServiceResult(
            ok=True, op="check", data={"handlers": 2, "interceptors": 3, "healthy": True}
        )
        assert format_result(result) == "OK: check - 2 handler(s), 3 interceptor(s), healthy"

    def test_quiet(self) -> None:
        out = format_result(_show_result(), settings=OutputSettings(quiet=True))
        assert out == "OK: show"

    def test_error_lists_issues(self) -> None:
        result = ServiceResult.failure(
            "check",
            "INVALID_BINDINGS",
            "1 binding issue(s) found",
            data={"issues": [{"message": "Unknown interceptor 'ghost' [Query.user]"}]},
        )
        lines = format_result(result).splitlines()
        assert lines[0] == "ERROR: check [INVALID_BINDINGS] - 1 binding issue(s) found"
        assert lines[1] == "  - Unknown interceptor 'ghost' [Query.user]"

    def test_verbose_adds_span_tree(self) -> None:
        result = ServiceResult(
            ok=True,
            op="check",
            data={"handlers": 0, "interceptors": 0},
            meta={
                "telemetry": {
                    "name": "BindingService.check",
                    "kind": "service",
                    "duration_ms": 1.5,
                    "outcome": "ok",
                    "children": [
                        {
                            "name": "interceptor:cache",
                            "kind": "interceptor",
                            "duration_ms": 0.25,
                            "outcome": "short_circuited",
                            "annotations": {"position": 0},
                        }
                    ],
                },
                "chain": {"interceptors": 1, "short_circuits": 1, "targets": 0, "failures": 0},
            },
        )
        lines = format_result(result, settings=OutputSettings(verbose=True)).splitlines()

        assert "telemetry:" in [line.rstrip() for line in lines]
        assert any(line.startswith("BindingService.check 1.50ms [ok]") for line in lines)
        child = next(line for line in lines if "interceptor:cache" in line)
        assert child.rstrip().endswith("interceptor:cache 0.25ms [short_circuited] position=0")
        assert lines[-1] == (
            "chain: 1 interceptor(s), 1 short-circuit(s), 0 target(s), 0 failure(s)"
        )

    def test_telemetry_hidden_without_verbose(self) -> None:
        result = ServiceResult(
            ok=True, op="other", meta={"telemetry": {"name": "x", "duration_ms": 0.0}}
        )
        assert "telemetry" not in format_result(result)

    def test_generic_result(self) -> None:
        result = ServiceResult(ok=True, op="other", data={"names": ["a"], "count": 1})
        assert format_result(result).splitlines() == [
            "OK: other",
            '  names: ["a"]',
            "  count: 1",
        ]
