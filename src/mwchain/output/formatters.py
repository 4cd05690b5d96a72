"""Rich/JSON output for ServiceResult.

Humans get Rich-rendered text (a table per handler for ``show``, an issue
list for ``check``); machines get the JSON model dump with ``--json``.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from mwchain.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from mwchain.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    console = create_console()
    if not result.ok:
        _render_error(console, result)
    elif settings.quiet:
        console.print(f"[mw.ok]OK[/]: {result.op}")
    elif result.op == "show":
        _render_show(console, result.data)
    elif result.op == "check":
        _render_check(console, result.data)
    else:
        _render_generic(console, result)

    if settings.verbose and result.meta and "telemetry" in result.meta:
        _render_telemetry(console, result.meta)
    return get_output(console).rstrip("\n")


def _render_error(console: Console, result: ServiceResult) -> None:
    error_msg = result.error.message if result.error else "Unknown error"
    code = f" [{result.error.code}]" if result.error else ""
    console.print(f"[mw.error]ERROR[/]: {result.op}{escape(code)} - {escape(error_msg)}")
    for issue in result.data.get("issues", []):
        console.print(f"  - {escape(issue['message'])}")


def _render_show(console: Console, data: dict[str, Any]) -> None:
    console.print(f"[mw.ok]OK[/]: show ({data.get('count', 0)} handler(s))")
    for handler in data.get("handlers", []):
        table = Table(title=escape(handler["handler_id"]), title_justify="left", show_edge=False)
        table.add_column("#", justify="right", style="mw.key")
        table.add_column("Interceptor", style="mw.interceptor")
        table.add_column("Type")
        for entry in handler["interceptors"]:
            table.add_row(str(entry["position"]), escape(entry["name"]), escape(entry["type"]))
        if not handler["interceptors"]:
            table.add_row("-", "(none: handler runs directly)", "")
        console.print(table)


def _render_check(console: Console, data: dict[str, Any]) -> None:
    console.print(
        f"[mw.ok]OK[/]: check - {data.get('handlers', 0)} handler(s), "
        f"{data.get('interceptors', 0)} interceptor(s), healthy"
    )


def _render_generic(console: Console, result: ServiceResult) -> None:
    console.print(f"[mw.ok]OK[/]: {result.op}")
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            value = _json.dumps(value, separators=(",", ":"))
        console.print(f"  [mw.key]{key}[/]: {escape(str(value))}")


def _render_telemetry(console: Console, meta: dict[str, Any]) -> None:
    console.print("[mw.key]telemetry:[/]")
    console.print(_span_tree(meta["telemetry"]))
    chain = meta.get("chain")
    if chain:
        console.print(
            f"[mw.key]chain:[/] {chain['interceptors']} interceptor(s), "
            f"{chain['short_circuits']} short-circuit(s), {chain['targets']} target(s), "
            f"{chain['failures']} failure(s)"
        )


def _span_tree(span: dict[str, Any], parent: Tree | None = None) -> Tree:
    """Build a Rich tree from a ``Span.to_dict()`` payload."""
    label = f"{escape(span.get('name', '?'))} [mw.key]{span.get('duration_ms', 0.0):.2f}ms[/]"
    if span.get("outcome"):
        label += " " + escape(f"[{span['outcome']}]")
    for key, value in span.get("annotations", {}).items():
        label += " " + escape(f"{key}={value}")
    node = Tree(label) if parent is None else parent.add(label)
    for child in span.get("children", []):
        _span_tree(child, node)
    return node
