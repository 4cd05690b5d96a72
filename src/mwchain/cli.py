"""``mwchain`` entry point: global options, then a subcommand."""

from __future__ import annotations

from pathlib import Path

import click

from mwchain import __version__
from mwchain.commands import register_commands
from mwchain.commands._context import AppContext
from mwchain.config.settings import MwSettings

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(__version__, "-V", "--version", prog_name="mwchain")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Use this file instead of searching for mwchain.toml.",
)
@click.option(
    "-C",
    "--project",
    "project_root",
    type=click.Path(exists=True, file_okay=False, resolve_path=True, path_type=Path),
    help="Search for mwchain.toml from this directory instead of the cwd.",
)
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the status line.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and a span tree per command.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("--sync", is_flag=True, help="Dispatch plugin events inline.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    project_root: Path | None,
    **flags: bool,
) -> None:
    """Inspect the interceptor chains configured in mwchain.toml."""
    settings = MwSettings.from_cli(config_path=config_path, project_root=project_root, **flags)
    app = ctx.obj = AppContext(settings)
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
