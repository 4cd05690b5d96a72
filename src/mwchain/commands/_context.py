"""Per-invocation state shared by every mwchain command.

The root group builds one :class:`AppContext` and subcommands receive it
with ``@click.pass_obj``. It owns logging setup, the lazily created
Runtime, and the mapping from a ServiceResult to output streams and the
exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from mwchain.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from mwchain.config.settings import MwSettings
    from mwchain.infrastructure.runtime import Runtime
    from mwchain.services.result import ServiceResult


class AppContext:
    """Settings, runtime and result emission for one CLI run."""

    def __init__(self, settings: MwSettings) -> None:
        from mwchain.config.logging import configure_logging
        from mwchain.services.telemetry import enable_telemetry

        self.settings = settings
        self.output = OutputSettings(
            json_output=settings.json_output,
            quiet=settings.quiet,
            verbose=settings.verbose,
        )
        self._runtime: Runtime | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def runtime(self) -> Runtime:
        """Built on first use, so ``--help`` never imports interceptors."""
        if self._runtime is None:
            from mwchain.infrastructure.runtime import Runtime

            self._runtime = Runtime(self.settings)
            self._runtime.init_event_bus(sync=True if self.settings.sync else None)
        return self._runtime

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; a failed one goes to stderr and exits with status 1.

        Warnings of a successful result go to stderr as ``WARNING:`` lines,
        except in JSON mode where they are part of the payload.
        """
        text = format_result(result, settings=self.output)
        if not result.ok:
            click.echo(text, err=True)
            raise SystemExit(1)

        click.echo(text)
        if self.output.json_output:
            return
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)

    def close(self) -> None:
        if self._runtime is not None:
            self._runtime.close()
