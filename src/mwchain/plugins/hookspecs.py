"""Pluggy hook specifications for mwchain lifecycle events.

Both hooks are notifications: return values are ignored and a failing
implementation never changes the outcome of a chain run or a build.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("mwchain")
hookimpl = pluggy.HookimplMarker("mwchain")


class MwchainHookSpec:
    """Hook specifications for the mwchain plugin system."""

    @hookspec
    def post_chain_run(
        self,
        handler_id: str,
        status: str,
        interceptors: list[str],
        target_executed: bool,
        error: str | None,
    ) -> None:
        """Called after every executed chain, successful or not."""

    @hookspec
    def post_build(self, handlers: list[str]) -> None:
        """Called after a ChainBuilder has resolved all bindings."""
