"""Locating and reading ``mwchain.toml``.

Candidates are tried in order and the first hit wins:

1. an explicit path (``--config``), which must exist
2. ``$MWCHAIN_CONFIG``; a value naming no file disables discovery
3. the nearest ``mwchain.toml`` in the start directory or one of its parents
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import click

CONFIG_FILENAME = "mwchain.toml"
CONFIG_ENV_VAR = "MWCHAIN_CONFIG"

Origin = Literal["explicit", "env", "walk-up"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigSource:
    """A config file and how it was found."""

    path: Path
    origin: Origin

    @property
    def root(self) -> Path:
        return self.path.parent


def locate_config(
    start: Path | None = None,
    *,
    explicit: str | Path | None = None,
) -> ConfigSource | None:
    """Find the config file for a project rooted at or above *start* (default: cwd).

    Raises ClickException when *explicit* names a missing file.
    """
    if explicit is not None:
        path = Path(explicit)
        if not path.is_file():
            msg = f"Config file not found: {explicit}"
            raise click.ClickException(msg)
        return ConfigSource(path, "explicit")

    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        path = Path(env_value)
        if path.is_file():
            return ConfigSource(path, "env")
        logger.warning("%s=%s is not a file; running without config", CONFIG_ENV_VAR, env_value)
        return None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return ConfigSource(candidate, "walk-up")
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML; syntax errors surface as ClickException."""
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc
