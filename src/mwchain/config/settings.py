"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``MWCHAIN_*`` prefix
  3. TOML file: ``mwchain.toml`` discovered via walk-up
  4. Code defaults: baked into the section models
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from mwchain.config.discovery import ConfigSource, locate_config, read_config
from mwchain.config.models import EventsConfig, MwConfig, PluginsConfig

logger = logging.getLogger(__name__)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings read from the located ``mwchain.toml``, if any."""

    def __init__(self, settings_cls: type[BaseSettings], source: ConfigSource | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = read_config(source.path) if source else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Config source for the settings object under construction.
_tls = threading.local()


class MwSettings(BaseSettings):
    """Unified settings for the mwchain CLI and runtime.

    Attributes:
        project_root: Directory holding ``mwchain.toml`` (or CWD if none found).
        config_path: The TOML file in use, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MWCHAIN_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False

    # --- TOML sections ---
    interceptors: dict[str, str] = Field(default_factory=dict)
    bindings: dict[str, list[str]] = Field(default_factory=dict)
    events: EventsConfig = Field(default_factory=EventsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        source = getattr(_tls, "source", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, source),
        )

    def to_config(self) -> MwConfig:
        """The TOML-backed sections as a validated :class:`MwConfig`."""
        return MwConfig(
            interceptors=self.interceptors,
            bindings=self.bindings,
            events=self.events,
            plugins=self.plugins,
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | Path | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> MwSettings:
        """Build settings for one CLI invocation.

        The config file is *config_path* when given, otherwise the one
        located from *project_root* (default: cwd). Without an explicit
        *project_root* the project is rooted at the config file's directory.
        CLI flags override every other source.
        """
        source = locate_config(project_root, explicit=config_path or None)
        if source is not None:
            logger.debug("Using %s config %s", source.origin, source.path)

        if project_root is None:
            project_root = source.root if source else Path.cwd()

        _tls.source = source
        try:
            return cls(
                project_root=project_root,
                config_path=source.path if source else None,
                **cli_flags,
            )
        finally:
            _tls.source = None
