"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, mwchain.toml only contains
overrides. A useful file needs only [interceptors] and [bindings]::

    [interceptors]
    log = "myapp.interceptors:LogInterceptor"
    auth = "myapp.interceptors:require_user"

    [bindings]
    "Query.user" = ["log", "auth"]
    "Query.health" = []
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class EventsConfig(BaseModel):
    """[events] section."""

    model_config = {"frozen": True}

    sync: bool = True
    max_workers: int = Field(default=2, ge=1)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class MwConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    interceptors: dict[str, str] = Field(default_factory=dict)
    bindings: dict[str, list[str]] = Field(default_factory=dict)
    events: EventsConfig = Field(default_factory=EventsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @field_validator("interceptors")
    @classmethod
    def _check_import_paths(cls, value: dict[str, str]) -> dict[str, str]:
        for name, path in value.items():
            if ":" not in path:
                msg = f"interceptor {name!r}: import path {path!r} must be 'module:attribute'"
                raise ValueError(msg)
        return value
