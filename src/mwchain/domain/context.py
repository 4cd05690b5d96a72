"""RequestContext: mutable per-invocation state shared across a chain run.

The caller creates the context before the chain starts; the chain never
constructs one. Interceptors read and write it in place, or hand a different
instance to the continuation, which then becomes the working context for
every later interceptor and for the target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SourceLocation:
    """Line/column of the request element the handler is resolving."""

    line: int
    column: int


@dataclass
class RequestContext:
    """Chain-shared request state.

    Attributes:
        handler_id: Identifier of the handler being invoked (e.g. ``"Query.user"``).
        arguments: Caller-supplied arguments for the handler.
        metadata: Caller-supplied request metadata (headers, auth claims, ...).
        scratch: Free-form key/value space for interceptors.
        path: Field/index steps locating the request element, used when an
            error is converted to a protocol payload.
        location: Source location of the request element, if known.
    """

    handler_id: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    scratch: dict[str, Any] = field(default_factory=dict)
    path: list[str | int] = field(default_factory=list)
    location: SourceLocation | None = None

    def get(self, key: str, default: Any = None) -> Any:
        """Read a scratch value."""
        return self.scratch.get(key, default)

    def put(self, key: str, value: Any) -> None:
        """Write a scratch value."""
        self.scratch[key] = value

    def argument(self, name: str, default: Any = None) -> Any:
        return self.arguments.get(name, default)
