"""Error boundary: classify failures before they leave the chain.

One rule, applied at two points (inside continuation dispatch and around
the whole run): DomainError and ChainIntegrityError pass through as is,
every other exception becomes ``DomainError(UNEXPECTED_ERROR_MESSAGE)``
with the original attached as cause. Re-classifying a DomainError is a
no-op, so nesting boundaries yields one consistently typed failure.

Also hosts the protocol-boundary converter that turns a DomainError into
an :class:`ErrorPayload` (message, path, locations) for API responses.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from mwchain.domain.errors import UNEXPECTED_ERROR_MESSAGE, ChainIntegrityError, DomainError

if TYPE_CHECKING:
    from mwchain.domain.context import RequestContext

logger = logging.getLogger(__name__)


def classify_error(exc: Exception) -> DomainError | ChainIntegrityError:
    """Return *exc* unchanged if it is already classified, else wrap it."""
    if isinstance(exc, DomainError | ChainIntegrityError):
        return exc
    return DomainError(UNEXPECTED_ERROR_MESSAGE, cause=exc)


@contextmanager
def error_boundary(stage: str = "outer") -> Iterator[None]:
    """Re-raise any failure from the block in classified form.

    Args:
        stage: Label for debug logging (``"inner"`` or ``"outer"``).
    """
    try:
        yield
    except (DomainError, ChainIntegrityError):
        raise
    except Exception as exc:
        logger.debug("Wrapping unexpected %s at %s boundary", type(exc).__name__, stage)
        raise classify_error(exc) from exc


# --- Protocol boundary ---


class ErrorLocation(BaseModel):
    model_config = {"frozen": True}

    line: int
    column: int


class ErrorPayload(BaseModel):
    """Client-facing error object."""

    model_config = {"frozen": True}

    message: str
    path: list[str | int] = Field(default_factory=list)
    locations: list[ErrorLocation] = Field(default_factory=list)
    extensions: dict[str, Any] = Field(default_factory=dict)


def to_error_payload(error: DomainError, context: RequestContext | None = None) -> ErrorPayload:
    """Convert *error* into a payload located by *context*'s path and location."""
    path: list[str | int] = []
    locations: list[ErrorLocation] = []
    if context is not None:
        path = list(context.path)
        if context.location is not None:
            locations.append(
                ErrorLocation(line=context.location.line, column=context.location.column)
            )
    extensions: dict[str, Any] = {}
    if error.cause is not None:
        extensions["cause"] = type(error.cause).__name__
    return ErrorPayload(
        message=error.describe(),
        path=path,
        locations=locations,
        extensions=extensions,
    )


def resolve_error(exc: BaseException, context: RequestContext | None = None) -> ErrorPayload | None:
    """Payload for DomainErrors; None leaves anything else to the host framework."""
    if isinstance(exc, DomainError):
        return to_error_payload(exc, context)
    return None
