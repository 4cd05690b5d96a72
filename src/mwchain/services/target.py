"""TargetInvocation: the wrapped call to the underlying business handler.

The context's position in the call is explicit: a positional index or a
keyword name. When the chain hands over an updated context, it is
substituted at that slot; everything else is passed exactly as the caller
supplied it. Handler failures propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from mwchain.domain.context import RequestContext


class TargetInvocation:
    """Invoke *handler* with the original arguments, optionally swapping the context.

    Args:
        handler: The business handler.
        args: Original positional arguments.
        kwargs: Original keyword arguments.
        context_slot: Index into *args* or key into *kwargs* holding the
            request context, or None when the handler takes no context.
    """

    def __init__(
        self,
        handler: Callable[..., Any],
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        *,
        context_slot: int | str | None = None,
    ) -> None:
        self._handler = handler
        self._args = tuple(args)
        self._kwargs = dict(kwargs or {})
        if isinstance(context_slot, int) and not 0 <= context_slot < len(self._args):
            msg = f"Context slot {context_slot} is outside the {len(self._args)} positional args"
            raise ValueError(msg)
        if isinstance(context_slot, str) and context_slot not in self._kwargs:
            msg = f"Context keyword {context_slot!r} was not supplied"
            raise ValueError(msg)
        self._context_slot = context_slot

    @property
    def handler(self) -> Callable[..., Any]:
        return self._handler

    @property
    def context_slot(self) -> int | str | None:
        return self._context_slot

    @property
    def context(self) -> RequestContext | None:
        """The context as originally supplied at the slot."""
        if self._context_slot is None:
            return None
        if isinstance(self._context_slot, int):
            return self._args[self._context_slot]
        return self._kwargs[self._context_slot]

    def invoke(self, context: RequestContext | None = None) -> Any:
        """Call the handler, substituting *context* at the slot when given."""
        if context is None or self._context_slot is None:
            return self._handler(*self._args, **self._kwargs)

        args = list(self._args)
        kwargs = dict(self._kwargs)
        if isinstance(self._context_slot, int):
            args[self._context_slot] = context
        else:
            kwargs[self._context_slot] = context
        return self._handler(*args, **kwargs)

    def __call__(self, context: RequestContext | None = None) -> Any:
        return self.invoke(context)

    def __repr__(self) -> str:
        name = getattr(self._handler, "__qualname__", repr(self._handler))
        return f"TargetInvocation({name}, context_slot={self._context_slot!r})"
