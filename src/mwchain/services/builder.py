"""ChainBuilder: resolve handler bindings into interceptor chains.

Bindings map a handler identifier to an ordered list of interceptor
identifiers. Resolution happens once, eagerly, when the builder is
constructed: if any identifier in any binding is unknown, construction
fails with a BindingError listing every problem and no chain is built.

Handlers are attached with :meth:`ChainBuilder.bind`::

    builder = ChainBuilder(registry, {"Query.user": ["log", "auth"]})

    @builder.bind("Query.user", context_arg="ctx")
    def user(ctx: RequestContext, user_id: str) -> dict: ...
"""

from __future__ import annotations

import functools
import inspect
import logging
import types
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from mwchain.domain.errors import BindingError, BindingIssue
from mwchain.domain.types import Interceptor, interceptor_name
from mwchain.services.chain import ChainExecutor
from mwchain.services.target import TargetInvocation

if TYPE_CHECKING:
    from mwchain.infrastructure.registry import InterceptorRegistry

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def validate_bindings(
    registry: InterceptorRegistry,
    bindings: Mapping[str, Sequence[str]],
) -> list[BindingIssue]:
    """Return every unresolvable identifier across *bindings* (empty when valid)."""
    issues: list[BindingIssue] = []
    for handler_id, names in bindings.items():
        for name in names:
            if name not in registry:
                issues.append(
                    BindingIssue(
                        code="UNKNOWN_INTERCEPTOR",
                        message=f"Handler {handler_id!r} references unknown interceptor {name!r}",
                        handler_id=handler_id,
                        interceptor=name,
                    )
                )
    return issues


class ChainBuilder:
    """Eagerly resolved handler → interceptor chain table.

    Parameters:
        registry: Lookup service for interceptor instances.
        bindings: Handler identifier → ordered interceptor identifiers.
        executor: Executor used by bound handlers (a plain one by default).
    """

    def __init__(
        self,
        registry: InterceptorRegistry,
        bindings: Mapping[str, Sequence[str]],
        *,
        executor: ChainExecutor | None = None,
    ) -> None:
        issues = validate_bindings(registry, bindings)
        if issues:
            raise BindingError(issues)

        self._registry = registry
        self._executor = executor or ChainExecutor()
        self._bindings = {handler_id: tuple(names) for handler_id, names in bindings.items()}
        self._chains: dict[str, tuple[Interceptor, ...]] = {
            handler_id: tuple(registry.get(name) for name in names)
            for handler_id, names in self._bindings.items()
        }
        logger.debug("Resolved %d handler binding(s)", len(self._chains))
        self._publish_build()

    @property
    def executor(self) -> ChainExecutor:
        return self._executor

    @property
    def handlers(self) -> list[str]:
        return sorted(self._chains)

    def is_bound(self, handler_id: str) -> bool:
        return handler_id in self._chains

    def binding(self, handler_id: str) -> tuple[str, ...]:
        """Configured interceptor identifiers for *handler_id* (empty if unbound)."""
        return self._bindings.get(handler_id, ())

    def resolve(self, handler_id: str) -> tuple[Interceptor, ...]:
        """Resolved interceptors for *handler_id*; unbound handlers get an empty chain."""
        chain = self._chains.get(handler_id)
        if chain is None:
            logger.debug("No binding for handler %s; running without interceptors", handler_id)
            return ()
        return chain

    def bind(
        self,
        handler_id: str,
        *,
        context_arg: str = "context",
    ) -> Callable[[Callable[..., Any]], BoundHandler]:
        """Decorator wrapping a handler in its resolved chain."""

        def decorator(handler: Callable[..., Any]) -> BoundHandler:
            return BoundHandler(
                handler_id,
                handler,
                self.resolve(handler_id),
                self._executor,
                context_arg=context_arg,
            )

        return decorator

    def _publish_build(self) -> None:
        bus = self._executor.event_bus
        if bus is None:
            return
        try:
            bus.dispatch("post_build", {"handlers": self.handlers})
        except Exception:
            logger.warning("Event dispatch failed for post_build", exc_info=True)


class BoundHandler:
    """A handler whose every call runs through its interceptor chain.

    The request context is located by parameter name, checked against the
    handler signature once at bind time.
    """

    def __init__(
        self,
        handler_id: str,
        handler: Callable[..., Any],
        interceptors: Sequence[Interceptor],
        executor: ChainExecutor,
        *,
        context_arg: str = "context",
    ) -> None:
        signature = inspect.signature(handler)
        parameter = signature.parameters.get(context_arg)
        if parameter is None or parameter.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            issue = BindingIssue(
                code="NO_CONTEXT_PARAMETER",
                message=f"Handler {handler_id!r} has no parameter named {context_arg!r}",
                handler_id=handler_id,
            )
            raise BindingError([issue])

        self.handler_id = handler_id
        self._handler = handler
        self._interceptors = tuple(interceptors)
        self._executor = executor
        self._signature = signature
        self._context_arg = context_arg
        self._context_slot: int | str = context_arg
        if parameter.kind in _POSITIONAL_KINDS:
            self._context_slot = list(signature.parameters).index(context_arg)
        functools.update_wrapper(self, handler)

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._interceptors

    @property
    def interceptor_names(self) -> list[str]:
        return [interceptor_name(i) for i in self._interceptors]

    def __get__(self, instance: object, owner: type | None = None) -> Any:
        """Bind like a function so resolver methods receive ``self``."""
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        bound = self._signature.bind(*args, **kwargs)
        bound.apply_defaults()
        context = bound.arguments.get(self._context_arg)
        if context is None:
            msg = f"{self.handler_id} was called without a request context"
            raise TypeError(msg)

        target = TargetInvocation(
            self._handler,
            bound.args,
            bound.kwargs,
            context_slot=self._context_slot,
        )
        return self._executor.execute(
            self._interceptors,
            context,
            target,
            handler_id=self.handler_id,
        )

    def __repr__(self) -> str:
        return f"BoundHandler({self.handler_id!r}, interceptors={self.interceptor_names})"
