"""InterceptorRegistry: explicit name → interceptor instance lookup.

The registry is filled at startup, either directly in code or from
``"package.module:attribute"`` import paths in the ``[interceptors]``
config table. Lookups of unknown names fail immediately.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from collections.abc import Iterator, Mapping
from typing import Any

from mwchain.domain.errors import BindingError, BindingIssue
from mwchain.domain.types import FunctionInterceptor, Interceptor

logger = logging.getLogger(__name__)


class InterceptorRegistry:
    """Name-keyed store of interceptor instances."""

    def __init__(self, interceptors: Mapping[str, Interceptor] | None = None) -> None:
        self._interceptors: dict[str, Interceptor] = {}
        for name, instance in (interceptors or {}).items():
            self.register(name, instance)

    def register(self, name: str, instance: Any) -> Interceptor:
        """Register *instance* under *name*.

        Plain callables are wrapped in :class:`FunctionInterceptor`.
        Raises BindingError on duplicates or objects that cannot intercept.
        """
        if name in self._interceptors:
            raise BindingError(
                [
                    BindingIssue(
                        code="DUPLICATE_INTERCEPTOR",
                        message=f"Interceptor {name!r} is already registered",
                        interceptor=name,
                    )
                ]
            )
        resolved = _as_interceptor(instance, name)
        if resolved is None:
            raise BindingError(
                [
                    BindingIssue(
                        code="NOT_AN_INTERCEPTOR",
                        message=f"Object registered as {name!r} has no apply(context, chain)",
                        interceptor=name,
                    )
                ]
            )
        self._interceptors[name] = resolved
        logger.debug("Registered interceptor: %s", name)
        return resolved

    def get(self, name: str) -> Interceptor:
        try:
            return self._interceptors[name]
        except KeyError:
            raise BindingError(
                [
                    BindingIssue(
                        code="UNKNOWN_INTERCEPTOR",
                        message=f"Unknown interceptor {name!r}",
                        interceptor=name,
                    )
                ]
            ) from None

    def names(self) -> list[str]:
        return sorted(self._interceptors)

    def __contains__(self, name: object) -> bool:
        return name in self._interceptors

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._interceptors)

    @classmethod
    def from_import_paths(cls, paths: Mapping[str, str]) -> InterceptorRegistry:
        """Build a registry from name → import path, failing on any problem."""
        registry, issues = load_interceptors(paths)
        if issues:
            raise BindingError(issues)
        return registry


def load_interceptors(
    paths: Mapping[str, str],
) -> tuple[InterceptorRegistry, list[BindingIssue]]:
    """Import every path in *paths*, collecting problems instead of raising.

    Classes are instantiated with no arguments. Objects with ``apply`` are
    used as is, and plain callables are wrapped.
    """
    registry = InterceptorRegistry()
    issues: list[BindingIssue] = []
    for name, path in paths.items():
        try:
            obj = import_object(path)
        except (ImportError, AttributeError, ValueError) as exc:
            logger.warning("Failed to import interceptor %s from %s", name, path, exc_info=True)
            issues.append(
                BindingIssue(
                    code="IMPORT_FAILED",
                    message=f"Cannot import interceptor {name!r} from {path!r}: {exc}",
                    interceptor=name,
                )
            )
            continue

        if inspect.isclass(obj):
            try:
                obj = obj()
            except Exception as exc:
                logger.warning("Failed to instantiate interceptor %s", name, exc_info=True)
                issues.append(
                    BindingIssue(
                        code="INSTANTIATION_FAILED",
                        message=f"Cannot instantiate interceptor {name!r}: {exc}",
                        interceptor=name,
                    )
                )
                continue

        try:
            registry.register(name, obj)
        except BindingError as exc:
            issues.extend(exc.issues)
    return registry, issues


def import_object(path: str) -> Any:
    """Resolve ``"package.module:attr.sub"`` to the object it names."""
    module_name, sep, attr_path = path.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"Import path {path!r} must look like 'package.module:attribute'"
        raise ValueError(msg)
    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


def _as_interceptor(obj: Any, name: str) -> Interceptor | None:
    if isinstance(obj, Interceptor) and not inspect.isclass(obj):
        return obj
    if callable(obj) and not inspect.isclass(obj):
        return FunctionInterceptor(obj, name=name)
    return None
