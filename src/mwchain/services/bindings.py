"""BindingService: validate and describe configured interceptor chains.

Used by ``mwchain check`` and ``mwchain show``. Unlike
:class:`~mwchain.services.builder.ChainBuilder`, which raises on the first
invalid configuration, this service reports every problem as data.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from mwchain.domain.errors import BindingError
from mwchain.services.base import BaseService
from mwchain.services.builder import validate_bindings
from mwchain.services.result import ServiceResult
from mwchain.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class BindingService(BaseService):
    """Inspection operations over the runtime's configuration."""

    @traced
    def check(self) -> ServiceResult:
        """Import every interceptor and resolve every binding, collecting issues."""
        op = "check"
        try:
            config = self._runtime.config
        except ValidationError as exc:
            return ServiceResult.failure(op, "INVALID_CONFIG", str(exc))

        with trace_span("load_interceptors"):
            registry = self._runtime.registry
            load_issues = self._runtime.load_issues

        failed_imports = {issue.interceptor for issue in load_issues}
        with trace_span("validate_bindings"):
            binding_issues = [
                issue
                for issue in validate_bindings(registry, config.bindings)
                if issue.interceptor not in failed_imports
            ]
        issues = [*load_issues, *binding_issues]

        bound = {name for names in config.bindings.values() for name in names}
        warnings = [
            f"Interceptor {name!r} is not bound to any handler"
            for name in sorted(config.interceptors)
            if name not in bound
        ]
        for handler_id, names in sorted(config.bindings.items()):
            repeated = sorted({name for name in names if names.count(name) > 1})
            warnings.extend(
                f"Handler {handler_id!r} lists interceptor {name!r} more than once"
                for name in repeated
            )

        data: dict[str, Any] = {
            "handlers": len(config.bindings),
            "interceptors": len(config.interceptors),
            "issues": [issue.model_dump() for issue in issues],
            "healthy": not issues,
        }
        if issues:
            logger.debug("Binding check found %d issue(s)", len(issues))
            return ServiceResult.failure(
                op,
                "INVALID_BINDINGS",
                f"{len(issues)} binding issue(s) found",
                detail={"issues": data["issues"]},
                data=data,
            )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    @traced
    def show(self, handler_id: str | None = None) -> ServiceResult:
        """Describe the resolved chain for one handler, or for all of them."""
        op = "show"
        try:
            builder = self._runtime.builder
        except ValidationError as exc:
            return ServiceResult.failure(op, "INVALID_CONFIG", str(exc))
        except BindingError as exc:
            return ServiceResult.failure(
                op,
                "INVALID_BINDINGS",
                str(exc),
                detail={"issues": [issue.model_dump() for issue in exc.issues]},
            )

        if handler_id is not None and not builder.is_bound(handler_id):
            return ServiceResult.failure(
                op,
                "UNKNOWN_HANDLER",
                f"No binding configured for handler {handler_id!r}",
                detail={"known": builder.handlers},
            )

        handler_ids = [handler_id] if handler_id is not None else builder.handlers
        handlers = []
        for hid in handler_ids:
            names = builder.binding(hid)
            resolved = builder.resolve(hid)
            handlers.append(
                {
                    "handler_id": hid,
                    "interceptors": [
                        {
                            "position": position,
                            "name": name,
                            "type": type(instance).__qualname__,
                        }
                        for position, (name, instance) in enumerate(
                            zip(names, resolved, strict=True)
                        )
                    ],
                }
            )
        return ServiceResult(ok=True, op=op, data={"handlers": handlers, "count": len(handlers)})
