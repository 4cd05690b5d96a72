"""BaseService: foundation for inspection services.

Every service receives a :class:`Runtime` at construction time and
reads configuration, registry, and builder state through it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mwchain.infrastructure.runtime import Runtime


class BaseService:
    """Base for service-layer classes.

    Usage::

        class BindingService(BaseService):
            def check(self) -> ServiceResult:
                registry = self._runtime.registry
                ...
    """

    def __init__(self, runtime: Runtime) -> None:
        self._runtime = runtime
