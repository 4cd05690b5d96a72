"""mwchain: sequential interceptor chain execution engine."""

from mwchain.domain.context import RequestContext, SourceLocation
from mwchain.domain.errors import (
    UNEXPECTED_ERROR_MESSAGE,
    BindingError,
    ChainIntegrityError,
    DomainError,
)
from mwchain.domain.types import ChainStatus, FunctionInterceptor, Interceptor, interceptor
from mwchain.infrastructure.registry import InterceptorRegistry
from mwchain.services.builder import BoundHandler, ChainBuilder
from mwchain.services.chain import Chain, ChainExecutor
from mwchain.services.target import TargetInvocation

__version__ = "0.1.0"

__all__ = [
    "UNEXPECTED_ERROR_MESSAGE",
    "BindingError",
    "BoundHandler",
    "Chain",
    "ChainBuilder",
    "ChainExecutor",
    "ChainIntegrityError",
    "ChainStatus",
    "DomainError",
    "FunctionInterceptor",
    "Interceptor",
    "InterceptorRegistry",
    "RequestContext",
    "SourceLocation",
    "TargetInvocation",
    "interceptor",
]
