"""
Core logic package.

Per-invoke protocol logic: deadlines, execution context, crash containment,
response negotiation and failure reporting.
"""

from .deadline import parse_deadline, unix_millis
from .exceptions import (
    HandlerCrashError,
    HandlerError,
    MalformedInvokeError,
    RuntimeAPIError,
    RuntimeShimError,
)
from .execution_context import POST_INVOKE_SIGNAL_KEY, ExecutionContext, PostInvokeSignal

__all__ = [
    "parse_deadline",
    "unix_millis",
    "HandlerCrashError",
    "HandlerError",
    "MalformedInvokeError",
    "RuntimeAPIError",
    "RuntimeShimError",
    "POST_INVOKE_SIGNAL_KEY",
    "ExecutionContext",
    "PostInvokeSignal",
]
