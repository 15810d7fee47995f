"""
Crash-contained handler invocation.

``call_handler`` is the single recovery boundary around handler code. Nothing
else in the runtime catches handler failures, so fatal conditions are never
masked further up.
"""

from types import TracebackType
from typing import Any, Callable, Optional, Tuple

from ..models.errors import InvokeError, stack_frames
from .execution_context import ExecutionContext

HandlerFunc = Callable[[ExecutionContext, bytes], Any]

# Interpreter-level faults that leave the process in an unknown state.
CRASH_EXCEPTIONS = (MemoryError, RecursionError, SystemError)


def is_crash(exc: BaseException) -> bool:
    return not isinstance(exc, Exception) or isinstance(exc, CRASH_EXCEPTIONS)


def _describe(exc: BaseException) -> str:
    try:
        return str(exc)
    except Exception:
        return f"<unprintable {type(exc).__name__} object>"


def _error_type(exc: BaseException) -> str:
    error_type = getattr(exc, "error_type", None)
    if isinstance(error_type, str) and error_type:
        return error_type
    return type(exc).__name__


def error_response(exc: BaseException, tb: Optional[TracebackType] = None) -> InvokeError:
    """
    Reportable, non-fatal error for ``exc``.

    Exceptions exposing ``to_invoke_error()`` supply their own structured error.
    """
    to_invoke_error = getattr(exc, "to_invoke_error", None)
    if callable(to_invoke_error):
        try:
            invoke_error = to_invoke_error()
        except Exception:
            invoke_error = None
        if isinstance(invoke_error, InvokeError):
            return invoke_error
    return InvokeError(
        error_type=_error_type(exc),
        error_message=_describe(exc),
        stack_trace=stack_frames(tb),
    )


def crash_response(exc: BaseException, tb: Optional[TracebackType] = None) -> InvokeError:
    """Fatal error for ``exc``; the runtime exits after reporting it."""
    return InvokeError(
        error_type=type(exc).__name__,
        error_message=_describe(exc),
        stack_trace=stack_frames(tb),
        should_exit=True,
    )


def call_handler(
    ctx: ExecutionContext, payload: bytes, handler: HandlerFunc
) -> Tuple[Any, Optional[InvokeError]]:
    """
    Run ``handler`` and convert any failure into an InvokeError.

    Returns:
        (result, None) on success, (None, InvokeError) on failure
    """
    try:
        return handler(ctx, payload), None
    except BaseException as e:
        # Drop this frame so reported stacks start in handler code.
        tb = e.__traceback__.tb_next if e.__traceback__ is not None else None
        if is_crash(e):
            return None, crash_response(e, tb)
        return None, error_response(e, tb)
