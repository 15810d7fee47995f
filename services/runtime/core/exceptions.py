"""
Custom exception classes.

Represent errors raised while processing invokes from the Runtime API.
"""

from typing import List, Optional

from ..models.errors import InvokeError, StackFrame


class RuntimeShimError(Exception):
    """Base exception class for the runtime shim."""

    pass


class MalformedInvokeError(RuntimeShimError):
    """Raised when an invoke carries malformed protocol headers.

    Always reported back to the Runtime API; never ends the loop.
    """

    error_type = "Runtime.MalformedInvoke"


class RuntimeAPIError(RuntimeShimError):
    """Raised when the Runtime API cannot be reached or rejects a request.

    Non-recoverable: the loop stops and the process is expected to exit.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class HandlerCrashError(RuntimeShimError):
    """Raised by the loop after a fatal handler failure has been reported."""

    def __init__(self, invoke_error: InvokeError):
        self.invoke_error = invoke_error
        super().__init__("calling the handler function resulted in a crash, the process should exit")


class HandlerError(Exception):
    """
    Explicit, structured error raised by handler code.

    The error type, message and stack trace are reported exactly as given.
    """

    def __init__(
        self,
        error_type: str,
        message: str,
        stack_trace: Optional[List[StackFrame]] = None,
    ):
        self.error_type = error_type
        self.message = message
        self.stack_trace = list(stack_trace or [])
        super().__init__(message)

    def to_invoke_error(self) -> InvokeError:
        return InvokeError(
            error_type=self.error_type,
            error_message=self.message,
            stack_trace=self.stack_trace,
        )
