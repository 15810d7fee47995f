"""
RequestContext management.

Holds the identifiers of the invoke currently being processed so that log
records can be correlated with it. The trace id is additionally published to
the process-wide ``_X_AMZN_TRACE_ID`` variable read by tracing instrumentation.
The runtime processes one invoke at a time; the ambient variable is not safe
for concurrent invokes.
"""

import os
from contextvars import ContextVar
from typing import Optional

TRACE_ID_ENV_VAR = "_X_AMZN_TRACE_ID"

# Context variable for Trace ID (verbatim Lambda-Runtime-Trace-Id header).
_trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
# Context variable for Request ID (Lambda-Runtime-Aws-Request-Id header).
_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_trace_id() -> Optional[str]:
    """Get the current Trace ID."""
    return _trace_id_var.get()


def get_request_id() -> Optional[str]:
    """Get the current Request ID."""
    return _request_id_var.get()


def set_request_id(request_id: str) -> None:
    _request_id_var.set(request_id)


def set_trace_id(trace_id: str) -> str:
    """
    Publish the Trace ID for the invoke about to run.

    This is the only writer of the ambient ``_X_AMZN_TRACE_ID`` variable.

    Args:
        trace_id: Lambda-Runtime-Trace-Id header value, propagated verbatim

    Returns:
        The Trace ID that was set
    """
    os.environ[TRACE_ID_ENV_VAR] = trace_id
    _trace_id_var.set(trace_id or None)
    return trace_id


def reset_trace_id() -> None:
    """Forget the Trace ID for log correlation; the ambient variable is left as-is."""
    _trace_id_var.set(None)


def clear_trace_id() -> None:
    """Clear the Trace ID context."""
    _trace_id_var.set(None)
    _request_id_var.set(None)
