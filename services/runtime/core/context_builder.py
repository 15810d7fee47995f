"""
Invocation context builder.

Turns the Runtime API headers of an invoke into the execution context handed
to handler code.
"""

from typing import TYPE_CHECKING, Optional

from pydantic import TypeAdapter, ValidationError

from services.common.core import request_context

from ..models.context import ClientContext, CognitoIdentity, InvocationContext
from ..models.invoke import (
    HEADER_CLIENT_CONTEXT,
    HEADER_COGNITO_IDENTITY,
    HEADER_DEADLINE_MS,
    HEADER_INVOKED_FUNCTION_ARN,
    HEADER_TRACE_ID,
    Invoke,
)
from .deadline import parse_deadline
from .exceptions import MalformedInvokeError
from .execution_context import LAMBDA_CONTEXT_KEY, TRACE_ID_KEY, ExecutionContext

if TYPE_CHECKING:
    from ..config import RuntimeConfig

_client_context_adapter = TypeAdapter(Optional[ClientContext])
_cognito_identity_adapter = TypeAdapter(Optional[CognitoIdentity])


def parse_client_context(invoke: Invoke) -> ClientContext:
    """Absent (or JSON null) header yields an empty ClientContext."""
    client_context_json = invoke.header(HEADER_CLIENT_CONTEXT)
    if not client_context_json:
        return ClientContext()
    try:
        parsed = _client_context_adapter.validate_json(client_context_json)
    except ValidationError as e:
        raise MalformedInvokeError(f"failed to unmarshal client context json: {e}") from e
    return parsed or ClientContext()


def parse_cognito_identity(invoke: Invoke) -> CognitoIdentity:
    """Absent (or JSON null) header yields an empty CognitoIdentity."""
    cognito_identity_json = invoke.header(HEADER_COGNITO_IDENTITY)
    if not cognito_identity_json:
        return CognitoIdentity()
    try:
        parsed = _cognito_identity_adapter.validate_json(cognito_identity_json)
    except ValidationError as e:
        raise MalformedInvokeError(f"failed to unmarshal cognito identity json: {e}") from e
    return parsed or CognitoIdentity()


def build_context(
    invoke: Invoke,
    base_context: ExecutionContext,
    config: Optional["RuntimeConfig"] = None,
) -> ExecutionContext:
    """
    Build the execution context for one invoke.

    The returned context is cancelled at the invoke deadline; the caller must
    cancel it once the invoke has been reported.

    Raises:
        MalformedInvokeError: the deadline, client context or identity header is malformed
    """
    deadline = parse_deadline(invoke.header(HEADER_DEADLINE_MS))
    client_context = parse_client_context(invoke)
    identity = parse_cognito_identity(invoke)

    trace_id = invoke.header(HEADER_TRACE_ID)
    lc = InvocationContext(
        aws_request_id=invoke.id,
        invoked_function_arn=invoke.header(HEADER_INVOKED_FUNCTION_ARN),
        client_context=client_context,
        identity=identity,
        deadline=deadline,
        xray_trace_id=trace_id,
    )
    if config is not None:
        lc.function_name = config.AWS_LAMBDA_FUNCTION_NAME
        lc.function_version = config.AWS_LAMBDA_FUNCTION_VERSION
        lc.memory_limit_in_mb = config.AWS_LAMBDA_FUNCTION_MEMORY_SIZE
        lc.log_group_name = config.AWS_LAMBDA_LOG_GROUP_NAME
        lc.log_stream_name = config.AWS_LAMBDA_LOG_STREAM_NAME

    ctx = base_context.with_deadline(deadline)
    ctx = ctx.with_value(LAMBDA_CONTEXT_KEY, lc)

    # Ambient channel for instrumentation that only reads the environment,
    # explicit channel for everything that receives the context.
    request_context.set_trace_id(trace_id)
    ctx = ctx.with_value(TRACE_ID_KEY, trace_id)
    return ctx


def from_context(ctx: ExecutionContext) -> Optional[InvocationContext]:
    """The InvocationContext stored in ``ctx``, if any."""
    lc = ctx.value(LAMBDA_CONTEXT_KEY)
    return lc if isinstance(lc, InvocationContext) else None
