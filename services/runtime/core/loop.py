"""
Invoke-processing loop.

Fetches invokes one at a time and reports exactly one outcome for each:
FETCH -> CONTEXT_BUILD -> EXECUTE -> REPORT_SUCCESS | REPORT_FAILURE -> WAIT.
"""

import logging
from typing import Callable, Optional

from services.common.core import request_context

from ..client import RuntimeAPIClient
from ..models.invoke import Invoke
from .context_builder import build_context
from .exceptions import HandlerCrashError, HandlerError, MalformedInvokeError, RuntimeAPIError
from .execution_context import POST_INVOKE_SIGNAL_KEY, ExecutionContext, PostInvokeSignal
from .failure import report_failure
from .handler import HandlerOptions, new_handler
from .invoker import call_handler, error_response
from .negotiator import is_body, negotiate, release_after

logger = logging.getLogger("runtime.loop")

POST_INVOKE_WAIT_SECONDS = 10.0


def handle_invoke(invoke: Invoke, options: HandlerOptions) -> None:
    """
    Process one invoke and report its outcome.

    Raises:
        RuntimeAPIError: the outcome could not be sent to the Runtime API
        HandlerCrashError: the handler crashed; its failure has been reported
    """
    request_context.set_request_id(invoke.id)
    # Set again by build_context once the headers are known to be valid.
    request_context.reset_trace_id()

    try:
        ctx = build_context(invoke, options.base_context, options.config)
    except MalformedInvokeError as e:
        logger.warning(f"Rejecting malformed invoke {invoke.id}: {e}")
        report_failure(invoke, error_response(e))
        return

    try:
        _execute(invoke, ctx, options)
    finally:
        ctx.cancel()


def _execute(invoke: Invoke, ctx: ExecutionContext, options: HandlerOptions) -> None:
    response, invoke_error = call_handler(ctx, invoke.payload, options.handler_func)
    if invoke_error is None and not is_body(response):
        invoke_error = error_response(
            HandlerError(
                "Runtime.MarshalError",
                f"Unable to send response of type {type(response).__name__}",
            )
        )
    if invoke_error is not None:
        report_failure(invoke, invoke_error)
        if invoke_error.should_exit:
            raise HandlerCrashError(invoke_error)
        return

    # Responses holding a resource (open file, socket) are closed before the next invoke.
    with release_after(response):
        body, content_type = negotiate(response)
        try:
            invoke.success(body, content_type)
        except Exception as e:
            raise RuntimeAPIError(
                "unexpected error occurred when sending the function functionResponse "
                f"to the API: {e}",
                status_code=getattr(e, "status_code", None),
            ) from e


def wait_for_post_invoke_signal(base_context: ExecutionContext) -> None:
    """Give background work started by the handler a bounded chance to finish."""
    signal = base_context.value(POST_INVOKE_SIGNAL_KEY)
    if not isinstance(signal, PostInvokeSignal) or not signal.armed:
        return
    if not signal.wait(POST_INVOKE_WAIT_SECONDS):
        logger.info(f"Post-invoke signal not set within {POST_INVOKE_WAIT_SECONDS}s, continuing")


def start_runtime_api_loop(
    api: str,
    handler: Callable,
    client: Optional[RuntimeAPIClient] = None,
    options: Optional[HandlerOptions] = None,
) -> None:
    """
    Process invokes until a non-recoverable error occurs.

    Only returns by raising: RuntimeAPIError for transport failures,
    HandlerCrashError after a fatal handler failure was reported.
    """
    if client is None:
        client = RuntimeAPIClient(api)
    if options is None:
        options = new_handler(handler)

    logger.info(f"Starting invoke loop against Runtime API {api}")
    while True:
        invoke = client.next()
        handle_invoke(invoke, options)
        wait_for_post_invoke_signal(options.base_context)
