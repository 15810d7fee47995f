"""
Handler adaptation.

Wraps a Python ``handler(event, context)`` function into the uniform
``(ctx, payload) -> result`` signature the invoke loop calls.
"""

import asyncio
import inspect
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from .context_builder import from_context
from .exceptions import HandlerError
from .execution_context import ExecutionContext
from .invoker import HandlerFunc
from .negotiator import TypedPayload, declared_content_type, is_body

if TYPE_CHECKING:
    from ..config import RuntimeConfig


def _passes_through(result: Any) -> bool:
    if isinstance(result, (bytes, bytearray)) or callable(getattr(result, "read", None)):
        return True
    # Typed results are sent as-is only when they already are a body.
    return callable(getattr(result, "content_type", None)) and is_body(result)


def decode_event(payload: bytes) -> Any:
    if not payload:
        return None
    try:
        return json.loads(payload)
    except ValueError as e:
        raise HandlerError("Runtime.UnmarshalError", f"Unable to unmarshal input: {e}") from e


def encode_result(result: Any) -> Any:
    if _passes_through(result):
        return result
    try:
        body = json.dumps(result, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise HandlerError("Runtime.MarshalError", f"Unable to marshal response: {e}") from e
    if callable(getattr(result, "content_type", None)):
        return TypedPayload(body, declared_content_type(result))
    return body


def adapt_handler(func: Callable[..., Any]) -> HandlerFunc:
    """
    Adapt ``func(event, context)`` to ``(ctx, payload) -> result``.

    Coroutine functions are run to completion on a fresh event loop.
    """

    def adapted(ctx: ExecutionContext, payload: bytes) -> Any:
        event = decode_event(payload)
        result = func(event, from_context(ctx))
        if inspect.isawaitable(result):
            result = asyncio.run(_await(result))
        return encode_result(result)

    adapted.__name__ = getattr(func, "__name__", "handler")
    adapted.__qualname__ = getattr(func, "__qualname__", adapted.__name__)
    return adapted


async def _await(awaitable: Any) -> Any:
    return await awaitable


@dataclass
class HandlerOptions:
    handler_func: HandlerFunc
    base_context: ExecutionContext = field(default_factory=ExecutionContext)
    config: Optional["RuntimeConfig"] = None


def new_handler(
    handler: Callable[..., Any],
    base_context: Optional[ExecutionContext] = None,
    config: Optional["RuntimeConfig"] = None,
    raw: bool = False,
) -> HandlerOptions:
    """
    Build the options the invoke loop runs with.

    Args:
        handler: ``handler(event, context)``, or ``handler(ctx, payload)`` when raw is True
        base_context: parent of every per-invoke execution context
        config: function configuration copied into each InvocationContext
        raw: handler already has the ``(ctx, payload)`` signature
    """
    handler_func = handler if raw else adapt_handler(handler)
    return HandlerOptions(
        handler_func=handler_func,
        base_context=base_context if base_context is not None else ExecutionContext(),
        config=config,
    )
