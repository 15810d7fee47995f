"""
Response negotiation.

Derives the body and content type reported for a handler result. Results are
inspected for optional capabilities rather than required to share a base class.
"""

import logging
from collections.abc import Iterable, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Protocol, Tuple, runtime_checkable

from ..models.invoke import CONTENT_TYPE_BYTES

logger = logging.getLogger("runtime.negotiator")


@runtime_checkable
class HasContentType(Protocol):
    def content_type(self) -> str: ...


@runtime_checkable
class Releasable(Protocol):
    def close(self) -> Any: ...


@dataclass(frozen=True)
class TypedPayload:
    """Encoded body that keeps the content type its result declared."""

    body: bytes
    media_type: str

    def content_type(self) -> str:
        return self.media_type


# Iterable, but never a stream of byte chunks.
_CONTAINERS = (Mapping, list, tuple, set, frozenset)


def is_body(result: Any) -> bool:
    """Whether ``result`` can be sent as-is: bytes, text, a readable or an iterable of chunks."""
    if result is None or isinstance(result, (bytes, bytearray, memoryview, str, TypedPayload)):
        return True
    if callable(getattr(result, "read", None)):
        return True
    return isinstance(result, Iterable) and not isinstance(result, _CONTAINERS)


def payload_source(result: Any) -> Any:
    """Body for the Runtime API: bytes, or a readable/iterable streamed as-is."""
    if result is None:
        return b""
    if isinstance(result, TypedPayload):
        return result.body
    if isinstance(result, bytes):
        return result
    if isinstance(result, (bytearray, memoryview)):
        return bytes(result)
    if isinstance(result, str):
        return result.encode("utf-8")
    return result


def declared_content_type(result: Any, default: str = CONTENT_TYPE_BYTES) -> str:
    if isinstance(result, HasContentType) and callable(result.content_type):
        try:
            declared = result.content_type()
        except Exception as e:
            logger.warning(f"Ignoring content type of handler response: {e}")
        else:
            if isinstance(declared, str):
                return declared
    return default


def negotiate(result: Any) -> Tuple[Any, str]:
    return payload_source(result), declared_content_type(result)


@contextmanager
def release_after(result: Any) -> Iterator[Any]:
    """
    Close ``result`` on exit if it holds a resource (open stream, socket, file).

    Release is best-effort; a failing close() is logged and swallowed so it
    never changes how the invoke was reported.
    """
    try:
        yield result
    finally:
        if isinstance(result, Releasable):
            try:
                result.close()
            except Exception as e:
                logger.warning(
                    f"Failed to release handler response: {e}",
                    extra={"error_type": type(e).__name__},
                )
