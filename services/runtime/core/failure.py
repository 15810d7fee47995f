"""
Failure reporting.

Serializes an InvokeError for the Runtime API, derives the X-Ray error cause
document from it and sends both.
"""

import json
import logging
import os
from typing import List, Optional

from pydantic_core import PydanticSerializationError

from ..models.errors import InvokeError
from ..models.invoke import CONTENT_TYPE_JSON, Invoke
from ..models.xray import XRayError, XRayException
from .exceptions import RuntimeAPIError

logger = logging.getLogger("runtime.failure")

SERIALIZATION_ERROR_TYPE = "Runtime.SerializationError"


def safe_marshal(invoke_error: InvokeError) -> bytes:
    """
    Wire JSON for ``invoke_error``.

    Never raises: if the error cannot be serialized, a Runtime.SerializationError
    payload describing the failure is returned instead.
    """
    if invoke_error.stack_trace is None:
        invoke_error = invoke_error.model_copy(update={"stack_trace": []})
    try:
        return invoke_error.model_dump_json(by_alias=True, warnings=False).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        fallback = {
            "errorType": SERIALIZATION_ERROR_TYPE,
            "errorMessage": str(e),
            "stackTrace": [],
        }
        return json.dumps(fallback).encode("utf-8")


def _working_directory() -> str:
    try:
        return os.getcwd()
    except OSError:
        return ""


def make_xray_error(invoke_error: InvokeError) -> XRayError:
    """
    X-Ray error cause document for ``invoke_error``.

    ``paths`` lists each frame path once, in first-seen order.
    """
    stack = list(invoke_error.stack_trace or [])
    paths: List[str] = []
    visited_paths = set()
    for frame in stack:
        path = getattr(frame, "path", None)
        if isinstance(path, str) and path not in visited_paths:
            visited_paths.add(path)
            paths.append(path)

    # Frames are carried over unvalidated; serialization decides whether they are usable.
    exception = XRayException.model_construct(
        type=invoke_error.error_type,
        message=invoke_error.error_message,
        stack=stack,
    )
    return XRayError(
        working_directory=_working_directory(),
        exceptions=[exception],
        paths=paths,
    )


def marshal_xray_error(xray_error: XRayError) -> Optional[bytes]:
    try:
        return xray_error.model_dump_json(warnings=False).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        logger.warning(f"Dropping X-Ray error cause that could not be serialized: {e}")
        return None


def report_failure(invoke: Invoke, invoke_error: InvokeError) -> None:
    """
    Report ``invoke_error`` as the outcome of ``invoke``.

    Raises:
        RuntimeAPIError: the Runtime API did not accept the error report
    """
    error_payload = safe_marshal(invoke_error)
    logger.error(error_payload.decode("utf-8"))

    cause_for_xray = marshal_xray_error(make_xray_error(invoke_error))

    try:
        invoke.failure(error_payload, CONTENT_TYPE_JSON, cause_for_xray)
    except Exception as e:
        raise RuntimeAPIError(
            f"unexpected error occurred when sending the function error to the API: {e}",
            status_code=getattr(e, "status_code", None),
        ) from e
