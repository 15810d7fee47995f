"""
Invoke error models.

Wire representation of a failed invoke, shared with the Runtime API error schema.
"""

import traceback
from types import TracebackType
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StackFrame(BaseModel):
    """One frame of a reported stack trace."""

    model_config = ConfigDict(frozen=True)

    path: str = ""
    line: int = 0
    label: str = ""


class InvokeError(BaseModel):
    """
    Structured failure of a single invoke.

    ``should_exit`` marks errors after which the runtime must terminate; it is
    never part of the wire payload.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error_type: str = Field(default="", alias="errorType")
    error_message: str = Field(default="", alias="errorMessage")
    stack_trace: List[StackFrame] = Field(default_factory=list, alias="stackTrace")
    should_exit: bool = Field(default=False, exclude=True)


def stack_frames(tb: Optional[TracebackType]) -> List[StackFrame]:
    """Convert a traceback into reportable frames, outermost first."""
    if tb is None:
        return []
    return [
        StackFrame(path=frame.filename, line=frame.lineno or 0, label=frame.name)
        for frame in traceback.extract_tb(tb)
    ]
