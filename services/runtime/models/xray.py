"""
X-Ray error cause models.

The document sent in the Lambda-Runtime-Function-Xray-Error-Cause header when
an invoke fails.
"""

from typing import List

from pydantic import BaseModel, Field

from .errors import StackFrame


class XRayException(BaseModel):
    type: str
    message: str
    stack: List[StackFrame] = Field(default_factory=list)


class XRayError(BaseModel):
    working_directory: str = ""
    exceptions: List[XRayException] = Field(default_factory=list)
    paths: List[str] = Field(default_factory=list)
