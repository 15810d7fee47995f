"""
Data model definitions package.

Aggregates the models exchanged between the invoke loop, handler code and the Runtime API.
"""

from .context import ClientApplication, ClientContext, CognitoIdentity, InvocationContext
from .errors import InvokeError, StackFrame
from .invoke import Invoke
from .xray import XRayError, XRayException

__all__ = [
    "ClientApplication",
    "ClientContext",
    "CognitoIdentity",
    "InvocationContext",
    "InvokeError",
    "StackFrame",
    "Invoke",
    "XRayError",
    "XRayException",
]
