"""
Invoke model.

One unit of work fetched from the Runtime API.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import httpx

HEADER_AWS_REQUEST_ID = "Lambda-Runtime-Aws-Request-Id"
HEADER_DEADLINE_MS = "Lambda-Runtime-Deadline-Ms"
HEADER_TRACE_ID = "Lambda-Runtime-Trace-Id"
HEADER_COGNITO_IDENTITY = "Lambda-Runtime-Cognito-Identity"
HEADER_CLIENT_CONTEXT = "Lambda-Runtime-Client-Context"
HEADER_INVOKED_FUNCTION_ARN = "Lambda-Runtime-Invoked-Function-Arn"
HEADER_XRAY_ERROR_CAUSE = "Lambda-Runtime-Function-Xray-Error-Cause"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_BYTES = "application/octet-stream"


class InvokeTransport(Protocol):
    """What an Invoke needs from the client that fetched it."""

    def post(
        self,
        url: str,
        body: Any,
        content_type: str,
        xray_error_cause: Optional[bytes] = None,
    ) -> None: ...

    def invocation_url(self, request_id: str, action: str) -> str: ...


@dataclass
class Invoke:
    """
    A single invoke.

    Terminates with exactly one call to ``success`` or ``failure``.
    """

    id: str
    payload: bytes = b""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    client: Optional[InvokeTransport] = None

    def header(self, name: str) -> str:
        """Case-insensitive header lookup, empty string if absent."""
        return self.headers.get(name, "")

    def success(self, body: Any, content_type: str) -> None:
        """Report the handler response for this invoke."""
        client = self._require_client()
        client.post(client.invocation_url(self.id, "response"), body, content_type)

    def failure(self, body: Any, content_type: str, xray_error_cause: Optional[bytes]) -> None:
        """Report the handler error for this invoke."""
        client = self._require_client()
        client.post(client.invocation_url(self.id, "error"), body, content_type, xray_error_cause)

    def _require_client(self) -> InvokeTransport:
        if self.client is None:
            raise RuntimeError(f"invoke {self.id} is not bound to a Runtime API client")
        return self.client
