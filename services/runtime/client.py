"""
Runtime API client.

Talks to the Lambda Runtime API (2018-06-01): long-polls for the next invoke
and posts responses and errors back.
"""

import logging
import platform
from typing import Any, Dict, Optional

import httpx

from services.common.core.config import BaseAppConfig
from services.common.core.http_client import HttpClientFactory

from .core.exceptions import RuntimeAPIError
from .models.invoke import HEADER_AWS_REQUEST_ID, HEADER_XRAY_ERROR_CAUSE, Invoke

logger = logging.getLogger("runtime.client")

API_VERSION = "2018-06-01"
XRAY_ERROR_CAUSE_MAX_SIZE = 1024 * 1024
USER_AGENT = f"esb-runtime-python/{platform.python_version()}"


class RuntimeAPIClient:
    def __init__(
        self,
        address: str,
        http_client: Optional[httpx.Client] = None,
        config: Optional[BaseAppConfig] = None,
    ):
        """
        Args:
            address: host:port of the Runtime API (AWS_LAMBDA_RUNTIME_API)
            http_client: Shared httpx.Client; created through HttpClientFactory if omitted
            config: settings used to create the client
        """
        self.address = address
        self.base_url = f"http://{address}/{API_VERSION}/runtime/invocation/"
        if http_client is None:
            # The next-invoke request blocks until work arrives; it must not time out.
            http_client = HttpClientFactory(config or BaseAppConfig()).create_sync_client(
                timeout=None
            )
        self.http_client = http_client

    def invocation_url(self, request_id: str, action: str) -> str:
        return f"{self.base_url}{request_id}/{action}"

    def next(self) -> Invoke:
        """
        Block until the Runtime API hands out the next invoke.

        Raises:
            RuntimeAPIError: transport failure or unexpected status code
        """
        url = self.base_url + "next"
        try:
            resp = self.http_client.get(url, headers={"User-Agent": USER_AGENT})
        except httpx.HTTPError as e:
            raise RuntimeAPIError(f"failed to get the next invoke: {e}") from e

        if resp.status_code != httpx.codes.OK:
            raise RuntimeAPIError(
                f"failed to GET {url}: got unexpected status code: {resp.status_code}",
                status_code=resp.status_code,
            )

        request_id = resp.headers.get(HEADER_AWS_REQUEST_ID, "")
        logger.debug(f"Received invoke {request_id}", extra={"payload_size": len(resp.content)})
        return Invoke(id=request_id, payload=resp.content, headers=resp.headers, client=self)

    def post(
        self,
        url: str,
        body: Any,
        content_type: str,
        xray_error_cause: Optional[bytes] = None,
    ) -> None:
        """
        POST a response or error body.

        Raises:
            RuntimeAPIError: transport failure or a status other than 202 Accepted
        """
        headers: Dict[str, Any] = {"Content-Type": content_type, "User-Agent": USER_AGENT}
        if xray_error_cause is not None and len(xray_error_cause) < XRAY_ERROR_CAUSE_MAX_SIZE:
            headers[HEADER_XRAY_ERROR_CAUSE] = xray_error_cause

        try:
            resp = self.http_client.post(url, content=body, headers=headers)
        except httpx.HTTPError as e:
            raise RuntimeAPIError(f"failed to POST to {url}: {e}") from e

        if resp.status_code != httpx.codes.ACCEPTED:
            raise RuntimeAPIError(
                f"failed to POST to {url}: got unexpected status code: {resp.status_code}",
                status_code=resp.status_code,
            )

    def close(self) -> None:
        self.http_client.close()
