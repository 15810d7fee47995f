import time
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx
import pytest

from services.common.core import request_context
from services.runtime.core.exceptions import RuntimeAPIError
from services.runtime.models.invoke import (
    HEADER_AWS_REQUEST_ID,
    HEADER_DEADLINE_MS,
    HEADER_INVOKED_FUNCTION_ARN,
    Invoke,
)

FUNCTION_ARN = "arn:aws:lambda:us-east-1:123456789012:function:test-fn"


@dataclass
class Report:
    request_id: str
    action: str
    body: bytes
    content_type: str
    xray_error_cause: Optional[bytes] = None


class RecordingClient:
    """
    Runtime API stand-in.

    Hands out the queued invokes in order, records every report and raises
    RuntimeAPIError once the queue is empty (which ends the loop).
    """

    def __init__(self, invokes: List[Invoke] = (), fail_actions=()):
        self.invokes = list(invokes)
        self.reports: List[Report] = []
        self.fail_actions = set(fail_actions)
        self.fetches = 0

    def next(self) -> Invoke:
        self.fetches += 1
        if not self.invokes:
            raise RuntimeAPIError("no more invokes")
        invoke = self.invokes.pop(0)
        invoke.client = self
        return invoke

    def invocation_url(self, request_id: str, action: str) -> str:
        return f"http://runtime.test/invocation/{request_id}/{action}"

    def post(self, url: str, body: Any, content_type: str, xray_error_cause=None) -> None:
        if callable(getattr(body, "read", None)):
            body = body.read()
        request_id, action = url.rsplit("/", 2)[-2:]
        self.reports.append(Report(request_id, action, body, content_type, xray_error_cause))
        if action in self.fail_actions:
            raise RuntimeAPIError(f"{action} rejected", status_code=500)

    def reports_for(self, request_id: str) -> List[Report]:
        return [r for r in self.reports if r.request_id == request_id]


def _deadline_in(seconds: float) -> str:
    return str(int((time.time() + seconds) * 1000))


@pytest.fixture
def make_invoke():
    def _make(
        request_id: str = "req-1",
        payload: bytes = b"{}",
        deadline: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> Invoke:
        hdrs = {
            HEADER_AWS_REQUEST_ID: request_id,
            HEADER_DEADLINE_MS: deadline if deadline is not None else _deadline_in(60),
            HEADER_INVOKED_FUNCTION_ARN: FUNCTION_ARN,
        }
        hdrs.update(headers or {})
        return Invoke(id=request_id, payload=payload, headers=httpx.Headers(hdrs))

    return _make


@pytest.fixture
def deadline_in():
    return _deadline_in


@pytest.fixture
def recording_client():
    return RecordingClient


@pytest.fixture(autouse=True)
def _clean_request_context(monkeypatch):
    monkeypatch.delenv(request_context.TRACE_ID_ENV_VAR, raising=False)
    request_context.clear_trace_id()
    yield
    request_context.clear_trace_id()
