import pytest

from services.common.core import request_context


@pytest.fixture(autouse=True)
def _clean_request_context(monkeypatch):
    monkeypatch.delenv(request_context.TRACE_ID_ENV_VAR, raising=False)
    request_context.clear_trace_id()
    yield
    request_context.clear_trace_id()
