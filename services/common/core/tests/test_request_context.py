import os
import threading

from services.common.core import request_context


def test_get_trace_id_default_is_none():
    """TraceId is None by default."""
    assert request_context.get_trace_id() is None


def test_set_trace_id_is_verbatim():
    """Trace ID is stored exactly as received, without normalization."""
    trace_str = "Root=1-67890abc-def1234567890abcdef12345"
    result = request_context.set_trace_id(trace_str)
    assert result == trace_str
    assert request_context.get_trace_id() == trace_str


def test_set_trace_id_publishes_ambient_variable():
    trace_str = "Root=1-676b8f34-e432f8314483756f7098e60b;Sampled=1"
    request_context.set_trace_id(trace_str)
    assert os.environ[request_context.TRACE_ID_ENV_VAR] == trace_str


def test_set_trace_id_overwrites_previous_invoke():
    request_context.set_trace_id("Root=1-aaaaaaaa-aaaaaaaaaaaaaaaaaaaaaaaa")
    request_context.set_trace_id("")
    assert os.environ[request_context.TRACE_ID_ENV_VAR] == ""
    assert request_context.get_trace_id() is None


def test_trace_id_does_not_affect_request_id():
    """Setting Trace ID does not affect Request ID."""
    request_context.set_trace_id("Root=1-67890abc-def1234567890abcdef12345")
    assert request_context.get_request_id() is None

    request_context.set_request_id("req-1")
    assert request_context.get_request_id() == "req-1"


def test_clear_trace_id():
    """TraceId and RequestId can be cleared."""
    request_context.set_trace_id("Root=1-676b8f34-e432f8314483756f7098e60b;Sampled=1")
    request_context.set_request_id("req-1")

    request_context.clear_trace_id()
    assert request_context.get_trace_id() is None
    assert request_context.get_request_id() is None


def test_context_var_not_visible_from_new_thread():
    """The log-correlation channel is per context; only the env var is process wide."""
    request_context.set_trace_id("Root=1-bbbbbbbb-bbbbbbbbbbbbbbbbbbbbbbbb")
    seen = {}

    def worker():
        seen["trace_id"] = request_context.get_trace_id()
        seen["env"] = os.environ.get(request_context.TRACE_ID_ENV_VAR)

    t = threading.Thread(target=worker)
    t.start()
    t.join()

    assert seen["trace_id"] is None
    assert seen["env"] == "Root=1-bbbbbbbb-bbbbbbbbbbbbbbbbbbbbbbbb"


def test_reset_trace_id_keeps_ambient_variable_and_request_id():
    trace = "Root=1-676b8f34-e432f8314483756f7098e60b;Sampled=1"
    request_context.set_trace_id(trace)
    request_context.set_request_id("req-1")

    request_context.reset_trace_id()

    assert request_context.get_trace_id() is None
    assert request_context.get_request_id() == "req-1"
    assert os.environ[request_context.TRACE_ID_ENV_VAR] == trace
