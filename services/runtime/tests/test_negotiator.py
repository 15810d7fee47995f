import io
import logging

import pytest

from services.runtime.core.negotiator import TypedPayload, is_body, negotiate, release_after
from services.runtime.models.invoke import CONTENT_TYPE_BYTES


class HtmlResponse:
    def __init__(self, body: bytes):
        self.body = body

    def content_type(self) -> str:
        return "text/html; charset=utf-8"

    def __iter__(self):
        yield self.body


class ClosableStream(io.BytesIO):
    def __init__(self, data: bytes, fail_on_close: bool = False):
        super().__init__(data)
        self.close_calls = 0
        self.fail_on_close = fail_on_close

    def close(self):
        self.close_calls += 1
        super().close()
        if self.fail_on_close and self.close_calls == 1:
            raise OSError("close failed")


@pytest.mark.parametrize(
    "result, expected",
    [
        (b'{"n":2}', b'{"n":2}'),
        (bytearray(b"raw"), b"raw"),
        (memoryview(b"view"), b"view"),
        ("text", b"text"),
        (None, b""),
    ],
)
def test_default_content_type_and_payload(result, expected):
    body, content_type = negotiate(result)
    assert body == expected
    assert content_type == CONTENT_TYPE_BYTES


def test_content_type_capability_is_used_verbatim():
    response = HtmlResponse(b"<p>hi</p>")
    body, content_type = negotiate(response)

    assert content_type == "text/html; charset=utf-8"
    assert body is response


def test_content_type_attribute_that_is_not_callable_is_ignored():
    class WithAttribute:
        content_type = "text/plain"

    _, content_type = negotiate(WithAttribute())
    assert content_type == CONTENT_TYPE_BYTES


def test_failing_content_type_falls_back_to_default():
    class Broken:
        def content_type(self):
            raise RuntimeError("no")

    _, content_type = negotiate(Broken())
    assert content_type == CONTENT_TYPE_BYTES


def test_streams_pass_through():
    stream = io.BytesIO(b"streamed")
    body, content_type = negotiate(stream)
    assert body is stream
    assert content_type == CONTENT_TYPE_BYTES


def test_release_after_closes_on_normal_exit():
    stream = ClosableStream(b"data")
    with release_after(stream):
        assert stream.close_calls == 0
    assert stream.close_calls == 1


def test_release_after_closes_when_transmission_fails():
    stream = ClosableStream(b"data")
    with pytest.raises(ConnectionError):
        with release_after(stream):
            raise ConnectionError("send failed")
    assert stream.close_calls == 1


def test_release_after_swallows_close_errors(caplog):
    stream = ClosableStream(b"data", fail_on_close=True)
    with caplog.at_level(logging.WARNING, logger="runtime.negotiator"):
        with release_after(stream):
            pass
    assert stream.close_calls == 1
    assert "Failed to release handler response" in caplog.text


def test_release_after_ignores_non_releasable_results():
    with release_after(b"bytes") as result:
        assert result == b"bytes"


def test_typed_payload_keeps_declared_content_type():
    body, content_type = negotiate(TypedPayload(b'{"n":2}', "application/json"))
    assert body == b'{"n":2}'
    assert content_type == "application/json"


@pytest.mark.parametrize(
    "result",
    [None, b"raw", bytearray(b"raw"), "text", io.BytesIO(b"s"), HtmlResponse(b"<p/>"), iter([b"a"])],
)
def test_is_body_accepts_sendable_results(result):
    assert is_body(result) is True


@pytest.mark.parametrize("result", [{"n": 1}, [b"a"], (b"a",), {b"a"}, 42, object()])
def test_is_body_rejects_values_that_need_encoding(result):
    assert is_body(result) is False
