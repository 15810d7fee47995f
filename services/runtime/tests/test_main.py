import sys
from unittest.mock import MagicMock

import pytest

from services.runtime import main as runtime_main
from services.runtime.config import RuntimeConfig
from services.runtime.core.exceptions import HandlerCrashError, RuntimeAPIError
from services.runtime.models.errors import InvokeError


@pytest.fixture
def handler_module(tmp_path, monkeypatch):
    (tmp_path / "shim_test_app.py").write_text(
        "VALUE = 1\n"
        "def lambda_handler(event, context):\n"
        "    return event\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    yield "shim_test_app"
    sys.modules.pop("shim_test_app", None)


@pytest.fixture
def config():
    return RuntimeConfig(AWS_LAMBDA_RUNTIME_API="127.0.0.1:9001", _env_file=None)


def test_resolve_handler(handler_module):
    handler = runtime_main.resolve_handler(f"{handler_module}.lambda_handler")
    assert handler({"a": 1}, None) == {"a": 1}


@pytest.mark.parametrize(
    "name, match",
    [
        ("no_dot", "expected module.function"),
        ("shim_test_app.missing", "missing on module"),
        ("shim_test_app.VALUE", "not callable"),
    ],
)
def test_resolve_handler_errors(handler_module, name, match):
    with pytest.raises(ImportError, match=match):
        runtime_main.resolve_handler(name)


def test_resolve_handler_unknown_module():
    with pytest.raises(ImportError):
        runtime_main.resolve_handler("module_that_does_not_exist_xyz.handler")


@pytest.mark.parametrize(
    "error",
    [
        RuntimeAPIError("connection refused"),
        HandlerCrashError(InvokeError(error_type="MemoryError", error_message="", should_exit=True)),
    ],
)
def test_start_exits_when_loop_stops(monkeypatch, config, error):
    client = MagicMock()
    monkeypatch.setattr(runtime_main, "RuntimeAPIClient", MagicMock(return_value=client))
    loop = MagicMock(side_effect=error)
    monkeypatch.setattr(runtime_main, "start_runtime_api_loop", loop)

    with pytest.raises(SystemExit) as exc_info:
        runtime_main.start(lambda event, context: None, config=config)

    assert exc_info.value.code == 1
    client.close.assert_called_once()
    options = loop.call_args.kwargs["options"]
    assert options.config is config
    assert loop.call_args.kwargs["client"] is client


def test_main_exits_without_runtime_api(monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.delenv("AWS_LAMBDA_RUNTIME_API", raising=False)
    monkeypatch.setattr(runtime_main, "setup_logging", MagicMock())
    monkeypatch.setattr(runtime_main, "RuntimeConfig", lambda: RuntimeConfig(_env_file=None))

    with pytest.raises(SystemExit) as exc_info:
        runtime_main.main()
    assert exc_info.value.code == 1


def test_main_exits_on_bad_handler(monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "127.0.0.1:9001")
    monkeypatch.setenv("_HANDLER", "module_that_does_not_exist_xyz.handler")
    monkeypatch.setattr(runtime_main, "setup_logging", MagicMock())
    start = MagicMock()
    monkeypatch.setattr(runtime_main, "start", start)

    with pytest.raises(SystemExit) as exc_info:
        runtime_main.main()

    assert exc_info.value.code == 1
    start.assert_not_called()


def test_main_starts_resolved_handler(monkeypatch, handler_module):
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "127.0.0.1:9001")
    monkeypatch.setenv("_HANDLER", f"{handler_module}.lambda_handler")
    monkeypatch.setattr(runtime_main, "setup_logging", MagicMock())
    start = MagicMock()
    monkeypatch.setattr(runtime_main, "start", start)

    runtime_main.main()

    handler = start.call_args.args[0]
    assert handler.__name__ == "lambda_handler"
    assert start.call_args.kwargs["config"].AWS_LAMBDA_RUNTIME_API == "127.0.0.1:9001"
