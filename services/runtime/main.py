"""
Runtime bootstrap.

Entry point of the function process: loads configuration, resolves the handler
named by ``_HANDLER`` and runs the invoke loop until a non-recoverable error.
"""

import importlib
import logging
import sys
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .client import RuntimeAPIClient
from .config import RuntimeConfig
from .core.exceptions import RuntimeShimError
from .core.execution_context import ExecutionContext
from .core.handler import new_handler
from .core.logging_config import setup_logging
from .core.loop import start_runtime_api_loop

logger = logging.getLogger("runtime.main")


def resolve_handler(name: str) -> Callable[..., Any]:
    """
    Import ``module.function`` (module may be dotted).

    Raises:
        ImportError: module or attribute missing, or not callable
    """
    module_name, _, func_name = name.rpartition(".")
    if not module_name or not func_name:
        raise ImportError(f"Bad handler '{name}': expected module.function")
    module = importlib.import_module(module_name)
    handler = getattr(module, func_name, None)
    if handler is None:
        raise ImportError(f"Handler '{func_name}' missing on module '{module_name}'")
    if not callable(handler):
        raise ImportError(f"Handler '{name}' is not callable")
    return handler


def start(
    handler: Callable[..., Any],
    base_context: Optional[ExecutionContext] = None,
    config: Optional[RuntimeConfig] = None,
) -> None:
    """
    Run ``handler(event, context)`` for every invoke; never returns.

    Exits the process with status 1 once the loop stops, so the host can
    restart the worker in a clean state.
    """
    if config is None:
        config = RuntimeConfig()
    options = new_handler(handler, base_context=base_context, config=config)
    client = RuntimeAPIClient(config.AWS_LAMBDA_RUNTIME_API, config=config)
    try:
        start_runtime_api_loop(config.AWS_LAMBDA_RUNTIME_API, handler, client=client, options=options)
    except RuntimeShimError as e:
        logger.critical(f"Invoke loop stopped: {e}", extra={"error_type": type(e).__name__})
        sys.exit(1)
    finally:
        client.close()


def main() -> None:
    setup_logging()
    try:
        config = RuntimeConfig()
    except ValidationError as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    # Handler modules live in the task root, which is the working directory.
    if "" not in sys.path:
        sys.path.insert(0, "")

    try:
        handler = resolve_handler(config.HANDLER)
    except Exception as e:
        logger.critical(
            f"Unable to import handler '{config.HANDLER}': {e}",
            exc_info=True,
            extra={"error_type": type(e).__name__},
        )
        sys.exit(1)

    start(handler, config=config)


if __name__ == "__main__":
    main()
