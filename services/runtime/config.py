"""
Runtime configuration definition.

Loads the function configuration the Lambda execution environment provides
through environment variables. Uses pydantic-settings for type safety and defaults.
"""

from pydantic import AliasChoices, Field

from services.common.core.config import BaseAppConfig


class RuntimeConfig(BaseAppConfig):
    """
    Configuration of the runtime shim process.
    """

    # Runtime API (required from env)
    AWS_LAMBDA_RUNTIME_API: str = Field(..., description="host:port of the Runtime API")

    # Handler resolution
    HANDLER: str = Field(
        default="lambda_function.lambda_handler",
        validation_alias=AliasChoices("_HANDLER", "HANDLER"),
        description="Handler to run, as module.function",
    )

    # Function metadata exposed on the invocation context
    AWS_LAMBDA_FUNCTION_NAME: str = Field(default="", description="Function name")
    AWS_LAMBDA_FUNCTION_VERSION: str = Field(default="$LATEST", description="Function version")
    AWS_LAMBDA_FUNCTION_MEMORY_SIZE: int = Field(default=128, description="Memory limit (MB)")
    AWS_LAMBDA_LOG_GROUP_NAME: str = Field(default="", description="CloudWatch log group")
    AWS_LAMBDA_LOG_STREAM_NAME: str = Field(default="", description="CloudWatch log stream")

    # Logging
    LOG_CONFIG_PATH: str = Field(
        default="/var/runtime/config/runtime_log.yaml", description="Logging YAML path"
    )

    # model_config is inherited
