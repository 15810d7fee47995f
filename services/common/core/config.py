"""
Shared settings base.

Every process reads its settings from the environment (and an optional
``.env`` file in the working directory).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class BaseAppConfig(BaseSettings):
    """
    Settings common to all processes: log level and outbound TLS verification.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Level for the runtime and root loggers")
    VERIFY_SSL: bool = Field(
        default=False, description="Verify TLS certificates on outbound HTTP clients"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )
