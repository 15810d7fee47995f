"""
Invocation context models.

The per-invoke metadata handed to handler code as its ``context`` argument.
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class _HeaderDocument(BaseModel):
    """JSON ``null`` leaves a header field at its zero value."""

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        if isinstance(value, dict):
            return {k: "" if v is None else v for k, v in value.items()}
        return value


class ClientApplication(_HeaderDocument):
    """Metadata about the calling application (mobile SDK invokes)."""

    installation_id: str = ""
    app_title: str = ""
    app_version_code: str = ""
    app_package_name: str = ""


class ClientContext(_HeaderDocument):
    """Parsed Lambda-Runtime-Client-Context header."""

    client: ClientApplication = Field(default_factory=ClientApplication)
    env: Dict[str, str] = Field(default_factory=dict)
    custom: Dict[str, str] = Field(default_factory=dict)


class CognitoIdentity(_HeaderDocument):
    """Parsed Lambda-Runtime-Cognito-Identity header."""

    model_config = ConfigDict(populate_by_name=True)

    cognito_identity_id: str = Field(default="", alias="cognitoIdentityId")
    cognito_identity_pool_id: str = Field(default="", alias="cognitoIdentityPoolId")


class InvocationContext(BaseModel):
    """
    Lambda context object for one invoke.

    Built fresh for every invoke from the Runtime API headers and the
    function configuration of the process.
    """

    aws_request_id: str
    invoked_function_arn: str = ""
    client_context: ClientContext = Field(default_factory=ClientContext)
    identity: CognitoIdentity = Field(default_factory=CognitoIdentity)
    deadline: datetime
    xray_trace_id: str = ""

    function_name: str = ""
    function_version: str = ""
    memory_limit_in_mb: int = 0
    log_group_name: str = ""
    log_stream_name: str = ""

    def get_remaining_time_in_millis(self) -> int:
        """Milliseconds left before the deadline, never negative."""
        remaining = self.deadline.timestamp() - time.time()
        return max(int(remaining * 1000), 0)
