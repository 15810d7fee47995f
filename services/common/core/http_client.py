import logging

import httpx

from .config import BaseAppConfig

logger = logging.getLogger(__name__)


class HttpClientFactory:
    """
    HTTP Client Factory for centralized SSL verification handling.
    """

    def __init__(self, config: BaseAppConfig):
        self.config = config

    def create_sync_client(self, **kwargs) -> httpx.Client:
        """
        Create an httpx.Client with configured SSL verification.

        Args:
            **kwargs: Additional arguments for httpx.Client
        """
        verify = kwargs.pop("verify", None)

        # If verify is not explicitly provided, use config default
        if verify is None:
            verify = self.config.VERIFY_SSL

        # Avoid leaking host HTTP(S)_PROXY/NO_PROXY into internal calls unless explicitly requested.
        kwargs.setdefault("trust_env", False)

        logger.debug("Creating sync HTTP client (verify=%s)", verify)
        return httpx.Client(verify=verify, **kwargs)
