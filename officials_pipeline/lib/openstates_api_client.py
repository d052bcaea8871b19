"""OpenStates v3 API client for the per-jurisdiction officials directory."""

import logging
import os
from typing import Optional

from officials_pipeline.lib.http_client import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
    DirectoryAPIClient,
    DirectoryAPIError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://v3.openstates.org"


class OpenStatesAPIError(DirectoryAPIError):
    """Base exception for OpenStates API errors."""

    pass


class OpenStatesAPIRateLimitError(OpenStatesAPIError):
    pass


class OpenStatesAPINotFoundError(OpenStatesAPIError):
    pass


class OpenStatesAPIConnectionError(OpenStatesAPIError):
    pass


class OpenStatesAPIClient(DirectoryAPIClient):
    """Client for the OpenStates /people search endpoint."""

    key_param = "apikey"
    error_class = OpenStatesAPIError
    rate_limit_error_class = OpenStatesAPIRateLimitError
    not_found_error_class = OpenStatesAPINotFoundError
    connection_error_class = OpenStatesAPIConnectionError

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        api_key = api_key or os.environ.get("OPENSTATES_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenStates API key required. Provide via api_key parameter or "
                "OPENSTATES_API_KEY environment variable."
            )

        super().__init__(
            api_key=api_key,
            base_url=base_url or os.environ.get("OPENSTATES_API_BASE_URL", DEFAULT_API_BASE_URL),
            timeout=timeout,
            max_attempts=max_attempts,
        )

    def search_people_raw(self, jurisdiction: str) -> bytes:
        """Fetch current people for one jurisdiction.

        Args:
            jurisdiction: Two-letter state code; sent lowercase

        Returns:
            Raw JSON body (``{"results": [...], "pagination": {...}}``)
        """
        return self._make_request("/people", {"jurisdiction": jurisdiction.lower()})
