"""Congress.gov API client for the federal officials directory.

Example usage:
    from officials_pipeline.lib.congress_api_client import CongressAPIClient

    client = CongressAPIClient(api_key="your_key_here")
    raw = client.list_members_raw()
"""

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

DEFAULT_API_BASE_URL = "https://api.congress.gov/v3"
DEFAULT_MEMBER_LIMIT = 600


class CongressAPIError(DirectoryAPIError):
    """Base exception for Congress API errors."""

    pass


class CongressAPIRateLimitError(CongressAPIError):
    """Raised when API rate limit is exceeded (HTTP 429)."""

    pass


class CongressAPINotFoundError(CongressAPIError):
    """Raised when resource not found (HTTP 404)."""

    pass


class CongressAPIConnectionError(CongressAPIError):
    """Raised on network failures and timeouts."""

    pass


class CongressAPIClient(DirectoryAPIClient):
    """Client for the Congress.gov v3 member list.

    Example:
        >>> client = CongressAPIClient(api_key=os.environ["CONGRESS_API_KEY"])
        >>> payload = FederalMemberList.model_validate_json(client.list_members_raw())
    """

    key_param = "api_key"
    error_class = CongressAPIError
    rate_limit_error_class = CongressAPIRateLimitError
    not_found_error_class = CongressAPINotFoundError
    connection_error_class = CongressAPIConnectionError

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize Congress API client.

        Args:
            api_key: Congress.gov API key (defaults to CONGRESS_API_KEY env var)
            base_url: API base URL (defaults to https://api.congress.gov/v3)
            timeout: Request timeout in seconds (defaults to 30)
            max_attempts: Attempts per request including the first (defaults to 1)

        Raises:
            ValueError: If API key is not provided and not in environment
        """
        api_key = api_key or os.environ.get("CONGRESS_API_KEY")
        if not api_key:
            raise ValueError(
                "Congress API key required. Provide via api_key parameter or "
                "CONGRESS_API_KEY environment variable."
            )

        super().__init__(
            api_key=api_key,
            base_url=base_url or os.environ.get("CONGRESS_API_BASE_URL", DEFAULT_API_BASE_URL),
            timeout=timeout,
            max_attempts=max_attempts,
        )

    def list_members_raw(self, limit: int = DEFAULT_MEMBER_LIMIT) -> bytes:
        """Fetch the member list in a single request.

        Args:
            limit: Page size requested from the API

        Returns:
            Raw JSON body (``{"members": [...], "pagination": {...}}``)
        """
        return self._make_request("/member", {"limit": limit, "format": "json"})
