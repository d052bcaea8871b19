"""Shared HTTP plumbing for the upstream officials directories.

Provides configurable tenacity retries and error translation for the
Congress.gov and OpenStates clients. Responses are returned as raw bytes so
callers can archive exactly what the upstream sent before parsing.

The pipeline runs with ``max_attempts=1`` by default: one request per cache
miss, no retries. Raise it only if the upstream quota allows.

The API key travels in the query string, so no message raised from here may
include the request's full URL.
"""

import logging
from typing import Any, Dict, Optional

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_ATTEMPTS = 1


class DirectoryAPIError(Exception):
    """Base exception for upstream directory API errors."""

    pass


class DirectoryAPIRateLimitError(DirectoryAPIError):
    """Raised when API rate limit is exceeded (HTTP 429)."""

    pass


class DirectoryAPINotFoundError(DirectoryAPIError):
    """Raised when resource not found (HTTP 404)."""

    pass


class DirectoryAPIConnectionError(DirectoryAPIError):
    """Raised on network failures and timeouts."""

    pass


class DirectoryAPIClient:
    """Base client: one GET per call with optional retries.

    Subclasses set ``key_param`` (the query parameter carrying the API key)
    and the ``*_error_class`` attributes (the exception family raised).
    """

    key_param = "api_key"
    error_class = DirectoryAPIError
    rate_limit_error_class = DirectoryAPIRateLimitError
    not_found_error_class = DirectoryAPINotFoundError
    connection_error_class = DirectoryAPIConnectionError

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)

        logger.info(
            f"Initialized {type(self).__name__}: base_url={self.base_url}, "
            f"max_attempts={self.max_attempts}"
        )

    def _make_request(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> bytes:
        """GET ``endpoint`` and return the raw response body.

        Raises:
            DirectoryAPIRateLimitError: If rate limit exceeded (HTTP 429)
            DirectoryAPINotFoundError: If resource not found (HTTP 404)
            DirectoryAPIConnectionError: For network errors and timeouts
            DirectoryAPIError: For other non-2xx responses
        """
        retrying = Retrying(
            retry=retry_if_exception_type(
                (self.connection_error_class, self.rate_limit_error_class)
            ),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            stop=stop_after_attempt(self.max_attempts),
            reraise=True,
        )
        return retrying(self._get, endpoint, dict(params or {}))

    def _get(self, endpoint: str, params: Dict[str, Any]) -> bytes:
        url = f"{self.base_url}{endpoint}"
        safe_params = dict(params)
        params[self.key_param] = self.api_key
        logger.debug(f"GET {url} params={safe_params}")

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                logger.error(f"Rate limit exceeded: {url}")
                raise self.rate_limit_error_class(f"Rate limit exceeded: {url}") from None
            elif status == 404:
                logger.warning(f"Resource not found: {url}")
                raise self.not_found_error_class(f"Resource not found: {url}") from None
            else:
                logger.error(f"API error: HTTP {status} for {url}")
                raise self.error_class(f"API error: HTTP {status} for {url}") from None
        except requests.exceptions.RequestException as e:
            # requests embeds the full query string, key included, in its messages
            raise self.connection_error_class(
                f"Request failed ({type(e).__name__}) for {url} params={safe_params}"
            ) from None

        return response.content
