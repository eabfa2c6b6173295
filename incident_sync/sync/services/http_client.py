"""HTTP Client - Shared HTTP primitive for every provider connector.

Provides reusable HTTP request handling for all connectors.
Features:
- Fixed timeout on every request
- Identifying User-Agent header merged with caller-supplied auth headers
- Standardized errors for transport failures and non-2xx responses

No retries: a failed source is simply retried on the next scheduled pass.
"""

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_USER_AGENT = "IncidentSync/1.0"


class HTTPClientError(Exception):
    """Base exception for HTTP client errors (transport failures, timeouts)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class APIError(HTTPClientError):
    """Raised for non-2xx responses and unparseable bodies."""

    pass


class RateLimitError(APIError):
    """Raised when rate limit is exceeded (429)."""

    pass


class HTTPClient:
    """HTTP client shared by all connectors.

    Example:
        with HTTPClient(base_url="https://www.githubstatus.com") as client:
            data = client.get("/api/v2/incidents.json")
    """

    def __init__(
        self,
        base_url: str = "",
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize HTTP client.

        Args:
            base_url: Base URL prepended to relative endpoints
            timeout_seconds: Request timeout in seconds (default: 30)
            user_agent: Identifying client header value
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

        # Session for connection pooling
        self._session = requests.Session()

        logger.debug(
            f"HTTPClient initialized: base_url={self.base_url}, timeout={timeout_seconds}s"
        )

    def _build_url(self, endpoint: str) -> str:
        """Join endpoint onto base_url unless it is already absolute."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.base_url}{endpoint}"

    def _build_headers(self, headers: Optional[dict[str, str]] = None) -> dict[str, str]:
        """Build request headers: client identity first, caller headers on top."""
        merged = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        if headers:
            merged.update(headers)
        return merged

    def _handle_response(self, response: requests.Response) -> Any:
        """Handle response and raise appropriate errors.

        Args:
            response: Response object from requests

        Returns:
            Parsed JSON response

        Raises:
            RateLimitError: If rate limited (429)
            APIError: For other non-2xx statuses or invalid JSON
        """
        if response.status_code == 429:
            raise RateLimitError(
                f"Rate limit exceeded for {response.url}",
                status_code=429,
            )

        if not 200 <= response.status_code < 300:
            raise APIError(
                f"API error {response.status_code} for {response.url}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"Invalid JSON response from {response.url}: {e}",
                status_code=response.status_code,
            )

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make an HTTP request and return the parsed JSON body.

        Raises:
            HTTPClientError: On network failure or timeout
            APIError: On non-2xx status or invalid JSON
        """
        url = self._build_url(endpoint)

        logger.debug(f"{method} {url} params={params}")

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._build_headers(headers),
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as e:
            logger.error(f"Request timed out after {self.timeout_seconds}s: {url}")
            raise HTTPClientError(f"Request timed out after {self.timeout_seconds}s: {url}") from e
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise HTTPClientError(f"Request failed: {e}") from e

        return self._handle_response(response)

    def get(
        self,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make GET request.

        Args:
            endpoint: API endpoint (e.g., "/api/v2/incidents.json") or absolute URL
            params: Query parameters
            headers: Extra headers (e.g., Authorization)

        Returns:
            Parsed JSON response

        Raises:
            HTTPClientError: On request failure
        """
        return self.request("GET", endpoint, params=params, headers=headers)

    def post(
        self,
        endpoint: str,
        json: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make POST request with a JSON body.

        Returns:
            Parsed JSON response

        Raises:
            HTTPClientError: On request failure
        """
        return self.request("POST", endpoint, json=json, headers=headers)

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "HTTPClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
