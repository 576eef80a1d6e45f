"""Request manager for fetching filled format URLs.

This module provides the RequestManager class that encapsulates the HTTP
client and the request/response plumbing used by the fetch layer.

The request manager is responsible for:
- Maintaining the HTTP client (httpx.Client)
- Building requests and reporting URLs that cannot be requested
- Sending requests and reading their bodies, always releasing the
  response afterwards

This separation lets the fetch layer focus on what to do with a body
(HTML, JSON, retries) while delegating HTTP concerns here.
"""

from __future__ import annotations

import logging
import ssl
from typing import Any

import httpx

from urlfmt.common.exceptions import (
    FetchException,
    RequestConstructionException,
    RequestFailedException,
    RequestTimeoutException,
    ResponseCloseException,
    ResponseReadException,
)
from urlfmt.config import DEFAULT_CONFIG, FetchConfig

logger = logging.getLogger(__name__)


def build_request(
    method: str,
    url: str,
    *,
    content: bytes | str | None = None,
    headers: dict[str, str] | None = None,
    config: FetchConfig = DEFAULT_CONFIG,
) -> httpx.Request:
    """Build an httpx.Request carrying the config's default headers.

    Args:
        method: HTTP method, e.g. "GET".
        url: Absolute URL to request.
        content: Optional request body.
        headers: Extra headers, overriding the config's defaults.
        config: Configuration supplying the default headers.

    Returns:
        The constructed request.

    Raises:
        RequestConstructionException: If the URL, method or body is invalid.
    """
    merged = {**config.headers, **(headers or {})}
    try:
        return httpx.Request(method, url, content=content, headers=merged)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise RequestConstructionException(url, method, str(e)) from e


class RequestManager:
    """Manages HTTP requests for the fetch layer.

    This class encapsulates:

    - httpx.Client lifecycle
    - Request construction with configured default headers
    - Sending requests and reading bodies with guaranteed release

    Example::

        with RequestManager(FetchConfig(timeout=30.0)) as manager:
            request = manager.build_request("GET", url)
            content, response = manager.fetch(request)
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        ssl_context: ssl.SSLContext | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the request manager.

        Args:
            config: Client settings. Defaults to DEFAULT_CONFIG.
            ssl_context: Optional SSL context for HTTPS connections. Use
                this for servers requiring specific cipher suites.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self.config = config or DEFAULT_CONFIG
        self.timeout = self.config.timeout

        verify: ssl.SSLContext | bool = (
            ssl_context if ssl_context is not None else self.config.verify
        )
        self._client = httpx.Client(
            verify=verify,
            timeout=self.timeout,
            follow_redirects=self.config.follow_redirects,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> RequestManager:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()

    def build_request(
        self,
        method: str,
        url: str,
        *,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a request using this manager's config."""
        return build_request(
            method, url, content=content, headers=headers, config=self.config
        )

    def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request without reading its body.

        The caller owns the returned response and must close it.

        Raises:
            RequestTimeoutException: If the request times out.
            RequestFailedException: If the request fails for any other
                transport reason.
        """
        url = str(request.url)
        logger.debug(f"{request.method} {url}")
        try:
            return self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.timeout
            ) from e
        except httpx.HTTPError as e:
            raise RequestFailedException(url, str(e)) from e

    def fetch(self, request: httpx.Request) -> tuple[bytes, httpx.Response]:
        """Send a request and read its full body.

        The response is closed on every exit path. A failure to close it is
        raised on its own if nothing else went wrong, and otherwise attached
        as a note to the error that is already propagating.

        Returns:
            Tuple of (body bytes, response).

        Raises:
            RequestTimeoutException: If the request or the body read times
                out.
            RequestFailedException: If the request fails.
            ResponseReadException: If the body cannot be read.
            ResponseCloseException: If the body cannot be released.
        """
        response = self.send(request)
        url = str(request.url)
        primary: FetchException | None = None
        try:
            try:
                content = response.read()
            except httpx.TimeoutException as e:
                primary = RequestTimeoutException(
                    url=url, timeout_seconds=self.timeout
                )
                raise primary from e
            except (httpx.HTTPError, httpx.StreamError) as e:
                primary = ResponseReadException(url, str(e))
                raise primary from e
        finally:
            self._release(response, url, primary)

        logger.debug(
            f"{response.status_code} from {url} ({len(content)} bytes)"
        )
        return content, response

    def _release(
        self,
        response: httpx.Response,
        url: str,
        primary: FetchException | None,
    ) -> None:
        try:
            response.close()
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            error = ResponseCloseException(url, str(e))
            if primary is None:
                raise error from e
            primary.add_note(str(error))
