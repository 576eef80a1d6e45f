"""Fetch helpers behind FormatURL.soup, FormatURL.json and their retrying
variants.

Every helper accepts an optional RequestManager. Without one, a manager
built from DEFAULT_CONFIG is opened for the duration of the call (for the
whole retry loop in the retrying variants) and closed afterwards. Both the
HTML and the JSON path use the manager's configured timeout.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import httpx

from urlfmt.common.checked_html import CheckedHtmlElement, parse_html
from urlfmt.common.exceptions import JSONDecodeException
from urlfmt.common.request_manager import RequestManager
from urlfmt.retry import retry

if TYPE_CHECKING:
    from urlfmt.format_url import FormatURL


@contextmanager
def managed(manager: RequestManager | None) -> Iterator[RequestManager]:
    """Yield the given manager, or a temporary one that is closed on exit."""
    if manager is not None:
        yield manager
        return
    with RequestManager() as owned:
        yield owned


def _resolve_request(
    format_url: FormatURL,
    args: tuple[Any, ...],
    request: httpx.Request | None,
    manager: RequestManager,
) -> httpx.Request:
    if request is not None:
        return request
    _, built = format_url.get_request(*args, manager=manager)
    return built


def fetch_soup(
    format_url: FormatURL,
    *args: Any,
    request: httpx.Request | None = None,
    manager: RequestManager | None = None,
) -> tuple[CheckedHtmlElement, httpx.Response]:
    """Fetch a page and parse it into a searchable HTML tree.

    Args:
        format_url: The format URL to fill.
        *args: Arguments for FormatURL.fill (protocol excluded).
        request: A prepared request. When given, ``args`` are ignored.
        manager: RequestManager to send with.

    Returns:
        Tuple of (parsed page, response). The response body has already
        been read and released.

    Raises:
        FormatArgumentException: If the arguments don't fit the verbs.
        RequestConstructionException: If the request cannot be built.
        TransientException: If the request fails or times out.
        ResponseReadException: If the body cannot be read.
        HTMLParseException: If the body is not an HTML document.
    """
    with managed(manager) as active:
        request = _resolve_request(format_url, args, request, active)
        content, response = active.fetch(request)
    return parse_html(content, str(request.url)), response


def fetch_json(
    format_url: FormatURL,
    *args: Any,
    request: httpx.Request | None = None,
    manager: RequestManager | None = None,
) -> tuple[dict[str, Any], httpx.Response]:
    """Fetch a resource and decode it as a JSON object.

    Same arguments as fetch_soup.

    Returns:
        Tuple of (decoded object, response).

    Raises:
        JSONDecodeException: If the body is not valid JSON or is not an
            object.
        Plus everything fetch_soup raises before parsing.
    """
    with managed(manager) as active:
        request = _resolve_request(format_url, args, request, active)
        content, response = active.fetch(request)

    url = str(request.url)
    try:
        body = json.loads(content)
    except ValueError as e:
        raise JSONDecodeException(url, str(e)) from e
    if not isinstance(body, dict):
        raise JSONDecodeException(
            url, f"expected a JSON object, got {type(body).__name__}"
        )
    return body, response


def retry_soup(
    format_url: FormatURL,
    check: Callable[[CheckedHtmlElement, httpx.Response], Any],
    *args: Any,
    max_tries: int,
    min_delay: float = 0.0,
    request: httpx.Request | None = None,
    manager: RequestManager | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """Fetch a page with fetch_soup and hand it to ``check``.

    If fetching fails or ``check`` raises, the whole step is retried, up to
    ``max_tries`` attempts in total with the backoff described in
    urlfmt.retry.

    Returns:
        The value returned by ``check`` on the first successful attempt.

    Raises:
        RetriesExhaustedException: If every attempt failed.
    """
    with managed(manager) as active:

        def attempt(number: int) -> Any:
            page, response = fetch_soup(
                format_url, *args, request=request, manager=active
            )
            return check(page, response)

        return retry(
            attempt,
            max_tries,
            min_delay,
            url=str(format_url),
            operation="requesting Soup",
            sleep=sleep,
        )


def retry_json(
    format_url: FormatURL,
    check: Callable[[dict[str, Any], httpx.Response], Any],
    *args: Any,
    max_tries: int,
    min_delay: float = 0.0,
    request: httpx.Request | None = None,
    manager: RequestManager | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """Fetch a JSON object with fetch_json and hand it to ``check``.

    Retries exactly like retry_soup.
    """
    with managed(manager) as active:

        def attempt(number: int) -> Any:
            body, response = fetch_json(
                format_url, *args, request=request, manager=active
            )
            return check(body, response)

        return retry(
            attempt,
            max_tries,
            min_delay,
            url=str(format_url),
            operation="requesting JSON",
            sleep=sleep,
        )
