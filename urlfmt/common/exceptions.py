"""Exception types for format URL and fetch errors.

There are three families:

1. FormatURLException: the caller handed a format URL something it cannot
   work with (wrong arguments, a URL of a different shape). Recoverable.
2. FetchException: building, sending or decoding an HTTP request failed.
   Recoverable, and TransientException marks the ones worth retrying.
3. UnrecoverableFormatError: an internal invariant of the format engine was
   violated. These are never retried and never caught by the other two
   families' handlers.
"""

from __future__ import annotations

from typing import Any


class URLFmtException(Exception):
    """Base class for recoverable errors raised by this package.

    Every error carries the URL it concerns (a concrete URL, or the format
    URL template for format errors) and an optional dict of context that is
    rendered beneath the message.
    """

    def __init__(
        self,
        message: str,
        url: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            url: The URL (or format URL) the failure concerns.
            context: Optional dict of additional context.
        """
        self.message = message
        self.url = url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        parts.append(f"URL: {self.url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


# =============================================================================
# Format errors
# =============================================================================


class FormatURLException(URLFmtException):
    """Raised when a format URL cannot be applied to the given input."""


class FormatArgumentException(FormatURLException):
    """Raised when fill arguments do not line up with the format's verbs.

    Attributes:
        expected: Number of arguments the verbs require (protocol included).
        actual: Number of arguments supplied (protocol included).
    """

    def __init__(
        self,
        message: str,
        format_url: str,
        expected: int,
        actual: int,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            message,
            format_url,
            {
                "expected_args": expected,
                "actual_args": actual,
                **(context or {}),
            },
        )


class InvalidFormatURLException(FormatURLException):
    """Raised when a format URL cannot be compiled into a regex."""


class URLMismatchException(FormatURLException):
    """Raised when extracting arguments from a URL the format doesn't match.

    Attributes:
        target_url: The concrete URL that failed to match.
    """

    def __init__(self, format_url: str, target_url: str, pattern: str) -> None:
        self.target_url = target_url
        super().__init__(
            f"{target_url} does not match the format URL",
            format_url,
            {"target_url": target_url, "pattern": pattern},
        )


class HTMLStructuralAssumptionException(URLFmtException):
    """Raised when a checked selector finds too few or too many results.

    Usually a sign that the page layout changed.

    Attributes:
        selector: The XPath or CSS selector.
        selector_type: "xpath" or "css".
        is_element_query: False when string results were requested.
    """

    def __init__(
        self,
        selector: str,
        selector_type: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        request_url: str,
        is_element_query: bool = True,
    ) -> None:
        self.selector = selector
        self.selector_type = selector_type
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count
        self.is_element_query = is_element_query

        if expected_max is None:
            expected = f"at least {expected_min}"
        elif expected_min == expected_max:
            expected = f"exactly {expected_min}"
        else:
            expected = f"between {expected_min} and {expected_max}"

        super().__init__(
            f"{selector_type} query for '{description}' expected {expected} "
            f"result(s), found {actual_count}",
            request_url,
            {"selector": selector, "is_element_query": is_element_query},
        )


# =============================================================================
# Fetch errors
# =============================================================================


class FetchException(URLFmtException):
    """Base class for failures while fetching a filled format URL."""


class RequestConstructionException(FetchException):
    """Raised when an HTTP request cannot be built for a filled URL."""

    def __init__(self, url: str, method: str, reason: str) -> None:
        self.method = method
        super().__init__(
            f"request for {url!r} could not be created: {reason}",
            url,
            {"method": method},
        )


class TransientException(FetchException):
    """Base class for network failures that might resolve on retry."""


class RequestFailedException(TransientException):
    """Raised when the HTTP round trip itself fails."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"could not fetch {url}: {reason}", url)


class RequestTimeoutException(TransientException):
    """Raised when a request times out.

    Attributes:
        timeout_seconds: The timeout duration in seconds.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Request to {url} timed out after {timeout_seconds}s", url
        )


class ResponseReadException(FetchException):
    """Raised when a response body cannot be read."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            f"could not read response body from {url}: {reason}", url
        )


class ResponseCloseException(FetchException):
    """Raised when a response body cannot be closed.

    If another error is already propagating, this one is attached to it as
    a note instead of replacing it.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            f"response body from {url} could not be closed: {reason}", url
        )


class HTMLParseException(FetchException):
    """Raised when a response body cannot be parsed as HTML."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            f"HTML could not be parsed from response from {url}: {reason}",
            url,
        )


class JSONDecodeException(FetchException):
    """Raised when a response body is not a JSON object."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            f"JSON could not be parsed from response from {url}: {reason}",
            url,
        )


class RetriesExhaustedException(FetchException):
    """Raised when every attempt of a retrying fetch has failed.

    The last underlying error is chained as ``__cause__``.

    Attributes:
        attempts: Total number of attempts made.
        operation: What was being attempted, e.g. "requesting JSON".
        last_error: The error raised by the final attempt.
    """

    def __init__(
        self,
        url: str,
        operation: str,
        attempts: int,
        last_error: BaseException,
    ) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"ran out of tries ({attempts} total) whilst {operation} "
            f"for {url}: {last_error}",
            url,
            {"last_error": type(last_error).__name__},
        )


# =============================================================================
# Unrecoverable errors
# =============================================================================


class UnrecoverableFormatError(Exception):
    """Base class for violated format engine invariants.

    Deliberately not a URLFmtException: handlers for ordinary failures must
    not catch these, and retry loops re-raise them immediately.
    """


class GroupCountMismatchError(UnrecoverableFormatError):
    """Raised when a compiled regex has a different number of groups than
    the format URL has verbs."""

    def __init__(self, pattern: str, expected: int, actual: int) -> None:
        self.pattern = pattern
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"the number of groups in {pattern} doesn't match the number of "
            f"verbs in the format URL ({actual} vs {expected})"
        )


class ArgumentParseError(UnrecoverableFormatError):
    """Raised when a registered parser rejects the text its pattern matched.

    Attributes:
        value: The matched text.
        pattern: The pattern whose parser was used.
    """

    def __init__(self, value: str, pattern: str, reason: str) -> None:
        self.value = value
        self.pattern = pattern
        super().__init__(
            f"could not parse string {value!r} using parser for "
            f"{pattern!r}: {reason}"
        )
