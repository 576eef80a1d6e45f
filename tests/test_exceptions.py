"""Tests for the exception hierarchy.

Recoverable errors carry a URL and context; unrecoverable format errors
live outside the recoverable families so generic handlers never catch them.
"""

import pytest

from urlfmt.common.exceptions import (
    ArgumentParseError,
    FetchException,
    FormatArgumentException,
    FormatURLException,
    GroupCountMismatchError,
    HTMLStructuralAssumptionException,
    RequestConstructionException,
    RequestFailedException,
    RequestTimeoutException,
    RetriesExhaustedException,
    TransientException,
    UnrecoverableFormatError,
    URLFmtException,
)


class TestURLFmtException:
    """Tests for the base exception's message formatting."""

    def test_message_includes_url_and_context(self):
        """The formatted message shall list the URL and each context item."""
        exc = URLFmtException(
            "something broke",
            "https://example.com/app/1",
            {"attempt": 2},
        )

        message = str(exc)
        assert message.startswith("something broke")
        assert "URL: https://example.com/app/1" in message
        assert "attempt: 2" in message

    def test_context_defaults_to_empty(self):
        """Context shall default to an empty dict."""
        exc = URLFmtException("oops", "https://example.com")
        assert exc.context == {}
        assert "Context:" not in str(exc)


class TestHierarchy:
    """Tests for how the exception families relate."""

    @pytest.mark.parametrize(
        "exc_type, base",
        [
            (FormatArgumentException, FormatURLException),
            (RequestFailedException, TransientException),
            (RequestTimeoutException, TransientException),
            (TransientException, FetchException),
            (RetriesExhaustedException, FetchException),
            (FetchException, URLFmtException),
            (FormatURLException, URLFmtException),
            (HTMLStructuralAssumptionException, URLFmtException),
            (GroupCountMismatchError, UnrecoverableFormatError),
            (ArgumentParseError, UnrecoverableFormatError),
        ],
    )
    def test_subclass(self, exc_type, base):
        """Each exception shall belong to its family."""
        assert issubclass(exc_type, base)

    def test_unrecoverable_is_separate(self):
        """Unrecoverable errors shall not be URLFmtExceptions."""
        assert not issubclass(UnrecoverableFormatError, URLFmtException)


class TestFetchExceptions:
    """Tests for fetch exception attributes and messages."""

    def test_request_construction_keeps_url(self):
        """RequestConstructionException shall keep the attempted URL."""
        exc = RequestConstructionException(
            "https://example.com:bad/", "GET", "Invalid port"
        )
        assert exc.url == "https://example.com:bad/"
        assert exc.method == "GET"
        assert "Invalid port" in str(exc)

    def test_timeout_attributes(self):
        """RequestTimeoutException shall report the timeout."""
        exc = RequestTimeoutException(
            url="http://example.com/slow", timeout_seconds=10.0
        )
        assert exc.timeout_seconds == 10.0
        assert "timed out after 10.0s" in str(exc)

    def test_retries_exhausted_message(self):
        """RetriesExhaustedException shall report attempts and last error."""
        last = ValueError("no app name")
        exc = RetriesExhaustedException(
            url="%s://store.steampowered.com/app/%d",
            operation="requesting Soup",
            attempts=3,
            last_error=last,
        )
        assert exc.attempts == 3
        assert exc.last_error is last
        assert "ran out of tries (3 total) whilst requesting Soup" in str(exc)
        assert "no app name" in str(exc)


class TestUnrecoverableErrors:
    """Tests for unrecoverable error messages."""

    def test_group_count_mismatch(self):
        """GroupCountMismatchError shall report both counts."""
        exc = GroupCountMismatchError(r"(a)(b)", expected=1, actual=2)
        assert exc.expected == 1
        assert exc.actual == 2
        assert "(2 vs 1)" in str(exc)

    def test_argument_parse_error(self):
        """ArgumentParseError shall name the value and the pattern."""
        exc = ArgumentParseError("12x", r"(\d+)", "invalid literal")
        assert exc.value == "12x"
        assert exc.pattern == r"(\d+)"
        assert "'12x'" in str(exc)


class TestHTMLStructuralAssumptionException:
    """Tests for HTMLStructuralAssumptionException."""

    @pytest.mark.parametrize(
        "expected_min, expected_max, phrase",
        [
            (1, None, "at least 1"),
            (1, 1, "exactly 1"),
            (2, 5, "between 2 and 5"),
        ],
    )
    def test_expected_count_phrase(self, expected_min, expected_max, phrase):
        """The message shall describe the expected count."""
        exc = HTMLStructuralAssumptionException(
            selector="//div[@id='appHubAppName']",
            selector_type="xpath",
            description="app name",
            expected_min=expected_min,
            expected_max=expected_max,
            actual_count=0,
            request_url="https://store.steampowered.com/app/1",
        )
        assert phrase in str(exc)
        assert "'app name'" in str(exc)
