"""Format URLs: printf-style URL templates and their derived operations.

A FormatURL couples a template such as::

    SteamAppPage = FormatURL("%s://store.steampowered.com/app/%d")

with a fixed set of operations:

- ``fill``: interpolate arguments; the protocol is always ``https``.
- ``regex``: the regular expression matching every URL of this shape.
- ``match``: whether a concrete URL has this shape.
- ``extract_args``: the typed arguments a concrete URL was filled with.
- ``standardise``: ``fill(*extract_args(url))``.

plus request builders and fetch helpers that fill the template and parse
the response as HTML or JSON (see urlfmt.fetch).

The leading protocol is written as ``%s://`` and callers never pass it to
``fill``. Literal template text is escaped when compiling, so each verb
contributes exactly one capture group and the compiled form knows, per
group, which verb produced it and how to parse it back.
"""

from __future__ import annotations

import functools
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NamedTuple

from urlfmt import fetch
from urlfmt.common.exceptions import (
    ArgumentParseError,
    FormatArgumentException,
    GroupCountMismatchError,
    InvalidFormatURLException,
    URLMismatchException,
)
from urlfmt.common.request_manager import build_request
from urlfmt.protocol import Protocol, with_protocol
from urlfmt.verbs import Parser, format_value, parser_for, verb_pattern

if TYPE_CHECKING:
    import httpx

    from urlfmt.common.checked_html import CheckedHtmlElement
    from urlfmt.common.request_manager import RequestManager

# %% is a literal percent sign. %!d(MISSING) is what an under-filled printf
# leaves behind and is read back as the verb it replaced.
_TOKEN = re.compile(
    r"%(?:(?P<escape>%)|!(?P<missing>[a-zA-Z])\(MISSING\)|(?P<verb>[a-zA-Z]))"
)


class Segment(NamedTuple):
    """A run of literal text, or a single verb when ``verb`` is set."""

    text: str
    verb: str | None = None


def tokenize(template: str) -> tuple[Segment, ...]:
    """Split a template into literal segments and verb segments.

    A ``%`` that is followed by neither a letter nor another ``%`` (for
    example an already percent-encoded ``%20``) is kept as literal text.
    """
    segments: list[Segment] = []
    literal: list[str] = []
    position = 0
    for token in _TOKEN.finditer(template):
        literal.append(template[position : token.start()])
        position = token.end()
        if token["escape"]:
            literal.append("%")
            continue
        if literal:
            text = "".join(literal)
            if text:
                segments.append(Segment(text))
            literal = []
        verb = token["missing"] or token["verb"]
        segments.append(Segment(token.group(0), verb))
    literal.append(template[position:])
    text = "".join(literal)
    if text:
        segments.append(Segment(text))
    return tuple(segments)


def interpolate(template: str, args: tuple[Any, ...]) -> str:
    """Substitute ``args`` for the template's verbs, left to right.

    Raises:
        FormatArgumentException: If there are too few or too many
            arguments, or an argument cannot be rendered by its verb.
    """
    segments = tokenize(template)
    verbs = [segment for segment in segments if segment.verb is not None]
    if len(verbs) != len(args):
        raise FormatArgumentException(
            f"format URL has {len(verbs)} verb(s) but {len(args)} "
            "argument(s) were given",
            template,
            expected=len(verbs),
            actual=len(args),
        )

    parts: list[str] = []
    remaining = iter(args)
    for position, segment in enumerate(segments):
        if segment.verb is None:
            parts.append(segment.text)
            continue
        value = next(remaining)
        try:
            parts.append(format_value(segment.verb, value))
        except (TypeError, ValueError) as e:
            raise FormatArgumentException(
                f"cannot render argument {value!r} with %{segment.verb}",
                template,
                expected=len(verbs),
                actual=len(args),
                context={"segment": position, "reason": str(e)},
            ) from e
    return "".join(parts)


@dataclass(frozen=True)
class CaptureGroup:
    """One capture group of a compiled format URL.

    Attributes:
        verb: The verb letter the group was compiled from.
        pattern: The group's pattern text, e.g. ``(\\d+)``.
        parser: Converts matched text to a value. None keeps the raw text.
    """

    verb: str
    pattern: str
    parser: Parser | None

    def parse(self, text: str) -> Any:
        """Convert the text this group matched into its typed value.

        Raises:
            ArgumentParseError: If the registered parser rejects the text.
        """
        if self.parser is None:
            return text
        try:
            return self.parser(text)
        except (TypeError, ValueError) as e:
            raise ArgumentParseError(text, self.pattern, str(e)) from e


@dataclass(frozen=True)
class CompiledFormat:
    """A format URL compiled to a regex, with one CaptureGroup per verb."""

    regex: re.Pattern[str]
    groups: tuple[CaptureGroup, ...]

    def extract(self, match: re.Match[str]) -> list[Any]:
        """Parse every group of a match, in verb order."""
        return [
            group.parse(text)
            for group, text in zip(self.groups, match.groups())
        ]


@functools.lru_cache(maxsize=256)
def compile_format(template: str) -> CompiledFormat:
    """Compile a template to a CompiledFormat.

    The protocol is normalized to ``https?://``, each verb becomes its
    registered (or synthesized) pattern and everything else is escaped.
    Results are cached per template string.

    Raises:
        InvalidFormatURLException: If a synthesized verb pattern is not a
            valid regex (e.g. ``%q`` becomes ``(\\q+)``).
        GroupCountMismatchError: If the regex ends up with a different
            number of groups than there are verbs.
    """
    body = with_protocol(template, Protocol.NONE)
    pieces = [Protocol.REGEX.value]
    groups: list[CaptureGroup] = []
    for segment in tokenize(body):
        if segment.verb is None:
            pieces.append(re.escape(segment.text))
            continue
        pattern = verb_pattern(segment.verb)
        pieces.append(pattern)
        groups.append(CaptureGroup(segment.verb, pattern, parser_for(pattern)))

    source = "".join(pieces)
    try:
        regex = re.compile(source)
    except re.error as e:
        raise InvalidFormatURLException(
            f"format URL compiles to an invalid regex: {e}",
            template,
            {"pattern": source},
        ) from e

    if regex.groups != len(groups):
        raise GroupCountMismatchError(source, len(groups), regex.groups)
    return CompiledFormat(regex, tuple(groups))


@dataclass(frozen=True)
class FormatURL:
    """A URL template with printf-style verbs.

    Instances are immutable and intended to be defined once, as constants.

    Example::

        SteamAppPage = FormatURL("%s://store.steampowered.com/app/%d")
        SteamAppPage.fill(477160)
        # "https://store.steampowered.com/app/477160"
        SteamAppPage.extract_args("http://store.steampowered.com/app/477160")
        # [477160]
    """

    template: str

    def __str__(self) -> str:
        """The template with its protocol normalized to ``%s://``."""
        return self.with_protocol(Protocol.PLACEHOLDER)

    def with_protocol(self, protocol: Protocol) -> str:
        """The template with its current protocol replaced by ``protocol``."""
        return with_protocol(self.template, protocol)

    def fill(self, *args: Any) -> str:
        """Interpolate the arguments into the template.

        ``"https"`` is always used for the protocol, so it must not be
        passed.

        Raises:
            FormatArgumentException: If the arguments don't fit the verbs.
        """
        return interpolate(str(self), ("https", *args))

    def compile(self) -> CompiledFormat:
        """The compiled regex and per-group parsers for this template."""
        return compile_format(self.template)

    def regex(self) -> re.Pattern[str]:
        """The regular expression matching URLs of this format.

        The pattern is not anchored: text before or after a match is
        allowed.
        """
        return self.compile().regex

    def match(self, url: str) -> bool:
        """Whether the URL contains a match for this format."""
        return self.regex().search(url) is not None

    def extract_args(self, url: str) -> list[Any]:
        """Extract the arguments the URL was filled with, in verb order.

        Values are typed by the pattern each verb compiled to (``%d``
        gives an int, ``%t`` a bool, ``%f`` a float, ``%s`` a str). Verbs
        without a parser keep the matched text; ``%U`` gives None.

        Raises:
            URLMismatchException: If the URL does not match this format.
            ArgumentParseError: If a matched value fails to parse.
        """
        compiled = self.compile()
        found = compiled.regex.search(url)
        if found is None:
            raise URLMismatchException(
                self.template, url, compiled.regex.pattern
            )
        return compiled.extract(found)

    def standardise(self, url: str) -> str:
        """Re-fill this format with the arguments extracted from the URL."""
        return self.fill(*self.extract_args(url))

    def request(
        self,
        method: str,
        *args: Any,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
        manager: RequestManager | None = None,
    ) -> tuple[str, httpx.Request]:
        """Build a request for the filled URL.

        Returns:
            Tuple of (filled URL, request).

        Raises:
            FormatArgumentException: If the arguments don't fit the verbs.
            RequestConstructionException: If the request cannot be built.
        """
        url = self.fill(*args)
        if manager is not None:
            return url, manager.build_request(
                method, url, content=content, headers=headers
            )
        return url, build_request(
            method, url, content=content, headers=headers
        )

    def get_request(
        self,
        *args: Any,
        headers: dict[str, str] | None = None,
        manager: RequestManager | None = None,
    ) -> tuple[str, httpx.Request]:
        """Build a GET request for the filled URL."""
        return self.request("GET", *args, headers=headers, manager=manager)

    def soup(
        self,
        *args: Any,
        request: httpx.Request | None = None,
        manager: RequestManager | None = None,
    ) -> tuple[CheckedHtmlElement, httpx.Response]:
        """Fetch the filled URL and parse the page as HTML.

        If ``request`` is None a GET request for ``fill(*args)`` is made.
        See urlfmt.fetch.fetch_soup.
        """
        return fetch.fetch_soup(self, *args, request=request, manager=manager)

    def json(
        self,
        *args: Any,
        request: httpx.Request | None = None,
        manager: RequestManager | None = None,
    ) -> tuple[dict[str, Any], httpx.Response]:
        """Fetch the filled URL and decode the body as a JSON object.

        If ``request`` is None a GET request for ``fill(*args)`` is made.
        See urlfmt.fetch.fetch_json.
        """
        return fetch.fetch_json(self, *args, request=request, manager=manager)

    def retry_soup(
        self,
        check: Callable[[CheckedHtmlElement, httpx.Response], Any],
        *args: Any,
        max_tries: int,
        min_delay: float = 0.0,
        request: httpx.Request | None = None,
        manager: RequestManager | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Any:
        """Fetch HTML and run ``check`` on it, retrying on failure.

        See urlfmt.fetch.retry_soup.
        """
        return fetch.retry_soup(
            self,
            check,
            *args,
            max_tries=max_tries,
            min_delay=min_delay,
            request=request,
            manager=manager,
            sleep=sleep,
        )

    def retry_json(
        self,
        check: Callable[[dict[str, Any], httpx.Response], Any],
        *args: Any,
        max_tries: int,
        min_delay: float = 0.0,
        request: httpx.Request | None = None,
        manager: RequestManager | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Any:
        """Fetch JSON and run ``check`` on it, retrying on failure.

        See urlfmt.fetch.retry_json.
        """
        return fetch.retry_json(
            self,
            check,
            *args,
            max_tries=max_tries,
            min_delay=min_delay,
            request=request,
            manager=manager,
            sleep=sleep,
        )
