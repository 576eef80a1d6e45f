"""Protocol prefixes recognized at the start of a format URL."""

from __future__ import annotations

from enum import Enum


class Protocol(str, Enum):
    """Leading protocol segment of a format URL.

    Values:
        PLACEHOLDER: A string verb filled in by FormatURL.fill.
        REGEX: The alternation used when compiling a format URL to a regex.
        HTTP: Literal http scheme.
        HTTPS: Literal https scheme.
        NONE: No protocol segment.
    """

    PLACEHOLDER = "%s://"
    REGEX = "https?://"
    HTTP = "http://"
    HTTPS = "https://"
    NONE = ""

    def prefixes(self, template: str) -> bool:
        """Whether the template starts with this protocol's text."""
        return template.startswith(self.value)

    def replace(self, template: str, target: Protocol) -> str:
        """Swap this protocol's prefix on the template for the target's."""
        return target.value + template[len(self.value) :]


# Scan order for detect_protocol; a later entry overrides an earlier one.
SCAN_ORDER: tuple[Protocol, ...] = (
    Protocol.PLACEHOLDER,
    Protocol.REGEX,
    Protocol.HTTP,
    Protocol.HTTPS,
)


def detect_protocol(
    template: str,
    order: tuple[Protocol, ...] = SCAN_ORDER,
) -> Protocol:
    """Find the protocol the template currently starts with.

    Every protocol in ``order`` is checked and the last one that prefixes
    the template wins, so with overlapping prefixes the one listed later
    takes precedence. Templates starting with anything else (including
    other schemes such as ``ftp://``) have no protocol.
    """
    found = Protocol.NONE
    for candidate in order:
        if candidate.prefixes(template):
            found = candidate
    return found


def with_protocol(template: str, target: Protocol) -> str:
    """Replace the template's current protocol with the target protocol.

    Example::

        with_protocol("http://example.com/%d", Protocol.PLACEHOLDER)
        # "%s://example.com/%d"
        with_protocol("example.com/%d", Protocol.REGEX)
        # "https?://example.com/%d"
    """
    return detect_protocol(template).replace(template, target)
