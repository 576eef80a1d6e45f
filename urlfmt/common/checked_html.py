"""Searchable HTML tree returned by FormatURL.soup.

This module provides CheckedHtmlElement, a wrapper around
lxml.html.HtmlElement offering two styles of query:

- ``find``/``find_all``: tag and attribute lookups, returning None or an
  empty list when nothing matches.
- ``checked_xpath``/``checked_css``: selector queries that validate the
  number of results against expected counts and raise
  HTMLStructuralAssumptionException otherwise. This catches page layout
  changes early with a clear error.
"""

from __future__ import annotations

from typing import overload

from cssselect import SelectorError
from lxml import etree, html
from lxml.html import HtmlElement

from urlfmt.common.exceptions import (
    HTMLParseException,
    HTMLStructuralAssumptionException,
)


def parse_html(
    content: bytes | str, request_url: str = ""
) -> CheckedHtmlElement:
    """Parse an HTML document into a CheckedHtmlElement.

    Args:
        content: The raw document.
        request_url: URL the document was fetched from, used as the base URL
            and in error context.

    Raises:
        HTMLParseException: If lxml cannot build a tree (e.g. empty body).
    """
    try:
        root = html.document_fromstring(
            content, base_url=request_url or None
        )
    except (etree.ParserError, ValueError) as e:
        raise HTMLParseException(request_url, str(e)) from e
    return CheckedHtmlElement(root, request_url)


class CheckedHtmlElement:
    """Wrapper around HtmlElement with searchable and validated queries.

    Attributes not defined here are delegated to the wrapped element, so a
    CheckedHtmlElement can stand in for an HtmlElement.
    """

    def __init__(self, element: HtmlElement, request_url: str = "") -> None:
        """Initialize the checked element wrapper.

        Args:
            element: The lxml HtmlElement to wrap.
            request_url: Optional URL for error context.
        """
        self._element = element
        self._request_url = request_url

    @property
    def element(self) -> HtmlElement:
        """The wrapped lxml element."""
        return self._element

    @property
    def attrs(self) -> dict[str, str]:
        """The element's attributes."""
        return dict(self._element.attrib)

    def text(self) -> str:
        """Visible text of the element and its descendants, stripped."""
        return self._element.text_content().strip()

    def _matches(
        self, element: HtmlElement, attribute: tuple[str, ...]
    ) -> bool:
        if not attribute:
            return True
        key, value = attribute
        actual = element.get(key)
        if actual is None:
            return False
        if key == "class":
            return value in actual.split()
        return actual == value

    def find_all(self, tag: str, *attribute: str) -> list[CheckedHtmlElement]:
        """Find every descendant with the given tag.

        Args:
            tag: Tag name to look for.
            attribute: Optional ``key, value`` pair the element must carry.
                For ``class`` the value only has to be one of the classes.

        Returns:
            Matching elements in document order.

        Example::

            page.find_all("a", "class", "nav-link")
        """
        if len(attribute) not in (0, 2):
            raise ValueError(
                "attribute filter must be a key and a value, got "
                f"{len(attribute)} item(s)"
            )
        return [
            CheckedHtmlElement(element, self._request_url)
            for element in self._element.iterdescendants(tag)
            if self._matches(element, attribute)
        ]

    def find(self, tag: str, *attribute: str) -> CheckedHtmlElement | None:
        """Find the first descendant with the given tag.

        Example::

            name = page.find("div", "id", "appHubAppName")
        """
        found = self.find_all(tag, *attribute)
        return found[0] if found else None

    def _check_count(
        self,
        selector: str,
        selector_type: str,
        description: str,
        found: int,
        bounds: tuple[int, int | None],
        is_element_query: bool = True,
    ) -> None:
        low, high = bounds
        if low <= found and (high is None or found <= high):
            return
        raise HTMLStructuralAssumptionException(
            selector=selector,
            selector_type=selector_type,
            description=description,
            expected_min=low,
            expected_max=high,
            actual_count=found,
            request_url=self._request_url,
            is_element_query=is_element_query,
        )

    @overload
    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
        *,
        type: type[str],
    ) -> list[str]: ...

    @overload
    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]: ...

    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
        *,
        type: type[str] | None = None,
    ) -> list[CheckedHtmlElement] | list[str]:
        """Run an XPath query and require between min and max results.

        Pass ``type=str`` to keep only string results (text nodes and
        attribute values) instead of elements.

        Raises:
            HTMLStructuralAssumptionException: If the count is out of bounds.

        Example::

            name = page.checked_xpath("//div[@id='appHubAppName']", "name")
            hrefs = page.checked_xpath("//a/@href", "links", type=str)
        """
        results = self._element.xpath(xpath)
        found: list[CheckedHtmlElement] | list[str]
        if type is str:
            found = [str(r) for r in results if isinstance(r, str)]
        else:
            found = [
                CheckedHtmlElement(r, self._request_url)
                for r in results
                if isinstance(r, HtmlElement)
            ]
        self._check_count(
            xpath,
            "xpath",
            description,
            len(found),
            (min_count, max_count),
            is_element_query=type is not str,
        )
        return found

    def checked_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]:
        """CSS counterpart of checked_xpath, always returning elements.

        An unparseable selector counts as zero results.
        """
        try:
            results = self._element.cssselect(selector)
        except SelectorError as e:
            raise HTMLStructuralAssumptionException(
                selector=selector,
                selector_type="css",
                description=description,
                expected_min=min_count,
                expected_max=max_count,
                actual_count=0,
                request_url=self._request_url,
            ) from e
        self._check_count(
            selector, "css", description, len(results), (min_count, max_count)
        )
        return [CheckedHtmlElement(r, self._request_url) for r in results]

    def __getattr__(self, name: str):
        """Delegate all other attributes to the wrapped element."""
        return getattr(self._element, name)
