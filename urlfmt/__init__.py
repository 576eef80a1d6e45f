"""
Format URLs.

This package couples printf-style URL templates with the operations derived
from them (fill, regex, match, extract_args, standardise) and a thin fetch
layer that fills a template and parses the response as HTML or JSON.

Example::

    from urlfmt import FormatURL

    SteamAppPage = FormatURL("%s://store.steampowered.com/app/%d")
    SteamAppPage.extract_args("http://store.steampowered.com/app/477160")
    # [477160]
"""

from urlfmt.format_url import CompiledFormat, FormatURL
from urlfmt.protocol import Protocol
from urlfmt.verbs import Verb

__all__ = ["CompiledFormat", "FormatURL", "Protocol", "Verb"]
