"""Verb registry for format URLs.

This module holds the static tables that map printf-style interpolation
verbs to:

1. The regular expression that matches the verb's textual output.
2. The parser that turns a matched substring back into a typed value.
3. The formatter that renders a typed value in the verb's textual shape.

Verbs that are missing from the pattern table fall back to a pattern
synthesized from the verb letter itself (``%w`` becomes ``(\\w+)``). Verbs
that can only appear in a URL once percent-encoded (``%q``, ``%v`` on
structs, and so on) are deliberately not covered.

All tables are read-only mappings built at import time.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

Parser = Callable[[str], Any]
Formatter = Callable[[Any], str]


class Verb(str, Enum):
    """Interpolation verbs with a fixed lexical shape.

    Values:
        STRING: The uninterpreted characters of a string.
        BOOL: The word true or false.
        BASE2: Base 2 integer.
        CHAR: The character represented by a Unicode code point.
        BASE8: Base 8 integer.
        BASE8_PREFIX: Base 8 integer with a ``0o`` prefix.
        BASE10: Base 10 integer.
        UNICODE: Unicode format, e.g. ``U+1234``.
        SCIENTIFIC_LOWER: Scientific notation, e.g. ``-1.234456e+78``.
        SCIENTIFIC_UPPER: Scientific notation, e.g. ``-1.234456E+78``.
        FLOAT: Decimal point but no exponent, e.g. ``123.456``.
        FLOAT_SYNONYM: Synonym for FLOAT.
        FLOAT_HEX_LOWER: Hexadecimal float, e.g. ``-0x1.23abcp+20``.
        FLOAT_HEX_UPPER: Upper-case hexadecimal float, e.g. ``-0X1.23ABCP+20``.
    """

    STRING = "s"
    BOOL = "t"
    BASE2 = "b"
    CHAR = "c"
    BASE8 = "o"
    BASE8_PREFIX = "O"
    BASE10 = "d"
    UNICODE = "U"
    SCIENTIFIC_LOWER = "e"
    SCIENTIFIC_UPPER = "E"
    FLOAT = "f"
    FLOAT_SYNONYM = "F"
    FLOAT_HEX_LOWER = "x"
    FLOAT_HEX_UPPER = "X"


class VerbPattern(str, Enum):
    """Regex fragments matching each verb's output, one group apiece."""

    STRING = r"([a-zA-Z0-9-._~]+)"
    BOOL = r"(true|false)"
    BASE2 = r"([01]+)"
    CHAR = r"(.)"
    BASE8 = r"([0-7]+)"
    BASE8_PREFIX = r"(0o[0-7]+)"
    BASE10 = r"(\d+)"
    UNICODE = r"(U\+[0-9]+)"
    SCIENTIFIC_LOWER = r"([+-]?[0-9]+\.[0-9]+e\+[0-9]+)"
    SCIENTIFIC_UPPER = r"([+-]?[0-9]+\.[0-9]+E\+[0-9]+)"
    FLOAT = r"([+-]?[0-9]+\.[0-9]+)"
    FLOAT_HEX_LOWER = r"([+-]?0x[a-f0-9]+\.[0-9]+p\+[a-f0-9]+)"
    FLOAT_HEX_UPPER = r"([+-]?0x[A-F0-9]+\.[0-9]+P\+[A-F0-9]+)"


VERB_PATTERNS: Mapping[str, str] = MappingProxyType(
    {
        Verb.STRING.value: VerbPattern.STRING.value,
        Verb.BOOL.value: VerbPattern.BOOL.value,
        Verb.BASE2.value: VerbPattern.BASE2.value,
        Verb.CHAR.value: VerbPattern.CHAR.value,
        Verb.BASE8.value: VerbPattern.BASE8.value,
        Verb.BASE8_PREFIX.value: VerbPattern.BASE8_PREFIX.value,
        Verb.BASE10.value: VerbPattern.BASE10.value,
        Verb.UNICODE.value: VerbPattern.UNICODE.value,
        Verb.SCIENTIFIC_LOWER.value: VerbPattern.SCIENTIFIC_LOWER.value,
        Verb.SCIENTIFIC_UPPER.value: VerbPattern.SCIENTIFIC_UPPER.value,
        Verb.FLOAT.value: VerbPattern.FLOAT.value,
        Verb.FLOAT_SYNONYM.value: VerbPattern.FLOAT.value,
        Verb.FLOAT_HEX_LOWER.value: VerbPattern.FLOAT_HEX_LOWER.value,
        Verb.FLOAT_HEX_UPPER.value: VerbPattern.FLOAT_HEX_UPPER.value,
    }
)


def _parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"invalid boolean literal {text!r}")


def _parse_char(text: str) -> str:
    if len(text) != 1:
        raise ValueError(f"expected a single character, got {text!r}")
    return text


def _parse_prefixed_octal(text: str) -> int:
    sign = ""
    if text[:1] in "+-":
        sign, text = text[0], text[1:]
    if not text.startswith("0o"):
        raise ValueError(f"missing 0o prefix in {text!r}")
    return int(sign + text[2:], 8)


def _parse_unicode(text: str) -> None:
    return None


PATTERN_PARSERS: Mapping[str, Parser] = MappingProxyType(
    {
        VerbPattern.BOOL.value: _parse_bool,
        VerbPattern.BASE2.value: lambda text: int(text, 2),
        VerbPattern.CHAR.value: _parse_char,
        VerbPattern.BASE8.value: lambda text: int(text, 8),
        VerbPattern.BASE8_PREFIX.value: _parse_prefixed_octal,
        VerbPattern.BASE10.value: lambda text: int(text, 10),
        # Code points are matched but intentionally never turned into a value
        VerbPattern.UNICODE.value: _parse_unicode,
        VerbPattern.SCIENTIFIC_LOWER.value: float,
        VerbPattern.SCIENTIFIC_UPPER.value: float,
        VerbPattern.FLOAT.value: float,
        VerbPattern.FLOAT_HEX_LOWER.value: float.fromhex,
        VerbPattern.FLOAT_HEX_UPPER.value: float.fromhex,
    }
)


def pattern_for(verb: str) -> str | None:
    """Look up the registered pattern for a verb letter.

    Returns:
        The pattern, or None when the verb must use a synthesized pattern.
    """
    return VERB_PATTERNS.get(verb)


def parser_for(pattern: str) -> Parser | None:
    """Look up the parser registered for a pattern's exact text.

    Returns:
        The parser, or None when matches should be kept as raw strings.
    """
    return PATTERN_PARSERS.get(pattern)


def verb_pattern(verb: str) -> str:
    """Return the capture pattern for a verb, synthesizing one if needed."""
    pattern = pattern_for(verb)
    if pattern is None:
        pattern = f"(\\{verb}+)"
    return pattern


# =============================================================================
# Formatters
# =============================================================================


def _require_int(verb: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(
            f"%{verb} expects an int, got {type(value).__name__}={value!r}"
        )
    return value


def _require_real(verb: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(
            f"%{verb} expects a float, got {type(value).__name__}={value!r}"
        )
    return float(value)


def _format_string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(
            f"%s expects a str, got {type(value).__name__}={value!r}"
        )
    return value


def _format_bool(value: Any) -> str:
    if not isinstance(value, bool):
        raise TypeError(
            f"%t expects a bool, got {type(value).__name__}={value!r}"
        )
    return "true" if value else "false"


def _format_char(value: Any) -> str:
    if isinstance(value, str) and len(value) == 1:
        return value
    return chr(_require_int("c", value))


def _format_prefixed_octal(value: Any) -> str:
    return format(_require_int("O", value), "#o")


def _format_unicode(value: Any) -> str:
    if isinstance(value, str) and len(value) == 1:
        value = ord(value)
    return f"U+{_require_int('U', value):04X}"


def _format_hex(verb: str, value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return format(value, verb)
    number = _require_real(verb, value)
    if not math.isfinite(number):
        raise ValueError(f"%{verb} cannot render {number!r}")
    # float.hex() pads the fraction; printf keeps the shortest form and a
    # two digit exponent: 0x1.8000000000000p+1 -> 0x1.8p+01
    text = number.hex()
    sign = "-" if text.startswith("-") else ""
    mantissa, exponent = text.lstrip("-")[2:].split("p")
    mantissa = mantissa.rstrip("0").rstrip(".")
    power = int(exponent)
    power_sign = "+" if power >= 0 else "-"
    rendered = f"{sign}0x{mantissa}p{power_sign}{abs(power):02d}"
    if verb == "X":
        return rendered.upper()
    return rendered


def _format_generic(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


VERB_FORMATTERS: Mapping[str, Formatter] = MappingProxyType(
    {
        Verb.STRING.value: _format_string,
        Verb.BOOL.value: _format_bool,
        Verb.BASE2.value: lambda value: format(_require_int("b", value), "b"),
        Verb.CHAR.value: _format_char,
        Verb.BASE8.value: lambda value: format(_require_int("o", value), "o"),
        Verb.BASE8_PREFIX.value: _format_prefixed_octal,
        Verb.BASE10.value: lambda value: str(_require_int("d", value)),
        Verb.UNICODE.value: _format_unicode,
        Verb.SCIENTIFIC_LOWER.value: lambda value: "%e"
        % _require_real("e", value),
        Verb.SCIENTIFIC_UPPER.value: lambda value: "%E"
        % _require_real("E", value),
        Verb.FLOAT.value: lambda value: "%f" % _require_real("f", value),
        Verb.FLOAT_SYNONYM.value: lambda value: "%f"
        % _require_real("F", value),
        Verb.FLOAT_HEX_LOWER.value: lambda value: _format_hex("x", value),
        Verb.FLOAT_HEX_UPPER.value: lambda value: _format_hex("X", value),
    }
)


def format_value(verb: str, value: Any) -> str:
    """Render a value the way the verb would print it.

    Verbs without a dedicated formatter render booleans as ``true``/``false``
    and everything else with ``str()``.

    Raises:
        TypeError: If the value's type does not suit the verb.
        ValueError: If the value cannot be rendered by the verb.
    """
    formatter = VERB_FORMATTERS.get(verb, _format_generic)
    return formatter(value)
