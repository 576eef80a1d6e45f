"""Tests for the verb registry.

The registry maps each verb to the pattern matching its printf output, each
pattern to the parser reading it back, and each verb to a formatter.
"""

import pytest

from urlfmt.verbs import (
    PATTERN_PARSERS,
    VERB_PATTERNS,
    Verb,
    VerbPattern,
    format_value,
    parser_for,
    pattern_for,
    verb_pattern,
)


class TestPatternTable:
    """Tests for the verb to pattern table."""

    @pytest.mark.parametrize(
        "verb, pattern",
        [
            ("s", r"([a-zA-Z0-9-._~]+)"),
            ("t", r"(true|false)"),
            ("b", r"([01]+)"),
            ("c", r"(.)"),
            ("o", r"([0-7]+)"),
            ("O", r"(0o[0-7]+)"),
            ("d", r"(\d+)"),
            ("U", r"(U\+[0-9]+)"),
            ("e", r"([+-]?[0-9]+\.[0-9]+e\+[0-9]+)"),
            ("E", r"([+-]?[0-9]+\.[0-9]+E\+[0-9]+)"),
            ("f", r"([+-]?[0-9]+\.[0-9]+)"),
            ("F", r"([+-]?[0-9]+\.[0-9]+)"),
            ("x", r"([+-]?0x[a-f0-9]+\.[0-9]+p\+[a-f0-9]+)"),
            ("X", r"([+-]?0x[A-F0-9]+\.[0-9]+P\+[A-F0-9]+)"),
        ],
    )
    def test_registered_pattern(self, verb, pattern):
        """Every registered verb shall map to its fixed pattern."""
        assert pattern_for(verb) == pattern
        assert verb_pattern(verb) == pattern

    def test_every_verb_is_registered(self):
        """Every Verb member shall have a pattern."""
        assert set(VERB_PATTERNS) == {verb.value for verb in Verb}

    def test_unregistered_verb_has_no_pattern(self):
        """pattern_for shall return None for unregistered verbs."""
        assert pattern_for("w") is None

    def test_unregistered_verb_gets_synthesized_pattern(self):
        """verb_pattern shall build a class pattern from the letter."""
        assert verb_pattern("w") == r"(\w+)"
        assert verb_pattern("S") == r"(\S+)"

    def test_tables_are_read_only(self):
        """The registries shall not accept new entries."""
        with pytest.raises(TypeError):
            VERB_PATTERNS["q"] = "(.+)"  # type: ignore[index]
        with pytest.raises(TypeError):
            PATTERN_PARSERS["(.+)"] = str  # type: ignore[index]


class TestParsers:
    """Tests for the pattern to parser table."""

    def test_string_pattern_has_no_parser(self):
        """Strings shall be kept raw, so their pattern has no parser."""
        assert parser_for(VerbPattern.STRING.value) is None

    def test_unknown_pattern_has_no_parser(self):
        """Synthesized patterns shall have no parser."""
        assert parser_for(r"(\w+)") is None

    @pytest.mark.parametrize(
        "pattern, text, expected",
        [
            (VerbPattern.BOOL, "true", True),
            (VerbPattern.BOOL, "false", False),
            (VerbPattern.BASE2, "1011", 11),
            (VerbPattern.CHAR, "z", "z"),
            (VerbPattern.BASE8, "17", 15),
            (VerbPattern.BASE8_PREFIX, "0o17", 15),
            (VerbPattern.BASE10, "477160", 477160),
            (VerbPattern.SCIENTIFIC_LOWER, "-1.5e+10", -1.5e10),
            (VerbPattern.SCIENTIFIC_UPPER, "1.5E+10", 1.5e10),
            (VerbPattern.FLOAT, "123.456", 123.456),
            (VerbPattern.FLOAT_HEX_LOWER, "0x1.8p+1", 3.0),
            (VerbPattern.FLOAT_HEX_UPPER, "0x1.8P+1", 3.0),
        ],
    )
    def test_parser_converts_matched_text(self, pattern, text, expected):
        """Each parser shall turn matched text into its typed value."""
        parsed = parser_for(pattern.value)(text)
        assert parsed == expected
        assert type(parsed) is type(expected)

    def test_unicode_parser_yields_nothing(self):
        """Code points shall be matched but produce None."""
        parser = parser_for(VerbPattern.UNICODE.value)
        assert parser is not None
        assert parser("U+1234") is None

    def test_bool_parser_rejects_other_words(self):
        """The bool parser shall reject anything but true and false."""
        with pytest.raises(ValueError):
            parser_for(VerbPattern.BOOL.value)("yes")


class TestFormatters:
    """Tests for rendering values with a verb."""

    @pytest.mark.parametrize(
        "verb, value, expected",
        [
            ("s", "hempuli", "hempuli"),
            ("t", True, "true"),
            ("t", False, "false"),
            ("b", 11, "1011"),
            ("c", 65, "A"),
            ("c", "z", "z"),
            ("o", 15, "17"),
            ("O", 15, "0o17"),
            ("O", -15, "-0o17"),
            ("d", 477160, "477160"),
            ("d", -1, "-1"),
            ("U", 0x41, "U+0041"),
            ("e", 1234.5678, "1.234568e+03"),
            ("E", 1234.5678, "1.234568E+03"),
            ("f", 123.456, "123.456000"),
            ("F", 2, "2.000000"),
            ("x", 3.0, "0x1.8p+01"),
            ("x", 1.0, "0x1p+00"),
            ("x", -0.75, "-0x1.8p-01"),
            ("x", 255, "ff"),
            ("X", 3.0, "0X1.8P+01"),
            ("X", 255, "FF"),
        ],
    )
    def test_format_value(self, verb, value, expected):
        """format_value shall reproduce the verb's printf output."""
        assert format_value(verb, value) == expected

    def test_generic_verb_uses_str(self):
        """Verbs without a formatter shall render with str()."""
        assert format_value("v", 12) == "12"
        assert format_value("v", True) == "true"

    @pytest.mark.parametrize(
        "verb, value",
        [
            ("s", 5),
            ("d", "5"),
            ("d", True),
            ("t", 1),
            ("f", "1.0"),
            ("U", None),
            ("c", "ab"),
        ],
    )
    def test_wrong_type_is_rejected(self, verb, value):
        """format_value shall raise TypeError for unsupported values."""
        with pytest.raises(TypeError):
            format_value(verb, value)

    def test_non_finite_hex_float_is_rejected(self):
        """Hex floats shall refuse infinities."""
        with pytest.raises(ValueError):
            format_value("x", float("inf"))
