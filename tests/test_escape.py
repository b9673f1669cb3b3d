"""
Tests for SQL identifier and literal escaping.

Each escaped token is read back with PostgreSQL's quoting rules to check
that it denotes exactly the original string and that nothing follows the
closing quote.
"""

import re

import pytest

from directory_api.db.escape import escape_identifier, escape_literal

NASTY_STRINGS = [
    "users",
    "first name",
    "select",
    "order by",
    'a"b',
    '"',
    '""',
    'x"; DROP TABLE users; --',
    "x'; DROP TABLE users; --",
    "it's",
    "back\\slash",
    "trailing\\",
    "\\'; DELETE FROM t; --",
    "new\nline",
    "tab\there",
    "colon:name",
    "$1",
    "%s",
    "ünïcødé ✓",
    "",
]


def read_identifier(token: str) -> str:
    """Parse a double-quoted PostgreSQL identifier, requiring it to span the whole token."""
    match = re.fullmatch(r'"((?:[^"]|"")*)"', token)
    assert match, f"not a single quoted identifier: {token!r}"
    return match.group(1).replace('""', '"')


def read_literal(token: str) -> str:
    """Parse a PostgreSQL string literal (plain or E''), requiring it to span the whole token."""
    match = re.fullmatch(r"( E)?'((?:[^'\\]|''|\\\\)*)'", token)
    assert match, f"not a single string literal: {token!r}"
    body = match.group(2).replace("''", "'")
    if match.group(1):
        body = body.replace("\\\\", "\\")
    return body


class TestEscapeIdentifier:
    """Tests for escape_identifier()."""

    def test_simple_name_is_quoted(self):
        assert escape_identifier("users") == '"users"'

    def test_multi_word_name(self):
        assert escape_identifier("first name") == '"first name"'

    def test_reserved_word(self):
        assert escape_identifier("select") == '"select"'

    def test_embedded_quote_is_doubled(self):
        assert escape_identifier('a"b') == '"a""b"'

    def test_injection_attempt_stays_inside_quotes(self):
        escaped = escape_identifier('x"; DROP TABLE users; --')
        assert escaped == '"x""; DROP TABLE users; --"'

    @pytest.mark.parametrize("value", NASTY_STRINGS)
    def test_round_trip(self, value):
        assert read_identifier(escape_identifier(value)) == value

    def test_nul_is_rejected(self):
        with pytest.raises(ValueError):
            escape_identifier("a\x00b")


class TestEscapeLiteral:
    """Tests for escape_literal()."""

    def test_simple_value(self):
        assert escape_literal("hello") == "'hello'"

    def test_single_quote_is_doubled(self):
        assert escape_literal("it's") == "'it''s'"

    def test_backslash_uses_escape_string_syntax(self):
        assert escape_literal("C:\\temp") == " E'C:\\\\temp'"

    def test_quote_and_backslash(self):
        assert escape_literal("\\'") == " E'\\\\'''"

    def test_double_quote_untouched(self):
        assert escape_literal('say "hi"') == "'say \"hi\"'"

    @pytest.mark.parametrize("value", NASTY_STRINGS)
    def test_round_trip(self, value):
        assert read_literal(escape_literal(value)) == value

    def test_nul_is_rejected(self):
        with pytest.raises(ValueError):
            escape_literal("a\x00b")
