"""
SQL escaping for caller-supplied identifiers and literals.

Directory and property names arrive as plain strings at request time, so
they cannot be bound as query parameters. Every statement that embeds one
of them goes through the two functions below.
"""


def _reject_nul(value: str) -> None:
    # PostgreSQL text and names cannot contain NUL bytes.
    if "\x00" in value:
        raise ValueError("SQL identifiers and literals cannot contain NUL characters")


def escape_identifier(name: str) -> str:
    """Quote ``name`` as a PostgreSQL identifier.

    The result is always wrapped in double quotes with every embedded
    double quote doubled, so multi-word names, reserved words and names
    containing quotes all denote exactly the original string.

    Examples:
        "users" -> '"users"'
        'first name' -> '"first name"'
        'a"b' -> '"a""b"'
    """
    _reject_nul(name)
    return '"' + name.replace('"', '""') + '"'


def escape_literal(value: str) -> str:
    """Quote ``value`` as a PostgreSQL string literal.

    Single quotes are doubled. When the value contains a backslash, the
    backslashes are doubled and the literal uses the ``E''`` escape-string
    form, which reads the same whether or not
    ``standard_conforming_strings`` is enabled.

    Examples:
        "O'Brien" -> "'O''Brien'"
        "C:\\temp" -> " E'C:\\\\temp'"
    """
    _reject_nul(value)
    escaped = value.replace("'", "''")
    if "\\" in value:
        return " E'" + escaped.replace("\\", "\\\\") + "'"
    return "'" + escaped + "'"
