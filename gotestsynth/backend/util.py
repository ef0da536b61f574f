"""Shared helpers for Go text emission and identifier shaping."""

from __future__ import annotations

from gotestsynth.frontend.tokens import KEYWORDS

GO_RESERVED = frozenset(KEYWORDS)


def lower_first(name: str) -> str:
    """Lower-case the first letter, keeping the result a legal Go identifier."""
    if not name:
        return name
    result = name[0].lower() + name[1:]
    if result in GO_RESERVED:
        return result + "_"
    return result


def upper_first(name: str) -> str:
    """Upper-case the first letter (exported Go identifier)."""
    if not name:
        return name
    return name[0].upper() + name[1:]


def escape_string(value: str) -> str:
    """Escape a string for use in an interpreted Go string literal (without quotes)."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
        .replace("\f", "\\f")
        .replace("\v", "\\v")
        .replace("\x00", "\\x00")
        .replace("\x7f", "\\u007f")
    )


def quote(value: str) -> str:
    """Interpreted Go string literal."""
    return '"' + escape_string(value) + '"'


def raw_quote(value: str) -> str:
    """Raw Go string literal; falls back to an interpreted literal when `value` holds a backquote."""
    if "`" in value:
        return quote(value)
    return "`" + value + "`"
