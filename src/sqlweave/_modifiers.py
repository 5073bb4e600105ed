"""Modifier tags accepted after ``%`` in SQL text and in ``key%mod`` keys."""

from __future__ import annotations

import enum


class Modifier(enum.StrEnum):
    TEXT = "s"
    BINARY = "bin"
    BOOL = "b"
    INT = "i"
    UINT = "u"
    INT_OR_NULL = "iN"
    TEXT_OR_NULL = "sN"
    TEXT_OR_NULL_ALT = "sn"
    FLOAT = "f"
    DATE = "d"
    DATETIME = "dt"
    TIME = "t"
    IDENTIFIER = "n"
    RAW_IDENTIFIER = "N"
    EXPRESSION = "ex"
    SQL = "sql"
    RAW_SQL = "SQL"
    LIKE = "like"
    LIKE_PREFIX = "like~"
    LIKE_SUFFIX = "~like"
    LIKE_CONTAINS = "~like~"
    AND = "and"
    OR = "or"
    ASSIGN = "a"
    LIST = "l"
    IN = "in"
    VALUES = "v"
    MULTI = "m"
    ORDER = "by"
    LIMIT = "lmt"
    OFFSET = "ofs"
    IF = "if"
    ELSE = "else"
    END = "end"

    @classmethod
    def parse(cls, tag: str) -> Modifier | None:
        """Return the modifier for *tag*, or None if the tag is unknown."""
        try:
            return cls(tag)
        except ValueError:
            return None


# Side bit mask passed to Dialect.escape_like: 1 = leading %, 2 = trailing %
LIKE_SIDES: dict[Modifier, int] = {
    Modifier.LIKE: 0,
    Modifier.LIKE_SUFFIX: 1,
    Modifier.LIKE_PREFIX: 2,
    Modifier.LIKE_CONTAINS: 3,
}

# Modifiers that only make sense with an array value
ARRAY_ONLY = {
    Modifier.AND,
    Modifier.OR,
    Modifier.ASSIGN,
    Modifier.LIST,
    Modifier.VALUES,
}

DATE_MODIFIERS = {Modifier.DATE, Modifier.DATETIME, Modifier.TIME}

NULLABLE_ZERO = {Modifier.INT_OR_NULL, Modifier.TEXT_OR_NULL, Modifier.TEXT_OR_NULL_ALT}
