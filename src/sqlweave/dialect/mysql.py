"""MySQL dialect implementation."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from sqlweave.dialect._base import (
    Dialect,
    DialectName,
    check_limit,
    format_date,
    format_datetime,
    wrap_like,
)

# Same set as mysql_real_escape_string
_TEXT_ESCAPES = str.maketrans({
    "\x00": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\x1a": "\\Z",
})

# Backslash is doubled twice: once for the string literal, once for LIKE
_LIKE_ESCAPES = str.maketrans({
    "\x00": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\\": "\\\\\\\\",
    "'": "\\'",
    "%": "\\%",
    "_": "\\_",
})

# Upper bound used when only an offset is given
_MAX_LIMIT = "18446744073709551615"


class MySQLDialect(Dialect):
    """MySQL / MariaDB dialect."""

    name = DialectName.MYSQL

    # --- Identifiers ---

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace("`", "``")
        return f"`{escaped}`"

    # --- Literals ---

    def escape_text(self, value: str) -> str:
        return f"'{value.translate(_TEXT_ESCAPES)}'"

    def escape_binary(self, value: bytes) -> str:
        hex_str = value.hex().upper()
        return f"X'{hex_str}'"

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def escape_date(self, value: date) -> str:
        return f"'{format_date(value)}'"

    def escape_datetime(self, value: datetime) -> str:
        return f"'{format_datetime(value)}'"

    def escape_date_interval(self, value: timedelta) -> str:
        sign = "-" if value < timedelta(0) else ""
        value = abs(value)
        hours, rest = divmod(value.days * 86400 + value.seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"'{sign}{hours:02d}:{minutes:02d}:{seconds:02d}.{value.microseconds:06d}'"

    # --- Patterns ---

    def escape_like(self, value: str, side: int) -> str:
        return wrap_like(value.translate(_LIKE_ESCAPES), side)

    # --- Paging ---

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        check_limit(limit, offset)
        if limit is not None or offset:
            sql += " LIMIT " + (str(limit) if limit is not None else _MAX_LIMIT)
            if offset:
                sql += f" OFFSET {offset}"
        return sql
