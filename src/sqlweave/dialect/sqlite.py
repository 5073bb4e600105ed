"""SQLite dialect implementation."""

from __future__ import annotations

from datetime import date, datetime

from sqlweave.dialect._base import (
    Dialect,
    DialectName,
    check_limit,
    format_date,
    format_datetime,
    wrap_like,
)

_IDENTIFIER_ESCAPES = str.maketrans("[]", "  ")
_LIKE_ESCAPES = str.maketrans({"\\": "\\\\", "%": "\\%", "_": "\\_"})


class SQLiteDialect(Dialect):
    """SQLite 3 dialect."""

    name = DialectName.SQLITE

    # --- Identifiers ---

    def escape_identifier(self, value: str) -> str:
        return f"[{value.translate(_IDENTIFIER_ESCAPES)}]"

    # --- Literals ---

    def escape_text(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def escape_binary(self, value: bytes) -> str:
        hex_str = value.hex().upper()
        return f"X'{hex_str}'"

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def escape_date(self, value: date) -> str:
        return f"'{format_date(value)}'"

    def escape_datetime(self, value: datetime) -> str:
        return f"'{format_datetime(value)}'"

    # --- Patterns ---

    def escape_like(self, value: str, side: int) -> str:
        escaped = value.replace("'", "''").translate(_LIKE_ESCAPES)
        return wrap_like(escaped, side) + " ESCAPE '\\'"

    # --- Paging ---

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        check_limit(limit, offset)
        if limit is not None or offset:
            sql += " LIMIT " + (str(limit) if limit is not None else "-1")
            if offset:
                sql += f" OFFSET {offset}"
        return sql
