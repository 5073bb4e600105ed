"""DuckDB dialect implementation."""

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

_LIKE_ESCAPES = str.maketrans({"\\": "\\\\", "%": "\\%", "_": "\\_"})


class DuckDBDialect(Dialect):
    """DuckDB dialect."""

    name = DialectName.DUCKDB

    # --- Identifiers ---

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace('"', '""')
        return f'"{escaped}"'

    # --- Literals ---

    def escape_text(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def escape_binary(self, value: bytes) -> str:
        hex_str = "".join(f"\\x{byte:02X}" for byte in value)
        return f"'{hex_str}'::BLOB"

    def escape_bool(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def escape_date(self, value: date) -> str:
        return f"DATE '{format_date(value)}'"

    def escape_datetime(self, value: datetime) -> str:
        return f"TIMESTAMP '{format_datetime(value)}'"

    def escape_date_interval(self, value: timedelta) -> str:
        return (
            f"INTERVAL '{value.days} days {value.seconds} seconds "
            f"{value.microseconds} microseconds'"
        )

    # --- Patterns ---

    def escape_like(self, value: str, side: int) -> str:
        escaped = value.replace("'", "''").translate(_LIKE_ESCAPES)
        return wrap_like(escaped, side) + " ESCAPE '\\'"

    # --- Paging ---

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        check_limit(limit, offset)
        if limit is not None:
            sql += f" LIMIT {limit}"
        if offset:
            sql += f" OFFSET {offset}"
        return sql
