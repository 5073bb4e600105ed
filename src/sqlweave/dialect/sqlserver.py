"""Microsoft SQL Server dialect implementation."""

from __future__ import annotations

from datetime import date, datetime

from sqlweave._errors import UnsupportedDialectFeatureError
from sqlweave.dialect._base import (
    Dialect,
    DialectName,
    check_limit,
    format_date,
    format_datetime,
    wrap_like,
)

_LIKE_ESCAPES = str.maketrans({"'": "''", "%": "[%]", "_": "[_]", "[": "[[]"})

# SQL Server 2012
_OFFSET_FETCH_VERSION = 11


class SQLServerDialect(Dialect):
    """SQL Server dialect.

    Args:
        version: Major server version. Paging uses OFFSET/FETCH from
            SQL Server 2012 (version 11) and ``TOP`` before that.
    """

    name = DialectName.SQLSERVER

    def __init__(self, version: int = _OFFSET_FETCH_VERSION) -> None:
        self.version = version

    # --- Identifiers ---

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace("]", "]]")
        return f"[{escaped}]"

    # --- Literals ---

    def escape_text(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"N'{escaped}'"

    def escape_binary(self, value: bytes) -> str:
        return "0x" + value.hex()

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def escape_date(self, value: date) -> str:
        return f"'{format_date(value)}'"

    def escape_datetime(self, value: datetime) -> str:
        return f"CONVERT(DATETIME2(7), '{format_datetime(value)}')"

    # --- Patterns ---

    def escape_like(self, value: str, side: int) -> str:
        return wrap_like(value.translate(_LIKE_ESCAPES), side)

    # --- Paging ---

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        check_limit(limit, offset)
        if self.version < _OFFSET_FETCH_VERSION:
            if offset:
                raise UnsupportedDialectFeatureError(
                    "offset is not supported by this database",
                    f"SQL Server version {self.version} has no OFFSET/FETCH",
                )
            if limit is not None:
                sql = f"SELECT TOP ({limit}) * FROM ({sql}) t"
        elif limit is not None:
            # requires ORDER BY
            sql = f"{sql.rstrip()} OFFSET {offset or 0} ROWS FETCH NEXT {limit} ROWS ONLY"
        elif offset:
            sql = f"{sql.rstrip()} OFFSET {offset} ROWS"
        return sql

    def __repr__(self) -> str:
        return f"SQLServerDialect(version={self.version})"
