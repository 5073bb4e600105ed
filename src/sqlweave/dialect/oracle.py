"""Oracle dialect implementation."""

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

_LIKE_ESCAPES = str.maketrans({"\\": "\\\\", "%": "\\%", "_": "\\_", "'": "''"})


class OracleDialect(Dialect):
    """Oracle dialect.

    Args:
        legacy_rownum: Page with nested ``ROWNUM`` filters instead of the
            ``OFFSET ... FETCH`` syntax available since Oracle 12c.
    """

    name = DialectName.ORACLE

    def __init__(self, legacy_rownum: bool = False) -> None:
        self.legacy_rownum = legacy_rownum

    # --- Identifiers ---

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace('"', '""')
        return f'"{escaped}"'

    # --- Literals ---

    def escape_text(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def escape_binary(self, value: bytes) -> str:
        return f"HEXTORAW('{value.hex().upper()}')"

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def escape_date(self, value: date) -> str:
        return f"TO_DATE('{format_date(value)}', 'YYYY-mm-dd')"

    def escape_datetime(self, value: datetime) -> str:
        return f"TO_TIMESTAMP('{format_datetime(value)}', 'YYYY-mm-dd hh24:mi:ss.ff')"

    # --- Patterns ---

    def escape_like(self, value: str, side: int) -> str:
        return wrap_like(value.translate(_LIKE_ESCAPES), side) + " ESCAPE '\\'"

    # --- Paging ---

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        check_limit(limit, offset)
        if self.legacy_rownum:
            if offset:
                bound = f" WHERE ROWNUM <= {offset + limit}" if limit is not None else ""
                sql = (
                    f'SELECT * FROM (SELECT t.*, ROWNUM AS "__rnum" FROM ({sql}) t{bound})'
                    f' WHERE "__rnum" > {offset}'
                )
            elif limit is not None:
                sql = f"SELECT * FROM ({sql}) WHERE ROWNUM <= {limit}"
        elif offset:
            sql += f" OFFSET {offset} ROWS"
            if limit is not None:
                sql += f" FETCH NEXT {limit} ROWS ONLY"
        elif limit is not None:
            sql += f" FETCH FIRST {limit} ROWS ONLY"
        return sql

    def __repr__(self) -> str:
        return f"OracleDialect(legacy_rownum={self.legacy_rownum})"
