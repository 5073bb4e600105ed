"""Abstract base class for SQL dialects."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta

from sqlweave._errors import InvalidLimitError, UnsupportedDialectFeatureError


class DialectName(enum.StrEnum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"
    DUCKDB = "duckdb"


class Dialect(ABC):
    """Abstract base class defining the SQL dialect interface.

    All engine-specific quoting, literal and paging syntax lives behind
    this interface. Every method returns the SQL text for one value.
    """

    name: DialectName

    # --- Identifiers ---

    @abstractmethod
    def escape_identifier(self, value: str) -> str: ...

    # --- Literals ---

    @abstractmethod
    def escape_text(self, value: str) -> str: ...

    @abstractmethod
    def escape_binary(self, value: bytes) -> str: ...

    @abstractmethod
    def escape_bool(self, value: bool) -> str: ...

    @abstractmethod
    def escape_date(self, value: date) -> str: ...

    @abstractmethod
    def escape_datetime(self, value: datetime) -> str: ...

    def escape_date_interval(self, value: timedelta) -> str:
        raise UnsupportedDialectFeatureError(
            "date intervals are not supported by this dialect",
            f"{type(self).__name__} cannot render {value!r}",
        )

    # --- Patterns ---

    @abstractmethod
    def escape_like(self, value: str, side: int) -> str:
        """Escape *value* for LIKE; *side* bit 1 adds a leading %, bit 2 a trailing %."""

    # --- Paging ---

    @abstractmethod
    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def check_limit(limit: int | None, offset: int | None) -> None:
    """Reject negative paging values."""
    if (limit is not None and limit < 0) or (offset is not None and offset < 0):
        raise InvalidLimitError(
            "Negative offset or limit.",
            f"limit={limit!r}, offset={offset!r}",
        )


def wrap_like(value: str, side: int, quote: str = "'") -> str:
    """Quote an already escaped LIKE pattern and add the requested wildcards."""
    head = f"{quote}%" if side & 1 else quote
    tail = "%'" if side & 2 else "'"
    return head + value + tail


def format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def format_datetime(value: datetime) -> str:
    return value.replace(tzinfo=None).isoformat(sep=" ", timespec="microseconds")
