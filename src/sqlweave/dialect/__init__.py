"""SQL dialect system: engine-specific quoting, literals and paging."""

from sqlweave.dialect._base import Dialect, DialectName
from sqlweave.dialect.duckdb import DuckDBDialect
from sqlweave.dialect.mysql import MySQLDialect
from sqlweave.dialect.oracle import OracleDialect
from sqlweave.dialect.postgres import PostgresDialect
from sqlweave.dialect.sqlite import SQLiteDialect
from sqlweave.dialect.sqlserver import SQLServerDialect

__all__ = [
    "Dialect",
    "DialectName",
    "DuckDBDialect",
    "MySQLDialect",
    "OracleDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "SQLServerDialect",
    "get_dialect",
]

_REGISTRY: dict[str, type[Dialect]] = {
    DialectName.POSTGRESQL: PostgresDialect,
    DialectName.MYSQL: MySQLDialect,
    DialectName.SQLITE: SQLiteDialect,
    DialectName.SQLSERVER: SQLServerDialect,
    DialectName.ORACLE: OracleDialect,
    DialectName.DUCKDB: DuckDBDialect,
}


def get_dialect(name: str) -> Dialect:
    """Build the dialect registered under *name*.

    Args:
        name: Registry name: "postgresql", "mysql", "sqlite", "sqlserver",
            "oracle" or "duckdb".

    Returns:
        A Dialect instance.

    Raises:
        ValueError: If the dialect name is unknown.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        raise ValueError(
            f"unknown dialect: {name!r}. "
            f"Available: {', '.join(sorted(_REGISTRY))}"
        )
    return cls()
