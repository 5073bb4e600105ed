"""sqlweave - Translate SQL templates and fluent clause chains into escaped SQL."""

from __future__ import annotations

try:
    from sqlweave._version import __version__
except ModuleNotFoundError:  # editable install without VCS metadata
    __version__ = "0.0.0.dev0"

from collections.abc import Mapping
from typing import Any

from sqlweave._context import Context
from sqlweave._errors import (
    ConfigurationError,
    InvalidLimitError,
    InvalidValueError,
    SqlweaveError,
    TranslationError,
    UnsupportedDialectFeatureError,
)
from sqlweave._fluent import Fluent
from sqlweave._modifiers import Modifier
from sqlweave._substitutions import IdentifierCache, Substitutions
from sqlweave._values import REMOVE, Expression, Literal
from sqlweave.dialect import (
    Dialect,
    DialectName,
    DuckDBDialect,
    MySQLDialect,
    OracleDialect,
    PostgresDialect,
    SQLiteDialect,
    SQLServerDialect,
    get_dialect,
)

__all__ = [
    "translate",
    "format_value",
    "Context",
    "Fluent",
    "Literal",
    "Expression",
    "REMOVE",
    "Modifier",
    "Substitutions",
    "IdentifierCache",
    "SqlweaveError",
    "TranslationError",
    "InvalidValueError",
    "InvalidLimitError",
    "ConfigurationError",
    "UnsupportedDialectFeatureError",
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


def translate(
    *args: Any,
    dialect: Dialect | str | None = None,
    substitutions: Mapping[str, Any] | None = None,
) -> str:
    """Translate an argument list of SQL fragments and values into one SQL string.

    Args:
        *args: Literal SQL fragments interleaved with values. ``%mod``
            modifiers and ``?`` placeholders consume the following values.
        dialect: SQL dialect or registry name. Defaults to PostgreSQL.
        substitutions: Bindings for ``:name:`` tokens.

    Returns:
        The generated SQL.

    Raises:
        TranslationError: If the arguments cannot be translated.
    """
    return Context(dialect, substitutions).translate(*args)


def format_value(
    value: Any,
    modifier: str | None = None,
    *,
    dialect: Dialect | str | None = None,
    substitutions: Mapping[str, Any] | None = None,
) -> str:
    """Render a single value as SQL.

    Args:
        value: The value to render.
        modifier: Optional modifier tag without the ``%``, e.g. ``"i"`` or ``"and"``.
        dialect: SQL dialect or registry name. Defaults to PostgreSQL.
        substitutions: Bindings for ``:name:`` tokens.

    Raises:
        TranslationError: If the value does not fit the modifier.
    """
    return Context(dialect, substitutions).format_value(value, modifier)
