"""Shared configuration for translation and clause building."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlweave._errors import ConfigurationError
from sqlweave._fluent import Fluent
from sqlweave._substitutions import IdentifierCache, Substitutions
from sqlweave._translator import Translator
from sqlweave._values import Expression
from sqlweave.dialect import Dialect, DialectName, get_dialect

logger = logging.getLogger(__name__)

ObjectTranslator = Callable[[Any], Expression]


class Context:
    """Holds the dialect, substitutions and caches shared by translations.

    A context performs no I/O. Translators are created per call, so one
    context may serve any number of independent queries.

    Args:
        dialect: A ``Dialect`` instance or registry name. Defaults to PostgreSQL.
        substitutions: Initial ``:name:`` bindings.
        strict: Reject unknown builder keywords instead of appending them
            to the active clause.
        identifier_cache: Cache shared with other contexts. A private one
            is created when omitted.
    """

    def __init__(
        self,
        dialect: Dialect | str | None = None,
        substitutions: Mapping[str, Any] | None = None,
        *,
        strict: bool = False,
        identifier_cache: IdentifierCache | None = None,
    ) -> None:
        if dialect is None:
            dialect = DialectName.POSTGRESQL
        if isinstance(dialect, str):
            try:
                dialect = get_dialect(dialect)
            except ValueError as e:
                raise ConfigurationError(
                    f"unknown dialect: {dialect}", str(e), wrapped=e
                ) from e
        self._dialect = dialect
        self._substitutions = Substitutions(substitutions)
        self._identifiers = identifier_cache if identifier_cache is not None else IdentifierCache()
        self._object_translators: dict[type, ObjectTranslator] = {}
        self.strict = strict

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def substitutions(self) -> Substitutions:
        return self._substitutions

    @property
    def identifier_cache(self) -> IdentifierCache:
        return self._identifiers

    # ---- Translation ----

    def translate(self, *args: Any) -> str:
        """Generate SQL from literal fragments, values and modifiers.

        Raises:
            TranslationError: If the arguments cannot be translated.
        """
        return Translator(self).translate(args)

    def format_value(self, value: Any, modifier: str | None = None) -> str:
        """Render one value as SQL, optionally with a modifier tag."""
        return Translator(self).format_value(value, modifier)

    def substitute(self, value: str) -> str:
        return self._substitutions.substitute(value)

    def identifier(self, name: str) -> str:
        """Delimit a possibly dotted identifier, resolving substitutions first."""
        return self._identifiers.get(name, self._substitutions, self._delimite)

    def _delimite(self, name: str) -> str:
        parts = self.substitute(name).split(".")
        return ".".join(
            part if part == "*" else self._dialect.escape_identifier(part) for part in parts
        )

    # ---- Object translators ----

    def register_object_translator(self, cls: type, translator: ObjectTranslator) -> None:
        """Render instances of *cls* through *translator*, which returns an ``Expression``."""
        self._object_translators[cls] = translator
        logger.debug("registered object translator for %s", cls.__name__)

    def translate_object(self, value: Any) -> Expression | None:
        if not self._object_translators or value is None:
            return None
        for cls in type(value).__mro__:
            translator = self._object_translators.get(cls)
            if translator is None:
                continue
            result = translator(value)
            if not isinstance(result, Expression):
                raise ConfigurationError(
                    f"object translator for {cls.__name__} must return an Expression",
                    f"got {type(result).__name__} for {value!r}",
                )
            return result
        return None

    # ---- Builders ----

    def command(self) -> Fluent:
        return Fluent(self)

    def select(self, *args: Any) -> Fluent:
        return self.command().select(*args)

    def update(self, table: str, values: Mapping[str, Any]) -> Fluent:
        return self.command().update("%n", table).set(values)

    def insert(self, table: str, values: Mapping[str, Any]) -> Fluent:
        return (
            self.command()
            .insert()
            .into("%n", table, "(%n)", list(values.keys()))
            .values("%l", values)
        )

    def delete(self, table: str) -> Fluent:
        return self.command().delete().from_("%n", table)

    def __repr__(self) -> str:
        return f"Context(dialect={self._dialect!r}, strict={self.strict!r})"
