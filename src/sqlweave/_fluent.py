"""Fluent clause builder that flattens into a translator argument list."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from sqlweave._constants import IDENTIFIER_RE
from sqlweave._errors import ConfigurationError
from sqlweave._utils import format_clause, get_suggestion
from sqlweave._values import REMOVE, Literal

if TYPE_CHECKING:
    from sqlweave._context import Context

logger = logging.getLogger(__name__)


class Separator(enum.StrEnum):
    COMMA = ","
    AND = "AND"
    REPLACE = "replace"
    """A repeated call discards the previous content."""


MASKS: dict[str, list[str]] = {
    "SELECT": [
        "SELECT", "DISTINCT", "FROM", "WHERE", "GROUP BY",
        "HAVING", "ORDER BY", "LIMIT", "OFFSET",
    ],
    "UPDATE": ["UPDATE", "SET", "WHERE", "ORDER BY", "LIMIT"],
    "INSERT": ["INSERT", "INTO", "VALUES", "SELECT"],
    "DELETE": ["DELETE", "FROM", "USING", "WHERE", "ORDER BY", "LIMIT"],
}
"""Valid clauses per command, in emission order."""

MODIFIERS: dict[str, str] = {
    "SELECT": "%n",
    "FROM": "%n",
    "IN": "%in",
    "VALUES": "%l",
    "SET": "%a",
    "WHERE": "%and",
    "HAVING": "%and",
    "ORDER BY": "%by",
    "GROUP BY": "%by",
}
"""Default modifier for a lone array argument."""

SEPARATORS: dict[str, Separator] = {
    "SELECT": Separator.COMMA,
    "FROM": Separator.COMMA,
    "WHERE": Separator.AND,
    "GROUP BY": Separator.COMMA,
    "HAVING": Separator.AND,
    "ORDER BY": Separator.COMMA,
    "LIMIT": Separator.REPLACE,
    "OFFSET": Separator.REPLACE,
    "SET": Separator.COMMA,
    "VALUES": Separator.COMMA,
    "INTO": Separator.REPLACE,
}

CLAUSE_SWITCHES: dict[str, str] = {
    "JOIN": "FROM",
    "INNER JOIN": "FROM",
    "LEFT JOIN": "FROM",
    "RIGHT JOIN": "FROM",
    "OUTER JOIN": "FROM",
}
"""Join keywords accumulate into the FROM clause."""

TRAILING_KEYWORDS = frozenset({
    "AS", "ON", "AND", "OR", "USING", "ASC", "DESC", "IN", "NOT IN",
    "UNION", "UNION ALL", "INTERSECT", "EXCEPT",
})
"""Keywords accepted outside the command mask when the builder is strict."""


class Fluent:
    """Builds a SQL command from chained clause calls.

    Any attribute not defined here is a clause call::

        ctx.command().select("id").from_("users").where("age > %i", 18)

    Call names are normalized to keywords: ``orderBy`` and ``order_by``
    both become ``ORDER BY``, a trailing underscore is dropped.

    Args:
        context: Translation context used when the command is rendered.
        strict: Reject keywords that are neither in the command mask nor
            known trailing keywords. Defaults to the context setting.
    """

    def __init__(self, context: Context, *, strict: bool | None = None) -> None:
        self._context = context
        self._strict = context.strict if strict is None else strict
        self._command: str | None = None
        self._clauses: dict[str, list[Any] | None] = {}
        self._flags: dict[str, bool] = {}
        self._active: str | None = None

    def __getattr__(self, name: str) -> Callable[..., Fluent]:
        if name.startswith("_"):
            raise AttributeError(name)

        def clause_call(*args: Any) -> Fluent:
            return self.call(name, *args)

        return clause_call

    # ---- Building ----

    def call(self, name: str, *args: Any) -> Fluent:
        """Append *args* to the clause *name*."""
        clause = format_clause(name)
        args_list = list(args)
        remove = len(args_list) == 1 and args_list[0] is REMOVE

        # lazy initialization
        if self._command is None:
            if clause in MASKS:
                self._clauses = dict.fromkeys(MASKS[clause])
            elif self._strict:
                raise ConfigurationError(
                    f"unknown command: {clause}",
                    f"expected one of {', '.join(MASKS)}",
                )
            self._clauses[clause] = []
            self._active = clause
            self._command = clause

        if clause in CLAUSE_SWITCHES:
            self._active = CLAUSE_SWITCHES[clause]

        if clause in self._clauses:
            self._active = clause
            if remove:
                self._clauses[clause] = None
                return self

            separator = SEPARATORS.get(clause)
            if separator is Separator.REPLACE:
                self._clauses[clause] = []
            elif separator is not None and self._clauses[clause]:
                self._clauses[clause].append(separator.value)
        else:
            if remove:
                return self
            self._check_keyword(clause)
            self._target().append(clause)

        target = self._target()

        if len(args_list) == 1:
            arg = args_list[0]
            if arg is True:
                # flag
                return self
            if isinstance(arg, str):
                if IDENTIFIER_RE.match(arg):
                    args_list = ["%N" if clause == "AS" else "%n", arg]
            elif isinstance(arg, (Mapping, list, tuple, set, frozenset, Iterator)):
                if isinstance(arg, Iterator):
                    arg = list(arg)
                if clause in MODIFIERS:
                    args_list = [MODIFIERS[clause], arg]
                elif isinstance(arg, Mapping) and arg and isinstance(next(iter(arg)), str):
                    args_list = ["%a", arg]
                else:
                    args_list = [arg]

        for arg in args_list:
            if isinstance(arg, Fluent):
                arg = Literal(f"({arg})")
            target.append(arg)

        return self

    def _target(self) -> list[Any]:
        statement = self._clauses.get(self._active)
        if statement is None:
            statement = self._clauses[self._active] = []
        return statement

    def _check_keyword(self, clause: str) -> None:
        if clause in CLAUSE_SWITCHES or clause in TRAILING_KEYWORDS:
            return
        if self._strict:
            known = [*self._clauses, *CLAUSE_SWITCHES, *TRAILING_KEYWORDS]
            suggestion = get_suggestion(known, clause)
            hint = f", did you mean {suggestion}?" if suggestion else ""
            raise ConfigurationError(
                f"unknown clause {clause} for {self._command}{hint}",
                f"valid clauses: {', '.join(self._clauses)}",
            )
        logger.debug("appending keyword %s to clause %s", clause, self._active)

    def clause(self, name: str) -> Fluent:
        """Make *name* the active clause."""
        clause = format_clause(name)
        self._active = clause
        if self._clauses.get(clause) is None:
            self._clauses[clause] = []
        return self

    def remove_clause(self, name: str) -> Fluent:
        self._clauses[format_clause(name)] = None
        return self

    def set_flag(self, flag: str, value: bool = True) -> Fluent:
        flag = flag.upper()
        if value:
            self._flags[flag] = True
        else:
            self._flags.pop(flag, None)
        return self

    def get_flag(self, flag: str) -> bool:
        return flag.upper() in self._flags

    def get_command(self) -> str | None:
        return self._command

    @property
    def context(self) -> Context:
        return self._context

    # ---- Exporting ----

    def export(self, clause: str | None = None, args: list[Any] | tuple[Any, ...] = ()) -> list[Any]:
        """Flatten the command (or one clause) into a translator argument list.

        For SELECT, LIMIT and OFFSET are moved to the front as one
        ``%lmt %ofs`` directive so the dialect can rewrite paging.
        """
        result = list(args)
        if clause is None:
            data = dict(self._clauses)
            if self._command == "SELECT" and (data.get("LIMIT") or data.get("OFFSET")):
                limit = data.pop("LIMIT", None)
                offset = data.pop("OFFSET", None)
                result = [
                    "%lmt %ofs",
                    limit[0] if limit else None,
                    offset[0] if offset else None,
                    *result,
                ]
        else:
            clause = format_clause(clause)
            if clause not in self._clauses:
                return []
            data = {clause: self._clauses[clause]}

        for name, statement in data.items():
            if statement is None:
                continue
            result.append(name)
            if name == self._command and self._flags:
                result.append(" ".join(self._flags))
            result.extend(statement)

        return result

    def to_sql(self, clause: str | None = None) -> str:
        return self._context.translate(*self.export(clause))

    def to_page_sql(self, offset: int | None = None, limit: int | None = None) -> str:
        """Render the command with the given paging applied."""
        return self._context.translate(*self.export(None, ["%ofs %lmt", offset, limit]))

    def to_first_sql(self) -> str:
        """Render the command limited to one row unless a LIMIT is already set."""
        if self._command == "SELECT" and not self._clauses.get("LIMIT"):
            return self._context.translate(*self.export(None, ["%lmt", 1]))
        return self.to_sql()

    def to_count_sql(self) -> str:
        return self._context.translate("SELECT COUNT(*) FROM (%SQL) [data]", self.to_sql())

    def copy(self) -> Fluent:
        """Return an independent builder with copied clause lists."""
        other = Fluent(self._context, strict=self._strict)
        other._command = self._command
        other._clauses = {
            name: (list(statement) if statement is not None else None)
            for name, statement in self._clauses.items()
        }
        other._flags = dict(self._flags)
        other._active = self._active
        return other

    __copy__ = copy

    def __str__(self) -> str:
        return self.to_sql()

    def __repr__(self) -> str:
        return f"Fluent(command={self._command!r}, clauses={[k for k, v in self._clauses.items() if v is not None]!r})"
