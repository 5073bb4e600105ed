"""Translator - turns an ordered argument list into one SQL string."""

from __future__ import annotations

import enum
import logging
import warnings
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from dateutil import parser as date_parser

from sqlweave._constants import INTEGER_RE, NUMERIC_RE
from sqlweave._errors import (
    ERR_MSG_ALONE_QUOTE,
    ERR_MSG_EXPECTED_NUMBER,
    ERR_MSG_EXTRA_MODIFIER,
    ERR_MSG_EXTRA_PLACEHOLDER,
    ERR_MSG_INVALID_COMBINATION,
    ERR_MSG_INVALID_DATE,
    ERR_MSG_MULTI_INSERT,
    ERR_MSG_UNEXPECTED_TYPE,
    ERR_MSG_UNKNOWN_MODIFIER,
    InvalidValueError,
    TranslationError,
)
from sqlweave._modifiers import (
    ARRAY_ONLY,
    DATE_MODIFIERS,
    LIKE_SIDES,
    NULLABLE_ZERO,
    Modifier,
)
from sqlweave._scanner import Token, TokenKind, needs_scan, tokenize
from sqlweave._utils import format_float, int_val, split_key
from sqlweave._values import Expression, Literal

if TYPE_CHECKING:
    from sqlweave._context import Context

logger = logging.getLogger(__name__)

_SCALARS = (str, bytes, int, float, Decimal)

_COMMENT_OPEN = "/* ..."


def _is_array(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple, set, frozenset))


def _items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return list(enumerate(value))


def _values(value: Any) -> list[Any]:
    if isinstance(value, Mapping):
        return list(value.values())
    return list(value)


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _is_empty(value: Any) -> bool:
    """'' , 0 and None render as NULL for %iN and %sN."""
    return value is None or value == "" or (type(value) is int and value == 0)


@dataclass
class TranslatorState:
    """Mutable scan state of one translation."""

    cursor: int = 0
    comment: bool = False
    if_level: int = 0
    if_level_start: int = 0
    comment_fragment: int = -1
    limit: int | None = None
    offset: int | None = None
    errors: list[str] = field(default_factory=list)


class Translator:
    """Generates SQL from an argument list. Each instance is single-use."""

    def __init__(self, context: Context) -> None:
        self._context = context
        self._dialect = context.dialect
        self._args: list[Any] = []
        self._state = TranslatorState()
        self._fragment = -1
        self._used = False

    @property
    def state(self) -> TranslatorState:
        return self._state

    # ---- Entry points ----

    def translate(self, args: list[Any] | tuple[Any, ...]) -> str:
        """Translate *args* to SQL.

        Raises:
            TranslationError: If any problem was recorded during the scan.
        """
        self._claim()
        args = list(args)
        while len(args) == 1 and isinstance(args[0], (list, tuple)):
            args = list(args[0])
        self._args = args

        state = self._state
        command_ins: bool | None = None
        last_arr: int | None = None
        sql: list[str] = []

        while state.cursor < len(self._args):
            arg = self._args[state.cursor]
            state.cursor += 1

            # plain strings are SQL
            if isinstance(arg, str):
                self._fragment = state.cursor
                sql.append(self._scan(arg))
                continue

            if state.comment:
                continue

            if isinstance(arg, Iterator):
                arg = list(arg)

            if isinstance(arg, Mapping) and arg and isinstance(next(iter(arg)), str):
                # associative array: SET shape, or VALUES shape after INSERT / REPLACE
                if command_ins is None:
                    head = str(self._args[0]).lstrip()[:6].upper()
                    command_ins = head in ("INSERT", "REPLAC")
                    sql.append(
                        self._format(arg, Modifier.VALUES if command_ins else Modifier.ASSIGN)
                    )
                else:
                    if last_arr == state.cursor - 1:
                        sql.append(",")
                    sql.append(
                        self._format(arg, Modifier.LIST if command_ins else Modifier.ASSIGN)
                    )
                last_arr = state.cursor
                continue

            sql.append(self._format(arg, None))

        if state.comment:
            sql.append("*/")

        result = " ".join(part for part in sql if part).strip(" ")

        if state.errors:
            logger.debug("translation failed with %d error(s): %s", len(state.errors), state.errors)
            raise TranslationError(
                f"SQL translate error: {state.errors[0]}",
                f"{state.errors[0]} in: {result}",
                sql=result,
                errors=state.errors,
            )

        if state.limit is not None or state.offset is not None:
            result = self._dialect.apply_limit(result, state.limit, state.offset)

        logger.debug("translated SQL: %s", result)
        return result

    def format_value(self, value: Any, modifier: str | None = None) -> str:
        """Format a single value, optionally with a modifier tag such as ``"i"`` or ``"and"``.

        Raises:
            TranslationError: If the value cannot be rendered with the modifier.
        """
        self._claim()
        result = self._format_tagged(value, modifier)
        if self._state.errors:
            raise TranslationError(
                f"SQL translate error: {self._state.errors[0]}",
                sql=result,
                errors=self._state.errors,
            )
        return result

    def _claim(self) -> None:
        if self._used:
            raise RuntimeError("Translator instances are single-use")
        self._used = True

    # ---- Errors ----

    def _error(self, message: str) -> str:
        self._state.errors.append(message)
        return f"**{message}**"

    # ---- Literal text ----

    def _scan(self, text: str, *, expression: bool = False) -> str:
        if not needs_scan(text, expression=expression):
            return self._literal(text)
        out = []
        for piece in tokenize(text, expression=expression):
            if isinstance(piece, Token):
                out.append(self._token(piece))
            else:
                out.append(self._literal(piece))
        return "".join(out)

    def _literal(self, text: str) -> str:
        return "" if self._state.comment else text

    def _token(self, token: Token) -> str:
        state = self._state

        if token.kind is TokenKind.PLACEHOLDER:
            if state.cursor >= len(self._args):
                return self._error(ERR_MSG_EXTRA_PLACEHOLDER)
            state.cursor += 1
            return self._format(self._args[state.cursor - 1], None)

        if token.kind is TokenKind.MODIFIER:
            return self._modifier(token.value)

        if state.comment:
            return ""

        if token.kind is TokenKind.IDENTIFIER:
            return self._context.identifier(token.value)

        if token.kind is TokenKind.STRING:
            return self._dialect.escape_text(token.value)

        if token.kind is TokenKind.ALONE_QUOTE:
            return self._error(ERR_MSG_ALONE_QUOTE)

        # :substitution: renders as a value, :substitution:x as identifier text
        value = self._context.substitutions.resolve(token.value)
        if not token.flag:
            return self._format(value, None)
        return f"{value}{token.flag}"

    def _modifier(self, tag: str) -> str:
        state = self._state
        modifier = Modifier.parse(tag)

        if state.cursor >= len(self._args) and modifier not in (Modifier.ELSE, Modifier.END):
            return self._error(ERR_MSG_EXTRA_MODIFIER.format(modifier=tag))

        if modifier is Modifier.IF:
            state.if_level += 1
            state.cursor += 1
            if not state.comment and not self._args[state.cursor - 1]:
                return self._open_comment()
            return ""

        if modifier is Modifier.ELSE:
            if state.comment and state.if_level_start == state.if_level:
                return self._close_comment()
            if not state.comment:
                return self._open_comment()
            return ""

        if modifier is Modifier.END:
            state.if_level -= 1
            if state.comment and state.if_level_start == state.if_level + 1:
                return self._close_comment()
            return ""

        if modifier is Modifier.EXPRESSION:
            # splice the next argument's items into the argument list
            following = self._args[state.cursor]
            if isinstance(following, Expression):
                following = following.values
            if isinstance(following, (list, tuple)):
                self._args[state.cursor:state.cursor + 1] = list(following)
            return ""

        if modifier in (Modifier.LIMIT, Modifier.OFFSET):
            value = self._args[state.cursor]
            state.cursor += 1
            if value is None or state.comment:
                return ""
            try:
                number = int_val(value)
            except InvalidValueError as e:
                return self._error(e.user_message)
            if modifier is Modifier.LIMIT:
                state.limit = number
            else:
                state.offset = number
            return ""

        state.cursor += 1
        value = self._args[state.cursor - 1]
        if modifier is None:
            if state.comment:
                return ""
            return self._error(ERR_MSG_UNKNOWN_MODIFIER.format(modifier=tag))
        return self._format(value, modifier)

    # ---- Conditional compilation ----

    def _open_comment(self) -> str:
        state = self._state
        state.comment = True
        state.if_level_start = state.if_level
        state.comment_fragment = self._fragment
        return _COMMENT_OPEN

    def _close_comment(self) -> str:
        state = self._state
        state.comment = False
        state.if_level_start = 0
        # keep "/* ... */" spaced the same whether or not it spans fragments
        return " */" if state.comment_fragment == self._fragment else "*/"

    # ---- Values ----

    def _format_tagged(self, value: Any, tag: str | None) -> str:
        if tag is None:
            return self._format(value, None)
        modifier = Modifier.parse(tag)
        if modifier is None:
            if self._state.comment:
                return ""
            return self._error(ERR_MSG_UNKNOWN_MODIFIER.format(modifier=tag))
        return self._format(value, modifier)

    def _format_item(self, value: Any, tag: str | None) -> str:
        """Format an array element; a nested array without a modifier is an expression."""
        if tag is None and _is_array(value):
            scalars = ", ".join(str(v) for v in _values(value) if isinstance(v, _SCALARS))
            warnings.warn(
                f"Use Expression instead of array: {scalars}",
                UserWarning,
                stacklevel=2,
            )
            return self._translate_nested(_values(value))
        return self._format_tagged(value, tag)

    def _format(self, value: Any, modifier: Modifier | None) -> str:
        if self._state.comment:
            return ""

        if isinstance(value, Iterator):
            value = list(value)

        if _is_array(value):
            return self._format_array(value, modifier)

        if modifier is None:
            translated = self._context.translate_object(value)
            if translated is not None:
                return self._translate_nested(translated.values)

        if isinstance(value, enum.Enum) and isinstance(value.value, _SCALARS):
            value = value.value

        if modifier is not None:
            try:
                return self._format_modified(value, modifier)
            except InvalidValueError as e:
                return self._error(e.user_message)

        return self._format_plain(value)

    def _format_plain(self, value: Any) -> str:
        dialect = self._dialect
        if isinstance(value, str):
            return dialect.escape_text(value)
        if isinstance(value, bool):
            return dialect.escape_bool(value)
        if isinstance(value, int):
            return str(value)
        if isinstance(value, (float, Decimal)):
            return format_float(value)
        if value is None:
            return "NULL"
        if isinstance(value, datetime):
            return dialect.escape_datetime(value)
        if isinstance(value, date):
            return dialect.escape_date(value)
        if isinstance(value, timedelta):
            return dialect.escape_date_interval(value)
        if isinstance(value, bytes):
            return dialect.escape_binary(value)
        if isinstance(value, Literal):
            return str(value)
        if isinstance(value, Expression):
            return self._translate_nested(value.values)
        return self._error(ERR_MSG_UNEXPECTED_TYPE.format(type=type(value).__name__))

    def _format_modified(self, value: Any, modifier: Modifier) -> str:
        dialect = self._dialect

        if value is not None and not isinstance(value, _SCALARS):
            if isinstance(value, Literal) and modifier in (Modifier.SQL, Modifier.RAW_SQL):
                return str(value)
            if isinstance(value, Expression) and modifier in (Modifier.EXPRESSION, Modifier.SQL):
                return self._translate_nested(value.values)
            if not (isinstance(value, date) and modifier in DATE_MODIFIERS):
                return self._error(
                    ERR_MSG_INVALID_COMBINATION.format(
                        type=type(value).__name__, modifier=modifier.value
                    )
                )

        if isinstance(value, bytes) and modifier not in (Modifier.BINARY, Modifier.BOOL):
            value = self._decode(value, modifier)

        if modifier in NULLABLE_ZERO and _is_empty(value):
            return "NULL"

        if modifier in (Modifier.TEXT, Modifier.TEXT_OR_NULL, Modifier.TEXT_OR_NULL_ALT):
            return "NULL" if value is None else dialect.escape_text(_text(value))

        if modifier is Modifier.BINARY:
            if value is None:
                return "NULL"
            return dialect.escape_binary(value if isinstance(value, bytes) else str(value).encode())

        if modifier is Modifier.BOOL:
            return "NULL" if value is None else dialect.escape_bool(bool(value))

        if modifier in (Modifier.INT, Modifier.UINT, Modifier.INT_OR_NULL):
            return self._format_int(value)

        if modifier is Modifier.FLOAT:
            return self._format_float(value)

        if modifier in DATE_MODIFIERS:
            if value is None:
                return "NULL"
            moment = value if isinstance(value, date) else self._parse_datetime(value)
            if modifier is Modifier.DATE:
                return dialect.escape_date(moment)
            if not isinstance(moment, datetime):
                moment = datetime.combine(moment, time())
            return dialect.escape_datetime(moment)

        if modifier in (Modifier.IDENTIFIER, Modifier.ORDER):
            return self._context.identifier(_text(value))

        if modifier is Modifier.RAW_IDENTIFIER:
            return dialect.escape_identifier(_text(value))

        if modifier in (Modifier.EXPRESSION, Modifier.SQL):
            return self._scan(_text(value), expression=True)

        if modifier is Modifier.RAW_SQL:
            return _text(value)

        if modifier in LIKE_SIDES:
            if value is None:
                return "NULL"
            return dialect.escape_like(_text(value), LIKE_SIDES[modifier])

        if modifier in ARRAY_ONLY:
            return self._error(
                ERR_MSG_INVALID_COMBINATION.format(
                    type=type(value).__name__, modifier=modifier.value
                )
            )

        return self._error(ERR_MSG_UNKNOWN_MODIFIER.format(modifier=modifier.value))

    def _decode(self, value: bytes, modifier: Modifier) -> str:
        try:
            return value.decode()
        except UnicodeDecodeError as e:
            raise InvalidValueError(
                ERR_MSG_INVALID_COMBINATION.format(type="bytes", modifier=modifier.value),
                str(e),
                wrapped=e,
            ) from e

    def _format_int(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, str):
            text = value
            if INTEGER_RE.match(text):
                # long numbers are kept unchanged
                return text
            raise InvalidValueError(ERR_MSG_EXPECTED_NUMBER.format(value=text))
        try:
            return str(int(value))
        except (ValueError, OverflowError) as e:
            raise InvalidValueError(
                ERR_MSG_EXPECTED_NUMBER.format(value=value), wrapped=e
            ) from e

    def _format_float(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, str):
            text = value
            if NUMERIC_RE.match(text) and text[1:2] != "x":
                return text
            raise InvalidValueError(ERR_MSG_EXPECTED_NUMBER.format(value=text))
        return format_float(value)

    def _parse_datetime(self, value: Any) -> datetime:
        text = _text(value)
        try:
            if isinstance(value, (int, float, Decimal)) or text.lstrip("-").isdigit():
                return datetime.fromtimestamp(float(text))
            return date_parser.parse(text)
        except (ValueError, OverflowError, OSError) as e:
            raise InvalidValueError(
                ERR_MSG_INVALID_DATE.format(value=text), wrapped=e
            ) from e

    # ---- Arrays ----

    def _format_array(self, value: Any, modifier: Modifier | None) -> str:
        if modifier in (Modifier.AND, Modifier.OR):
            return self._format_conditions(value, modifier)

        if modifier is Modifier.IDENTIFIER:
            parts = []
            for k, v in _items(value):
                if isinstance(k, str):
                    alias = f" AS {self._dialect.escape_identifier(str(v))}" if v else ""
                    parts.append(self._context.identifier(k) + alias)
                else:
                    parts.append(self._context.identifier(split_key(v)[0]))
            return ", ".join(parts)

        if modifier is Modifier.ASSIGN:
            parts = []
            for k, v in _items(value):
                name, tag = split_key(k)
                parts.append(f"{self._context.identifier(name)}={self._format_item(v, tag)}")
            return ", ".join(parts)

        if modifier in (Modifier.IN, Modifier.LIST):
            parts = [self._format_item(v, split_key(k)[1]) for k, v in _items(value)]
            if not parts and modifier is Modifier.IN:
                return "(NULL)"
            return "(" + ", ".join(parts) + ")"

        if modifier is Modifier.VALUES:
            names = []
            parts = []
            for k, v in _items(value):
                name, tag = split_key(k)
                names.append(self._context.identifier(name))
                parts.append(self._format_item(v, tag))
            return "(" + ", ".join(names) + ") VALUES (" + ", ".join(parts) + ")"

        if modifier is Modifier.MULTI:
            if isinstance(value, Mapping):
                return self._format_multi_columns(value)
            return self._format_multi_rows(value)

        if modifier is Modifier.ORDER:
            parts = []
            for k, v in _items(value):
                if _is_array(v):
                    parts.append(self._format(v, Modifier.EXPRESSION))
                elif isinstance(k, str):
                    if isinstance(v, str):
                        ascending = v[:1].lower() != "d"
                    else:
                        ascending = (v or 0) > 0
                    parts.append(f"{self._context.identifier(k)} {'ASC' if ascending else 'DESC'}")
                else:
                    parts.append(self._format(v, Modifier.IDENTIFIER))
            return ", ".join(parts)

        if modifier in (Modifier.EXPRESSION, Modifier.SQL):
            return self._translate_nested(_values(value))

        # value, value, ... all with the same modifier
        return ", ".join(self._format(v, modifier) for v in _values(value))

    def _format_conditions(self, value: Any, modifier: Modifier) -> str:
        items = _items(value)
        if not items:
            return "1=1"

        parts = []
        for k, v in items:
            if not isinstance(k, str):
                parts.append(self._format(v, Modifier.EXPRESSION))
                continue

            name, tag = split_key(k)
            column = self._context.identifier(name) + " "
            if tag is None:
                rendered = self._format(v, None)
                parts.append(column + ("IS " if rendered == "NULL" else "= ") + rendered)
            elif tag == Modifier.EXPRESSION:
                parts.append(column + self._format_tagged(v, tag))
            else:
                rendered = self._format_tagged(v, tag)
                if tag in (Modifier.LIST, Modifier.IN):
                    op = "IN "
                elif "like" in tag:
                    op = "LIKE "
                elif rendered == "NULL":
                    op = "IS "
                else:
                    op = "= "
                parts.append(column + op + rendered)

        glue = f") {modifier.value.upper()} ("
        return "(" + glue.join(parts) + ")"

    def _format_multi_columns(self, value: Mapping[Any, Any]) -> str:
        # {column: [v1, v2, ...]} - every column shares the first column's shape
        shape: list[Any] | None = None
        names = []
        rows: dict[Any, list[str]] = {}
        for k, column in value.items():
            if isinstance(column, Iterator):
                column = list(column)
            if not _is_array(column):
                return self._error(ERR_MSG_UNEXPECTED_TYPE.format(type=type(column).__name__))
            keys = [key for key, _ in _items(column)]
            if shape is None:
                shape = keys
            elif keys != shape:
                return self._error(ERR_MSG_MULTI_INSERT.format(key=k))

            name, tag = split_key(k)
            names.append(self._context.identifier(name))
            for key, v in _items(column):
                rows.setdefault(key, []).append(self._format_item(v, tag))

        values = ", ".join("(" + ", ".join(row) + ")" for row in rows.values())
        return "(" + ", ".join(names) + ") VALUES " + values

    def _format_multi_rows(self, value: Any) -> str:
        # [{column: v}, ...] - every row repeats the first row's keys in order
        shape: list[Any] | None = None
        names: list[str] = []
        tags: list[str | None] = []
        rows = []
        for index, row in _items(value):
            if not isinstance(row, Mapping):
                return self._error(ERR_MSG_UNEXPECTED_TYPE.format(type=type(row).__name__))
            keys = list(row.keys())
            if shape is None:
                shape = keys
                for key in keys:
                    name, tag = split_key(key)
                    names.append(self._context.identifier(name))
                    tags.append(tag)
            elif keys != shape:
                return self._error(ERR_MSG_MULTI_INSERT.format(key=index))
            rendered = [self._format_item(v, tag) for v, tag in zip(row.values(), tags)]
            rows.append("(" + ", ".join(rendered) + ")")

        return "(" + ", ".join(names) + ") VALUES " + ", ".join(rows)

    # ---- Nested expressions ----

    def _translate_nested(self, args: list[Any]) -> str:
        """Translate a nested expression, folding its errors into this scan."""
        try:
            return self._context.translate(*args)
        except TranslationError as e:
            self._state.errors.extend(e.errors)
            return e.sql if e.sql is not None else f"**{e.user_message}**"
