"""Value wrappers understood by the translator."""

from __future__ import annotations

from typing import Any


class Literal:
    """SQL text inserted without any escaping."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = str(value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Literal) and other.value == self.value

    def __hash__(self) -> int:
        return hash(self.value)


class Expression:
    """A nested argument list translated in place of a single value."""

    __slots__ = ("values",)

    def __init__(self, *values: Any) -> None:
        self.values = list(values)

    def __repr__(self) -> str:
        return f"Expression({', '.join(repr(v) for v in self.values)})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Expression) and other.values == self.values

    __hash__ = None  # type: ignore[assignment]


class _Remove:
    __slots__ = ()

    def __repr__(self) -> str:
        return "REMOVE"

    def __bool__(self) -> bool:
        return False


REMOVE = _Remove()
"""Sole builder argument that deletes the targeted clause."""
