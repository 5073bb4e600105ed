"""Numeric conversion, clause-name normalization and suggestion helpers."""

from __future__ import annotations

import functools
import re
import warnings
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from sqlweave._constants import FLOAT_PRECISION, MAX_INT, MIN_INT
from sqlweave._errors import (
    ERR_MSG_EXPECTED_NUMBER,
    ERR_MSG_NUMBER_TOO_LARGE,
    InvalidValueError,
)

_INT_STRING_RE = re.compile(r"-?\d+\Z")
_CAMEL_BOUNDARY_RE = re.compile(r"[a-z](?=[A-Z])")


def int_val(value: Any) -> int:
    """Convert an int or an integer string to int, within the signed 64-bit range."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _INT_STRING_RE.match(value):
        number = int(value)
        if not MIN_INT <= number <= MAX_INT:
            raise InvalidValueError(
                ERR_MSG_NUMBER_TOO_LARGE.format(value=value),
                f"integer string {value!r} is outside the 64-bit range",
            )
        return number
    raise InvalidValueError(
        ERR_MSG_EXPECTED_NUMBER.format(value=value),
        f"cannot convert {type(value).__name__} {value!r} to int",
    )


def format_float(value: float | Decimal) -> str:
    """Render a number as locale-independent fixed-point text without trailing zeros.

    >>> format_float(1.23)
    '1.23'
    >>> format_float(2.0)
    '2'
    """
    text = f"{value:.{FLOAT_PRECISION}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@functools.cache
def format_clause(name: str) -> str:
    """Normalize a builder call name into a SQL clause keyword.

    ``orderBy``, ``order_by`` and ``ORDER BY`` all become ``ORDER BY``;
    a trailing underscore (``from_``) is dropped.
    """
    name = name.rstrip("_") or name
    if name in ("order", "group"):
        name += "By"
        warnings.warn(f"Did you mean '{name}'?", UserWarning, stacklevel=4)
    name = _CAMEL_BOUNDARY_RE.sub(r"\g<0> ", name)
    return name.replace("_", " ").upper()


def split_key(key: Any) -> tuple[str, str | None]:
    """Split an array key ``name%mod`` into the name and the optional modifier tag."""
    name, sep, modifier = str(key).partition("%")
    return name, (modifier if sep else None)


# insertion, deletion, substitution
_SUGGESTION_WEIGHTS = (10, 10, 11)


def get_suggestion(items: Iterable[str], value: str) -> str | None:
    """Return the item closest to *value*, or None if nothing is close enough."""
    choices = [item for item in dict.fromkeys(str(i) for i in items) if item != value]
    match = process.extractOne(
        value,
        choices,
        scorer=Levenshtein.distance,
        scorer_kwargs={"weights": _SUGGESTION_WEIGHTS},
        score_cutoff=int((len(value) / 4 + 1) * 10),
    )
    return match[0] if match else None
