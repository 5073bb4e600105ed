"""Grammar and limit constants for SQL translation."""

import re

TRIGGER_CHARS = "`['\":%?"
"""Characters that can start a token in literal SQL text."""

EXPRESSION_TRIGGER_CHARS = "`['\":"
"""Token start characters for strings formatted with %ex / %sql."""

MAX_INT = 2**63 - 1
"""Largest integer accepted for limit and offset values."""

MIN_INT = -(2**63)

IDENTIFIER_RE = re.compile(r"[a-zA-Z_:][a-zA-Z0-9_.:]*\Z")
"""A lone builder argument matching this is treated as an identifier."""

INTEGER_RE = re.compile(r"[+-]?\d+(?:e\d+)?\Z")
"""Numeric strings passed through unchanged by %i (values beyond native range)."""

NUMERIC_RE = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*\Z")
"""Numeric strings passed through unchanged by %f."""

FLOAT_PRECISION = 10
"""Digits after the decimal point before trailing zeros are trimmed."""
