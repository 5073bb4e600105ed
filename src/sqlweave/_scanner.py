"""Tokenizer for literal SQL fragments."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass

from sqlweave._constants import EXPRESSION_TRIGGER_CHARS, TRIGGER_CHARS

_TOKEN_RE = re.compile(
    r"""
    (?=[`['":%?])
    (?:
        `(?P<backtick>.+?)`
        |\[(?P<bracket>.+?)\]
        |'(?P<single>(?:''|[^'])*)'
        |"(?P<double>(?:""|[^"])*)"
        |(?P<alone>['"])
        |:(?P<subst>\S*?):(?P<flag>[a-zA-Z0-9._]?)
        |%(?P<modifier>[a-zA-Z~][a-zA-Z0-9~]{0,5})
        |(?P<placeholder>\?)
    )
    """,
    re.VERBOSE | re.DOTALL,
)

_EXPRESSION_TOKEN_RE = re.compile(
    r"""
    (?=[`['":])
    (?:
        `(?P<backtick>.+?)`
        |\[(?P<bracket>.+?)\]
        |'(?P<single>(?:''|[^'])*)'
        |"(?P<double>(?:""|[^"])*)"
        |(?P<alone>['"])
        |:(?P<subst>\S*?):(?P<flag>[a-zA-Z0-9._]?)
    )
    """,
    re.VERBOSE | re.DOTALL,
)


class TokenKind(enum.Enum):
    IDENTIFIER = "identifier"
    STRING = "string"
    ALONE_QUOTE = "alone_quote"
    SUBSTITUTION = "substitution"
    MODIFIER = "modifier"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    value: str = ""
    flag: str = ""


def needs_scan(text: str, *, expression: bool = False) -> bool:
    """Return True if *text* contains a character that may start a token."""
    triggers = EXPRESSION_TRIGGER_CHARS if expression else TRIGGER_CHARS
    return any(ch in text for ch in triggers)


def _to_token(m: re.Match[str]) -> Token:
    if m.group("backtick") is not None:
        return Token(TokenKind.IDENTIFIER, m.group("backtick"))
    if m.group("bracket") is not None:
        return Token(TokenKind.IDENTIFIER, m.group("bracket"))
    if m.group("single") is not None:
        return Token(TokenKind.STRING, m.group("single").replace("''", "'"))
    if m.group("double") is not None:
        return Token(TokenKind.STRING, m.group("double").replace('""', '"'))
    if m.group("alone") is not None:
        return Token(TokenKind.ALONE_QUOTE, m.group("alone"))
    if m.group("subst") is not None:
        return Token(TokenKind.SUBSTITUTION, m.group("subst"), m.group("flag"))
    if m.groupdict().get("modifier") is not None:
        return Token(TokenKind.MODIFIER, m.group("modifier"))
    return Token(TokenKind.PLACEHOLDER, "?")


def tokenize(text: str, *, expression: bool = False) -> Iterator[str | Token]:
    """Yield the literal spans and tokens of *text* in order.

    With ``expression=True`` only identifiers, strings, lone quotes and
    substitutions are recognized; ``%`` and ``?`` stay literal.
    """
    pattern = _EXPRESSION_TOKEN_RE if expression else _TOKEN_RE
    pos = 0
    for m in pattern.finditer(text):
        if m.start() > pos:
            yield text[pos:m.start()]
        yield _to_token(m)
        pos = m.end()
    if pos < len(text):
        yield text[pos:]
