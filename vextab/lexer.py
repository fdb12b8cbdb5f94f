"""Lexer for a single VexTab note-group such as ``4-5-6/4`` or ``(4/5.5/6)``.

The lexer is a pure function over the unconsumed suffix of a note-group: it
returns the next token together with the remaining text and never looks further
ahead than one token.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Final

from vextab.errors import NumberOutOfRange, UnexpectedCharacter, UnexpectedEndOfInput


class TokenKind(Enum):
    """Every token the notes grammar knows about."""

    NUMBER = "number"
    OPEN_CHORD = "("
    CLOSE_CHORD = ")"
    DASH = "-"
    SLASH = "/"
    DOT = "."
    TAP = "t"
    SLIDE = "s"
    HAMMER_ON = "h"
    PULL_OFF = "p"
    BEND = "b"
    VIBRATO = "v"
    HARSH_VIBRATO = "V"


_SYMBOLS: Final[dict[str, TokenKind]] = {
    kind.value: kind for kind in TokenKind if kind is not TokenKind.NUMBER
}

# ASCII digits only.
_NUMBER_RE: Final = re.compile(r"[0-9]+")

#: Largest fret or string number the lexer accepts (unsigned 32-bit).
MAX_NUMBER: Final = 2**32 - 1
_MAX_DIGITS: Final = len(str(MAX_NUMBER))


@dataclass(frozen=True)
class Token:
    """A lexed token; ``value`` is only set for ``NUMBER`` tokens."""

    kind: TokenKind
    value: int | None = None

    @property
    def is_number(self) -> bool:
        return self.kind is TokenKind.NUMBER

    def __str__(self) -> str:
        if self.kind is TokenKind.NUMBER:
            return str(self.value)
        return self.kind.value


def next_token(remaining: str) -> tuple[Token, str]:
    """
    Split the next token off the front of ``remaining``.

    Returns:
        The token and the still-unconsumed suffix.

    Raises:
        UnexpectedEndOfInput: If ``remaining`` is empty.
        UnexpectedCharacter: If ``remaining`` starts with anything other than
            digits or one of ``( ) - / . t b h p s v V``.
        NumberOutOfRange: If a digit run is larger than ``MAX_NUMBER``.
    """
    if not remaining:
        raise UnexpectedEndOfInput()

    match = _NUMBER_RE.match(remaining)
    if match:
        digits = match.group()
        if len(digits.lstrip("0")) > _MAX_DIGITS or int(digits) > MAX_NUMBER:
            raise NumberOutOfRange(digits)
        return Token(TokenKind.NUMBER, int(digits)), remaining[match.end():]

    kind = _SYMBOLS.get(remaining[0])
    if kind is None:
        raise UnexpectedCharacter(remaining)
    return Token(kind), remaining[1:]


def tokenize(text: str) -> Iterator[Token]:
    """Yield every token of a note-group, left to right."""
    while text:
        token, text = next_token(text)
        yield token
