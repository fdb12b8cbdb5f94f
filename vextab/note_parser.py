"""
Recursive-descent parser for VexTab note-groups.

A note-group is one whitespace-free unit of a ``notes`` line, for example::

    4-5-6/4        three frets run on string 4
    5b7b5/3        bend and release on string 3
    5h6p5/2        hammer-on then pull-off
    (4/5.5/6)v     a two-note chord with vibrato
    t12/1          tapped note

Every grammar rule below takes the shared :class:`ParseState`, consumes exactly
the tokens it owns and hands control back. Rules that must be followed by a
destination fret (ties and bends) return that fret's token so the fret rule can
continue with it. Dashes and string declarations end the fret rule, which sends
control back to the top-level loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Final

from vextab.errors import ParseError
from vextab.lexer import Token, TokenKind, next_token
from vextab.tab_models import (
    Annotation,
    Bend,
    FretRef,
    NoteGroupResult,
    Tie,
    TieKind,
    Vibrato,
)

_TIE_KINDS: Final[dict[TokenKind, TieKind]] = {
    TokenKind.SLIDE: TieKind.SLIDE,
    TokenKind.HAMMER_ON: TieKind.HAMMER_ON,
    TokenKind.PULL_OFF: TieKind.PULL_OFF,
    TokenKind.TAP: TieKind.TAP,
}

_VIBRATO_KINDS: Final[frozenset[TokenKind]] = frozenset(
    {TokenKind.VIBRATO, TokenKind.HARSH_VIBRATO}
)

TAP_ANNOTATION: Final[str] = "T"


@dataclass
class ParseState:
    """Mutable state owned by a single note-group parse."""

    remaining: str
    positions: list[list[FretRef]] = field(default_factory=list)
    inside_bend: bool = False
    expecting_string: bool = False
    chord_index: int | None = None
    bends: list[Bend] = field(default_factory=list)
    ties: list[Tie] = field(default_factory=list)
    vibratos: list[Vibrato] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return not self.remaining

    @property
    def current_position(self) -> int:
        """Index of the most recently started position (-1 before the first)."""
        return len(self.positions) - 1

    def advance(self) -> Token:
        """Consume and return the next token; raises at end of input."""
        token, self.remaining = next_token(self.remaining)
        return token

    def extend_last_bend(self) -> None:
        last = self.bends[-1]
        self.bends[-1] = replace(last, step_count=last.step_count + 1)

    def to_result(self) -> NoteGroupResult:
        return NoteGroupResult(
            positions=tuple(tuple(position) for position in self.positions),
            bends=tuple(self.bends),
            ties=tuple(self.ties),
            vibratos=tuple(self.vibratos),
            annotations=tuple(self.annotations),
        )


# ── Public API ───────────────────────────────────────────────────────────────

def parse_note_group(text: str) -> NoteGroupResult:
    """
    Parse one note-group into positions and their modifiers.

    Args:
        text: A single note-group with surrounding whitespace already stripped.

    Returns:
        The immutable parse result.

    Raises:
        ParseError: On the first malformed token, or when a fret is left without
            a string. Lexer failures are ``ParseError`` subclasses.
    """
    state = ParseState(remaining=text)
    _parse_top_level(state)

    for position in state.positions:
        for ref in position:
            if ref.string is None:
                raise ParseError(f"Fret without string: {ref.fret}")

    result = state.to_result()
    result.validate()
    return result


# ── Grammar rules ────────────────────────────────────────────────────────────

def _parse_top_level(state: ParseState) -> None:
    while True:
        token = state.advance()
        if token.kind is TokenKind.OPEN_CHORD:
            _parse_open_chord(state)
        elif token.kind is TokenKind.TAP:
            _parse_tap_annotation(state)
        else:
            _parse_fret(state, token)

        if state.exhausted:
            return


def _parse_open_chord(state: ParseState) -> None:
    state.positions.append([])
    state.chord_index = -1
    _parse_chord_fret(state, state.advance())


def _parse_chord_fret(state: ParseState, token: Token) -> None:
    """Parse ``fret[b target...]/string`` notes separated by ``.`` up to ``)``."""
    chord = state.positions[-1]
    while True:
        fret = _expect_number(token, "Invalid fret number")

        token = state.advance()
        if token.kind is TokenKind.BEND:
            _parse_chord_bend(state)
        elif token.kind is not TokenKind.SLASH:
            raise ParseError(f"Expecting / for string number: {token}")

        string = _expect_number(state.advance(), "Invalid string number")
        chord.append(FretRef(fret, string))
        state.chord_index = len(chord) - 1

        token = state.advance()
        if token.kind is TokenKind.DOT:
            token = state.advance()
        elif token.kind is TokenKind.CLOSE_CHORD:
            _parse_close_chord(state)
            return
        else:
            raise ParseError(f"Unexpected token: {token}")


def _parse_chord_bend(state: ParseState) -> None:
    """Parse ``b target`` steps inside a chord; stops after consuming the ``/``."""
    while True:
        target = _expect_number(state.advance(), "Expecting fret")
        if state.inside_bend:
            state.extend_last_bend()
        else:
            state.inside_bend = True
            state.bends.append(
                Bend(
                    position=state.current_position,
                    chord_index=len(state.positions[-1]),
                    target_fret=target,
                )
            )

        token = state.advance()
        if token.kind is TokenKind.SLASH:
            break
        if token.kind is not TokenKind.BEND:
            raise ParseError(f"Unexpected token: {token}")

    state.inside_bend = False


def _parse_close_chord(state: ParseState) -> None:
    state.chord_index = None
    if state.exhausted:
        return

    token = state.advance()
    if token.kind not in _VIBRATO_KINDS:
        raise ParseError(f"Unexpected token: {token}")
    _record_vibrato(state, token)


def _parse_tap_annotation(state: ParseState) -> None:
    state.annotations.append(Annotation(len(state.positions), TAP_ANNOTATION))
    _parse_fret(state, state.advance())


def _parse_fret(state: ParseState, token: Token | None) -> None:
    """Parse a fret outside a chord, following any tie/bend chain it starts."""
    while token is not None:
        fret = _expect_number(token, "Invalid fret number")
        state.positions.append([FretRef(fret)])

        token = state.advance()
        if token.kind is TokenKind.DASH:
            _parse_dash(state)
            return
        if token.kind is TokenKind.SLASH:
            _parse_slash(state)
            return

        if token.kind is TokenKind.BEND:
            token = _parse_bend(state)
        elif token.kind in _TIE_KINDS:
            token = _parse_tie(state, token)
        elif token.kind in _VIBRATO_KINDS:
            token = _parse_fret_vibrato(state, token)
        else:
            raise ParseError(f"Unexpected token: {token}")


def _parse_dash(state: ParseState) -> None:
    state.inside_bend = False
    if state.expecting_string:
        raise ParseError(f"No dashes on strings: {state.remaining}")


def _parse_slash(state: ParseState) -> None:
    state.inside_bend = False
    state.expecting_string = True
    _parse_string(state, state.advance())


def _parse_string(state: ParseState, token: Token) -> None:
    if not state.positions:
        raise ParseError(f"String without frets: {token}")
    string = _expect_number(token, "Invalid string number")

    # Chords resolve their own strings; only pending single frets are bound.
    for position in state.positions:
        if len(position) == 1 and position[0].string is None:
            position[0] = replace(position[0], string=string)


def _parse_tie(state: ParseState, token: Token) -> Token:
    state.inside_bend = False
    if state.expecting_string:
        raise ParseError(f"Unexpected token on string: {token}")

    state.ties.append(
        Tie(
            position=state.current_position,
            chord_index=state.chord_index if state.chord_index is not None else 0,
            kind=_TIE_KINDS[token.kind],
        )
    )
    return state.advance()


def _parse_bend(state: ParseState) -> Token:
    if state.expecting_string:
        raise ParseError("Unexpected token on string: b")

    if state.inside_bend:
        state.extend_last_bend()
    else:
        state.inside_bend = True
        state.bends.append(Bend(position=state.current_position))
    return state.advance()


def _parse_fret_vibrato(state: ParseState, token: Token) -> Token | None:
    _record_vibrato(state, token)

    token = state.advance()
    if token.kind is TokenKind.DASH:
        _parse_dash(state)
        return None
    if token.kind is TokenKind.SLASH:
        _parse_slash(state)
        return None
    if token.kind in _TIE_KINDS:
        return _parse_tie(state, token)
    raise ParseError(f"Unexpected token: {token}")


def _record_vibrato(state: ParseState, token: Token) -> None:
    position = state.current_position
    if state.inside_bend:
        # Attach to the note the bend started on, not its destination.
        position -= state.bends[-1].step_count
    state.vibratos.append(Vibrato(position, harsh=token.kind is TokenKind.HARSH_VIBRATO))


def _expect_number(token: Token, message: str) -> int:
    if token.value is None:
        raise ParseError(f"{message}: {token}")
    return token.value
