"""Data models for parsed note-groups."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TieKind(Enum):
    """Articulation connecting a position to the one after it."""

    SLIDE = "S"
    HAMMER_ON = "H"
    PULL_OFF = "P"
    TAP = "T"


@dataclass(frozen=True)
class FretRef:
    """One fret on one string. ``string`` stays ``None`` until a trailing ``/n`` resolves it."""

    fret: int
    string: int | None = None


#: A moment in time: one FretRef for a plain note, several for a chord.
Position = tuple[FretRef, ...]


@dataclass(frozen=True)
class Bend:
    """
    A bend starting on ``positions[position][chord_index]``.

    Attributes:
        position:    Index of the bent position.
        chord_index: Which FretRef of that position is bent (0 outside chords).
        step_count:  Number of bend/release steps chained on the note.
        target_fret: Explicit destination fret, only given inside chords. Outside
                     chords the destination is the fret of the next position.
    """

    position: int
    chord_index: int = 0
    step_count: int = 1
    target_fret: int | None = None


@dataclass(frozen=True)
class Tie:
    """A slide, hammer-on, pull-off or tap from ``position`` to ``position + 1``."""

    position: int
    chord_index: int
    kind: TieKind


@dataclass(frozen=True)
class Vibrato:
    position: int
    harsh: bool = False


@dataclass(frozen=True)
class Annotation:
    """Free text attached to a position. The notes grammar only emits ``"T"`` (tap)."""

    position: int
    text: str


@dataclass(frozen=True)
class NoteGroupResult:
    """Everything parsed out of one note-group."""

    positions: tuple[Position, ...]
    bends: tuple[Bend, ...] = ()
    ties: tuple[Tie, ...] = ()
    vibratos: tuple[Vibrato, ...] = ()
    annotations: tuple[Annotation, ...] = ()

    def validate(self) -> None:
        """
        Check that every modifier references an existing position.

        A dangling reference means the parser itself is broken, so this raises
        ``AssertionError`` rather than a user-facing parse error.
        """
        count = len(self.positions)
        for bend in self.bends:
            _check_index("bend", bend.position, count)
            if bend.target_fret is None:
                _check_index("bend destination", bend.position + 1, count)
        for tie in self.ties:
            _check_index("tie", tie.position, count)
            _check_index("tie destination", tie.position + 1, count)
        for vibrato in self.vibratos:
            _check_index("vibrato", vibrato.position, count)
        for annotation in self.annotations:
            _check_index("annotation", annotation.position, count)

    def to_dict(self) -> dict[str, object]:
        """Plain JSON-friendly representation."""
        return {
            "positions": [
                [{"fret": ref.fret, "string": ref.string} for ref in position]
                for position in self.positions
            ],
            "bends": [
                {
                    "position": b.position,
                    "chord_index": b.chord_index,
                    "step_count": b.step_count,
                    "target_fret": b.target_fret,
                }
                for b in self.bends
            ],
            "ties": [
                {"position": t.position, "chord_index": t.chord_index, "kind": t.kind.name.lower()}
                for t in self.ties
            ],
            "vibratos": [{"position": v.position, "harsh": v.harsh} for v in self.vibratos],
            "annotations": [{"position": a.position, "text": a.text} for a in self.annotations],
        }


def _check_index(label: str, index: int, count: int) -> None:
    if not 0 <= index < count:
        raise AssertionError(f"{label} references position {index} of {count}")
