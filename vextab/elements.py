"""Convert parsed staves into render-ready tab notes, modifiers and ties."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final

from vextab.document import BarLine, NoteGroupEntry, Stave, TabDocument
from vextab.sheet_models import (
    BarElement,
    BendModifier,
    ScoreDocument,
    StaveElement,
    StaveElements,
    TabNoteElement,
    TieElement,
)
from vextab.tab_models import NoteGroupResult

logger = logging.getLogger(__name__)

NOTE_DURATION: Final[str] = "8"

#: Bend labels keyed by the distance, in frets, between origin and destination.
BEND_LABELS: Final[dict[int, str]] = {
    1: "1/2",
    2: "Full",
    3: "1 1/2",
    4: "2 Steps",
}


def bend_label(from_fret: int, to_fret: int) -> str:
    """Return the text drawn above a bend from ``from_fret`` to ``to_fret``."""
    return BEND_LABELS.get(to_fret - from_fret, f"Bend to {to_fret}")


@dataclass
class _PendingNote:
    positions: list[tuple[int, int]]
    bends: list[BendModifier] = field(default_factory=list)
    vibratos: list[bool] = field(default_factory=list)
    annotations: list[str] = field(default_factory=list)
    # Index of the note a bend destination is drawn on, when it is not drawn itself.
    absorbed_by: int | None = None

    def freeze(self) -> TabNoteElement:
        return TabNoteElement(
            positions=self.positions,
            duration=NOTE_DURATION,
            bends=self.bends,
            vibratos=self.vibratos,
            annotations=self.annotations,
        )


def _resolve(notes: list[_PendingNote], index: int) -> int:
    """Follow absorbed bend destinations back to the note that is drawn."""
    absorbed_by = notes[index].absorbed_by
    while absorbed_by is not None:
        index = absorbed_by
        absorbed_by = notes[index].absorbed_by
    return index


def _build_group(result: NoteGroupResult) -> tuple[list[_PendingNote], list[tuple[int, int, str, int]]]:
    """
    Build the notes for one note-group.

    Returns the pending notes and the group's ties as ``(first, last, effect, index)``
    tuples, with note indices local to the group.
    """
    notes = [
        _PendingNote(positions=[(ref.string or 0, ref.fret) for ref in position])
        for position in result.positions
    ]

    for bend in result.bends:
        origin = result.positions[bend.position]
        from_fret = origin[bend.chord_index].fret
        if bend.target_fret is not None:
            to_fret = bend.target_fret
        else:
            to_fret = result.positions[bend.position + 1][bend.chord_index].fret
            notes[bend.position + 1].absorbed_by = bend.position
        notes[bend.position].bends.append(
            BendModifier(
                text=bend_label(from_fret, to_fret),
                release=bend.step_count > 1,
                index=bend.chord_index,
            )
        )

    for vibrato in result.vibratos:
        notes[_resolve(notes, vibrato.position)].vibratos.append(vibrato.harsh)

    for annotation in result.annotations:
        notes[_resolve(notes, annotation.position)].annotations.append(annotation.text)

    ties = [
        (
            _resolve(notes, tie.position),
            _resolve(notes, tie.position + 1),
            tie.kind.value,
            tie.chord_index,
        )
        for tie in result.ties
    ]
    return notes, ties


def build_stave(stave: Stave) -> StaveElements:
    """Lay out one stave's note-groups and bars as drawable elements."""
    items: list[StaveElement] = []
    ties: list[TieElement] = []

    for item in stave.items:
        if isinstance(item, BarLine):
            items.append(BarElement())
            continue

        assert isinstance(item, NoteGroupEntry)
        notes, group_ties = _build_group(item.result)

        stave_index: dict[int, int] = {}
        for local_index, note in enumerate(notes):
            if note.absorbed_by is not None:
                logger.debug("%s: note %d drawn as a bend on its origin", item.source, local_index)
                continue
            stave_index[local_index] = len(items)
            items.append(note.freeze())

        for first, last, effect, index in group_ties:
            ties.append(
                TieElement(first=stave_index[first], last=stave_index[last], effect=effect, index=index)
            )

    return StaveElements(items=items, ties=ties, options=dict(stave.options))


def build_score(document: TabDocument, title: str = "") -> ScoreDocument:
    """Build the render-ready score for every stave of ``document``."""
    return ScoreDocument(title=title, staves=[build_stave(stave) for stave in document.staves])
