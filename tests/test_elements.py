"""Unit tests for building render-ready stave elements."""

import pytest

from vextab.document import NoteGroupEntry, Stave, parse_document
from vextab.elements import bend_label, build_score, build_stave
from vextab.sheet_models import BarElement, BendModifier, StaveElements, TabNoteElement, TieElement
from vextab.tab_models import FretRef, NoteGroupResult, Tie, TieKind


def _stave(code: str) -> StaveElements:
    return build_score(parse_document(code)).staves[0]


@pytest.mark.parametrize(
    ("from_fret", "to_fret", "label"),
    [
        (5, 6, "1/2"),
        (5, 7, "Full"),
        (5, 8, "1 1/2"),
        (5, 9, "2 Steps"),
        (5, 10, "Bend to 10"),
        (7, 5, "Bend to 5"),
    ],
)
def test_bend_label(from_fret: int, to_fret: int, label: str) -> None:
    assert bend_label(from_fret, to_fret) == label


def test_plain_notes_are_eighth_notes() -> None:
    stave = _stave("notes 4-5/4")
    assert stave.items == [
        TabNoteElement(positions=[(4, 4)]),
        TabNoteElement(positions=[(4, 5)]),
    ]
    assert all(note.duration == "8" for note in stave.notes)


def test_bend_destination_is_absorbed() -> None:
    stave = _stave("notes 5b7/3")
    assert len(stave.items) == 1
    note = stave.notes[0]
    assert note.positions == [(3, 5)]
    assert note.bends == [BendModifier(text="Full", release=False, index=0)]


def test_bend_release_keeps_final_note() -> None:
    stave = _stave("notes 5b7b5/3")
    assert [note.positions for note in stave.notes] == [[(3, 5)], [(3, 5)]]
    assert stave.notes[0].bends == [BendModifier(text="Full", release=True, index=0)]


def test_chord_bend_uses_explicit_target() -> None:
    stave = _stave("notes (5b6/3.5/4)")
    assert len(stave.items) == 1
    assert stave.notes[0].positions == [(3, 5), (4, 5)]
    assert stave.notes[0].bends == [BendModifier(text="1/2", release=False, index=0)]


def test_ties_index_stave_items() -> None:
    stave = _stave("notes 5/4 | 5h7/3")
    assert isinstance(stave.items[1], BarElement)
    assert stave.ties == [TieElement(first=2, last=3, effect="H")]


def test_tie_from_bend_destination_starts_at_origin() -> None:
    stave = _stave("notes 5b7s9/3")
    assert [note.positions for note in stave.notes] == [[(3, 5)], [(3, 9)]]
    assert stave.ties == [TieElement(first=0, last=1, effect="S")]


def test_ties_carry_chord_member() -> None:
    result = NoteGroupResult(
        positions=((FretRef(5, 3), FretRef(5, 4)), (FretRef(7, 3), FretRef(7, 4))),
        ties=(Tie(position=0, chord_index=1, kind=TieKind.HAMMER_ON),),
    )
    stave = build_stave(Stave(items=[NoteGroupEntry(source="chord-tie", result=result)]))
    assert stave.ties == [TieElement(first=0, last=1, effect="H", index=1)]


def test_ties_outside_chords_use_first_member() -> None:
    stave = _stave("notes 5h7/3")
    assert stave.ties[0].index == 0


def test_vibrato_and_annotation_modifiers() -> None:
    stave = _stave("notes 5b7V/3 t12/1")
    assert stave.notes[0].vibratos == [True]
    assert stave.notes[1].annotations == ["T"]


def test_score_keeps_title_and_options() -> None:
    score = build_score(parse_document("tabstave notation=true\nnotes 5/4\ntabstave"), title="Riff")
    assert score.title == "Riff"
    assert len(score.staves) == 2
    assert score.staves[0].options == {"notation": "true"}
    assert score.staves[1].items == []
