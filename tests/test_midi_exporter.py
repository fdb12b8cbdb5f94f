"""Unit tests for MidiExporter."""

from pathlib import Path

import pytest

from vextab.document import parse_document
from vextab.elements import build_score
from vextab.midi_exporter import TUNINGS, MidiExporter, fret_to_midi
from vextab.sheet_models import ScoreDocument, StaveElements, TabNoteElement


def test_fret_to_midi_standard_tuning() -> None:
    tuning = TUNINGS["standard"]
    assert fret_to_midi(1, 0, tuning) == 64
    assert fret_to_midi(6, 3, tuning) == 43
    assert fret_to_midi(3, 2, tuning) == 57


def test_fret_to_midi_unknown_string() -> None:
    with pytest.raises(ValueError, match="String 7"):
        fret_to_midi(7, 0, TUNINGS["standard"])
    with pytest.raises(ValueError):
        fret_to_midi(0, 0, TUNINGS["standard"])


def test_fret_to_midi_above_range() -> None:
    with pytest.raises(ValueError, match="MIDI range"):
        fret_to_midi(1, 100, TUNINGS["standard"])


def test_unknown_tuning() -> None:
    with pytest.raises(ValueError, match="Unknown tuning 'banjo'"):
        MidiExporter(tuning="banjo")


def test_bass_tuning_has_four_strings() -> None:
    assert len(TUNINGS["bass"]) == 4


def test_chord_pitches() -> None:
    exporter = MidiExporter(tuning="drop-d")
    note = TabNoteElement(positions=[(6, 0), (5, 0), (4, 0)])
    assert exporter._note_pitches(note) == [38, 45, 50]


def test_build_rejects_unplayable_string() -> None:
    score = ScoreDocument(
        title="",
        staves=[StaveElements(items=[TabNoteElement(positions=[(5, 3)])], ties=[])],
    )
    with pytest.raises(ValueError):
        MidiExporter(tuning="bass").build(score)


def test_export_writes_standard_midi_file(tmp_path: Path) -> None:
    score = build_score(parse_document("tabstave\nnotes 5/4 | (4/5.5/6)\ntabstave\nnotes 7h9/3"))
    out = tmp_path / "riff.mid"

    MidiExporter(tempo=90).export(score, str(out))

    data = out.read_bytes()
    assert data.startswith(b"MThd")
    assert data.count(b"MTrk") == 3
