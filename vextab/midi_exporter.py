"""MidiExporter: plays tab staves back as a multi-track MIDI file."""

from __future__ import annotations

import logging
from typing import Final

from midiutil import MIDIFile

from vextab.sheet_models import ScoreDocument, TabNoteElement

logger = logging.getLogger(__name__)

# midiutil writes Format 1 files with its own tempo track in front of the
# data tracks, so stave n (0-based) is simply track n.
TRACK_TEMPO = 0
CHANNEL = 0

MIDI_MAX_PITCH = 127

#: Open-string MIDI pitches, string 1 (highest) first.
TUNINGS: Final[dict[str, tuple[int, ...]]] = {
    "standard": (64, 59, 55, 50, 45, 40),  # E4 B3 G3 D3 A2 E2
    "drop-d": (64, 59, 55, 50, 45, 38),    # E4 B3 G3 D3 A2 D2
    "dadgad": (62, 57, 55, 50, 45, 38),    # D4 A3 G3 D3 A2 D2
    "bass": (43, 38, 33, 28),              # G2 D2 A1 E1
}


def fret_to_midi(string: int, fret: int, tuning: tuple[int, ...]) -> int:
    """
    Convert a string/fret pair to a MIDI note number.

    Args:
        string: 1-based string number, 1 being the highest-pitched string.
        fret:   Fret number, 0 for the open string.
        tuning: Open-string pitches, string 1 first.

    Raises:
        ValueError: If the string does not exist in ``tuning`` or the pitch is
            outside the MIDI range.
    """
    if not 1 <= string <= len(tuning):
        raise ValueError(f"String {string} does not exist on a {len(tuning)}-string instrument.")
    pitch = tuning[string - 1] + fret
    if pitch > MIDI_MAX_PITCH:
        raise ValueError(f"Fret {fret} on string {string} is above the MIDI range.")
    return pitch


class MidiExporter:
    """
    Writes a MIDI file with one track per tab stave.

    Timing
    ------
    Every drawn tab note lasts ``NOTE_BEATS`` (an eighth note). Chords sound
    all their strings together; bar lines take no time. Bend destinations that
    are drawn on their origin note are not played separately.
    """

    DEFAULT_TEMPO = 100    # BPM
    DEFAULT_VELOCITY = 80  # MIDI velocity (0-127)
    NOTE_BEATS = 0.5       # eighth note

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        tuning: str = "standard",
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        """
        Args:
            tempo:    Playback tempo in beats per minute.
            tuning:   Name of an entry in ``TUNINGS``.
            velocity: MIDI note-on velocity.

        Raises:
            ValueError: If ``tuning`` is unknown.
        """
        if tuning not in TUNINGS:
            supported = ", ".join(sorted(TUNINGS))
            raise ValueError(f"Unknown tuning '{tuning}'. Use one of: {supported}.")
        self.tempo = tempo
        self.tuning_name = tuning
        self.tuning = TUNINGS[tuning]
        self.velocity = velocity

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _note_pitches(self, note: TabNoteElement) -> list[int]:
        return [fret_to_midi(string, fret, self.tuning) for string, fret in note.positions]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, score: ScoreDocument) -> MIDIFile:
        """
        Build the MIDI file in memory.

        Raises:
            ValueError: If a note cannot be played in the selected tuning.
        """
        midi = MIDIFile(numTracks=max(1, len(score.staves)), removeDuplicates=False, deinterleave=False)
        midi.addTempo(TRACK_TEMPO, 0, self.tempo)

        for track, stave in enumerate(score.staves):
            midi.addTrackName(track, 0, f"Tab Stave {track + 1}")
            time = 0.0
            for note in stave.notes:
                for pitch in self._note_pitches(note):
                    midi.addNote(
                        track=track,
                        channel=CHANNEL,
                        pitch=pitch,
                        time=time,
                        duration=self.NOTE_BEATS,
                        volume=self.velocity,
                    )
                time += self.NOTE_BEATS
            logger.debug("Stave %d: %d note(s), %.1f beat(s)", track + 1, len(stave.notes), time)

        return midi

    def export(self, score: ScoreDocument, output_path: str) -> None:
        """
        Render the score to a Standard MIDI File (format 1).

        Raises:
            ValueError: If a note cannot be played in the selected tuning.
            OSError: If the output file cannot be opened for writing.
        """
        midi = self.build(score)
        with open(output_path, "wb") as f:
            midi.writeFile(f)
