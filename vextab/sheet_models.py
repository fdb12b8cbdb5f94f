"""Data models for render-ready staves, shared by the renderers and the MIDI exporter."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BendModifier:
    """A bend label drawn above one note of a tab note."""

    text: str
    release: bool
    index: int


@dataclass(frozen=True)
class TabNoteElement:
    """
    A single VexFlow tab note or chord.

    ``positions`` holds ``(string, fret)`` pairs in the order they were written.
    """

    positions: list[tuple[int, int]]
    duration: str = "8"
    bends: list[BendModifier] = field(default_factory=list)
    vibratos: list[bool] = field(default_factory=list)
    annotations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BarElement:
    """A bar line."""


@dataclass(frozen=True)
class TieElement:
    """
    A tie, slide, hammer-on, pull-off or tap between two tab notes.

    ``first`` and ``last`` index into the owning stave's ``items``; ``effect``
    is ``"S"``, ``"H"``, ``"P"`` or ``"T"``; ``index`` is the tied chord member
    on both notes (0 for single notes).
    """

    first: int
    last: int
    effect: str
    index: int = 0


StaveElement = TabNoteElement | BarElement


@dataclass(frozen=True)
class StaveElements:
    """Everything drawn on one tab stave."""

    items: list[StaveElement]
    ties: list[TieElement]
    options: dict[str, str] = field(default_factory=dict)

    @property
    def notes(self) -> list[TabNoteElement]:
        return [item for item in self.items if isinstance(item, TabNoteElement)]


@dataclass(frozen=True)
class ScoreDocument:
    """Neutral tab score representation consumed by the renderers."""

    title: str
    staves: list[StaveElements]
