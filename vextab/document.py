"""
Line-level VexTab parser.

A VexTab document is a sequence of lines, each starting with a command::

    tabstave
    notes 4-5-6/4 | (4/5.5/6.6.7) 5b7b5/3
    tabstave notation=true
    notes t12/1 7h8p7/2

``tabstave`` starts a new stave and ``notes`` adds note-groups and bar lines to
the current one. Note-groups are handed to :func:`parse_note_group`; any error
is re-raised with the line number it occurred on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vextab.errors import DocumentError, VexTabError
from vextab.note_parser import parse_note_group
from vextab.tab_models import NoteGroupResult

logger = logging.getLogger(__name__)

BAR_TOKEN = "|"


@dataclass(frozen=True)
class NoteGroupEntry:
    """A parsed note-group together with the text it came from."""

    source: str
    result: NoteGroupResult


@dataclass(frozen=True)
class BarLine:
    """A ``|`` bar separator."""


StaveItem = NoteGroupEntry | BarLine


@dataclass
class Stave:
    """
    One tab stave and everything written on it.

    Attributes:
        options: ``key=value`` parameters from the ``tabstave`` line, kept as
                 given (e.g. ``{"notation": "true"}``).
        items:   Note-groups and bar lines in source order.
    """

    options: dict[str, str] = field(default_factory=dict)
    items: list[StaveItem] = field(default_factory=list)

    @property
    def note_groups(self) -> list[NoteGroupResult]:
        return [item.result for item in self.items if isinstance(item, NoteGroupEntry)]


@dataclass
class TabDocument:
    staves: list[Stave] = field(default_factory=list)


class DocumentParser:
    """
    Parse a VexTab document line by line.

    The parser keeps a reference to the stave currently receiving notes; a
    ``notes`` line seen before any ``tabstave`` opens an implicit stave.
    """

    def __init__(self) -> None:
        self.document = TabDocument()
        self._line_number = 0

    def parse(self, code: str) -> TabDocument:
        """
        Parse ``code`` and return the resulting document.

        Raises:
            DocumentError: On the first invalid line. The error message is
                prefixed with ``Line N:``; no partial document is returned.
        """
        self.document = TabDocument()
        self._line_number = 0

        for line_number, raw_line in enumerate(code.split("\n"), start=1):
            self._line_number = line_number
            line = raw_line.strip()
            if not line:
                continue
            try:
                self._parse_line(line)
            except DocumentError:
                raise
            except VexTabError as exc:
                logger.debug("Line %d rejected: %s", line_number, exc)
                raise DocumentError(line_number, str(exc)) from exc

        logger.info(
            "Parsed %d stave(s) from %d line(s)", len(self.document.staves), self._line_number
        )
        return self.document

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _parse_line(self, line: str) -> None:
        command, *params = line.split()
        if command == "tabstave":
            self._start_stave(params)
        elif command == "notes":
            self._parse_notes(params)
        else:
            raise DocumentError(self._line_number, f"Invalid keyword: {command}")

    def _start_stave(self, params: list[str]) -> Stave:
        options: dict[str, str] = {}
        for param in params:
            key, sep, value = param.partition("=")
            if not sep or not key or not value:
                raise DocumentError(self._line_number, f"Invalid tabstave option: {param}")
            options[key] = value

        stave = Stave(options=options)
        self.document.staves.append(stave)
        logger.debug("Line %d: tabstave #%d %s", self._line_number, len(self.document.staves), options)
        return stave

    def _current_stave(self) -> Stave:
        if not self.document.staves:
            return self._start_stave([])
        return self.document.staves[-1]

    def _parse_notes(self, groups: list[str]) -> None:
        stave = self._current_stave()
        for group in groups:
            if group == BAR_TOKEN:
                stave.items.append(BarLine())
                continue
            result = parse_note_group(group)
            logger.debug(
                "Line %d: %r -> %d position(s)", self._line_number, group, len(result.positions)
            )
            stave.items.append(NoteGroupEntry(source=group, result=result))


def parse_document(code: str) -> TabDocument:
    """Parse a complete VexTab document. See :class:`DocumentParser`."""
    return DocumentParser().parse(code)
