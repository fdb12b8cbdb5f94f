"""SheetExporter: converts VexTab source files to HTML, Markdown or JSON tab scores."""

from __future__ import annotations

import logging
from typing import Final

from vextab.document import parse_document
from vextab.elements import build_score
from vextab.sheet_models import ScoreDocument
from vextab.sheet_renderers import (
    JsonRenderer,
    SheetRenderer,
    VexflowHtmlRenderer,
    VexflowMarkdownRenderer,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"html", "md-vexflow", "json"}


class SheetExporter:
    """
    Convert VexTab notation into sheet output via a pluggable renderer.

    Supported formats:
    - ``html``: self-contained HTML page drawing the staves with VexFlow.
    - ``md-vexflow``: markdown file with embedded VexFlow JavaScript renderer.
    - ``json``: the render-ready score payload.
    """

    def __init__(self, title: str = "", output_format: str = "html") -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VexflowHtmlRenderer()
        if output_format == "json":
            return JsonRenderer()
        return VexflowMarkdownRenderer()

    def _read_source(self, source_path: str) -> str:
        with open(source_path, encoding="utf-8") as fh:
            return fh.read()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_document(self, code: str) -> ScoreDocument:
        """
        Parse VexTab code into a render-ready score.

        Raises:
            DocumentError: If any line of ``code`` is invalid.
        """
        return build_score(parse_document(code), title=self.title)

    def render(self, code: str) -> str:
        """Parse VexTab code and return the rendered file content."""
        return self.renderer.render(title=self.title, score_document=self.build_document(code))

    def export(self, source_path: str, output_path: str) -> None:
        """
        Convert a VexTab file into the selected sheet format and write it to disk.

        Raises:
            DocumentError: If the VexTab source is invalid.
            OSError: If the source cannot be read or the output cannot be written.
        """
        content = self.render(self._read_source(source_path))
        logger.info("Writing %s output to %s", self.output_format, output_path)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
