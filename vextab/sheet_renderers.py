"""Renderer implementations for tab score output formats."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, Final

from vextab.sheet_models import BarElement, ScoreDocument, StaveElements

VEXFLOW_URL: Final[str] = "https://cdn.jsdelivr.net/npm/vexflow@4.2.3/build/esm/entry/vexflow.js"


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _stave_payload(stave: StaveElements) -> dict[str, Any]:
    items: list[dict[str, Any]] = []
    for item in stave.items:
        if isinstance(item, BarElement):
            items.append({"type": "bar"})
        else:
            items.append(
                {
                    "type": "note",
                    "positions": [{"str": s, "fret": f} for s, f in item.positions],
                    "duration": item.duration,
                    "bends": [asdict(bend) for bend in item.bends],
                    "vibratos": [{"harsh": harsh} for harsh in item.vibratos],
                    "annotations": item.annotations,
                }
            )
    return {
        "options": stave.options,
        "items": items,
        "ties": [asdict(tie) for tie in stave.ties],
    }


def score_payload(score_document: ScoreDocument) -> dict[str, Any]:
    """JSON-ready representation of a score, as read by the VexFlow script."""
    return {
        "title": score_document.title,
        "staves": [_stave_payload(stave) for stave in score_document.staves],
    }


def _payload_json(score_document: ScoreDocument) -> str:
    score_json = json.dumps(score_payload(score_document), separators=(",", ":"))
    return score_json.replace("</", "<\\/")


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(self, *, title: str, score_document: ScoreDocument) -> str:
        """Render output into a file content string."""


class VexflowScriptMixin:
    """Builds the ``<div>`` host and VexFlow script shared by the HTML and Markdown outputs."""

    # VexFlow layout constants (CSS pixels)
    _STAVE_X: int = 10
    _STAVE_WIDTH: int = 760
    _STAVE_SPACING: int = 150  # vertical distance between consecutive tab staves

    def build_score_block(self, score_document: ScoreDocument) -> str:
        score_json = _payload_json(score_document)
        width = self._STAVE_X * 2 + self._STAVE_WIDTH
        return f"""<div id="vextab-score"></div>
<script id="vextab-score-data" type="application/json">{score_json}</script>
<script type="module">
  import {{
    Annotation,
    BarNote,
    Bend,
    Formatter,
    Renderer,
    TabNote,
    TabSlide,
    TabStave,
    TabTie,
    Vibrato
  }} from "{VEXFLOW_URL}";

  const host = document.getElementById("vextab-score");
  const payloadNode = document.getElementById("vextab-score-data");

  if (!host || !payloadNode) {{
    throw new Error("Missing VexFlow score container.");
  }}

  const payload = JSON.parse(payloadNode.textContent || "{{}}");
  const staves = Array.isArray(payload.staves) ? payload.staves : [];

  const renderer = new Renderer(host, Renderer.Backends.SVG);
  renderer.resize({width}, Math.max(1, staves.length) * {self._STAVE_SPACING} + 30);
  const context = renderer.getContext();

  const toTabNote = (entry) => {{
    if (entry.type === "bar") {{
      return new BarNote();
    }}

    const tabNote = new TabNote({{
      positions: entry.positions,
      duration: entry.duration || "8",
    }});
    (entry.bends || []).forEach((bend) => {{
      tabNote.addModifier(new Bend(bend.text, bend.release), bend.index);
    }});
    (entry.vibratos || []).forEach((vibrato) => {{
      tabNote.addModifier(new Vibrato().setHarsh(vibrato.harsh), 0);
    }});
    (entry.annotations || []).forEach((text) => {{
      tabNote.addModifier(new Annotation(text), 0);
    }});
    return tabNote;
  }};

  staves.forEach((staveData, index) => {{
    const stave = new TabStave({self._STAVE_X}, index * {self._STAVE_SPACING}, {self._STAVE_WIDTH});
    stave.addTabGlyph();
    stave.setContext(context).draw();

    const notes = (staveData.items || []).map(toTabNote);
    if (notes.length > 0) {{
      Formatter.FormatAndDraw(context, stave, notes);
    }}

    (staveData.ties || []).forEach((tie) => {{
      const ends = {{
        first_note: notes[tie.first],
        last_note: notes[tie.last],
        first_indices: [tie.index || 0],
        last_indices: [tie.index || 0],
      }};
      const effect = tie.effect === "S" ? new TabSlide(ends) : new TabTie(ends, tie.effect);
      effect.setContext(context).draw();
    }});
  }});
</script>"""


class VexflowHtmlRenderer(VexflowScriptMixin, SheetRenderer):
    """Render a score into a self-contained HTML page driven by VexFlow."""

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(self, *, title: str, score_document: ScoreDocument) -> str:
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        score_block = self.build_score_block(score_document)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    body {{
      font-family: Georgia, serif;
      background: #f0f0f0;
      margin: 0;
      padding: 2rem;
    }}
    h1 {{
      text-align: center;
      font-size: 1.6rem;
      margin-bottom: 2rem;
      color: #222;
    }}
    #vextab-score {{
      background: #fff;
      box-shadow: 0 2px 8px rgba(0, 0, 0, 0.15);
      margin: 0 auto;
      max-width: 820px;
      padding: 1rem;
      overflow-x: auto;
    }}
    @media print {{
      body {{
        background: #fff;
        padding: 0;
      }}
      #vextab-score {{
        box-shadow: none;
        padding: 0;
      }}
    }}
  </style>
</head>
<body>
{heading}{score_block}
</body>
</html>"""


class VexflowMarkdownRenderer(VexflowScriptMixin, SheetRenderer):
    """Render a score into Markdown with an embedded VexFlow script."""

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(self, *, title: str, score_document: ScoreDocument) -> str:
        title_safe = _escape_html(title)
        score_block = self.build_score_block(score_document)

        return f"""# {title_safe}

This Markdown uses embedded JavaScript + VexFlow. Open it in a Markdown viewer that allows script execution.

<style>
  #vextab-score {{
    border: 1px solid #d8d8d8;
    border-radius: 8px;
    background: #ffffff;
    padding: 0.5rem;
    overflow-x: auto;
  }}
</style>

{score_block}
"""


class JsonRenderer(SheetRenderer):
    """Write the score payload as indented JSON."""

    @property
    def default_extension(self) -> str:
        return ".json"

    def render(self, *, title: str, score_document: ScoreDocument) -> str:
        payload = score_payload(score_document)
        payload["title"] = title
        return json.dumps(payload, indent=2) + "\n"
