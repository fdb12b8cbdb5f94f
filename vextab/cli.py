"""VexTab CLI entry point."""

import json
import logging
import sys
from pathlib import Path

import click

from vextab import __version__
from vextab.document import parse_document
from vextab.elements import build_score
from vextab.errors import VexTabError
from vextab.midi_exporter import TUNINGS, MidiExporter
from vextab.note_parser import parse_note_group
from vextab.sheet_exporter import SheetExporter


def _read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        click.echo(f"  ERROR: Could not read '{path}' — {exc}", err=True)
        sys.exit(1)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="vextab")
@click.option("--verbose", "-v", is_flag=True, help="Log parser progress to stderr.")
def main(verbose: bool) -> None:
    """VexTab — guitar tablature parser and renderer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ── check subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, readable=True))
def check(source: str) -> None:
    """
    Validate a VexTab file and summarise its staves.

    \b
    Examples:
      vextab check song.tab
    """
    try:
        document = parse_document(_read_source(source))
    except VexTabError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)

    click.echo(f"{source}: OK")
    for number, stave in enumerate(document.staves, start=1):
        groups = stave.note_groups
        positions = sum(len(group.positions) for group in groups)
        bars = len(stave.items) - len(groups)
        click.echo(
            f"  Stave {number}: {len(groups)} note-group(s), {positions} position(s), {bars} bar(s)"
        )


# ── parse subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("groups", nargs=-1, required=True)
def parse(groups: tuple[str, ...]) -> None:
    """
    Parse note-groups and print the result as JSON.

    \b
    Examples:
      vextab parse 4-5-6/4 "(4/5.5/6.6.7)" 5b7b5/3
    """
    results = []
    for group in groups:
        try:
            result = parse_note_group(group.strip())
        except VexTabError as exc:
            click.echo(f"  ERROR: {group}: {exc}", err=True)
            sys.exit(1)
        results.append({"group": group, **result.to_dict()})

    click.echo(json.dumps(results, indent=2))


# ── render subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file path. Defaults to extension based on --format.",
)
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Title shown in the output header. Defaults to the source filename stem.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "md-vexflow", "json"], case_sensitive=False),
    default="html",
    show_default=True,
    help="Output format: HTML page or Markdown with a VexFlow script, or the JSON score payload.",
)
def render(source: str, output: str | None, title: str | None, output_format: str) -> None:
    """
    Render a VexTab file as tablature (HTML, Markdown or JSON).

    SOURCE is the path to an existing VexTab file.

    \b
    Examples:
      vextab render song.tab
      vextab render song.tab -o score.html --title "My Song"
      vextab render song.tab --format md-vexflow -o score.md
    """
    source_path = Path(source)
    resolved_title = title if title is not None else source_path.stem.replace("_", " ")

    exporter = SheetExporter(title=resolved_title, output_format=output_format)
    resolved_output = (
        output
        if output is not None
        else str(source_path.with_suffix(exporter.renderer.default_extension))
    )

    click.echo(f"vextab v{__version__}")
    click.echo(f"  Source : {source}")
    click.echo(f"  Format : {exporter.output_format}")
    click.echo(f"  Title  : {resolved_title}")
    click.echo(f"  Output : {resolved_output}")
    click.echo()

    try:
        exporter.export(source, resolved_output)
    except VexTabError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file — {exc}", err=True)
        sys.exit(1)

    click.echo(f"Done!  Wrote '{resolved_output}'.")


# ── midi subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination MIDI file path. Defaults to <source>.mid.",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=MidiExporter.DEFAULT_TEMPO,
    show_default=True,
    help="Playback tempo in BPM.",
)
@click.option(
    "--tuning",
    type=click.Choice(sorted(TUNINGS), case_sensitive=False),
    default="standard",
    show_default=True,
    help="Instrument tuning used to turn string/fret pairs into pitches.",
)
def midi(source: str, output: str | None, tempo: int, tuning: str) -> None:
    """
    Play a VexTab file back as a MIDI file, one track per stave.

    \b
    Examples:
      vextab midi song.tab
      vextab midi song.tab --tuning drop-d --tempo 90 -o riff.mid
    """
    resolved_output = output if output is not None else str(Path(source).with_suffix(".mid"))

    try:
        score = build_score(parse_document(_read_source(source)))
        MidiExporter(tempo=tempo, tuning=tuning.lower()).export(score, resolved_output)
    except VexTabError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not play score — {exc}", err=True)
        sys.exit(1)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
        sys.exit(1)

    click.echo(f"Done!  Wrote '{resolved_output}' ({tuning}, {tempo} BPM).")
