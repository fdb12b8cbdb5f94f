"""Tests for the vextab command line interface."""

import json
from pathlib import Path

from click.testing import CliRunner

from vextab import __version__
from vextab.cli import main


def _write(tmp_path: Path, name: str, code: str) -> Path:
    path = tmp_path / name
    path.write_text(code, encoding="utf-8")
    return path


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_check_summarises_staves(tmp_path: Path) -> None:
    source = _write(tmp_path, "song.tab", "tabstave\nnotes 4-5-6/4 | (4/5.5/6)\n")
    result = CliRunner().invoke(main, ["check", str(source)])
    assert result.exit_code == 0
    assert "OK" in result.output
    assert "Stave 1: 2 note-group(s), 4 position(s), 1 bar(s)" in result.output


def test_check_reports_line_of_error(tmp_path: Path) -> None:
    source = _write(tmp_path, "bad.tab", "tabstave\nnotes 5/4 (4/5\n")
    result = CliRunner().invoke(main, ["check", str(source)])
    assert result.exit_code == 1
    assert "Line 2: Unexpected end of line" in result.output


def test_check_reports_oversized_fret(tmp_path: Path) -> None:
    source = _write(tmp_path, "huge.tab", "notes " + "9" * 5000 + "/4\n")
    result = CliRunner().invoke(main, ["check", str(source)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Line 1: Number out of range: 99999999999999999999..." in result.output


def test_parse_prints_json() -> None:
    result = CliRunner().invoke(main, ["parse", "4-5-6/4", "5s6/3"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data[0]["group"] == "4-5-6/4"
    assert data[0]["positions"][0] == [{"fret": 4, "string": 4}]
    assert data[1]["ties"][0]["kind"] == "slide"


def test_parse_rejects_bad_group() -> None:
    result = CliRunner().invoke(main, ["parse", "5/"])
    assert result.exit_code == 1


def test_render_defaults_to_html_next_to_source(tmp_path: Path) -> None:
    source = _write(tmp_path, "my_riff.tab", "notes 5h7/3\n")
    result = CliRunner().invoke(main, ["render", str(source)])
    assert result.exit_code == 0
    out = tmp_path / "my_riff.html"
    assert out.exists()
    assert "<title>my riff</title>" in out.read_text(encoding="utf-8")


def test_render_json(tmp_path: Path) -> None:
    source = _write(tmp_path, "riff.tab", "notes 5b7/3\n")
    out = tmp_path / "score.json"
    result = CliRunner().invoke(
        main, ["render", str(source), "--format", "json", "-o", str(out), "--title", "Bend"]
    )
    assert result.exit_code == 0
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["title"] == "Bend"
    assert payload["staves"][0]["items"][0]["bends"][0]["text"] == "Full"


def test_render_invalid_source(tmp_path: Path) -> None:
    source = _write(tmp_path, "bad.tab", "stave\n")
    result = CliRunner().invoke(main, ["render", str(source)])
    assert result.exit_code == 1
    assert "Invalid keyword: stave" in result.output


def test_midi_export(tmp_path: Path) -> None:
    source = _write(tmp_path, "riff.tab", "notes 0-2-3/6 (0/6.2/5)\n")
    result = CliRunner().invoke(main, ["midi", str(source), "--tuning", "drop-d"])
    assert result.exit_code == 0
    assert (tmp_path / "riff.mid").read_bytes().startswith(b"MThd")


def test_midi_unplayable_string(tmp_path: Path) -> None:
    source = _write(tmp_path, "riff.tab", "notes 3/6\n")
    result = CliRunner().invoke(main, ["midi", str(source), "--tuning", "bass"])
    assert result.exit_code == 1
    assert "Could not play score" in result.output
