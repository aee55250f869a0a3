from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from chatlog_studio import cli as cli_module
from chatlog_studio.cli import cli


def test_render_prints_fragment(sample_transcript: Path):
    result = CliRunner().invoke(cli, ["render", str(sample_transcript)])
    assert result.exit_code == 0, result.output
    assert '<div style="max-width: 800px;' in result.output
    assert "The Lighthouse" in result.output


def test_render_is_the_default_command(sample_transcript: Path):
    result = CliRunner().invoke(cli, [str(sample_transcript)])
    assert result.exit_code == 0, result.output
    assert "The Lighthouse" in result.output


def test_render_to_file(tmp_path: Path, sample_transcript: Path):
    out = tmp_path / "nested" / "story.html"
    result = CliRunner().invoke(cli, ["render", str(sample_transcript), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8").startswith("<div ")
    assert "Output:" in result.output


def test_render_with_config_and_overrides(sample_transcript: Path, sample_config_json: Path):
    result = CliRunner().invoke(
        cli,
        ["render", str(sample_transcript), "-c", str(sample_config_json), "-s", "bubbleRadius=4", "-s", "user_name=Jae"],
    )
    assert result.exit_code == 0, result.output
    assert "Harbor Town" in result.output
    assert "box-shadow" not in result.output
    assert "4px 4px 4px 0.25em" in result.output
    assert ">Jae<" in result.output


def test_config_from_environment(sample_transcript: Path, sample_config_json: Path):
    result = CliRunner().invoke(
        cli, ["render", str(sample_transcript)], env={"CHATLOG_STUDIO_CONFIG": str(sample_config_json)}
    )
    assert result.exit_code == 0, result.output
    assert "Harbor Town" in result.output


def test_collapsible_flag(sample_transcript: Path):
    result = CliRunner().invoke(cli, ["render", "--collapsible", str(sample_transcript)])
    assert result.exit_code == 0, result.output
    assert "<details open" in result.output
    assert "▼ sample_transcript" in result.output


def test_render_empty_input_warns(tmp_path: Path):
    blank = tmp_path / "blank.txt"
    blank.write_text("\n   \n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["render", str(blank)])
    assert result.exit_code == 0
    assert "Nothing to render" in result.output


def test_missing_input_is_a_click_error(tmp_path: Path):
    result = CliRunner().invoke(cli, ["render", str(tmp_path / "nope.txt")])
    assert result.exit_code != 0
    assert "File not found" in result.output


def test_bad_config_is_a_click_error(tmp_path: Path, sample_transcript: Path):
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    result = CliRunner().invoke(cli, ["render", str(sample_transcript), "-c", str(bad)])
    assert result.exit_code != 0
    assert "Invalid JSON" in result.output


def test_bad_override_is_a_click_error(sample_transcript: Path):
    result = CliRunner().invoke(cli, ["render", str(sample_transcript), "-s", "novalue"])
    assert result.exit_code != 0
    assert "KEY=VALUE" in result.output


def test_log_level_option(sample_transcript: Path):
    result = CliRunner().invoke(cli, ["--log-level", "debug", "render", str(sample_transcript)])
    assert result.exit_code == 0, result.output


def test_preview_writes_page_without_opening(tmp_path: Path, sample_transcript: Path, monkeypatch):
    opened: list[Path] = []
    monkeypatch.setattr(cli_module, "open_output", lambda path: opened.append(Path(path)))
    out_dir = tmp_path / "preview"
    result = CliRunner().invoke(cli, ["preview", str(sample_transcript), "-o", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert (out_dir / "index.html").exists()
    assert opened == []


def test_preview_defaults_to_temp_dir_and_browser(tmp_path: Path, sample_transcript: Path, monkeypatch):
    opened: list[Path] = []
    monkeypatch.setattr(cli_module, "open_output", lambda path: opened.append(Path(path)))
    monkeypatch.setattr(cli_module, "default_output_dir", lambda: tmp_path / "auto")
    result = CliRunner().invoke(cli, ["preview", str(sample_transcript)])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "auto" / "index.html").exists()
    assert opened == [tmp_path / "auto"]


def test_preview_open_flag_with_output(tmp_path: Path, sample_transcript: Path, monkeypatch):
    opened: list[Path] = []
    monkeypatch.setattr(cli_module, "open_output", lambda path: opened.append(Path(path)))
    result = CliRunner().invoke(cli, ["preview", str(sample_transcript), "-o", str(tmp_path), "--open"])
    assert result.exit_code == 0, result.output
    assert opened == [tmp_path]


def test_tui_reports_load_errors_before_starting(tmp_path: Path, monkeypatch):
    started: list[bool] = []
    monkeypatch.setattr(cli_module, "run_tui", lambda **_kwargs: started.append(True))
    result = CliRunner().invoke(cli, ["tui", str(tmp_path / "nope.txt")])
    assert result.exit_code != 0
    assert started == []


def test_tui_passes_inputs(sample_transcript: Path, monkeypatch):
    calls: list[dict] = []
    monkeypatch.setattr(cli_module, "run_tui", lambda **kwargs: calls.append(kwargs))
    result = CliRunner().invoke(cli, ["tui", str(sample_transcript)])
    assert result.exit_code == 0, result.output
    assert calls == [{"paths": [sample_transcript], "config_path": None, "collapsible": False}]
