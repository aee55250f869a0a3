from __future__ import annotations

import logging
from pathlib import Path

import click
from click_default_group import DefaultGroup

from chatlog_studio.blocks import ContentBlock, TranscriptLoadError, load_blocks
from chatlog_studio.config import CONFIG_ENV_VAR, ConfigLoadError, StyleConfig, load_config
from chatlog_studio.transcript import (
    default_output_dir,
    generate_preview_page,
    open_output,
    render_fragment_html,
)
from chatlog_studio.tui import run_tui


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

_paths_argument = click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
_config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help=f"Style settings JSON (default: ${CONFIG_ENV_VAR}, else built-in defaults).",
)
_set_option = click.option(
    "-s",
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override one style setting, e.g. -s bubbleRadius=8. Repeatable.",
)
_collapsible_option = click.option(
    "--collapsible", is_flag=True, help="Wrap every block in a collapsible section."
)


def _parse_overrides(overrides: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for item in overrides:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.ClickException(f"Expected KEY=VALUE, got: {item}")
        parsed[key.strip()] = value
    return parsed


def _load_inputs(
    paths: tuple[Path, ...],
    config_path: Path | None,
    overrides: tuple[str, ...] = (),
    *,
    collapsible: bool = False,
) -> tuple[list[ContentBlock], StyleConfig]:
    try:
        config = load_config(config_path)
        blocks = load_blocks(paths, collapsible=collapsible)
    except (ConfigLoadError, TranscriptLoadError) as e:
        raise click.ClickException(str(e)) from e
    if overrides:
        config = config.with_overrides(**_parse_overrides(overrides))
    return blocks, config


@click.group(cls=DefaultGroup, default="render", default_if_no_args=False)
@click.version_option(None, "-v", "--version", package_name="chatlog-studio")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity (written to stderr).",
)
def cli(log_level: str) -> None:
    """Turn marker-annotated chat logs into inline-styled HTML fragments.

\b
Transcript lines:
  ---            divider
  ## Title       heading (1-3 #)
  << text        user bubble
  >> text        AI bubble
  anything else  narration

\b
Examples:
  chatlog-studio story.txt > story.html
  chatlog-studio render part1.txt part2.txt -c theme.json -o out.html
  chatlog-studio preview story.txt
  chatlog-studio tui story.txt
    """
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command("render")
@_paths_argument
@_config_option
@_set_option
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write the fragment to this file (default: stdout).")
@_collapsible_option
def render_cmd(
    paths: tuple[Path, ...],
    config_path: Path | None,
    overrides: tuple[str, ...],
    output: Path | None,
    collapsible: bool,
) -> None:
    """Print the HTML fragment for one or more transcripts."""
    blocks, config = _load_inputs(paths, config_path, overrides, collapsible=collapsible)
    fragment = render_fragment_html(blocks, config)
    if not fragment:
        click.echo("Nothing to render: every block is empty.", err=True)

    if output is None:
        if fragment:
            click.echo(fragment)
        return

    output = output.expanduser()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(fragment + "\n" if fragment else "", encoding="utf-8")
    click.echo(f"Output: {output}", err=True)


@cli.command("preview")
@_paths_argument
@_config_option
@_set_option
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output directory (default: temp dir + open browser).")
@click.option("--open/--no-open", "open_browser", default=None, help="Open the preview page in your browser.")
@_collapsible_option
def preview_cmd(
    paths: tuple[Path, ...],
    config_path: Path | None,
    overrides: tuple[str, ...],
    output: Path | None,
    open_browser: bool | None,
    collapsible: bool,
) -> None:
    """Write a standalone page showing the rendered fragment and its markup."""
    blocks, config = _load_inputs(paths, config_path, overrides, collapsible=collapsible)
    out_dir = default_output_dir() if output is None else output.expanduser()
    page = generate_preview_page(blocks, config, out_dir)

    if open_browser or (open_browser is None and output is None):
        open_output(out_dir)

    click.echo(f"Output: {page}")


@cli.command("tui")
@_paths_argument
@_config_option
@_collapsible_option
def tui_cmd(paths: tuple[Path, ...], config_path: Path | None, collapsible: bool) -> None:
    """Browse the rendered fragment as a tree in the terminal (r reloads)."""
    # Fail fast on bad inputs before taking over the terminal.
    _load_inputs(paths, config_path, collapsible=collapsible)
    run_tui(paths=list(paths), config_path=config_path, collapsible=collapsible)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
