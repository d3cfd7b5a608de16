# === NAVMAP v1 ===
# {
#   "module": "RustReleases.cli",
#   "purpose": "Typer CLI for querying release indexes",
#   "sections": [
#     {"id": "context", "name": "CliContext", "anchor": "class-clicontext", "kind": "class"},
#     {"id": "helpers", "name": "Index loading helpers", "anchor": "HELP", "kind": "helpers"},
#     {"id": "commands", "name": "Commands", "anchor": "CMD", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Command line interface for release index queries.

Examples::

    $ rust-releases latest
    $ rust-releases --format json list --source changelog
    $ rust-releases contains 1.50.0 --source dist-index --input dist.txt
"""

from __future__ import annotations

import contextlib
import json
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console

from . import __version__
from .channel import Channel
from .errors import ConfigurationError, ReleasesError
from .logging_utils import setup_logging
from .release import Release, ReleaseIndex
from .settings import ReleasesSettings, load_settings, reset_settings
from .sources import (
    SOURCES,
    ChannelManifests,
    RustChangelog,
    RustDistWithCLI,
    build_index,
    fetch_index,
)

__all__ = ["app", "CliContext", "get_context", "main"]

_console = Console()
_err_console = Console(stderr=True)

_VERBOSITY_LEVELS = {0: None, 1: "INFO"}


class CliContext:
    """State shared by every command of one invocation."""

    def __init__(
        self,
        settings: ReleasesSettings,
        *,
        verbosity: int = 0,
        format_output: str = "table",
    ) -> None:
        self.settings = settings
        self.verbosity = verbosity
        self.format_output = format_output
        self.console = _console


app = typer.Typer(
    name="rust-releases",
    help="Query the index of released Rust toolchain versions",
    no_args_is_help=True,
)

_context: Optional[CliContext] = None


def get_context() -> CliContext:
    """Return the context created by the global callback.

    Raises:
        RuntimeError: If the callback has not run.
    """
    if _context is None:
        raise RuntimeError("CLI context not initialized")
    return _context


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"rust-releases {__version__}")
        raise typer.Exit(0)


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        envvar="RUST_RELEASES_CONFIG",
        help="Path to a YAML settings file",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
    format_output: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table or json",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Global options apply to all subcommands and go before the subcommand name."""
    global _context

    if format_output not in {"table", "json"}:
        raise typer.BadParameter("must be 'table' or 'json'", param_hint="--format")
    try:
        settings = load_settings(config)
    except ConfigurationError as exc:
        _err_console.print(f"[red]Error loading settings: {exc}[/red]")
        raise typer.Exit(2)
    reset_settings(settings)

    level = _VERBOSITY_LEVELS.get(verbosity, "DEBUG") or settings.logging.level
    setup_logging(level=level, emit_json=settings.logging.emit_json_logs)

    _context = CliContext(settings, verbosity=verbosity, format_output=format_output)


# --- Index loading helpers ---------------------------------------------------


@contextlib.contextmanager
def _report_errors() -> Iterator[None]:
    try:
        yield
    except ReleasesError as exc:
        _err_console.print(f"[red]Error ({exc.kind.value}): {exc}[/red]")
        raise typer.Exit(1)


def _load_index(ctx: CliContext, source: str, channel: str, inputs: List[Path]) -> ReleaseIndex:
    if source not in SOURCES:
        raise typer.BadParameter(
            f"must be one of {', '.join(sorted(SOURCES))}", param_hint="--source"
        )
    release_channel = Channel.parse(channel)

    if source == "dist-index":
        if len(inputs) != 1:
            raise typer.BadParameter(
                "the dist-index source needs exactly one listing file", param_hint="--input"
            )
        return build_index(RustDistWithCLI.from_path(inputs[0]))
    if source == "changelog":
        if len(inputs) > 1:
            raise typer.BadParameter(
                "the changelog source takes a single file", param_hint="--input"
            )
        if inputs:
            return build_index(RustChangelog.from_path(inputs[0]))
        return fetch_index(RustChangelog, release_channel, ctx.settings)
    if inputs:
        return build_index(ChannelManifests.from_paths(inputs))
    return fetch_index(ChannelManifests, release_channel, ctx.settings)


_SOURCE_OPTION = typer.Option(
    "manifests", "--source", "-s", help="Index source: manifests, changelog or dist-index"
)
_CHANNEL_OPTION = typer.Option("stable", "--channel", help="Release channel")
_INPUT_OPTION = typer.Option(
    None,
    "--input",
    "-i",
    exists=True,
    dir_okay=False,
    help="Local document(s) to build from instead of fetching",
)


# --- Commands -----------------------------------------------------------------


@app.command("list")
def list_cmd(
    source: str = _SOURCE_OPTION,
    channel: str = _CHANNEL_OPTION,
    inputs: Optional[List[Path]] = _INPUT_OPTION,
) -> None:
    """List every release, lowest version first."""
    ctx = get_context()
    with _report_errors():
        index = _load_index(ctx, source, channel, inputs or [])
    versions = [str(release) for release in index]
    if ctx.format_output == "json":
        typer.echo(json.dumps(versions))
        return
    for version in versions:
        typer.echo(version)


@app.command()
def latest(
    source: str = _SOURCE_OPTION,
    channel: str = _CHANNEL_OPTION,
    inputs: Optional[List[Path]] = _INPUT_OPTION,
) -> None:
    """Print the highest released version."""
    ctx = get_context()
    with _report_errors():
        index = _load_index(ctx, source, channel, inputs or [])
    release = index.most_recent()
    if release is None:
        _err_console.print("[yellow]No releases found[/yellow]")
        raise typer.Exit(1)
    if ctx.format_output == "json":
        typer.echo(json.dumps({"latest": str(release), "count": len(index)}))
        return
    typer.echo(str(release))


@app.command()
def contains(
    version: str = typer.Argument(..., help="Semantic version to look up, e.g. 1.50.0"),
    source: str = _SOURCE_OPTION,
    channel: str = _CHANNEL_OPTION,
    inputs: Optional[List[Path]] = _INPUT_OPTION,
) -> None:
    """Exit 0 when VERSION was released, 1 otherwise."""
    ctx = get_context()
    try:
        release = Release.parse(version)
    except ValueError as exc:
        raise typer.BadParameter(
            f"{version!r} is not a semantic version", param_hint="VERSION"
        ) from exc
    with _report_errors():
        index = _load_index(ctx, source, channel, inputs or [])
    found = release in index
    if ctx.format_output == "json":
        typer.echo(json.dumps({"version": version, "released": found}))
    else:
        ctx.console.print(
            f"[green]{version} is released[/green]" if found else f"[red]{version} not found[/red]"
        )
    if not found:
        raise typer.Exit(1)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
