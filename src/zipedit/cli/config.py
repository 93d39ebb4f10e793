"""Commands for inspecting and changing persisted archive settings."""

from __future__ import annotations

from dataclasses import asdict

import typer
from rich import print

from ..config import COMPRESSION_METHODS, MATCH_MODES, ConfigStore
from .common import console, handle_cli_errors

app = typer.Typer(help="Persisted defaults for archive commands")


@app.command("show")
@handle_cli_errors
def config_show() -> None:
    """Display the stored settings."""

    store = ConfigStore()
    console.print_json(data=asdict(store.load()))


@app.command("set")
@handle_cli_errors
def config_set(
    match_mode: str | None = typer.Option(
        None, "--match-mode", help=f"Entry lookup mode: {', '.join(MATCH_MODES)}"
    ),
    case_sensitive: bool | None = typer.Option(
        None,
        "--case-sensitive/--case-insensitive",
        help="Compare directory paths with case sensitivity",
    ),
    strict: bool | None = typer.Option(
        None, "--strict/--lenient", help="Fail remove/extract when nothing matches"
    ),
    compression: str | None = typer.Option(
        None,
        "--compression",
        help=f"Method for new entries: {', '.join(COMPRESSION_METHODS)}",
    ),
    compresslevel: int | None = typer.Option(
        None, "--compresslevel", min=0, max=9, help="Deflate level for new entries"
    ),
) -> None:
    """Persist new defaults; options that are not passed keep their value."""

    if match_mode is not None and match_mode not in MATCH_MODES:
        raise typer.BadParameter(f"Unknown match mode: {match_mode}")
    if compression is not None and compression not in COMPRESSION_METHODS:
        raise typer.BadParameter(f"Unknown compression method: {compression}")

    store = ConfigStore()
    settings = store.update(
        match_mode=match_mode,
        case_sensitive=case_sensitive,
        strict=strict,
        compression=compression,
        compresslevel=compresslevel,
    )
    print(f"[green]Saved settings to[/green] {store.path}")
    console.print_json(data=asdict(settings))


__all__ = ["app", "config_show", "config_set"]
