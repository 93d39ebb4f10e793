"""Archive commands: inspect, mutate and extract ZIP containers."""

from __future__ import annotations

from pathlib import Path

import typer
from rich import print
from rich.table import Table

from .. import archive as ops
from ..cli_utils import get_settings_from_context, resolve_exact, resolve_strict
from ..paths import relative_to, split_archive_path
from .common import console, handle_cli_errors

ARCHIVE_ARGUMENT = typer.Argument(..., help="Path to the ZIP archive")
NAME_ARGUMENT = typer.Argument(..., help="Entry name (substring of the entry path unless --exact)")
SOURCE_ARGUMENT = typer.Argument(..., help="File or directory to store in the archive")
FOLDER_OPTION = typer.Option("", "--folder", "-f", help="Folder inside the archive")
EXACT_OPTION = typer.Option(
    None,
    "--exact/--contains",
    help="Match full entry paths instead of substrings (default: configured match mode)",
)
STRICT_OPTION = typer.Option(
    None,
    "--strict/--lenient",
    help="Fail when nothing matches (default: configured behaviour)",
)
BASE_OPTION = typer.Option(
    None,
    "--base",
    help="Keep the path of a file SOURCE relative to this directory inside the archive",
)
DEST_OPTION = typer.Option(..., "--dest", "-d", help="Destination directory")
FLATTEN_OPTION = typer.Option(
    False,
    "--flatten",
    help="Drop archive folders; files sharing a name overwrite each other",
)


def register(app: typer.Typer) -> None:
    app.command("create")(create)
    app.command("list")(list_command)
    app.command("find")(find)
    app.command("exists")(exists)
    app.command("add")(add)
    app.command("update")(update)
    app.command("remove")(remove)
    app.command("extract")(extract)
    app.command("extract-all")(extract_all)


@handle_cli_errors
def create(
    archive: Path = ARCHIVE_ARGUMENT,
    force: bool = typer.Option(False, "--force", help="Replace an existing file"),
) -> None:
    """Create an empty archive."""

    path = ops.create_archive(archive, overwrite=force)
    print(f"[green]Created[/green] {path}")


@handle_cli_errors
def list_command(
    archive: Path = ARCHIVE_ARGUMENT,
    json_output: bool = typer.Option(False, "--json", help="Emit entries as JSON"),
) -> None:
    """List archive entries in stored order."""

    entries = ops.list_entries(archive)
    if json_output:
        console.print_json(data=[entry.model_dump(mode="json") for entry in entries])
        return

    table = Table("Name", "Size", "Packed", "Method")
    for entry in entries:
        table.add_row(entry.name, str(entry.file_size), str(entry.compress_size), entry.compression)
    console.print(table)


@handle_cli_errors
def find(
    ctx: typer.Context,
    archive: Path = ARCHIVE_ARGUMENT,
    name: str = NAME_ARGUMENT,
    folder: str = FOLDER_OPTION,
    exact: bool | None = EXACT_OPTION,
) -> None:
    """Print the path of the first matching entry."""

    settings = get_settings_from_context(ctx)
    match = ops.find_entry(archive, name, folder, exact=resolve_exact(exact, settings=settings))
    if not match.found:
        print(f"[yellow]No entry matching[/yellow] {name}")
        raise typer.Exit(1)
    print(match.name)


@handle_cli_errors
def exists(
    ctx: typer.Context,
    archive: Path = ARCHIVE_ARGUMENT,
    name: str = NAME_ARGUMENT,
    folder: str = FOLDER_OPTION,
    exact: bool | None = EXACT_OPTION,
) -> None:
    """Exit with status 0 when a matching entry exists, 1 otherwise."""

    settings = get_settings_from_context(ctx)
    found = ops.exists(archive, name, folder, exact=resolve_exact(exact, settings=settings))
    print("true" if found else "false")
    if not found:
        raise typer.Exit(1)


def _store(
    ctx: typer.Context,
    archive: Path,
    source: Path,
    folder: str,
    base: Path | None,
    *,
    update: bool,
) -> None:
    settings = get_settings_from_context(ctx)
    options = {
        "compression": settings.compression_method,
        "compresslevel": settings.compresslevel,
    }
    if source.is_dir():
        if base is not None:
            raise typer.BadParameter(
                "--base applies to single files; directories keep paths relative to themselves",
                param_hint="--base",
            )
        names = ops.add_directory_tree(archive, source, folder, **options)
        print(f"[green]Stored {len(names)} files[/green] from {source}")
        return
    if base is not None:
        relative = relative_to(base, source, case_sensitive=settings.case_sensitive)
        relative_folder, _ = split_archive_path(relative)
        folder = "/".join(part for part in (folder, relative_folder) if part)
    if update:
        arcname = ops.update_file(archive, source, folder, **options)
    else:
        arcname = ops.add_file(archive, source, folder, **options)
    print(f"[green]Stored[/green] {arcname}")


@handle_cli_errors
def add(
    ctx: typer.Context,
    archive: Path = ARCHIVE_ARGUMENT,
    source: Path = SOURCE_ARGUMENT,
    folder: str = FOLDER_OPTION,
    base: Path | None = BASE_OPTION,
) -> None:
    """Add a file, or a directory tree, replacing entries at the same paths."""

    _store(ctx, archive, source, folder, base, update=False)


@handle_cli_errors
def update(
    ctx: typer.Context,
    archive: Path = ARCHIVE_ARGUMENT,
    source: Path = SOURCE_ARGUMENT,
    folder: str = FOLDER_OPTION,
    base: Path | None = BASE_OPTION,
) -> None:
    """Remove the existing entry for SOURCE, then store it again.

    A directory SOURCE is stored exactly as `add` stores it.
    """

    _store(ctx, archive, source, folder, base, update=True)


@handle_cli_errors
def remove(
    ctx: typer.Context,
    archive: Path = ARCHIVE_ARGUMENT,
    name: str = NAME_ARGUMENT,
    exact: bool | None = EXACT_OPTION,
    strict: bool | None = STRICT_OPTION,
) -> None:
    """Delete the first matching entry."""

    settings = get_settings_from_context(ctx)
    removed = ops.remove_file(
        archive,
        name,
        exact=resolve_exact(exact, settings=settings),
        strict=resolve_strict(strict, settings=settings),
    )
    if removed.found:
        print(f"[green]Removed[/green] {removed.name}")
    else:
        print(f"[yellow]No entry matching[/yellow] {name}")


@handle_cli_errors
def extract(
    ctx: typer.Context,
    archive: Path = ARCHIVE_ARGUMENT,
    name: str = NAME_ARGUMENT,
    dest: Path = DEST_OPTION,
    exact: bool | None = EXACT_OPTION,
    strict: bool | None = STRICT_OPTION,
) -> None:
    """Extract the first matching file into DEST, overwriting existing files."""

    settings = get_settings_from_context(ctx)
    target = ops.extract_file(
        archive,
        name,
        dest,
        exact=resolve_exact(exact, settings=settings),
        strict=resolve_strict(strict, settings=settings),
    )
    if target is None:
        print(f"[yellow]No entry matching[/yellow] {name}")
    else:
        print(f"[green]Extracted[/green] {target}")


@handle_cli_errors
def extract_all(
    archive: Path = ARCHIVE_ARGUMENT,
    dest: Path = DEST_OPTION,
    folder: str | None = typer.Option(
        None, "--folder", "-f", help="Only entries whose path contains this text"
    ),
    flatten: bool = FLATTEN_OPTION,
) -> None:
    """Extract every entry (or those under --folder) into DEST."""

    if folder:
        written = ops.extract_directory(archive, folder, dest, flatten)
    else:
        written = ops.extract_all(archive, dest, flatten)
    print(f"[green]Extracted {len(written)} files[/green] to {dest}")


__all__ = ["register"]
