from __future__ import annotations

import os
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

import typer
from rich.console import Console

from ..errors import (
    ArchiveNotFoundError,
    ContainmentError,
    CorruptArchiveError,
    ZipeditError,
)

console = Console()

CommandParams = ParamSpec("CommandParams")
CommandReturn = TypeVar("CommandReturn")


def handle_cli_errors(
    func: Callable[CommandParams, CommandReturn],
) -> Callable[CommandParams, CommandReturn]:
    @wraps(func)
    def wrapper(*args: CommandParams.args, **kwargs: CommandParams.kwargs) -> CommandReturn:
        try:
            return func(*args, **kwargs)
        except typer.BadParameter:
            raise
        except typer.Exit:
            raise
        except ArchiveNotFoundError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            console.print("Create the archive first with `zipedit create ARCHIVE`.")
            raise typer.Exit(1) from None
        except CorruptArchiveError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            console.print("The file could not be read as a ZIP container; it was left untouched.")
            raise typer.Exit(1) from None
        except ContainmentError as exc:
            console.print(f"[red]Error:[/red] Path is outside its base directory: {exc}")
            raise typer.Exit(1) from None
        except ZipeditError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from None
        except Exception as exc:
            if os.getenv("ZIPEDIT_DEBUG"):
                raise
            console.print(f"[red]Error:[/red] Unexpected failure: {exc}")
            console.print("Set ZIPEDIT_DEBUG=1 for a stack trace.")
            raise typer.Exit(1) from exc

    return wrapper


__all__ = ["console", "handle_cli_errors"]
