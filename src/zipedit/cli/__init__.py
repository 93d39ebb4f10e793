from __future__ import annotations

import logging

import typer

from . import archive, config

app = typer.Typer(help="zipedit: edit ZIP archives in place", no_args_is_help=True)

archive.register(app)
app.add_typer(config.app, name="config")


@app.callback()
def common(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log archive activity"),
) -> None:
    """Initialize shared Typer context state."""

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", None)


__all__ = ["app", "archive", "config"]
