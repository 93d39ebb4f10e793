from __future__ import annotations

import typer

from .config import ArchiveSettings, ConfigStore, apply_env_overrides


def get_settings_from_context(
    ctx: typer.Context, *, store: ConfigStore | None = None
) -> ArchiveSettings:
    """Return a cached :class:`ArchiveSettings` instance stored on ``ctx``."""

    ctx.ensure_object(dict)
    existing = ctx.obj.get("settings") if ctx.obj else None
    if isinstance(existing, ArchiveSettings):
        return existing

    cfg_store = store or ConfigStore()
    settings = apply_env_overrides(cfg_store.load())
    ctx.obj["settings"] = settings
    return settings


def resolve_exact(option_value: bool | None, *, settings: ArchiveSettings) -> bool:
    """Return the effective exact-match flag for a CLI command."""

    if option_value is not None:
        return option_value
    return settings.exact


def resolve_strict(option_value: bool | None, *, settings: ArchiveSettings) -> bool:
    """Return whether a lookup that matches nothing should fail the command."""

    if option_value is not None:
        return option_value
    return settings.strict
