from __future__ import annotations

import json
import logging
import os
import zipfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ZIPEDIT_DIR = os.path.expanduser(os.getenv("ZIPEDIT_HOME", "~/.zipedit"))
CONFIG_PATH = os.path.join(ZIPEDIT_DIR, "config.json")

MATCH_MODES = ("contains", "exact")
COMPRESSION_METHODS: dict[str, int] = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ArchiveSettings:
    match_mode: str = "contains"
    case_sensitive: bool = False
    strict: bool = False
    compression: str = "deflated"
    compresslevel: int | None = None

    @property
    def exact(self) -> bool:
        return self.match_mode == "exact"

    @property
    def compression_method(self) -> int:
        return COMPRESSION_METHODS[self.compression]


def parse_bool(value: str) -> bool | None:
    """Interpret an environment-style boolean; ``None`` when unrecognised."""

    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def _coerce_settings(raw: dict[str, Any]) -> ArchiveSettings:
    defaults = ArchiveSettings()
    known = {f.name for f in fields(ArchiveSettings)}
    values = {k: v for k, v in raw.items() if k in known}
    settings = ArchiveSettings(**values)

    if settings.match_mode not in MATCH_MODES:
        logger.warning("Ignoring unknown match_mode %r in config", settings.match_mode)
        settings.match_mode = defaults.match_mode
    if settings.compression not in COMPRESSION_METHODS:
        logger.warning("Ignoring unknown compression %r in config", settings.compression)
        settings.compression = defaults.compression
    for flag in ("case_sensitive", "strict"):
        if not isinstance(getattr(settings, flag), bool):
            logger.warning("Ignoring non-boolean %s in config", flag)
            setattr(settings, flag, getattr(defaults, flag))
    level = settings.compresslevel
    if level is not None and (not isinstance(level, int) or not 0 <= level <= 9):
        logger.warning("Ignoring invalid compresslevel %r in config", level)
        settings.compresslevel = None
    return settings


class ConfigStore:
    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path else Path(CONFIG_PATH)

    def _ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as handle:
            try:
                raw = json.load(handle)
            except json.JSONDecodeError as exc:
                logger.warning("Config file %s is not valid JSON (%s); using defaults", self.path, exc)
                return {}
        if not isinstance(raw, dict):
            logger.warning("Config file %s does not hold an object; using defaults", self.path)
            return {}
        return raw

    def _write(self, data: dict[str, Any]) -> None:
        self._ensure()
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        tmp.replace(self.path)

    def load(self) -> ArchiveSettings:
        return _coerce_settings(self._read())

    def save(self, settings: ArchiveSettings) -> None:
        self._write(asdict(settings))

    def update(self, **changes: Any) -> ArchiveSettings:
        """Apply ``changes`` (``None`` values are skipped) and persist the result."""

        current = asdict(self.load())
        current.update({k: v for k, v in changes.items() if v is not None})
        settings = _coerce_settings(current)
        self.save(settings)
        return settings


def apply_env_overrides(settings: ArchiveSettings) -> ArchiveSettings:
    """Return ``settings`` with ``ZIPEDIT_STRICT``/``ZIPEDIT_MATCH_MODE`` applied."""

    strict_raw = os.getenv("ZIPEDIT_STRICT")
    if strict_raw:
        strict = parse_bool(strict_raw)
        if strict is None:
            logger.warning("Ignoring invalid ZIPEDIT_STRICT value %r", strict_raw)
        else:
            settings.strict = strict

    match_mode = os.getenv("ZIPEDIT_MATCH_MODE")
    if match_mode:
        if match_mode in MATCH_MODES:
            settings.match_mode = match_mode
        else:
            logger.warning("Ignoring invalid ZIPEDIT_MATCH_MODE value %r", match_mode)
    return settings
