"""Load editor defaults, pin wiring, and store location from TOML files."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Type, TypeVar

import tomllib

from .codegen import ParallelPins
from .settings import DataType, GlyphSettings, Interfacing, LcdColor, parse_enum

CONFIG_ENV_VAR = "LCDGLYPH_CONFIG"
DEFAULT_STORE_DIR = Path("~/.local/share/lcdglyph")
VALID_PIN_RANGE = range(0, 256)

_EnumT = TypeVar("_EnumT", bound=Enum)


class ConfigError(ValueError):
    """Raised when a configuration file fails validation."""


@dataclass(frozen=True)
class GlyphConfig:
    """Resolved configuration used by the editor and CLI."""

    defaults: GlyphSettings = field(default_factory=GlyphSettings)
    store_dir: Path = DEFAULT_STORE_DIR
    pins: ParallelPins = field(default_factory=ParallelPins)
    history_limit: Optional[int] = None

    @classmethod
    def default(cls) -> "GlyphConfig":
        return cls(store_dir=DEFAULT_STORE_DIR.expanduser())


def load_config(config_path: Path) -> GlyphConfig:
    """Parse and validate configuration at ``config_path``."""

    try:
        with config_path.open("rb") as stream:
            data = tomllib.load(stream)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {config_path}: {exc}") from exc

    return GlyphConfig(
        defaults=_parse_defaults(_table(data, "defaults")),
        store_dir=_parse_store_dir(_table(data, "store"), base=config_path.parent),
        pins=_parse_pins(_table(data, "parallel_pins")),
        history_limit=_parse_history_limit(_table(data, "history")),
    )


def resolve_config(config_path: Optional[Path] = None) -> GlyphConfig:
    """Load ``config_path``, the ``LCDGLYPH_CONFIG`` file, or built-in defaults."""

    if config_path is None:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        if not env_value:
            return GlyphConfig.default()
        config_path = Path(env_value).expanduser()
    if not config_path.exists():
        raise ConfigError(f"configuration file not found: {config_path}")
    return load_config(config_path)


def _table(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{name}] section must be a table")
    return section


def _parse_defaults(section: Mapping[str, Any]) -> GlyphSettings:
    base = GlyphSettings()
    return GlyphSettings(
        color=_coerce_member(LcdColor, section.get("color"), base.color, "color"),
        interfacing=_coerce_member(
            Interfacing, section.get("interfacing"), base.interfacing, "interfacing"
        ),
        datatype=_coerce_member(DataType, section.get("datatype"), base.datatype, "datatype"),
    )


def _coerce_member(
    enum_type: Type[_EnumT], raw_value: Any, default: _EnumT, name: str
) -> _EnumT:
    if raw_value is None:
        return default
    member = parse_enum(enum_type, raw_value)
    if member is None:
        choices = ", ".join(item.value for item in enum_type)
        raise ConfigError(f"defaults.{name} must be one of: {choices}")
    return member


def _parse_store_dir(section: Mapping[str, Any], *, base: Path) -> Path:
    raw_path = section.get("path")
    if raw_path is None:
        return DEFAULT_STORE_DIR.expanduser()
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise ConfigError("store.path must be a non-empty string")
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _parse_pins(section: Mapping[str, Any]) -> ParallelPins:
    defaults = ParallelPins()
    values: dict[str, int] = {}
    for name in ("rs", "en", "d4", "d5", "d6", "d7"):
        raw_pin = section.get(name)
        if raw_pin is None:
            values[name] = getattr(defaults, name)
            continue
        if isinstance(raw_pin, bool) or not isinstance(raw_pin, int):
            raise ConfigError(f"parallel_pins.{name} must be an integer")
        if raw_pin not in VALID_PIN_RANGE:
            raise ConfigError(
                f"parallel_pins.{name} {raw_pin} outside supported range "
                f"{VALID_PIN_RANGE.start}-{VALID_PIN_RANGE.stop - 1}"
            )
        values[name] = raw_pin
    return ParallelPins(**values)


def _parse_history_limit(section: Mapping[str, Any]) -> Optional[int]:
    raw_limit = section.get("limit")
    if raw_limit is None:
        return None
    if isinstance(raw_limit, bool) or not isinstance(raw_limit, int) or raw_limit < 1:
        raise ConfigError("history.limit must be a positive integer")
    return raw_limit


__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "GlyphConfig",
    "load_config",
    "resolve_config",
]
