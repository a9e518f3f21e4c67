"""Enumerated glyph settings and their permissive decoders."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Type, TypeVar


class LcdColor(str, Enum):
    """Backlight theme; cosmetic only, never affects generated code."""

    GREEN = "green"
    BLUE = "blue"
    AMBER = "amber"
    WHITE = "white"
    RED = "red"


class Interfacing(str, Enum):
    """How the display is wired to the microcontroller."""

    PARALLEL = "parallel"
    I2C = "i2c"


class DataType(str, Enum):
    """Literal style used for row values in generated sketches."""

    BIN = "bin"
    HEX = "hex"


_EnumT = TypeVar("_EnumT", bound=Enum)


def parse_enum(enum_type: Type[_EnumT], value: Any) -> Optional[_EnumT]:
    """Return the member of ``enum_type`` named by ``value`` or ``None``."""

    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_type(value)
    except ValueError:
        return None


def coerce_color(value: Any, default: LcdColor = LcdColor.GREEN) -> LcdColor:
    member = parse_enum(LcdColor, value)
    return default if member is None else member


def coerce_interfacing(
    value: Any, default: Interfacing = Interfacing.PARALLEL
) -> Interfacing:
    member = parse_enum(Interfacing, value)
    return default if member is None else member


def coerce_datatype(value: Any, default: DataType = DataType.BIN) -> DataType:
    member = parse_enum(DataType, value)
    return default if member is None else member


@dataclass(frozen=True)
class GlyphSettings:
    """Settings that travel alongside a glyph wherever it is serialised."""

    color: LcdColor = LcdColor.GREEN
    interfacing: Interfacing = Interfacing.I2C
    datatype: DataType = DataType.BIN

    def with_updates(
        self,
        *,
        color: Optional[LcdColor] = None,
        interfacing: Optional[Interfacing] = None,
        datatype: Optional[DataType] = None,
    ) -> "GlyphSettings":
        return replace(
            self,
            color=color if color is not None else self.color,
            interfacing=interfacing if interfacing is not None else self.interfacing,
            datatype=datatype if datatype is not None else self.datatype,
        )


__all__ = [
    "DataType",
    "GlyphSettings",
    "Interfacing",
    "LcdColor",
    "coerce_color",
    "coerce_datatype",
    "coerce_interfacing",
    "parse_enum",
]
