"""Render hd44780 Arduino sketches that install a custom character."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .bitmap import COLS, ROWS, clamp_row_value
from .settings import DataType, Interfacing

SKETCH_FILENAME = "lcd_custom_char.ino"

_CHAR_TABLE = """byte customChar[] = {
  {DataX0},
  {DataX1},
  {DataX2},
  {DataX3},
  {DataX4},
  {DataX5},
  {DataX6},
  {DataX7}
};

void setup() {
  int status = lcd.begin(16, 2);
  if (status) {
    // If you want error details, see: https://github.com/duinoWitchery/hd44780
    // status = lcd.status();
  }

  lcd.createChar(0, customChar);
  lcd.clear();
  lcd.home();
  lcd.write((uint8_t)0);
}

void loop() { }
"""

_PARALLEL_HEADER = """#include <hd44780.h>
#include <hd44780ioClass/hd44780_pinIO.h>

// Pin wiring: RS, EN, D4, D5, D6, D7
const int LCD_RS = {rs};
const int LCD_EN = {en};
const int LCD_D4 = {d4};
const int LCD_D5 = {d5};
const int LCD_D6 = {d6};
const int LCD_D7 = {d7};

hd44780_pinIO lcd(LCD_RS, LCD_EN, LCD_D4, LCD_D5, LCD_D6, LCD_D7);

"""

_I2C_HEADER = """#include <hd44780.h>
#include <hd44780ioClass/hd44780_I2Cexp.h>

// Uses the hd44780 "I2Cexp" i/o class for PCF8574 backpacks.
// It can auto-detect the I2C address and the pin mapping on most modules.
hd44780_I2Cexp lcd;

"""


@dataclass(frozen=True)
class ParallelPins:
    """Arduino pin numbers used by the direct-wiring sketch."""

    rs: int = 12
    en: int = 11
    d4: int = 5
    d5: int = 4
    d6: int = 3
    d7: int = 2


def render_literals(rows: Sequence[int], datatype: DataType) -> list[str]:
    """Return the C literal for each row in ``datatype`` style."""

    values = [clamp_row_value(value) for value in rows]
    if datatype is DataType.HEX:
        return [f"0x{value:02X}" for value in values]
    return [f"B{value:0{COLS}b}" for value in values]


def sketch_template(
    interfacing: Interfacing, *, pins: Optional[ParallelPins] = None
) -> str:
    """Return the sketch skeleton with ``{DataX0}``..``{DataX7}`` placeholders."""

    if interfacing is Interfacing.PARALLEL:
        pins = pins or ParallelPins()
        header = _PARALLEL_HEADER
        for name in ("rs", "en", "d4", "d5", "d6", "d7"):
            header = header.replace("{" + name + "}", str(getattr(pins, name)))
        return header + _CHAR_TABLE
    return _I2C_HEADER + _CHAR_TABLE


def build_arduino_code(
    rows: Sequence[int],
    interfacing: Interfacing,
    datatype: DataType,
    *,
    pins: Optional[ParallelPins] = None,
) -> str:
    """Substitute the eight row literals into the ``interfacing`` skeleton."""

    literals = render_literals(rows, datatype)
    code = sketch_template(interfacing, pins=pins)
    for index in range(ROWS):
        code = code.replace(f"{{DataX{index}}}", literals[index], 1)
    return code.rstrip()


def sketch_text(code: str) -> str:
    """Return ``code`` as written to a ``.ino`` download."""

    return code + "\n"


__all__ = [
    "ParallelPins",
    "SKETCH_FILENAME",
    "build_arduino_code",
    "render_literals",
    "sketch_template",
    "sketch_text",
]
