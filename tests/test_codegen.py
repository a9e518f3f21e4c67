from __future__ import annotations

from lcdglyph.codegen import (
    ParallelPins,
    build_arduino_code,
    render_literals,
    sketch_template,
    sketch_text,
)
from lcdglyph.settings import DataType, Interfacing

ROWS = (0x1F, 0x11, 0x11, 0x1F, 0x01, 0x01, 0x1F, 0x00)


def test_render_literals_in_both_styles() -> None:
    assert render_literals(ROWS, DataType.BIN) == [
        "B11111",
        "B10001",
        "B10001",
        "B11111",
        "B00001",
        "B00001",
        "B11111",
        "B00000",
    ]
    assert render_literals(ROWS, DataType.HEX) == [
        "0x1F",
        "0x11",
        "0x11",
        "0x1F",
        "0x01",
        "0x01",
        "0x1F",
        "0x00",
    ]


def test_parallel_sketch_uses_pin_io_class() -> None:
    code = build_arduino_code(ROWS, Interfacing.PARALLEL, DataType.HEX)

    assert code.startswith("#include <hd44780.h>\n#include <hd44780ioClass/hd44780_pinIO.h>")
    assert "const int LCD_RS = 12;" in code
    assert "const int LCD_D7 = 2;" in code
    assert "hd44780_pinIO lcd(LCD_RS, LCD_EN, LCD_D4, LCD_D5, LCD_D6, LCD_D7);" in code
    assert "byte customChar[] = {\n  0x1F,\n  0x11,\n" in code
    assert "  0x1F,\n  0x00\n};" in code
    assert code.endswith("void loop() { }")
    assert "{DataX" not in code


def test_i2c_sketch_auto_detects_backpack() -> None:
    code = build_arduino_code(ROWS, Interfacing.I2C, DataType.BIN)

    assert "#include <hd44780ioClass/hd44780_I2Cexp.h>" in code
    assert "hd44780_I2Cexp lcd;" in code
    assert "LCD_RS" not in code
    assert "  B11111,\n  B10001," in code
    assert "lcd.createChar(0, customChar);" in code


def test_generation_is_deterministic() -> None:
    first = build_arduino_code(ROWS, Interfacing.PARALLEL, DataType.HEX)
    second = build_arduino_code(list(ROWS), Interfacing.PARALLEL, DataType.HEX)

    assert first == second


def test_switching_datatype_only_changes_literals() -> None:
    for interfacing in Interfacing:
        hex_code = build_arduino_code(ROWS, interfacing, DataType.HEX)
        bin_code = build_arduino_code(ROWS, interfacing, DataType.BIN)
        for literal in render_literals(ROWS, DataType.HEX):
            hex_code = hex_code.replace(literal, "<row>", 1)
        for literal in render_literals(ROWS, DataType.BIN):
            bin_code = bin_code.replace(literal, "<row>", 1)
        assert hex_code == bin_code


def test_template_keeps_placeholders_in_row_order() -> None:
    template = sketch_template(Interfacing.I2C)

    positions = [template.index(f"{{DataX{index}}}") for index in range(8)]
    assert positions == sorted(positions)


def test_custom_pins_only_change_pin_constants() -> None:
    pins = ParallelPins(rs=7, en=8, d4=9, d5=10, d6=11, d7=12)

    code = build_arduino_code(ROWS, Interfacing.PARALLEL, DataType.BIN, pins=pins)

    assert "const int LCD_RS = 7;" in code
    assert "const int LCD_D7 = 12;" in code
    default = build_arduino_code(ROWS, Interfacing.PARALLEL, DataType.BIN)
    assert code.splitlines()[5:] != default.splitlines()[5:]
    assert code.splitlines()[-20:] == default.splitlines()[-20:]


def test_output_has_no_trailing_whitespace_and_sketch_adds_newline() -> None:
    code = build_arduino_code(ROWS, Interfacing.I2C, DataType.HEX)

    assert code == code.rstrip()
    assert sketch_text(code) == code + "\n"


def test_out_of_range_rows_are_clamped() -> None:
    assert render_literals((99, -4), DataType.BIN) == ["B11111", "B00000"]
    assert render_literals((99, -4), DataType.HEX) == ["0x1F", "0x00"]
