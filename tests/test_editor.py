from __future__ import annotations

import json
from typing import Callable

import pytest

from lcdglyph.bitmap import empty_rows
from lcdglyph.codegen import ParallelPins
from lcdglyph.editor import GlyphEditor
from lcdglyph.records import GlyphCharacter, ImportShapeError, dumps_payload, export_saves
from lcdglyph.settings import DataType, GlyphSettings, Interfacing, LcdColor
from lcdglyph.store import MemoryBlobStore, SavedGlyphStore


def test_fresh_editor_defaults() -> None:
    editor = GlyphEditor()

    assert editor.rows == empty_rows()
    assert editor.token == "00000000"
    assert editor.settings == GlyphSettings(
        color=LcdColor.GREEN, interfacing=Interfacing.I2C, datatype=DataType.BIN
    )
    assert "hd44780_I2Cexp lcd;" in editor.code


def test_stroke_paints_with_value_chosen_at_start() -> None:
    editor = GlyphEditor()

    assert editor.begin_stroke(0, 0) is True
    editor.continue_stroke(0, 1)
    editor.continue_stroke(0, 1)
    editor.continue_stroke(1, 1)
    editor.end_stroke()

    assert editor.rows[:2] == (0b11000, 0b01000)
    assert len(editor.history.past) == 3


def test_stroke_starting_on_lit_pixel_erases() -> None:
    editor = GlyphEditor()
    editor.load_character(GlyphCharacter(rows=(31,) * 8))

    assert editor.begin_stroke(0, 2) is False
    editor.continue_stroke(0, 3)
    editor.end_stroke()

    assert editor.rows[0] == 0b11001
    assert not editor.stroke_active


def test_continue_without_active_stroke_is_ignored() -> None:
    editor = GlyphEditor()

    editor.continue_stroke(3, 3)

    assert editor.rows == empty_rows()
    assert not editor.history.can_undo


def test_undo_redo_clear_invert() -> None:
    editor = GlyphEditor()
    editor.set_pixel(7, 4, True)
    editor.invert()
    assert editor.rows[7] == 0b11110

    editor.undo()
    assert editor.rows[7] == 1
    editor.redo()
    editor.clear()
    assert editor.rows == empty_rows()
    assert len(editor.history.past) == 3


def test_settings_do_not_touch_history() -> None:
    editor = GlyphEditor()
    editor.set_pixel(0, 0, True)

    editor.set_color(LcdColor.AMBER)
    editor.set_interfacing(Interfacing.PARALLEL)
    editor.set_datatype(DataType.HEX)

    assert len(editor.history.past) == 1
    assert editor.character == GlyphCharacter(
        rows=(16, 0, 0, 0, 0, 0, 0, 0),
        color=LcdColor.AMBER,
        interfacing=Interfacing.PARALLEL,
        datatype=DataType.HEX,
    )
    assert "  0x10," in editor.code


def test_editor_uses_configured_pins() -> None:
    editor = GlyphEditor(
        settings=GlyphSettings(interfacing=Interfacing.PARALLEL),
        pins=ParallelPins(rs=9),
    )

    assert "const int LCD_RS = 9;" in editor.code


def test_load_share_resets_history_only_for_valid_token() -> None:
    editor = GlyphEditor()
    editor.set_pixel(0, 0, True)

    assert editor.load_share("c=red&r=bad") is False
    assert editor.history.can_undo
    assert editor.settings.color is LcdColor.RED

    assert editor.load_share("https://example.invalid/?r=VHHV11V0&t=hex") is True
    assert editor.token == "VHHV11V0"
    assert not editor.history.can_undo
    assert editor.settings.datatype is DataType.HEX


def test_share_url_round_trips_through_new_editor() -> None:
    editor = GlyphEditor()
    editor.set_pixel(4, 2, True)
    editor.set_color(LcdColor.BLUE)

    other = GlyphEditor()
    other.load_share(editor.share_url("https://example.invalid/app/"))

    assert other.rows == editor.rows
    assert other.settings == editor.settings


def test_export_then_import_character() -> None:
    editor = GlyphEditor()
    editor.set_pixel(1, 1, True)
    editor.set_datatype(DataType.HEX)
    text = editor.export_text()

    other = GlyphEditor()
    other.set_pixel(0, 0, True)
    imported = other.import_text(text)

    assert imported.character == editor.character
    assert other.rows == editor.rows
    assert other.settings == editor.settings
    assert not other.history.can_undo


def test_import_saves_merges_into_store(
    clock: Callable[[], int], id_factory: Callable[[], str]
) -> None:
    store = SavedGlyphStore(MemoryBlobStore(), clock=clock, id_factory=id_factory)
    store.save_new("Existing", GlyphCharacter())
    text = dumps_payload({"version": 1, "saves": [{"name": "Short", "rows": [5] * 7}]})
    editor = GlyphEditor()

    imported = editor.import_text(text, store)

    assert [record.name for record in imported.saves] == ["Short"]
    assert [record.name for record in store.records()] == ["Short", "Existing"]
    assert store.records()[0].rows == (5, 5, 5, 5, 5, 5, 5, 0)
    assert editor.rows == empty_rows()


def test_unrecognized_import_leaves_state_untouched(
    clock: Callable[[], int], id_factory: Callable[[], str]
) -> None:
    blobs = MemoryBlobStore()
    store = SavedGlyphStore(blobs, clock=clock, id_factory=id_factory)
    editor = GlyphEditor()
    editor.set_pixel(0, 0, True)
    before = editor.history

    with pytest.raises(ImportShapeError):
        editor.import_text(json.dumps({"glyphs": []}), store)

    assert editor.history is before
    assert blobs.values == {}


def test_saves_import_without_store_is_ignored() -> None:
    editor = GlyphEditor()
    text = dumps_payload(export_saves([]))

    imported = editor.import_text(text)

    assert imported.character is None
    assert editor.rows == empty_rows()
