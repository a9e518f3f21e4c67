"""Editing session combining glyph history, settings, and load/export flows."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .bitmap import Matrix, Rows, encode_token, rows_to_matrix
from .codegen import ParallelPins, build_arduino_code
from .history import EditHistory
from .records import (
    GlyphCharacter,
    ImportedPayload,
    dumps_payload,
    export_character,
    loads_import,
)
from .settings import DataType, GlyphSettings, Interfacing, LcdColor
from .share import apply_share, parse_share_query, share_url
from .store import SavedGlyphStore

LOGGER = logging.getLogger(__name__)


class GlyphEditor:
    """Hold the current glyph and settings; every view is derived on demand.

    Pointer strokes follow the paint-bucket rule: the first pixel touched
    decides whether the stroke sets or clears, and later pixels are only
    written when they differ from that paint value.
    """

    def __init__(
        self,
        *,
        settings: Optional[GlyphSettings] = None,
        pins: Optional[ParallelPins] = None,
        history_limit: Optional[int] = None,
    ) -> None:
        self.settings = settings or GlyphSettings()
        self.pins = pins
        self.history = EditHistory.create(limit=history_limit)
        self._paint_value: Optional[bool] = None

    # Derived views ----------------------------------------------------

    @property
    def rows(self) -> Rows:
        return self.history.present

    @property
    def matrix(self) -> Matrix:
        return rows_to_matrix(self.rows)

    @property
    def token(self) -> str:
        return encode_token(self.rows)

    @property
    def code(self) -> str:
        return build_arduino_code(
            self.rows,
            self.settings.interfacing,
            self.settings.datatype,
            pins=self.pins,
        )

    @property
    def character(self) -> GlyphCharacter:
        return GlyphCharacter.from_settings(self.rows, self.settings)

    # Pixel editing ----------------------------------------------------

    def set_pixel(self, row: int, col: int, value: bool) -> None:
        self.history = self.history.set_pixel(row, col, value)

    def begin_stroke(self, row: int, col: int) -> bool:
        """Start a stroke at ``(row, col)`` and return the chosen paint value."""

        paint = not self.matrix[row][col]
        self._paint_value = paint
        self.set_pixel(row, col, paint)
        return paint

    def continue_stroke(self, row: int, col: int) -> None:
        if self._paint_value is None:
            return
        if self.matrix[row][col] == self._paint_value:
            return
        self.set_pixel(row, col, self._paint_value)

    def end_stroke(self) -> None:
        self._paint_value = None

    @property
    def stroke_active(self) -> bool:
        return self._paint_value is not None

    def clear(self) -> None:
        self.history = self.history.clear()

    def invert(self) -> None:
        self.history = self.history.invert()

    def undo(self) -> None:
        self.history = self.history.undo()

    def redo(self) -> None:
        self.history = self.history.redo()

    # Settings ---------------------------------------------------------

    def set_color(self, color: LcdColor) -> None:
        self.settings = self.settings.with_updates(color=color)

    def set_interfacing(self, interfacing: Interfacing) -> None:
        self.settings = self.settings.with_updates(interfacing=interfacing)

    def set_datatype(self, datatype: DataType) -> None:
        self.settings = self.settings.with_updates(datatype=datatype)

    # Load and export flows --------------------------------------------

    def load_character(self, character: GlyphCharacter) -> None:
        """Replace glyph and settings with ``character`` and drop the history."""

        self.settings = character.settings
        self.history = self.history.reset(character.rows)

    def load_share(self, source: Union[str, Mapping[str, Any]]) -> bool:
        """Apply share fields from ``source``; return whether the glyph changed."""

        state = parse_share_query(source)
        self.settings, self.history = apply_share(state, self.settings, self.history)
        if state.rows is None:
            LOGGER.debug("share link carried no usable glyph token")
        return state.rows is not None

    def share_url(self, base_url: str) -> str:
        return share_url(base_url, self.rows, self.settings)

    def export_text(self) -> str:
        return dumps_payload(export_character(self.character))

    def import_text(
        self, text: str, store: Optional[SavedGlyphStore] = None
    ) -> ImportedPayload:
        """Import an export file.

        A character export is loaded into the editor. A saves export is merged
        into ``store`` when one is given. Unrecognized input raises
        :class:`~lcdglyph.records.ImportShapeError` before anything changes.
        """

        imported = loads_import(text)
        if imported.character is not None:
            self.load_character(imported.character)
        elif store is not None:
            stored = store.import_records(imported.saves)
            imported = ImportedPayload(saves=tuple(stored))
        else:
            LOGGER.warning("ignoring %d saved glyphs: no store attached", len(imported.saves))
        return imported


__all__ = ["GlyphEditor"]
