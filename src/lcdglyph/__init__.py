"""Public lcdglyph API for designing HD44780 custom characters."""
from __future__ import annotations

from .bitmap import (
    COLS,
    ROWS,
    clamp_row_value,
    decode_token,
    encode_token,
    matrix_to_rows,
    normalize_rows,
    rows_to_matrix,
)
from .codegen import ParallelPins, build_arduino_code
from .editor import GlyphEditor
from .history import EditHistory
from .records import (
    GlyphCharacter,
    ImportShapeError,
    SavedGlyph,
    export_character,
    export_saves,
    loads_import,
    parse_import,
)
from .settings import DataType, GlyphSettings, Interfacing, LcdColor
from .store import FileBlobStore, MemoryBlobStore, SavedGlyphStore

__all__ = [
    "COLS",
    "DataType",
    "EditHistory",
    "FileBlobStore",
    "GlyphCharacter",
    "GlyphEditor",
    "GlyphSettings",
    "ImportShapeError",
    "Interfacing",
    "LcdColor",
    "MemoryBlobStore",
    "ParallelPins",
    "ROWS",
    "SavedGlyph",
    "SavedGlyphStore",
    "build_arduino_code",
    "clamp_row_value",
    "decode_token",
    "encode_token",
    "export_character",
    "export_saves",
    "loads_import",
    "matrix_to_rows",
    "normalize_rows",
    "parse_import",
    "rows_to_matrix",
]
