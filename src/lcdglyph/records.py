"""Export and import payloads for single glyphs and saved glyph lists.

Two JSON shapes are produced, both stamped with ``version`` ``1``::

    {"version": 1, "character": {"rows": [...], "color": ..., ...}}
    {"version": 1, "saves": [{"id": ..., "name": ..., "rows": [...], ...}]}

Imports are tolerant: every field is repaired or defaulted, and only a
payload matching neither shape is rejected with :class:`ImportShapeError`.
"""

from __future__ import annotations

import json
import logging
import math
import time
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from .bitmap import Rows, empty_rows, normalize_rows
from .settings import (
    DataType,
    GlyphSettings,
    Interfacing,
    LcdColor,
    coerce_color,
    coerce_datatype,
    coerce_interfacing,
)

LOGGER = logging.getLogger(__name__)

EXPORT_VERSION = 1
DEFAULT_NAME = "Untitled"
CHARACTER_FILENAME = "lcd-character.json"
SAVES_FILENAME = "lcd-characters.json"


class ImportShapeError(ValueError):
    """Raised when an import payload is neither a character nor a saves export."""


def now_ms() -> int:
    """Return the current time in milliseconds since the Unix epoch."""

    return int(time.time() * 1000)


def make_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class GlyphCharacter:
    """A glyph bitmap with the settings it was designed under."""

    rows: Rows = empty_rows()
    color: LcdColor = LcdColor.GREEN
    interfacing: Interfacing = Interfacing.I2C
    datatype: DataType = DataType.BIN

    @classmethod
    def from_settings(cls, rows: Any, settings: GlyphSettings) -> "GlyphCharacter":
        return cls(
            rows=normalize_rows(rows),
            color=settings.color,
            interfacing=settings.interfacing,
            datatype=settings.datatype,
        )

    @property
    def settings(self) -> GlyphSettings:
        return GlyphSettings(
            color=self.color, interfacing=self.interfacing, datatype=self.datatype
        )


@dataclass(frozen=True)
class SavedGlyph:
    """Named, timestamped glyph owned by the saved-list store."""

    id: str
    name: str
    rows: Rows
    color: LcdColor
    interfacing: Interfacing
    datatype: DataType
    created_at: int
    updated_at: int

    @property
    def character(self) -> GlyphCharacter:
        return GlyphCharacter(
            rows=self.rows,
            color=self.color,
            interfacing=self.interfacing,
            datatype=self.datatype,
        )

    def with_updates(
        self,
        *,
        name: Optional[str] = None,
        character: Optional[GlyphCharacter] = None,
        updated_at: Optional[int] = None,
    ) -> "SavedGlyph":
        updated = replace(
            self,
            name=name if name is not None else self.name,
            updated_at=updated_at if updated_at is not None else self.updated_at,
        )
        if character is not None:
            updated = replace(
                updated,
                rows=character.rows,
                color=character.color,
                interfacing=character.interfacing,
                datatype=character.datatype,
            )
        return updated


@dataclass(frozen=True)
class ImportedPayload:
    """Result of :func:`parse_import`; exactly one field is populated."""

    character: Optional[GlyphCharacter] = None
    saves: tuple[SavedGlyph, ...] = ()


def character_to_dict(character: GlyphCharacter) -> dict[str, Any]:
    return {
        "rows": list(character.rows),
        "color": character.color.value,
        "interfacing": character.interfacing.value,
        "datatype": character.datatype.value,
    }


def record_to_dict(record: SavedGlyph) -> dict[str, Any]:
    """Serialise ``record`` to the list-export entry mapping."""

    return {
        "id": record.id,
        "name": record.name,
        "rows": list(record.rows),
        "color": record.color.value,
        "interfacing": record.interfacing.value,
        "datatype": record.datatype.value,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }


def export_character(character: GlyphCharacter) -> dict[str, Any]:
    return {"version": EXPORT_VERSION, "character": character_to_dict(character)}


def export_saves(records: Iterable[SavedGlyph]) -> dict[str, Any]:
    return {
        "version": EXPORT_VERSION,
        "saves": [record_to_dict(record) for record in records],
    }


def dumps_payload(payload: Mapping[str, Any]) -> str:
    """Return ``payload`` as export-file text (two-space indent, final newline)."""

    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def character_from_dict(payload: Any) -> GlyphCharacter:
    """Build a :class:`GlyphCharacter` from an untrusted mapping."""

    if not isinstance(payload, Mapping):
        payload = {}
    return GlyphCharacter(
        rows=normalize_rows(payload.get("rows")),
        color=coerce_color(payload.get("color")),
        interfacing=coerce_interfacing(payload.get("interfacing")),
        datatype=coerce_datatype(payload.get("datatype")),
    )


def record_from_dict(
    payload: Mapping[str, Any],
    *,
    now: Optional[int] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> SavedGlyph:
    """Reconstruct a :class:`SavedGlyph`, repairing missing or invalid fields."""

    stamp = now if now is not None else now_ms()
    character = character_from_dict(payload)
    raw_rows = payload.get("rows")
    if not isinstance(raw_rows, list) or len(raw_rows) != len(character.rows):
        LOGGER.debug("repaired rows for imported record: %r", raw_rows)

    record_id = _coerce_id(payload.get("id"))
    if record_id is None:
        record_id = (id_factory or make_id)()

    created_at = _coerce_timestamp(payload.get("createdAt"), stamp)
    return SavedGlyph(
        id=record_id,
        name=_coerce_name(payload.get("name")),
        rows=character.rows,
        color=character.color,
        interfacing=character.interfacing,
        datatype=character.datatype,
        created_at=created_at,
        updated_at=_coerce_timestamp(payload.get("updatedAt"), stamp),
    )


def parse_import(
    payload: Any,
    *,
    now: Optional[int] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> ImportedPayload:
    """Detect the export shape of ``payload`` and return its repaired contents."""

    if isinstance(payload, Mapping):
        saves = payload.get("saves")
        if isinstance(saves, list):
            stamp = now if now is not None else now_ms()
            records: list[SavedGlyph] = []
            for index, entry in enumerate(saves):
                if not isinstance(entry, Mapping):
                    LOGGER.warning("skipping saves entry #%d: not an object", index)
                    continue
                records.append(record_from_dict(entry, now=stamp, id_factory=id_factory))
            return ImportedPayload(saves=tuple(records))
        character = payload.get("character")
        if isinstance(character, Mapping):
            return ImportedPayload(character=character_from_dict(character))
    raise ImportShapeError("unrecognized import shape: expected 'saves' or 'character'")


def loads_import(
    text: str,
    *,
    now: Optional[int] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> ImportedPayload:
    """Parse export-file ``text``; invalid JSON counts as an unrecognized shape."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportShapeError(f"import is not valid JSON: {exc.msg}") from exc
    except RecursionError as exc:
        raise ImportShapeError("import is not valid JSON: nesting too deep") from exc
    return parse_import(payload, now=now, id_factory=id_factory)


def _coerce_id(raw_id: Any) -> Optional[str]:
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return str(raw_id)
    if isinstance(raw_id, str) and raw_id.strip():
        return raw_id
    return None


def _coerce_name(raw_name: Any) -> str:
    if isinstance(raw_name, str) and raw_name.strip():
        return raw_name
    return DEFAULT_NAME


def _coerce_timestamp(raw_value: Any, default: int) -> int:
    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
        return default
    if isinstance(raw_value, float) and not math.isfinite(raw_value):
        return default
    return int(raw_value)


__all__ = [
    "CHARACTER_FILENAME",
    "DEFAULT_NAME",
    "EXPORT_VERSION",
    "GlyphCharacter",
    "ImportShapeError",
    "ImportedPayload",
    "SAVES_FILENAME",
    "SavedGlyph",
    "character_from_dict",
    "character_to_dict",
    "dumps_payload",
    "export_character",
    "export_saves",
    "loads_import",
    "make_id",
    "now_ms",
    "parse_import",
    "record_from_dict",
    "record_to_dict",
]
