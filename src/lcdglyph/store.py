"""Saved glyph list persisted under a single key of a blob store.

The stored value is the list-export payload produced by
:func:`lcdglyph.records.export_saves`. A missing or unreadable value loads as
an empty list so a corrupted store never blocks the editor. Ids repaired
while loading are written back once.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from .records import (
    GlyphCharacter,
    ImportShapeError,
    SavedGlyph,
    export_saves,
    make_id,
    now_ms,
    parse_import,
)

LOGGER = logging.getLogger(__name__)

STORE_KEY = "lcd-character-creator.saves"


class BlobStore(Protocol):
    """Key-value text storage consumed by :class:`SavedGlyphStore`."""

    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, text: str) -> None:
        ...


class MemoryBlobStore:
    """Dictionary-backed :class:`BlobStore`."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def save(self, key: str, text: str) -> None:
        self.values[key] = text


class FileBlobStore:
    """Store each key as ``<key>.json`` inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not key or any(char in key for char in ("/", "\\", ":")):
            raise ValueError(f"invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, text: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=str(path.parent),
                prefix=path.name,
                suffix=".tmp",
                encoding="utf-8",
                delete=False,
            ) as stream:
                temp_path = Path(stream.name)
                stream.write(text)
                stream.flush()
                os.fsync(stream.fileno())
            os.replace(temp_path, path)
        except Exception:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            raise


class SavedGlyphStore:
    """Ordered list of saved glyphs, newest first, persisted on every change."""

    def __init__(
        self,
        blobs: BlobStore,
        *,
        key: str = STORE_KEY,
        clock: Optional[Callable[[], int]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._blobs = blobs
        self._key = key
        self._clock = clock or now_ms
        self._id_factory = id_factory or make_id
        self._records: Optional[List[SavedGlyph]] = None

    def records(self) -> List[SavedGlyph]:
        return list(self._loaded())

    def get(self, record_id: str) -> SavedGlyph:
        for record in self._loaded():
            if record.id == record_id:
                return record
        raise KeyError(f"saved glyph {record_id} not found")

    def save_new(self, name: str, character: GlyphCharacter) -> SavedGlyph:
        """Prepend a new record holding ``character`` and persist the list."""

        stamp = self._clock()
        record = SavedGlyph(
            id=self._fresh_id(self._ids()),
            name=name,
            rows=character.rows,
            color=character.color,
            interfacing=character.interfacing,
            datatype=character.datatype,
            created_at=stamp,
            updated_at=stamp,
        )
        self._loaded().insert(0, record)
        self._persist()
        return record

    def rename(self, record_id: str, name: str) -> SavedGlyph:
        return self._replace(record_id, name=name)

    def overwrite(self, record_id: str, character: GlyphCharacter) -> SavedGlyph:
        return self._replace(record_id, character=character)

    def delete(self, record_id: str) -> SavedGlyph:
        record = self.get(record_id)
        self._loaded().remove(record)
        self._persist()
        return record

    def import_records(self, records: Iterable[SavedGlyph]) -> List[SavedGlyph]:
        """Prepend ``records`` in their given order and return what was stored.

        Identifiers that collide with an existing record, or repeat within the
        import, are replaced with fresh ones.
        """

        imported, _ = self._unique(records, self._ids(), "imported")
        if imported:
            self._records = imported + self._loaded()
            self._persist()
        return imported

    def export(self) -> dict:
        return export_saves(self._loaded())

    # Internal helpers -------------------------------------------------

    def _loaded(self) -> List[SavedGlyph]:
        if self._records is None:
            records, repaired = self._read()
            self._records = records
            if repaired:
                LOGGER.info("rewriting saved glyph list %s with repaired ids", self._key)
                self._persist()
        return self._records

    def _read(self) -> tuple[List[SavedGlyph], bool]:
        """Return the stored records and whether any id had to be replaced."""

        generated: List[str] = []

        def generate_id() -> str:
            generated.append(self._id_factory())
            return generated[-1]

        try:
            text = self._blobs.load(self._key)
            if text is None or not text.strip():
                return [], False
            payload = json.loads(text)
            imported = parse_import(payload, now=self._clock(), id_factory=generate_id)
        except (
            json.JSONDecodeError,
            UnicodeDecodeError,
            RecursionError,
            ImportShapeError,
        ) as exc:
            LOGGER.warning("ignoring unreadable saved glyph list %s: %s", self._key, exc)
            return [], False
        records, renamed = self._unique(imported.saves, set(), "stored")
        return records, bool(generated) or renamed

    def _unique(
        self, records: Iterable[SavedGlyph], taken: set[str], origin: str
    ) -> tuple[List[SavedGlyph], bool]:
        """Give every record an id not in ``taken``; report whether any changed."""

        unique: List[SavedGlyph] = []
        renamed = False
        for record in records:
            if record.id in taken:
                fresh = self._fresh_id(taken)
                LOGGER.info("%s glyph id %s already in use; assigned %s", origin, record.id, fresh)
                record = replace(record, id=fresh)
                renamed = True
            taken.add(record.id)
            unique.append(record)
        return unique, renamed

    def _persist(self) -> None:
        payload = export_saves(self._loaded())
        self._blobs.save(self._key, json.dumps(payload, separators=(",", ":")))

    def _ids(self) -> set[str]:
        return {record.id for record in self._loaded()}

    def _fresh_id(self, taken: set[str]) -> str:
        candidate = self._id_factory()
        while candidate in taken:
            candidate = self._id_factory()
        return candidate

    def _replace(
        self,
        record_id: str,
        *,
        name: Optional[str] = None,
        character: Optional[GlyphCharacter] = None,
    ) -> SavedGlyph:
        records = self._loaded()
        record = self.get(record_id)
        updated = record.with_updates(
            name=name, character=character, updated_at=self._clock()
        )
        records[records.index(record)] = updated
        self._persist()
        return updated


__all__ = [
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    "STORE_KEY",
    "SavedGlyphStore",
]
