"""Undo/redo log over immutable glyph row snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .bitmap import (
    COLS,
    ROWS,
    Matrix,
    Rows,
    empty_rows,
    invert_rows,
    matrix_to_rows,
    normalize_rows,
    rows_to_matrix,
)


@dataclass(frozen=True)
class EditHistory:
    """Linear ``past``/``present``/``future`` log of glyph snapshots.

    Every operation returns a new history. Snapshots are tuples, so entries in
    ``past`` and ``future`` can be shared between history values without
    copying. ``limit`` caps the number of undo steps kept; ``None`` keeps all
    of them.
    """

    present: Rows = field(default_factory=empty_rows)
    past: tuple[Rows, ...] = ()
    future: tuple[Rows, ...] = ()
    limit: Optional[int] = None

    @classmethod
    def create(cls, rows: Any = None, *, limit: Optional[int] = None) -> "EditHistory":
        present = empty_rows() if rows is None else normalize_rows(rows)
        return cls(present=present, limit=limit)

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    @property
    def matrix(self) -> Matrix:
        return rows_to_matrix(self.present)

    def commit(self, rows: Any) -> "EditHistory":
        """Record ``rows`` as the new present unless it matches the current one."""

        snapshot = normalize_rows(rows)
        if snapshot == self.present:
            return self
        past = self.past + (self.present,)
        if self.limit is not None and len(past) > self.limit:
            past = past[len(past) - self.limit:]
        return replace(self, past=past, present=snapshot, future=())

    def undo(self) -> "EditHistory":
        if not self.past:
            return self
        return replace(
            self,
            past=self.past[:-1],
            present=self.past[-1],
            future=(self.present,) + self.future,
        )

    def redo(self) -> "EditHistory":
        if not self.future:
            return self
        return replace(
            self,
            past=self.past + (self.present,),
            present=self.future[0],
            future=self.future[1:],
        )

    def reset(self, rows: Any) -> "EditHistory":
        """Replace the present and drop all undo/redo state (load flows)."""

        return replace(self, past=(), present=normalize_rows(rows), future=())

    def set_pixel(self, row: int, col: int, value: bool) -> "EditHistory":
        if not (0 <= row < ROWS and 0 <= col < COLS):
            raise IndexError(f"pixel ({row}, {col}) outside the {COLS}x{ROWS} grid")
        cells = [list(line) for line in self.matrix]
        cells[row][col] = bool(value)
        return self.commit(matrix_to_rows(cells))

    def clear(self) -> "EditHistory":
        return self.commit(empty_rows())

    def invert(self) -> "EditHistory":
        return self.commit(invert_rows(self.present))


__all__ = ["EditHistory"]
