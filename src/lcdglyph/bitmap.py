"""Row-value bitmap helpers for 5×8 HD44780 custom characters."""
from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Sequence

ROWS = 8
COLS = 5
ROW_MASK = (1 << COLS) - 1
TOKEN_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUV"

Rows = tuple[int, ...]
Matrix = tuple[tuple[bool, ...], ...]

_ON_CELLS = {"#", "█", "1"}


_DECIMAL = re.compile(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_PREFIXED = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


def _as_number(value: Any) -> float:
    """Coerce a stored row value to a number.

    Strings accept signed decimal literals, ``Infinity`` and unsigned
    ``0x``/``0o``/``0b`` integers; anything else is ``nan``.
    """

    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL.fullmatch(text):
            return float(text)
        if _PREFIXED.fullmatch(text):
            return int(text, 0)
        return math.nan
    return math.nan


def clamp_row_value(value: Any) -> int:
    """Return ``value`` coerced into the 5-bit range ``0..31``.

    Non-numeric and non-finite inputs map to ``0``; finite numbers are
    truncated toward zero before clamping.
    """

    number = _as_number(value)
    if isinstance(number, float):
        if not math.isfinite(number):
            return 0
        number = math.trunc(number)
    return max(0, min(ROW_MASK, number))


def empty_rows() -> Rows:
    return (0,) * ROWS


def normalize_rows(values: Any) -> Rows:
    """Return exactly eight clamped row values built from ``values``.

    Longer inputs are truncated, shorter ones padded with zero rows. Anything
    that is not a sequence of numbers yields an empty glyph.
    """

    if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
        return empty_rows()
    clamped = [clamp_row_value(value) for _, value in zip(range(ROWS), values)]
    clamped.extend([0] * (ROWS - len(clamped)))
    return tuple(clamped)


def rows_to_matrix(rows: Sequence[int]) -> Matrix:
    """Expand ``rows`` into an 8×5 matrix; column 0 is the row's high bit."""

    return tuple(
        tuple(((rows[row] >> (COLS - 1 - col)) & 1) == 1 for col in range(COLS))
        for row in range(ROWS)
    )


def matrix_to_rows(matrix: Sequence[Sequence[bool]]) -> Rows:
    """Pack an 8×5 boolean ``matrix`` back into row values."""

    packed: list[int] = []
    for cells in matrix:
        value = 0
        for col in range(COLS):
            if cells[col]:
                value |= 1 << (COLS - 1 - col)
        packed.append(value)
    return tuple(packed)


def invert_rows(rows: Sequence[int]) -> Rows:
    return tuple(clamp_row_value((~value) & ROW_MASK) for value in rows)


def encode_token(rows: Sequence[int]) -> str:
    """Return the eight-character share token for ``rows``."""

    return "".join(TOKEN_ALPHABET[clamp_row_value(value)] for value in rows)


def decode_token(token: Any) -> Optional[Rows]:
    """Decode a share token, returning ``None`` when it is malformed."""

    if not isinstance(token, str) or len(token) != ROWS:
        return None
    decoded: list[int] = []
    for char in token:
        index = TOKEN_ALPHABET.find(char.upper())
        if index < 0:
            return None
        decoded.append(index)
    return tuple(decoded)


def render_rows(rows: Sequence[int], *, on: str = "#", off: str = ".") -> list[str]:
    """Return one text line per row with ``on``/``off`` cells."""

    return [
        "".join(on if lit else off for lit in cells)
        for cells in rows_to_matrix(rows)
    ]


def parse_pattern(lines: Iterable[str]) -> Rows:
    """Return the row values for an 8×5 glyph described by ``lines``."""

    pattern = list(lines)
    if len(pattern) != ROWS:
        raise ValueError("glyph patterns must supply eight rows")
    matrix: list[tuple[bool, ...]] = []
    for line in pattern:
        if len(line) != COLS:
            raise ValueError("each glyph row must contain exactly five cells")
        matrix.append(tuple(char in _ON_CELLS for char in line))
    return matrix_to_rows(matrix)


__all__ = [
    "COLS",
    "Matrix",
    "ROWS",
    "ROW_MASK",
    "Rows",
    "TOKEN_ALPHABET",
    "clamp_row_value",
    "decode_token",
    "empty_rows",
    "encode_token",
    "invert_rows",
    "matrix_to_rows",
    "normalize_rows",
    "parse_pattern",
    "render_rows",
    "rows_to_matrix",
]
