from __future__ import annotations

import itertools
import math

import pytest

from lcdglyph.bitmap import (
    COLS,
    ROWS,
    TOKEN_ALPHABET,
    clamp_row_value,
    decode_token,
    empty_rows,
    encode_token,
    invert_rows,
    matrix_to_rows,
    normalize_rows,
    parse_pattern,
    render_rows,
    rows_to_matrix,
)

SQUARE_WITH_TAIL = (0x1F, 0x11, 0x11, 0x1F, 0x01, 0x01, 0x1F, 0x00)


def test_column_zero_is_the_most_significant_bit() -> None:
    matrix = rows_to_matrix((0b10000, 0b00001, 0, 0, 0, 0, 0, 0))

    assert matrix[0] == (True, False, False, False, False)
    assert matrix[1] == (False, False, False, False, True)
    assert all(not any(cells) for cells in matrix[2:])


def test_every_row_value_survives_matrix_round_trip() -> None:
    for value in range(32):
        rows = (value,) * ROWS
        assert matrix_to_rows(rows_to_matrix(rows)) == rows


def test_every_row_pattern_survives_rows_round_trip() -> None:
    for bits in itertools.product((False, True), repeat=COLS):
        matrix = tuple(bits for _ in range(ROWS))
        assert rows_to_matrix(matrix_to_rows(matrix)) == matrix


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-5, 0),
        (40, 31),
        (math.nan, 0),
        (math.inf, 0),
        (-math.inf, 0),
        (17.9, 17),
        (-0.5, 0),
        (True, 1),
        ("12", 12),
        ("abc", 0),
        (" 7 ", 7),
        ("1e1", 10),
        ("+.5e1", 5),
        ("0x10", 16),
        ("0b101", 5),
        ("-0x10", 0),
        ("1_0", 0),
        ("infinity", 0),
        ("\u0663", 0),
        (None, 0),
        ([3], 0),
    ],
)
def test_clamp_row_value(value: object, expected: int) -> None:
    result = clamp_row_value(value)

    assert result == expected
    assert isinstance(result, int)


def test_normalize_rows_pads_truncates_and_clamps() -> None:
    assert normalize_rows([1, 2, 99, -3, 4.7, 5, 6]) == (1, 2, 31, 0, 4, 5, 6, 0)
    assert normalize_rows(range(20)) == (0, 1, 2, 3, 4, 5, 6, 7)


@pytest.mark.parametrize("payload", [None, 7, "VHHV11V0", {"rows": [1]}])
def test_normalize_rows_rejects_non_sequences(payload: object) -> None:
    assert normalize_rows(payload) == empty_rows()


def test_encode_token_uses_one_symbol_per_row() -> None:
    token = encode_token(SQUARE_WITH_TAIL)

    assert token == "VHHV11V0"
    assert decode_token(token) == SQUARE_WITH_TAIL


def test_token_round_trip_covers_the_alphabet() -> None:
    for start in range(0, 32, ROWS):
        rows = tuple(range(start, start + ROWS))
        assert decode_token(encode_token(rows)) == rows


def test_decode_token_is_case_insensitive() -> None:
    assert decode_token("vhhv11v0") == SQUARE_WITH_TAIL


@pytest.mark.parametrize(
    "token",
    ["", "VHHV11V", "VHHV11V00", "VHHV11VW", "VHHV 1V0", "VHHV-1V0", None, 12345678],
)
def test_decode_token_rejects_malformed_input(token: object) -> None:
    assert decode_token(token) is None


def test_encode_token_clamps_out_of_range_rows() -> None:
    assert encode_token((99, -1, 0, 0, 0, 0, 0, 0)) == "V" + "0" * 7
    assert len(TOKEN_ALPHABET) == 32


def test_invert_rows_is_self_inverse() -> None:
    for value in range(32):
        rows = (value,) * ROWS
        inverted = invert_rows(rows)
        assert all(0 <= row <= 31 for row in inverted)
        assert invert_rows(inverted) == rows
    assert invert_rows(empty_rows()) == (31,) * ROWS


def test_render_and_parse_pattern() -> None:
    lines = render_rows(SQUARE_WITH_TAIL)

    assert lines == [
        "#####",
        "#...#",
        "#...#",
        "#####",
        "....#",
        "....#",
        "#####",
        ".....",
    ]
    assert parse_pattern(lines) == SQUARE_WITH_TAIL


def test_parse_pattern_requires_eight_rows_of_five_cells() -> None:
    with pytest.raises(ValueError, match="eight rows"):
        parse_pattern(["#####"] * 7)
    with pytest.raises(ValueError, match="five cells"):
        parse_pattern(["####"] * 8)
