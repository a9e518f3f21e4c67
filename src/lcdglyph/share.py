"""Share-link encoding of a glyph and its settings as query parameters."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from .bitmap import Rows, decode_token, encode_token
from .history import EditHistory
from .settings import DataType, GlyphSettings, Interfacing, LcdColor, parse_enum

ROWS_FIELD = "r"
COLOR_FIELD = "c"
INTERFACING_FIELD = "i"
DATATYPE_FIELD = "t"
SHARE_FIELDS = (ROWS_FIELD, COLOR_FIELD, INTERFACING_FIELD, DATATYPE_FIELD)


@dataclass(frozen=True)
class ShareState:
    """Decoded share fields; ``None`` means keep the current value."""

    rows: Optional[Rows] = None
    color: Optional[LcdColor] = None
    interfacing: Optional[Interfacing] = None
    datatype: Optional[DataType] = None


def share_params(rows: Sequence[int], settings: GlyphSettings) -> dict[str, str]:
    return {
        ROWS_FIELD: encode_token(rows),
        COLOR_FIELD: settings.color.value,
        INTERFACING_FIELD: settings.interfacing.value,
        DATATYPE_FIELD: settings.datatype.value,
    }


def build_share_query(rows: Sequence[int], settings: GlyphSettings) -> str:
    return urlencode(share_params(rows, settings))


def share_url(base_url: str, rows: Sequence[int], settings: GlyphSettings) -> str:
    """Return ``base_url`` with the share fields set, keeping other parameters."""

    parts = urlsplit(base_url)
    kept = [
        (name, value)
        for name, values in parse_qs(parts.query, keep_blank_values=True).items()
        if name not in SHARE_FIELDS
        for value in values
    ]
    kept.extend(share_params(rows, settings).items())
    return urlunsplit(parts._replace(query=urlencode(kept)))


def _first_values(source: Union[str, Mapping[str, Any]]) -> dict[str, Any]:
    if isinstance(source, Mapping):
        values: dict[str, Any] = {}
        for name, value in source.items():
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            values[name] = value
        return values
    query = urlsplit(source).query if "?" in source else source.lstrip("?")
    return {name: entries[0] for name, entries in parse_qs(query).items() if entries}


def parse_share_query(source: Union[str, Mapping[str, Any]]) -> ShareState:
    """Decode share fields from a query string, a URL, or a parameter mapping.

    Unknown enumeration names and a malformed ``r`` token decode to ``None``
    rather than failing the whole load.
    """

    values = _first_values(source)
    token = values.get(ROWS_FIELD)
    return ShareState(
        rows=decode_token(token) if token else None,
        color=parse_enum(LcdColor, values.get(COLOR_FIELD)),
        interfacing=parse_enum(Interfacing, values.get(INTERFACING_FIELD)),
        datatype=parse_enum(DataType, values.get(DATATYPE_FIELD)),
    )


def apply_share(
    state: ShareState, settings: GlyphSettings, history: EditHistory
) -> tuple[GlyphSettings, EditHistory]:
    """Overlay ``state`` onto the current settings and history."""

    updated = settings.with_updates(
        color=state.color,
        interfacing=state.interfacing,
        datatype=state.datatype,
    )
    if state.rows is not None:
        history = history.reset(state.rows)
    return updated, history


__all__ = [
    "COLOR_FIELD",
    "DATATYPE_FIELD",
    "INTERFACING_FIELD",
    "ROWS_FIELD",
    "SHARE_FIELDS",
    "ShareState",
    "apply_share",
    "build_share_query",
    "parse_share_query",
    "share_params",
    "share_url",
]
