"""Pytest configuration that puts the lcdglyph ``src`` layout on ``sys.path``."""
from __future__ import annotations

import sys
from itertools import count
from pathlib import Path
from typing import Callable

import pytest

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Return a deterministic identifier source (``id-1``, ``id-2``, ...)."""

    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def clock() -> Callable[[], int]:
    """Return a clock advancing one second per call from a fixed epoch."""

    ticks = count(0)
    return lambda: 1_700_000_000_000 + 1000 * next(ticks)
