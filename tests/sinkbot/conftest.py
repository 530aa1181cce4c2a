from __future__ import annotations

import random
from collections.abc import Callable, Iterable

import pytest

from sinkbot.core.codec import decode_grid
from sinkbot.core.grid import Grid
from sinkbot.core.models import CellState, Position

GridText = Callable[..., str]


def _coords(cell: tuple[int, int] | Position) -> tuple[int, int]:
    if isinstance(cell, Position):
        return cell.row, cell.col
    return cell


def encode_cells(
    ships: Iterable[tuple[int, int]] = (),
    water: Iterable[tuple[int, int]] = (),
    rows: int = 12,
    columns: int = 12,
) -> str:
    cells = ["*"] * (rows * columns)
    for row, col in map(_coords, water):
        cells[row * columns + col] = "."
    for row, col in map(_coords, ships):
        cells[row * columns + col] = "X"
    return "".join(cells)


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1337)


@pytest.fixture
def grid_text() -> GridText:
    """Build an encoded 12x12 grid from ship and water coordinates."""
    return encode_cells


@pytest.fixture
def grid_of() -> Callable[..., Grid[CellState]]:
    """Build a decoded cell-state grid from ship and water coordinates."""

    def _make(
        ships: Iterable[tuple[int, int]] = (),
        water: Iterable[tuple[int, int]] = (),
        rows: int = 12,
        columns: int = 12,
    ) -> Grid[CellState]:
        return decode_grid(encode_cells(ships, water, rows, columns), rows, columns)

    return _make


@pytest.fixture
def positions() -> Callable[..., list[Position]]:
    def _make(*coords: tuple[int, int]) -> list[Position]:
        return [Position(row, col) for row, col in coords]

    return _make
