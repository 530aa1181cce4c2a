"""Core domain models used by the decision engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum

GRID_ROWS = 12
GRID_COLUMNS = 12

CELL_UNKNOWN_SYMBOL = "*"
CELL_WATER_SYMBOL = "."
CELL_SHIP_SYMBOL = "X"


class CellState(IntEnum):
    """Observable state of a single cell."""

    UNKNOWN = 0
    WATER = 1
    SHIP = 2

    @property
    def is_known(self) -> bool:
        return self is not CellState.UNKNOWN


class Orientation(StrEnum):
    """Orientation of a run of hits."""

    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"
    UNKNOWN = "UNKNOWN"


class Ability(StrEnum):
    """Once-per-match special abilities, valued by their wire names."""

    REVEAL_SMALLEST_SHIP = "ironman"
    AREA_REVEAL = "thor"
    DESTROY_SHIP = "hulk"


class PlayMode(StrEnum):
    """Top-level engine mode."""

    SEARCHING = "SEARCHING"
    TARGETING = "TARGETING"


@dataclass(frozen=True, slots=True)
class Position:
    """Board coordinate."""

    row: int
    col: int

    def shifted(self, d_row: int, d_col: int) -> Position:
        return Position(self.row + d_row, self.col + d_col)

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


SYMBOL_TO_STATE: dict[str, CellState] = {
    CELL_UNKNOWN_SYMBOL: CellState.UNKNOWN,
    CELL_WATER_SYMBOL: CellState.WATER,
    CELL_SHIP_SYMBOL: CellState.SHIP,
}

STATE_TO_SYMBOL: dict[CellState, str] = {state: symbol for symbol, state in SYMBOL_TO_STATE.items()}
