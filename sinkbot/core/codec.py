"""Grid string encoding shared with the game target."""

from __future__ import annotations

import numpy as np

from sinkbot.core.errors import GridEncodingError
from sinkbot.core.grid import Grid
from sinkbot.core.models import STATE_TO_SYMBOL, SYMBOL_TO_STATE, CellState


def decode_cells(text: str, rows: int, columns: int) -> np.ndarray:
    """Decode an encoded grid into a rows x columns array of cell-state codes."""
    expected = rows * columns
    if len(text) != expected:
        raise GridEncodingError(f"Grid string has {len(text)} cells, expected {expected}.")
    codes = np.empty(expected, dtype=np.int8)
    for index, symbol in enumerate(text):
        state = SYMBOL_TO_STATE.get(symbol)
        if state is None:
            raise GridEncodingError(f"Unknown character {symbol!r} in grid state string.")
        codes[index] = int(state)
    return codes.reshape(rows, columns)


def decode_grid(text: str, rows: int, columns: int) -> Grid[CellState]:
    """Build a fresh cell-state grid from its encoded string."""
    grid = Grid.of_cell_states(rows, columns)
    grid.load_array(decode_cells(text, rows, columns))
    return grid


def merge_grid(grid: Grid[CellState], text: str) -> None:
    """Apply an encoded observation to an existing grid.

    Known cells in the observation win; an UNKNOWN symbol never overrides a
    value the grid already knows.
    """
    incoming = decode_cells(text, grid.rows, grid.columns)
    current = grid.as_array()
    merged = np.where(incoming != int(CellState.UNKNOWN), incoming, current)
    grid.load_array(merged)


def encode_grid(grid: Grid[CellState]) -> str:
    """Encode a cell-state grid as a row-major symbol string."""
    return "".join(STATE_TO_SYMBOL[grid.get(position)] for position in grid.positions())


def format_grid(grid: Grid[CellState]) -> str:
    """Render a grid as one line of symbols per row for logs and the CLI."""
    encoded = encode_grid(grid)
    return "\n".join(
        " ".join(encoded[row * grid.columns : (row + 1) * grid.columns]) for row in range(grid.rows)
    )
