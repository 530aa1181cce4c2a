"""Generic numpy-backed grid with positional and neighbour queries."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

import numpy as np
import numpy.typing as npt

from sinkbot.core.errors import InvalidConfigurationError, OutOfBoundsError
from sinkbot.core.models import CellState, Position

T = TypeVar("T")

Offsets = tuple[tuple[int, int], ...]

_CROSS_OFFSETS: Offsets = ((-1, 0), (1, 0), (0, -1), (0, 1))
_VERTICAL_OFFSETS: Offsets = ((-1, 0), (1, 0))
_HORIZONTAL_OFFSETS: Offsets = ((0, -1), (0, 1))
_ALL_AROUND_OFFSETS: Offsets = tuple(
    (d_row, d_col) for d_row in (-1, 0, 1) for d_col in (-1, 0, 1) if (d_row, d_col) != (0, 0)
)


@dataclass(frozen=True, slots=True)
class NeighborView:
    """Restartable view over the in-bounds neighbours of one position."""

    origin: Position
    rows: int
    columns: int
    offsets: Offsets

    def __iter__(self) -> Iterator[Position]:
        for d_row, d_col in self.offsets:
            row = self.origin.row + d_row
            col = self.origin.col + d_col
            if 0 <= row < self.rows and 0 <= col < self.columns:
                yield Position(row, col)


class Grid(Generic[T]):
    """Rows x columns mapping from position to a value, backed by a private array."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        rows: int,
        columns: int,
        *,
        fill: T,
        dtype: npt.DTypeLike,
        cast: Callable[[int], T],
    ) -> None:
        if rows <= 0 or columns <= 0:
            raise InvalidConfigurationError(f"Grid dimensions must be positive, got {rows}x{columns}.")
        self._rows = rows
        self._columns = columns
        self._dtype = dtype
        self._cast = cast
        self._cells = np.full((rows, columns), int(fill), dtype=dtype)  # type: ignore[call-overload]

    @classmethod
    def of_cell_states(
        cls, rows: int, columns: int, fill: CellState = CellState.UNKNOWN
    ) -> Grid[CellState]:
        """Create a cell-state grid, UNKNOWN everywhere by default."""
        return Grid(rows, columns, fill=fill, dtype=np.int8, cast=CellState)

    @classmethod
    def of_counts(cls, rows: int, columns: int) -> Grid[int]:
        """Create a zeroed integer grid."""
        return Grid(rows, columns, fill=0, dtype=np.int32, cast=int)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def size(self) -> int:
        return self._rows * self._columns

    def in_bounds(self, position: Position) -> bool:
        """Return whether the position lies on the grid."""
        return 0 <= position.row < self._rows and 0 <= position.col < self._columns

    def get(self, position: Position) -> T:
        self._require_in_bounds(position)
        return self._cast(int(self._cells[position.row, position.col]))

    def set(self, position: Position, value: T) -> None:
        self._require_in_bounds(position)
        self._cells[position.row, position.col] = int(value)  # type: ignore[call-overload]

    def get_at(self, index: int) -> T:
        """Read a value by row-major linear index."""
        return self.get(self.position_of(index))

    def position_of(self, index: int) -> Position:
        """Map a row-major linear index to its position."""
        if not 0 <= index < self.size:
            raise OutOfBoundsError(f"Index {index} outside grid of {self.size} cells.")
        row, col = divmod(index, self._columns)
        return Position(row, col)

    def index_of(self, position: Position) -> int:
        """Map a position to its row-major linear index."""
        self._require_in_bounds(position)
        return position.row * self._columns + position.col

    def positions(self) -> Iterator[Position]:
        """Iterate every position in row-major order."""
        for row in range(self._rows):
            for col in range(self._columns):
                yield Position(row, col)

    def cross_neighbors(self, position: Position) -> NeighborView:
        """Up to four orthogonal neighbours: up, down, left, right."""
        return self._neighbors(position, _CROSS_OFFSETS)

    def all_around_neighbors(self, position: Position) -> NeighborView:
        """Up to eight neighbours including diagonals."""
        return self._neighbors(position, _ALL_AROUND_OFFSETS)

    def vertical_neighbors(self, position: Position) -> NeighborView:
        return self._neighbors(position, _VERTICAL_OFFSETS)

    def horizontal_neighbors(self, position: Position) -> NeighborView:
        return self._neighbors(position, _HORIZONTAL_OFFSETS)

    def count(self, value: T) -> int:
        """Count cells holding the given value."""
        return int(np.count_nonzero(self._cells == int(value)))  # type: ignore[call-overload]

    def as_array(self) -> np.ndarray:
        """Return a copy of the backing array."""
        return self._cells.copy()

    def load_array(self, values: np.ndarray) -> None:
        """Replace all cells from an array of matching shape."""
        if values.shape != self._cells.shape:
            raise InvalidConfigurationError(
                f"Array shape {values.shape} does not match grid {self._cells.shape}."
            )
        self._cells = np.array(values, dtype=self._dtype, copy=True)

    def copy(self) -> Grid[T]:
        clone: Grid[T] = Grid(
            self._rows,
            self._columns,
            fill=self._cast(0),
            dtype=self._dtype,
            cast=self._cast,
        )
        clone._cells = self._cells.copy()
        return clone

    def _neighbors(self, position: Position, offsets: Offsets) -> NeighborView:
        self._require_in_bounds(position)
        return NeighborView(origin=position, rows=self._rows, columns=self._columns, offsets=offsets)

    def _require_in_bounds(self, position: Position) -> None:
        if not self.in_bounds(position):
            raise OutOfBoundsError(
                f"Position {position} outside grid of {self._rows}x{self._columns}."
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._cells.shape == other._cells.shape and bool(
            np.array_equal(self._cells, other._cells)
        )

    def __repr__(self) -> str:
        return f"Grid(rows={self._rows}, columns={self._columns})"
