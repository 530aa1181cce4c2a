"""Ship shapes, catalog and remaining-ship inventory."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum

import numpy as np

from sinkbot.core.errors import InvalidConfigurationError, InvalidShipSizeError, InventoryError

CROSS_SHIP_SIZE = 9


@dataclass(frozen=True, slots=True)
class ShipShape:
    """Immutable occupancy matrix describing one orientation of a ship."""

    cells: tuple[tuple[bool, ...], ...]

    def __post_init__(self) -> None:
        if not self.cells or not self.cells[0]:
            raise InvalidConfigurationError("Ship shape must not be empty.")
        width = len(self.cells[0])
        if any(len(row) != width for row in self.cells):
            raise InvalidConfigurationError("Ship shape rows must have equal width.")

    @classmethod
    def from_pattern(cls, *rows: str) -> ShipShape:
        """Build a shape from rows of `X` (occupied) and `.` (empty)."""
        return cls(tuple(tuple(symbol == "X" for symbol in row) for row in rows))

    @classmethod
    def line(cls, length: int) -> ShipShape:
        return cls.from_pattern("X" * length)

    @property
    def height(self) -> int:
        return len(self.cells)

    @property
    def width(self) -> int:
        return len(self.cells[0])

    @property
    def size(self) -> int:
        """Number of occupied cells."""
        return sum(sum(row) for row in self.cells)

    @property
    def longest_run(self) -> int:
        """Longest straight run of occupied cells along either axis."""
        best = 0
        for lines in (self.cells, tuple(zip(*self.cells))):
            for line in lines:
                run = 0
                for occupied in line:
                    run = run + 1 if occupied else 0
                    best = max(best, run)
        return best

    def offsets(self) -> tuple[tuple[int, int], ...]:
        """Occupied (row, col) offsets relative to the top-left anchor."""
        return tuple(
            (row, col)
            for row, line in enumerate(self.cells)
            for col, occupied in enumerate(line)
            if occupied
        )

    def as_array(self) -> np.ndarray:
        return np.array(self.cells, dtype=bool)

    def rotate(self) -> ShipShape:
        """Return the shape rotated by transposing its matrix."""
        return ShipShape(tuple(zip(*self.cells)))


class ShipType(StrEnum):
    """Ships of the fleet."""

    BOAT = "BOAT"
    SUBMARINE = "SUBMARINE"
    DESTROYER = "DESTROYER"
    BATTLESHIP = "BATTLESHIP"
    CARRIER = "CARRIER"
    HELICARRIER = "HELICARRIER"

    @property
    def shape(self) -> ShipShape:
        return SHIP_SHAPES[self]

    @property
    def size(self) -> int:
        return SHIP_SHAPES[self].size


SHIP_SHAPES: dict[ShipType, ShipShape] = {
    ShipType.BOAT: ShipShape.line(2),
    ShipType.SUBMARINE: ShipShape.line(3),
    ShipType.DESTROYER: ShipShape.line(3),
    ShipType.BATTLESHIP: ShipShape.line(4),
    ShipType.CARRIER: ShipShape.line(5),
    ShipType.HELICARRIER: ShipShape.from_pattern(
        ".X.X.",
        "XXXXX",
        ".X.X.",
    ),
}

DEFAULT_FLEET: tuple[ShipType, ...] = (
    ShipType.BOAT,
    ShipType.SUBMARINE,
    ShipType.DESTROYER,
    ShipType.BATTLESHIP,
    ShipType.CARRIER,
    ShipType.HELICARRIER,
)

DEFAULT_FLEET_SIZES: tuple[int, ...] = tuple(ship.size for ship in DEFAULT_FLEET)

# Submarine and destroyer share a size; either line serves for placement counting.
_SHAPE_BY_SIZE: dict[int, ShipType] = {
    2: ShipType.BOAT,
    3: ShipType.SUBMARINE,
    4: ShipType.BATTLESHIP,
    5: ShipType.CARRIER,
    CROSS_SHIP_SIZE: ShipType.HELICARRIER,
}


class ShipCatalog:
    """Canonical shape per ship size."""

    def __init__(self, shapes: Mapping[int, ShipShape] | None = None) -> None:
        if shapes is None:
            shapes = {size: ship.shape for size, ship in _SHAPE_BY_SIZE.items()}
        for size, shape in shapes.items():
            if shape.size != size:
                raise InvalidConfigurationError(
                    f"Shape registered for size {size} occupies {shape.size} cells."
                )
        self._shapes = dict(shapes)

    @property
    def sizes(self) -> tuple[int, ...]:
        return tuple(sorted(self._shapes))

    def shape_for(self, size: int) -> ShipShape:
        """Return the canonical shape for a ship size."""
        shape = self._shapes.get(size)
        if shape is None:
            raise InvalidShipSizeError(f"Invalid ship size: {size}.")
        return shape

    def orientations(self, size: int) -> tuple[ShipShape, ShipShape]:
        """Canonical shape followed by its rotation."""
        shape = self.shape_for(size)
        return shape, self.rotate(shape)

    def longest_run(self, size: int) -> int:
        return self.shape_for(size).longest_run

    @staticmethod
    def rotate(shape: ShipShape) -> ShipShape:
        return shape.rotate()


class ShipInventory:
    """Multiset of ship sizes still afloat."""

    def __init__(self, sizes: Iterable[int] = DEFAULT_FLEET_SIZES) -> None:
        self._sizes: list[int] = sorted(sizes)

    @property
    def sizes(self) -> tuple[int, ...]:
        return tuple(self._sizes)

    @property
    def is_empty(self) -> bool:
        return not self._sizes

    def max_size(self) -> int:
        """Largest remaining size; raises InventoryError when empty."""
        if not self._sizes:
            raise InventoryError("No ships remain in inventory.")
        return self._sizes[-1]

    def remove(self, size: int) -> None:
        """Remove one ship of the given size."""
        if size not in self._sizes:
            raise InventoryError(f"No remaining ship of size {size}; remaining={self._sizes}.")
        self._sizes.remove(size)

    def count(self, size: int) -> int:
        return self._sizes.count(size)

    def counts(self) -> Counter[int]:
        return Counter(self._sizes)

    def __contains__(self, size: object) -> bool:
        return size in self._sizes

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._sizes))

    def __len__(self) -> int:
        return len(self._sizes)

    def __repr__(self) -> str:
        return f"ShipInventory({self._sizes})"
