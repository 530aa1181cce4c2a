"""Placement-counting probability surface for search mode."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from sinkbot.core.grid import Grid
from sinkbot.core.models import CellState, Position
from sinkbot.core.ships import ShipCatalog, ShipInventory, ShipShape

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProbabilitySurface:
    """Snapshot of placement counts published to observers."""

    counts: tuple[int, ...]
    rows: int
    columns: int


SurfaceObserver = Callable[[ProbabilitySurface], None]


class ProbabilityEstimator:
    """Scores unknown cells by how many legal placements of remaining ships cover them."""

    def __init__(
        self,
        catalog: ShipCatalog | None = None,
        on_surface_updated: SurfaceObserver | None = None,
    ) -> None:
        self._catalog = catalog or ShipCatalog()
        self._on_surface_updated = on_surface_updated

    def compute(self, grid: Grid[CellState], inventory: ShipInventory) -> Grid[int]:
        """Count, per cell, the legal placements of every remaining ship and orientation."""
        unknown = grid.as_array() == int(CellState.UNKNOWN)
        counts = np.zeros(unknown.shape, dtype=np.int32)
        for size in inventory:
            for shape in self._catalog.orientations(size):
                _accumulate_placements(unknown, shape, counts)

        surface = Grid.of_counts(grid.rows, grid.columns)
        surface.load_array(counts)
        logger.debug("probability_surface_updated max=%s ships=%s", int(counts.max()), inventory.sizes)
        if self._on_surface_updated is not None:
            self._on_surface_updated(
                ProbabilitySurface(
                    counts=tuple(int(value) for value in counts.ravel()),
                    rows=grid.rows,
                    columns=grid.columns,
                )
            )
        return surface

    @staticmethod
    def best_cell(grid: Grid[CellState], surface: Grid[int]) -> Position | None:
        """Highest-scoring unknown cell, ties broken by row-major order."""
        unknown = grid.as_array() == int(CellState.UNKNOWN)
        if not unknown.any():
            return None
        scores = np.where(unknown, surface.as_array(), -1)
        return grid.position_of(int(np.argmax(scores)))


def _accumulate_placements(unknown: np.ndarray, shape: ShipShape, counts: np.ndarray) -> None:
    rows, columns = unknown.shape
    if shape.height > rows or shape.width > columns:
        return
    mask = shape.as_array()
    windows = sliding_window_view(unknown, (shape.height, shape.width))
    fits = np.all(windows | ~mask, axis=(2, 3))
    anchor_rows, anchor_cols = fits.shape
    for d_row, d_col in shape.offsets():
        counts[d_row : d_row + anchor_rows, d_col : d_col + anchor_cols] += fits
