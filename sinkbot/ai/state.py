"""Owned per-match engine state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from sinkbot.ai.targeting import TargetingSession
from sinkbot.core.grid import Grid
from sinkbot.core.models import CellState, PlayMode, Position
from sinkbot.core.observation import TargetCell
from sinkbot.core.ships import ShipInventory


class SunkShipRegistry:
    """Positions already attributed to a destroyed or abandoned ship."""

    def __init__(self, positions: Iterable[Position] = ()) -> None:
        self._positions: set[Position] = set(positions)

    def add_all(self, positions: Iterable[Position]) -> None:
        self._positions.update(positions)

    def __contains__(self, position: object) -> bool:
        return position in self._positions

    def __iter__(self) -> Iterator[Position]:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)


@dataclass(slots=True)
class EngineState:
    """Everything one controller carries between turns of a single match."""

    grid: Grid[CellState] | None = None
    inventory: ShipInventory = field(default_factory=ShipInventory)
    session: TargetingSession = field(default_factory=TargetingSession)
    sunk: SunkShipRegistry = field(default_factory=SunkShipRegistry)
    mode: PlayMode = PlayMode.SEARCHING
    last_target: TargetCell | None = None
    pending_hint: Position | None = None

    def require_grid(self) -> Grid[CellState]:
        if self.grid is None:
            raise RuntimeError("Engine state has no working grid yet.")
        return self.grid

    def is_attributed(self, position: Position) -> bool:
        return position in self.sunk or position in self.session.hits

    def unattributed_ship_cells(self) -> list[Position]:
        """Ship cells owned by neither the registry nor the active session, row-major."""
        grid = self.require_grid()
        return [
            position
            for position in grid.positions()
            if grid.get(position) is CellState.SHIP and not self.is_attributed(position)
        ]
