"""Policies deciding when a targeting session has destroyed a whole ship."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sinkbot.ai.state import EngineState
from sinkbot.ai.targeting import TargetingSession
from sinkbot.core.grid import Grid
from sinkbot.core.models import CellState, Orientation, Position
from sinkbot.core.ships import CROSS_SHIP_SIZE, ShipInventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SunkShip:
    """Ship confirmed destroyed by the engine."""

    size: int
    positions: tuple[Position, ...]
    water_marked: tuple[Position, ...]


class SunkShipDetector(ABC):
    """Decides whether the session's hits cover a complete ship."""

    name: str = "detector"

    def is_sunk(
        self,
        session: TargetingSession,
        grid: Grid[CellState],
        inventory: ShipInventory,
        *,
        ability_available: bool = False,
    ) -> bool:
        if len(session.hits) < 2:
            return False
        return self._evaluate(session, grid, inventory, ability_available=ability_available)

    @abstractmethod
    def _evaluate(
        self,
        session: TargetingSession,
        grid: Grid[CellState],
        inventory: ShipInventory,
        *,
        ability_available: bool,
    ) -> bool:
        raise NotImplementedError


class CrossAwareSunkShipDetector(SunkShipDetector):
    """Resolves straight runs against the cross-shaped ship before confirming them."""

    name = "cross-aware"

    def _evaluate(
        self,
        session: TargetingSession,
        grid: Grid[CellState],
        inventory: ShipInventory,
        *,
        ability_available: bool,
    ) -> bool:
        hit_count = len(session.hits)
        in_line = session.orientation() is not Orientation.UNKNOWN
        has_cross = CROSS_SHIP_SIZE in inventory
        water_both_ends = session.water_at_both_ends(grid)

        could_be_cross = has_cross and (
            not in_line
            or hit_count in (3, 5)
            or (hit_count in (2, 4) and not water_both_ends)
        )

        if not could_be_cross and hit_count in inventory:
            if hit_count == inventory.max_size() or water_both_ends:
                return True

        if has_cross and not in_line and hit_count == CROSS_SHIP_SIZE:
            return True

        if in_line and hit_count in inventory:
            # The cross ship needs ship cells on both sides of its pivots.
            ordered = session.ordered_hits()
            if hit_count == 5 and _pivot_blocked(session, grid, (ordered[1], ordered[3])):
                return True
            if hit_count == 3 and water_both_ends and _pivot_blocked(session, grid, (ordered[1],)):
                return True

        return _fully_surrounded(session, grid)


class BasicSunkShipDetector(SunkShipDetector):
    """Confirms only on complete enclosure and a few unambiguous counts."""

    name = "basic"

    def _evaluate(
        self,
        session: TargetingSession,
        grid: Grid[CellState],
        inventory: ShipInventory,
        *,
        ability_available: bool,
    ) -> bool:
        if _fully_surrounded(session, grid):
            return True
        hit_count = len(session.hits)
        if ability_available and hit_count == CROSS_SHIP_SIZE:
            return True
        return (
            hit_count == 5
            and session.next_in_line(grid) is None
            and CROSS_SHIP_SIZE not in inventory
        )


def sink_ship(state: EngineState) -> SunkShip:
    """Retire the session's ship: update inventory, surround it with water, register hits."""
    grid = state.require_grid()
    hits = tuple(state.session.hits)
    state.inventory.remove(len(hits))

    water_marked: list[Position] = []
    for hit in hits:
        for neighbor in grid.all_around_neighbors(hit):
            if grid.get(neighbor) is CellState.UNKNOWN:
                grid.set(neighbor, CellState.WATER)
                water_marked.append(neighbor)

    state.sunk.add_all(hits)
    state.session.clear()
    sunk = SunkShip(size=len(hits), positions=hits, water_marked=tuple(water_marked))
    logger.info(
        "ship_sunk size=%s cells=%s remaining=%s",
        sunk.size,
        [str(position) for position in hits],
        state.inventory.sizes,
    )
    return sunk


def _fully_surrounded(session: TargetingSession, grid: Grid[CellState]) -> bool:
    return all(
        grid.get(neighbor).is_known
        for hit in session.hits
        for neighbor in grid.cross_neighbors(hit)
    )


def _pivot_blocked(
    session: TargetingSession, grid: Grid[CellState], pivots: tuple[Position, ...]
) -> bool:
    for pivot in pivots:
        sides = session.perpendicular_neighbors(grid, pivot)
        if len(sides) < 2 or any(grid.get(side) is CellState.WATER for side in sides):
            return True
    return False
