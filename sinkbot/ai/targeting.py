"""Targeting session: finish off a ship once one of its cells is hit."""

from __future__ import annotations

from collections import deque
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from sinkbot.core.grid import Grid
from sinkbot.core.models import CellState, Orientation, Position
from sinkbot.core.ships import CROSS_SHIP_SIZE, ShipCatalog, ShipInventory


@dataclass(slots=True)
class TargetingSession:
    """Connected hits of the ship being hunted plus queued follow-up cells."""

    hits: list[Position] = field(default_factory=list)
    candidates: deque[Position] = field(default_factory=deque)

    @property
    def is_tracking(self) -> bool:
        return bool(self.hits)

    @property
    def is_idle(self) -> bool:
        return not self.hits and not self.candidates

    def add_hit(self, position: Position) -> bool:
        """Record a confirmed hit; returns False if it was already tracked."""
        if position in self.hits:
            return False
        self.hits.append(position)
        return True

    def absorb_connected_hits(
        self, grid: Grid[CellState], excluded: Collection[Position] = ()
    ) -> list[Position]:
        """Grow the hit set to the full cross-connected component of ship cells."""
        added: list[Position] = []
        stack = list(self.hits)
        while stack:
            current = stack.pop()
            for neighbor in grid.cross_neighbors(current):
                if neighbor in excluded or neighbor in self.hits:
                    continue
                if grid.get(neighbor) is CellState.SHIP:
                    self.hits.append(neighbor)
                    added.append(neighbor)
                    stack.append(neighbor)
        return added

    def clear(self) -> None:
        self.hits.clear()
        self.candidates.clear()

    def orientation(self) -> Orientation:
        if len(self.hits) < 2:
            return Orientation.UNKNOWN
        if len({hit.row for hit in self.hits}) == 1:
            return Orientation.HORIZONTAL
        if len({hit.col for hit in self.hits}) == 1:
            return Orientation.VERTICAL
        return Orientation.UNKNOWN

    def ordered_hits(self) -> list[Position]:
        """Hits sorted along the run when they form a line, else in tracking order."""
        orientation = self.orientation()
        if orientation is Orientation.HORIZONTAL:
            return sorted(self.hits, key=lambda hit: hit.col)
        if orientation is Orientation.VERTICAL:
            return sorted(self.hits, key=lambda hit: hit.row)
        return list(self.hits)

    def line_ends(self) -> tuple[Position, Position] | None:
        """Cells just beyond both ends of a straight run, possibly off the board."""
        orientation = self.orientation()
        if orientation is Orientation.UNKNOWN:
            return None
        ordered = self.ordered_hits()
        first, last = ordered[0], ordered[-1]
        if orientation is Orientation.HORIZONTAL:
            return first.shifted(0, -1), last.shifted(0, 1)
        return first.shifted(-1, 0), last.shifted(1, 0)

    def water_at_both_ends(self, grid: Grid[CellState]) -> bool:
        """True when both line ends are water or off the board."""
        ends = self.line_ends()
        if ends is None:
            return False
        return all(not grid.in_bounds(end) or grid.get(end) is CellState.WATER for end in ends)

    def next_in_line(self, grid: Grid[CellState]) -> Position | None:
        ends = self.line_ends()
        if ends is None:
            return None
        for end in ends:
            if grid.in_bounds(end) and grid.get(end) is CellState.UNKNOWN:
                return end
        return None

    def perpendicular_neighbors(self, grid: Grid[CellState], position: Position) -> list[Position]:
        """Neighbours of a run cell across the run's orientation."""
        orientation = self.orientation()
        if orientation is Orientation.HORIZONTAL:
            return list(grid.vertical_neighbors(position))
        if orientation is Orientation.VERTICAL:
            return list(grid.horizontal_neighbors(position))
        return []

    def enqueue(self, positions: Iterable[Position]) -> None:
        for position in positions:
            if position not in self.candidates:
                self.candidates.append(position)

    def pop_candidate(self, grid: Grid[CellState]) -> Position | None:
        """Dequeue the next still-unknown candidate, dropping stale ones."""
        while self.candidates:
            candidate = self.candidates.popleft()
            if grid.get(candidate) is CellState.UNKNOWN:
                return candidate
        return None

    def next_target(
        self,
        grid: Grid[CellState],
        inventory: ShipInventory,
        catalog: ShipCatalog,
        *,
        last_shot_was_hit: bool,
    ) -> Position | None:
        """Propose the next cell for this ship, or None when nothing is left to try."""
        if not self.hits:
            return self.pop_candidate(grid)

        if len(self.hits) > 1 and len(self.hits) < _longest_remaining_run(inventory, catalog):
            in_line = self.next_in_line(grid)
            if in_line is not None:
                return in_line

        if not last_shot_was_hit:
            queued = self.pop_candidate(grid)
            if queued is not None:
                return queued

        if CROSS_SHIP_SIZE in inventory:
            probe = self._probe_cross_ship(grid)
            if probe is not None:
                return probe

        for neighbor in grid.cross_neighbors(self.hits[-1]):
            if grid.get(neighbor) is CellState.UNKNOWN:
                return neighbor

        for hit in self.hits:
            for neighbor in grid.cross_neighbors(hit):
                if grid.get(neighbor) is CellState.UNKNOWN:
                    return neighbor
        return None

    def _probe_cross_ship(self, grid: Grid[CellState]) -> Position | None:
        # A 3-run may be the cross ship's short bar, a 5-run its long bar.
        if self.orientation() is Orientation.UNKNOWN or len(self.hits) not in (3, 5):
            return None
        ordered = self.ordered_hits()
        pivots = [ordered[1]] if len(ordered) == 3 else [ordered[1], ordered[3]]
        for pivot in pivots:
            self.enqueue(
                neighbor
                for neighbor in self.perpendicular_neighbors(grid, pivot)
                if grid.get(neighbor) is CellState.UNKNOWN
            )
        return self.pop_candidate(grid)


def _longest_remaining_run(inventory: ShipInventory, catalog: ShipCatalog) -> int:
    return max((catalog.longest_run(size) for size in set(inventory)), default=0)
