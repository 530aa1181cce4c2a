"""Simple reference strategies."""

from __future__ import annotations

import random
from collections import deque

from sinkbot.ai.strategy import MatchStrategy
from sinkbot.core.errors import MatchAlreadyFinishedError
from sinkbot.core.grid import Grid
from sinkbot.core.models import CellState, Position
from sinkbot.core.observation import MatchObservation, TargetCell


class SequentialStrategy(MatchStrategy):
    """Fires at the first unknown cell in row-major order."""

    name = "sequential"

    def decide_next_target(self, observation: MatchObservation) -> TargetCell:
        self.assert_match_running(observation)
        grid = observation.decode()
        for position in grid.positions():
            if grid.get(position) is CellState.UNKNOWN:
                return TargetCell(position)
        raise MatchAlreadyFinishedError("No unknown cells remain.")


class ParityHuntStrategy(MatchStrategy):
    """Random checkerboard hunt, then cross-neighbour targeting around every ship cell."""

    name = "parity"

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng
        self._target_queue: deque[Position] = deque()
        self._seen_ship_cells: set[Position] = set()
        self._hunt_cells: list[Position] | None = None

    def decide_next_target(self, observation: MatchObservation) -> TargetCell:
        self.assert_match_running(observation)
        grid = observation.decode()
        if self._hunt_cells is None:
            self._hunt_cells = [
                position for position in grid.positions() if (position.row + position.col) % 2 == 0
            ]
            self._rng.shuffle(self._hunt_cells)
        self._enqueue_new_ship_neighbors(grid)
        return TargetCell(self._choose_shot(grid))

    def _choose_shot(self, grid: Grid[CellState]) -> Position:
        while self._target_queue:
            position = self._target_queue.popleft()
            if grid.get(position) is CellState.UNKNOWN:
                return position

        assert self._hunt_cells is not None
        while self._hunt_cells:
            position = self._hunt_cells.pop()
            if grid.get(position) is CellState.UNKNOWN and not _touches_ship(grid, position):
                return position

        remaining = [position for position in grid.positions() if grid.get(position) is CellState.UNKNOWN]
        if not remaining:
            raise MatchAlreadyFinishedError("No unknown cells remain.")
        return self._rng.choice(remaining)

    def _enqueue_new_ship_neighbors(self, grid: Grid[CellState]) -> None:
        for position in grid.positions():
            if grid.get(position) is not CellState.SHIP or position in self._seen_ship_cells:
                continue
            self._seen_ship_cells.add(position)
            for neighbor in grid.cross_neighbors(position):
                if grid.get(neighbor) is CellState.UNKNOWN:
                    self._target_queue.append(neighbor)


def _touches_ship(grid: Grid[CellState], position: Position) -> bool:
    return any(grid.get(neighbor) is CellState.SHIP for neighbor in grid.all_around_neighbors(position))
