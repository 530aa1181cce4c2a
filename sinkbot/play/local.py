"""In-process hidden-board simulator."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from sinkbot.core.errors import GameTargetError
from sinkbot.core.models import GRID_COLUMNS, GRID_ROWS, STATE_TO_SYMBOL, Ability, CellState, Position
from sinkbot.core.ships import DEFAULT_FLEET, ShipShape, ShipType
from sinkbot.play.target import FireResponse

logger = logging.getLogger(__name__)

AREA_REVEAL_CELLS = 10
DEFAULT_LOCAL_TRIES = 100


@dataclass(frozen=True, slots=True)
class ShipPlacement:
    """Ship type anchored at the top-left corner of its shape's bounding box."""

    ship_type: ShipType
    anchor: Position
    shape: ShipShape

    def cells(self) -> list[Position]:
        return [self.anchor.shifted(d_row, d_col) for d_row, d_col in self.shape.offsets()]


def random_fleet_layout(
    rng: random.Random,
    rows: int = GRID_ROWS,
    columns: int = GRID_COLUMNS,
    fleet: Sequence[ShipType] = DEFAULT_FLEET,
) -> list[ShipPlacement]:
    """Generate a random fleet whose ships never touch, diagonals included."""
    for _ in range(400):
        generated = _generate_non_touching_fleet(rng, rows, columns, fleet)
        if generated is not None:
            return generated
    raise RuntimeError("Failed to generate random fleet placement.")


def _generate_non_touching_fleet(
    rng: random.Random, rows: int, columns: int, fleet: Sequence[ShipType]
) -> list[ShipPlacement] | None:
    occupied: set[Position] = set()
    placements: list[ShipPlacement] = []
    # Largest ships first leave more room for the rest.
    for ship_type in sorted(fleet, key=lambda ship: ship.size, reverse=True):
        candidates = _candidate_placements(ship_type, rows, columns, occupied)
        if not candidates:
            return None
        placement = rng.choice(candidates)
        placements.append(placement)
        occupied.update(placement.cells())
    return placements


def _candidate_placements(
    ship_type: ShipType, rows: int, columns: int, occupied: set[Position]
) -> list[ShipPlacement]:
    candidates: list[ShipPlacement] = []
    canonical = ship_type.shape
    for shape in (canonical, canonical.rotate()):
        for row in range(rows - shape.height + 1):
            for col in range(columns - shape.width + 1):
                placement = ShipPlacement(ship_type=ship_type, anchor=Position(row, col), shape=shape)
                if _touches_existing(placement.cells(), occupied):
                    continue
                candidates.append(placement)
    return candidates


def _touches_existing(cells: list[Position], occupied: set[Position]) -> bool:
    for cell in cells:
        for d_row in (-1, 0, 1):
            for d_col in (-1, 0, 1):
                if cell.shifted(d_row, d_col) in occupied:
                    return True
    return False


@dataclass(slots=True)
class HiddenBoard:
    """Numpy-backed board holding ship ids and revealed cell states."""

    rows: int = GRID_ROWS
    columns: int = GRID_COLUMNS
    ships: np.ndarray = field(init=False)
    revealed: np.ndarray = field(init=False)
    ship_cells: dict[int, list[Position]] = field(default_factory=dict)
    ship_types: dict[int, ShipType] = field(default_factory=dict)
    ship_remaining: dict[int, int] = field(default_factory=dict)
    ability_available: bool = False
    ability_used: bool = False

    def __post_init__(self) -> None:
        self.ships = np.zeros((self.rows, self.columns), dtype=np.int16)
        self.revealed = np.full((self.rows, self.columns), int(CellState.UNKNOWN), dtype=np.int8)

    @classmethod
    def from_layout(
        cls, placements: Sequence[ShipPlacement], rows: int = GRID_ROWS, columns: int = GRID_COLUMNS
    ) -> HiddenBoard:
        board = cls(rows=rows, columns=columns)
        for ship_id, placement in enumerate(placements, start=1):
            board.place_ship(ship_id, placement)
        return board

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.columns

    def place_ship(self, ship_id: int, placement: ShipPlacement) -> None:
        cells = placement.cells()
        for cell in cells:
            if not self.in_bounds(cell) or self.ships[cell.row, cell.col] != 0:
                raise ValueError(f"Invalid placement for {placement.ship_type.value}.")
        for cell in cells:
            self.ships[cell.row, cell.col] = ship_id
        self.ship_cells[ship_id] = cells
        self.ship_types[ship_id] = placement.ship_type
        self.ship_remaining[ship_id] = len(cells)

    def was_revealed(self, position: Position) -> bool:
        return self.revealed[position.row, position.col] != int(CellState.UNKNOWN)

    def apply_shot(self, position: Position) -> CellState | None:
        """Reveal one cell; None when the shot is off the board or repeats a revealed cell."""
        if not self.in_bounds(position) or self.was_revealed(position):
            return None
        return self._reveal(position)

    def apply_ability_shot(
        self, position: Position, ability: Ability, rng: random.Random
    ) -> tuple[CellState, tuple[Position, ...]] | None:
        """Fire with an ability; returns the shot state and the cells the ability reported."""
        if not self.ability_available or self.ability_used:
            return None
        state = self.apply_shot(position)
        if state is None:
            return None
        self.ability_available = False
        self.ability_used = True

        if ability is Ability.REVEAL_SMALLEST_SHIP:
            reveals = self._smallest_ship_hint()
        elif ability is Ability.AREA_REVEAL:
            hidden = [
                Position(int(row), int(col))
                for row, col in zip(*np.nonzero(self.revealed == int(CellState.UNKNOWN)))
            ]
            reveals = tuple(rng.sample(hidden, min(AREA_REVEAL_CELLS, len(hidden))))
            for cell in reveals:
                self._reveal(cell)
        else:
            reveals = self._destroy_ship_at(position) if state is CellState.SHIP else ()
        logger.debug("ability_applied ability=%s target=%s reveals=%s", ability, position, len(reveals))
        return state, reveals

    def all_ships_sunk(self) -> bool:
        return all(remaining == 0 for remaining in self.ship_remaining.values())

    def encode(self) -> str:
        return "".join(STATE_TO_SYMBOL[CellState(int(code))] for code in self.revealed.ravel())

    def _reveal(self, position: Position) -> CellState:
        ship_id = int(self.ships[position.row, position.col])
        if ship_id == 0:
            self.revealed[position.row, position.col] = int(CellState.WATER)
            return CellState.WATER

        self.revealed[position.row, position.col] = int(CellState.SHIP)
        self.ship_remaining[ship_id] -= 1
        if self.ship_remaining[ship_id] == 0:
            ship_type = self.ship_types[ship_id]
            logger.debug("hidden_ship_sunk type=%s", ship_type)
            if ship_type is ShipType.HELICARRIER and not self.ability_used:
                self.ability_available = True
        return CellState.SHIP

    def _smallest_ship_hint(self) -> tuple[Position, ...]:
        afloat = [ship_id for ship_id, remaining in self.ship_remaining.items() if remaining > 0]
        if not afloat:
            return ()
        smallest = min(afloat, key=lambda ship_id: (self.ship_types[ship_id].size, ship_id))
        for cell in self.ship_cells[smallest]:
            if not self.was_revealed(cell):
                return (cell,)
        return ()

    def _destroy_ship_at(self, position: Position) -> tuple[Position, ...]:
        ship_id = int(self.ships[position.row, position.col])
        revealed: list[Position] = []
        for cell in self.ship_cells[ship_id]:
            if not self.was_revealed(cell):
                self._reveal(cell)
                revealed.append(cell)
        return tuple(revealed)


class LocalGameTarget:
    """Plays a sequence of randomly generated maps in memory."""

    def __init__(
        self,
        map_count: int = 1,
        *,
        rng: random.Random | None = None,
        rows: int = GRID_ROWS,
        columns: int = GRID_COLUMNS,
        fleet: Sequence[ShipType] = DEFAULT_FLEET,
        tries: int = DEFAULT_LOCAL_TRIES,
    ) -> None:
        if map_count <= 0:
            raise ValueError("map_count must be positive.")
        self._map_count = map_count
        self._rng = rng or random.Random()
        self._rows = rows
        self._columns = columns
        self._fleet = tuple(fleet)
        self._tries = tries
        self._start_game()

    @property
    def name(self) -> str:
        return "Local simulator"

    @property
    def board(self) -> HiddenBoard:
        return self._board

    def status(self) -> FireResponse:
        return self._response(cell="", result=False)

    def fire(self, row: int, col: int) -> FireResponse:
        self._require_running()
        position = Position(row, col)
        state = self._board.apply_shot(position)
        if state is None:
            logger.debug("local_shot_rejected target=%s", position)
            return self._response(cell="", result=False)
        return self._after_valid_shot(state, ())

    def fire_with_ability(self, row: int, col: int, ability: Ability) -> FireResponse:
        self._require_running()
        position = Position(row, col)
        outcome = self._board.apply_ability_shot(position, ability, self._rng)
        if outcome is None:
            logger.debug("local_ability_rejected target=%s ability=%s", position, ability)
            return self._response(cell="", result=False)
        state, reveals = outcome
        return self._after_valid_shot(state, reveals)

    def reset(self) -> int:
        """Start a new game and return the remaining number of tries."""
        if self._tries <= 0:
            raise GameTargetError("No tries left.")
        self._tries -= 1
        self._start_game()
        return self._tries

    def _start_game(self) -> None:
        self._map_id = 0
        self._finished = False
        self._new_board()

    def _new_board(self) -> None:
        layout = random_fleet_layout(self._rng, self._rows, self._columns, self._fleet)
        self._board = HiddenBoard.from_layout(layout, self._rows, self._columns)
        self._move_count = 0

    def _require_running(self) -> None:
        if self._finished:
            raise GameTargetError("Game already finished; reset to play again.")

    def _after_valid_shot(self, state: CellState, reveals: tuple[Position, ...]) -> FireResponse:
        self._move_count += 1
        response = self._response(cell=STATE_TO_SYMBOL[state], result=True, ability_reveals=reveals)
        if not self._board.all_ships_sunk():
            return response

        logger.info("local_map_cleared map_id=%s moves=%s", self._map_id, self._move_count)
        if self._map_id == self._map_count - 1:
            self._finished = True
            return self._response(cell=response.cell, result=True, ability_reveals=reveals)
        finished_moves = self._move_count
        self._map_id += 1
        self._new_board()
        return FireResponse(
            grid=response.grid,
            cell=response.cell,
            result=True,
            ability_available=False,
            map_id=self._map_id,
            map_count=self._map_count,
            move_count=finished_moves,
            finished=False,
            ability_reveals=reveals,
        )

    def _response(
        self, *, cell: str, result: bool, ability_reveals: tuple[Position, ...] = ()
    ) -> FireResponse:
        return FireResponse(
            grid=self._board.encode(),
            cell=cell,
            result=result,
            ability_available=self._board.ability_available,
            map_id=self._map_id,
            map_count=self._map_count,
            move_count=self._move_count,
            finished=self._finished,
            ability_reveals=ability_reveals,
        )
