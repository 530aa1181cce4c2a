"""Board collaborator contract shared by the simulator and the remote API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sinkbot.core.models import GRID_COLUMNS, GRID_ROWS, Ability, CELL_UNKNOWN_SYMBOL, Position


@dataclass(frozen=True, slots=True)
class FireResponse:
    """Board state after a status query or a shot."""

    grid: str
    cell: str = ""
    result: bool = False
    ability_available: bool = False
    map_id: int = 0
    map_count: int = 1
    move_count: int = 0
    finished: bool = False
    ability_reveals: tuple[Position, ...] = ()

    @property
    def was_hit(self) -> bool:
        return self.cell.upper() == "X"

    @classmethod
    def blank(
        cls,
        map_count: int,
        *,
        map_id: int = 0,
        rows: int = GRID_ROWS,
        columns: int = GRID_COLUMNS,
    ) -> FireResponse:
        """Response describing a fresh, untouched map."""
        return cls(grid=CELL_UNKNOWN_SYMBOL * (rows * columns), map_id=map_id, map_count=map_count)


class GameTarget(Protocol):
    """Anything a game can be played against."""

    @property
    def name(self) -> str: ...

    def status(self) -> FireResponse: ...

    def fire(self, row: int, col: int) -> FireResponse: ...

    def fire_with_ability(self, row: int, col: int, ability: Ability) -> FireResponse: ...

    def reset(self) -> int: ...
