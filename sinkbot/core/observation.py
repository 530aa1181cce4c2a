"""Per-turn engine input and output."""

from __future__ import annotations

from dataclasses import dataclass

from sinkbot.core.codec import decode_grid
from sinkbot.core.grid import Grid
from sinkbot.core.models import GRID_COLUMNS, GRID_ROWS, Ability, CellState, Position


@dataclass(frozen=True, slots=True)
class MatchObservation:
    """Immutable snapshot the orchestrator hands to a strategy each turn."""

    grid: str
    last_shot_was_hit: bool = False
    ability_available: bool = False
    ability_used: bool = False
    match_finished: bool = False
    rows: int = GRID_ROWS
    columns: int = GRID_COLUMNS
    ability_reveals: tuple[Position, ...] = ()

    def decode(self) -> Grid[CellState]:
        """Decode the encoded grid into a fresh cell-state grid."""
        return decode_grid(self.grid, self.rows, self.columns)


@dataclass(frozen=True, slots=True)
class TargetCell:
    """Next shot, optionally fired with an ability."""

    position: Position
    ability: Ability | None = None

    @property
    def uses_ability(self) -> bool:
        return self.ability is not None
