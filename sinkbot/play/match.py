"""Match and game orchestration against a game target."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sinkbot.ai.strategy import MatchStrategy
from sinkbot.core.codec import decode_grid, format_grid
from sinkbot.core.errors import GameTargetError, InvalidMoveError
from sinkbot.core.models import (
    CELL_SHIP_SYMBOL,
    CELL_UNKNOWN_SYMBOL,
    CELL_WATER_SYMBOL,
    GRID_COLUMNS,
    GRID_ROWS,
    Position,
)
from sinkbot.core.observation import MatchObservation, TargetCell
from sinkbot.play.target import FireResponse, GameTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of one map."""

    map_id: int
    move_count: int


@dataclass(frozen=True, slots=True)
class GameResult:
    """Outcome of a full game."""

    match_results: tuple[MatchResult, ...]
    total_move_count: int


@dataclass(frozen=True, slots=True)
class TurnRecord:
    """One fired shot, handed to turn observers."""

    map_id: int
    target: TargetCell
    response: FireResponse
    strategy: str
    target_name: str


TurnObserver = Callable[[TurnRecord], None]


def play_match(
    target: GameTarget,
    strategy: MatchStrategy,
    initial: FireResponse,
    *,
    on_turn: TurnObserver | None = None,
    rows: int = GRID_ROWS,
    columns: int = GRID_COLUMNS,
) -> MatchResult:
    """Fire until the map is cleared; every valid shot reveals at least one new cell."""
    map_id = initial.map_id
    grid = initial.grid
    last_shot_was_hit = False
    ability_available = initial.ability_available
    ability_used = False
    ability_reveals: tuple[Position, ...] = ()
    move_count = initial.move_count
    logger.info(
        "match_started map_id=%s strategy=%s target=%s", map_id, strategy.name, target.name
    )

    for _ in range(grid.count(CELL_UNKNOWN_SYMBOL)):
        observation = MatchObservation(
            grid=grid,
            last_shot_was_hit=last_shot_was_hit,
            ability_available=ability_available,
            ability_used=ability_used,
            rows=rows,
            columns=columns,
            ability_reveals=ability_reveals,
        )
        choice = strategy.decide_next_target(observation)
        position = choice.position
        if choice.ability is not None:
            logger.debug("turn_fire target=%s ability=%s", position, choice.ability)
            response = target.fire_with_ability(position.row, position.col, choice.ability)
        else:
            logger.debug("turn_fire target=%s", position)
            response = target.fire(position.row, position.col)

        if not response.result:
            logger.error(
                "invalid_move target=%s map_id=%s grid=\n%s",
                position,
                map_id,
                format_grid(decode_grid(grid, rows, columns)),
            )
            raise InvalidMoveError(f"Shot at {position} was rejected; was it already revealed?")

        if on_turn is not None:
            on_turn(
                TurnRecord(
                    map_id=map_id,
                    target=choice,
                    response=response,
                    strategy=strategy.name,
                    target_name=target.name,
                )
            )

        move_count = response.move_count
        if response.map_id != map_id or response.finished:
            logger.info("match_finished map_id=%s moves=%s", map_id, move_count)
            return MatchResult(map_id=map_id, move_count=move_count)

        grid = _with_cell(response.grid, position.row * columns + position.col, response.cell)
        last_shot_was_hit = response.was_hit
        ability_available = response.ability_available
        ability_used = ability_used or choice.uses_ability
        ability_reveals = response.ability_reveals

    raise GameTargetError(f"Map {map_id} did not finish after {move_count} moves.")


def play_game(
    target: GameTarget,
    strategy_factory: Callable[[], MatchStrategy],
    *,
    on_turn: TurnObserver | None = None,
) -> GameResult:
    """Play every remaining map of the current game, one fresh strategy per map."""
    status = target.status()
    logger.info(
        "game_started target=%s map_id=%s map_count=%s moves=%s",
        target.name,
        status.map_id,
        status.map_count,
        status.move_count,
    )
    if status.finished and status.map_id == status.map_count - 1:
        # The next valid shot starts a new game.
        status = FireResponse.blank(status.map_count)

    results: list[MatchResult] = []
    initial = status
    for map_id in range(status.map_id, status.map_count):
        if map_id != status.map_id:
            initial = FireResponse.blank(status.map_count, map_id=map_id)
        results.append(play_match(target, strategy_factory(), initial, on_turn=on_turn))

    total = sum(result.move_count for result in results)
    logger.info("game_finished maps=%s total_moves=%s", len(results), total)
    return GameResult(match_results=tuple(results), total_move_count=total)


def _with_cell(grid: str, index: int, cell: str) -> str:
    symbol = cell.upper()
    if symbol not in (CELL_SHIP_SYMBOL, CELL_WATER_SYMBOL) or not 0 <= index < len(grid):
        return grid
    return grid[:index] + symbol + grid[index + 1 :]
