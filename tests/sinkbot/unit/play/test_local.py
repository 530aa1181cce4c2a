import random

import pytest

from sinkbot.core.errors import GameTargetError
from sinkbot.core.models import Ability, CellState, Position
from sinkbot.core.ships import DEFAULT_FLEET, ShipType
from sinkbot.play.local import (
    AREA_REVEAL_CELLS,
    HiddenBoard,
    LocalGameTarget,
    ShipPlacement,
    random_fleet_layout,
)


def _placement(ship_type: ShipType, row: int, col: int) -> ShipPlacement:
    return ShipPlacement(ship_type=ship_type, anchor=Position(row, col), shape=ship_type.shape)


def _board() -> HiddenBoard:
    return HiddenBoard.from_layout(
        [
            _placement(ShipType.HELICARRIER, 5, 5),
            _placement(ShipType.SUBMARINE, 11, 0),
            _placement(ShipType.BOAT, 0, 0),
        ]
    )


def _sink_helicarrier(board: HiddenBoard) -> None:
    for cell in board.ship_cells[1]:
        assert board.apply_shot(cell) is CellState.SHIP


def test_random_layout_places_full_fleet_without_contact() -> None:
    layout = random_fleet_layout(random.Random(42))
    assert len(layout) == len(DEFAULT_FLEET)
    assert sum(len(placement.cells()) for placement in layout) == 26

    for index, placement in enumerate(layout):
        for other in layout[index + 1 :]:
            for cell in placement.cells():
                for other_cell in other.cells():
                    assert max(abs(cell.row - other_cell.row), abs(cell.col - other_cell.col)) > 1


def test_random_layout_is_deterministic_per_seed() -> None:
    first = random_fleet_layout(random.Random(9))
    second = random_fleet_layout(random.Random(9))
    assert first == second


def test_hidden_board_shot_outcomes() -> None:
    board = _board()
    assert board.apply_shot(Position(3, 3)) is CellState.WATER
    assert board.apply_shot(Position(3, 3)) is None
    assert board.apply_shot(Position(12, 0)) is None
    assert board.apply_shot(Position(0, 0)) is CellState.SHIP
    assert board.encode()[:2] == "X*"
    assert board.encode()[3 * 12 + 3] == "."


def test_place_ship_rejects_overlap() -> None:
    board = _board()
    with pytest.raises(ValueError):
        board.place_ship(9, _placement(ShipType.BOAT, 0, 1))


def test_ability_unlocks_when_cross_ship_sinks_and_is_single_use() -> None:
    board = _board()
    rng = random.Random(1)
    assert board.apply_ability_shot(Position(0, 0), Ability.DESTROY_SHIP, rng) is None

    _sink_helicarrier(board)
    assert board.ability_available

    state, reveals = board.apply_ability_shot(Position(0, 0), Ability.DESTROY_SHIP, rng)
    assert state is CellState.SHIP
    assert reveals == (Position(0, 1),)
    assert board.ship_remaining[3] == 0
    assert not board.ability_available
    assert board.apply_ability_shot(Position(11, 0), Ability.DESTROY_SHIP, rng) is None


def test_destroy_ship_on_miss_reveals_nothing() -> None:
    board = _board()
    _sink_helicarrier(board)
    state, reveals = board.apply_ability_shot(Position(3, 3), Ability.DESTROY_SHIP, random.Random(1))
    assert state is CellState.WATER
    assert reveals == ()


def test_area_reveal_uncovers_random_cells() -> None:
    board = _board()
    _sink_helicarrier(board)
    state, reveals = board.apply_ability_shot(Position(11, 11), Ability.AREA_REVEAL, random.Random(4))
    assert state is CellState.WATER
    assert len(reveals) == AREA_REVEAL_CELLS
    assert Position(11, 11) not in reveals
    assert all(board.was_revealed(cell) for cell in reveals)


def test_reveal_smallest_ship_hints_without_revealing() -> None:
    board = _board()
    _sink_helicarrier(board)
    state, reveals = board.apply_ability_shot(
        Position(11, 11), Ability.REVEAL_SMALLEST_SHIP, random.Random(4)
    )
    assert state is CellState.WATER
    assert reveals == (Position(0, 0),)
    assert not board.was_revealed(Position(0, 0))


def test_local_target_advances_maps_and_finishes() -> None:
    target = LocalGameTarget(map_count=2, rng=random.Random(5), fleet=(ShipType.BOAT,))
    status = target.status()
    assert status.grid == "*" * 144
    assert (status.map_id, status.map_count, status.finished) == (0, 2, False)

    first, second = target.board.ship_cells[1]
    assert target.fire(first.row, first.col).was_hit
    advanced = target.fire(second.row, second.col)
    assert advanced.result
    assert (advanced.map_id, advanced.move_count, advanced.finished) == (1, 2, False)
    assert target.status().grid == "*" * 144

    first, second = target.board.ship_cells[1]
    target.fire(first.row, first.col)
    done = target.fire(second.row, second.col)
    assert (done.map_id, done.move_count, done.finished) == (1, 2, True)

    with pytest.raises(GameTargetError):
        target.fire(0, 0)


def test_local_target_rejects_invalid_shots() -> None:
    target = LocalGameTarget(rng=random.Random(6))
    assert target.fire(12, 0).result is False
    assert target.fire(0, 0).result is True
    repeated = target.fire(0, 0)
    assert repeated.result is False
    assert repeated.move_count == 1
    assert target.fire_with_ability(1, 1, Ability.AREA_REVEAL).result is False


def test_reset_consumes_tries() -> None:
    target = LocalGameTarget(rng=random.Random(8), tries=1)
    target.fire(0, 0)
    assert target.reset() == 0
    assert target.status().move_count == 0
    with pytest.raises(GameTargetError):
        target.reset()
