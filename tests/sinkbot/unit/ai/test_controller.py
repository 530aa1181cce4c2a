import pytest

from sinkbot.ai.controller import StrategyController
from sinkbot.ai.power_advisor import NoPowerAdvisor
from sinkbot.ai.state import EngineState
from sinkbot.ai.sunk_detection import BasicSunkShipDetector
from sinkbot.core.codec import decode_grid
from sinkbot.core.errors import MatchAlreadyFinishedError
from sinkbot.core.grid import Grid
from sinkbot.core.models import Ability, CellState, PlayMode, Position
from sinkbot.core.observation import MatchObservation, TargetCell
from sinkbot.core.ships import ShipInventory

ISOLATED_WATER = [(5, 4), (5, 6), (4, 5), (6, 5)]


def test_isolated_hit_is_abandoned_and_search_resumes(grid_text) -> None:
    controller = StrategyController()
    observation = MatchObservation(grid=grid_text(ships=[(5, 5)], water=ISOLATED_WATER))

    target = controller.decide_next_target(observation)

    assert observation.decode().get(target.position) is CellState.UNKNOWN
    assert target.position not in {Position(r, c) for r, c in ISOLATED_WATER}
    assert Position(5, 5) in controller.state.sunk
    assert controller.mode is PlayMode.SEARCHING
    assert list(controller.state.inventory) == [2, 3, 3, 4, 5, 9]


def test_finished_observation_raises(grid_text) -> None:
    with pytest.raises(MatchAlreadyFinishedError):
        StrategyController().decide_next_target(MatchObservation(grid=grid_text(), match_finished=True))


def test_fully_known_board_raises(grid_text) -> None:
    water = [(r, c) for r in range(12) for c in range(12)]
    with pytest.raises(MatchAlreadyFinishedError):
        StrategyController().decide_next_target(MatchObservation(grid=grid_text(water=water)))


def test_empty_inventory_without_open_ship_cells_is_complete(grid_text) -> None:
    controller = StrategyController(state=EngineState(inventory=ShipInventory(())))
    with pytest.raises(MatchAlreadyFinishedError):
        controller.decide_next_target(MatchObservation(grid=grid_text(water=[(0, 0)])))


def test_hit_switches_to_targeting_around_it(grid_text) -> None:
    controller = StrategyController(advisor=NoPowerAdvisor())
    first = controller.decide_next_target(MatchObservation(grid=grid_text()))
    assert controller.mode is PlayMode.SEARCHING
    assert first.ability is None

    hit = first.position
    second = controller.decide_next_target(
        MatchObservation(grid=grid_text(ships=[(hit.row, hit.col)]), last_shot_was_hit=True)
    )
    grid = Grid.of_cell_states(12, 12)
    assert controller.mode is PlayMode.TARGETING
    assert second.position in set(grid.cross_neighbors(hit))
    assert controller.state.session.hits == [hit]


def test_line_is_followed_after_second_hit(grid_text) -> None:
    controller = StrategyController(advisor=NoPowerAdvisor())
    state = controller.state
    state.grid = decode_grid(grid_text(ships=[(6, 6)]), 12, 12)
    state.session.add_hit(Position(6, 6))
    state.mode = PlayMode.TARGETING
    state.last_target = TargetCell(Position(6, 7))

    target = controller.decide_next_target(
        MatchObservation(grid=grid_text(ships=[(6, 6), (6, 7)]), last_shot_was_hit=True)
    )
    assert target.position in {Position(6, 5), Position(6, 8)}


def test_sunk_ship_returns_to_search(grid_text) -> None:
    ships = [(0, 0), (0, 1)]
    controller = StrategyController(
        state=EngineState(inventory=ShipInventory((2, 3))),
        advisor=NoPowerAdvisor(),
    )
    controller.state.last_target = TargetCell(Position(0, 1))
    target = controller.decide_next_target(
        MatchObservation(grid=grid_text(ships=ships, water=[(0, 2)]), last_shot_was_hit=True)
    )
    assert list(controller.state.inventory) == [3]
    assert controller.mode is PlayMode.SEARCHING
    assert controller.state.grid.get(Position(1, 0)) is CellState.WATER
    assert target.position not in {Position(1, 0), Position(1, 1), Position(1, 2)}


def test_area_reveal_proposed_on_fresh_board(grid_text) -> None:
    target = StrategyController().decide_next_target(
        MatchObservation(grid=grid_text(), ability_available=True)
    )
    assert target.ability is Ability.AREA_REVEAL


def test_revealed_hint_is_fired_at_next(grid_text) -> None:
    controller = StrategyController()
    controller.state.last_target = TargetCell(Position(0, 0), Ability.REVEAL_SMALLEST_SHIP)
    target = controller.decide_next_target(
        MatchObservation(
            grid=grid_text(water=[(0, 0)]),
            ability_used=True,
            ability_reveals=(Position(7, 7),),
        )
    )
    assert target == TargetCell(Position(7, 7))


def test_revealed_ship_cells_start_a_session(grid_text) -> None:
    controller = StrategyController(detector=BasicSunkShipDetector(), advisor=NoPowerAdvisor())
    target = controller.decide_next_target(MatchObservation(grid=grid_text(ships=[(9, 2)])))
    assert controller.mode is PlayMode.TARGETING
    assert target.position in {Position(8, 2), Position(10, 2), Position(9, 1), Position(9, 3)}


def test_sinking_last_ship_finishes_match(grid_text) -> None:
    controller = StrategyController(
        state=EngineState(inventory=ShipInventory((2,))),
        advisor=NoPowerAdvisor(),
    )
    controller.state.last_target = TargetCell(Position(5, 6))
    with pytest.raises(MatchAlreadyFinishedError):
        controller.decide_next_target(
            MatchObservation(grid=grid_text(ships=[(5, 5), (5, 6)]), last_shot_was_hit=True)
        )
    assert controller.state.inventory.is_empty
    assert Position(5, 5) in controller.state.sunk
