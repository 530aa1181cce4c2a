import random

import pytest

from sinkbot.ai.baselines import SequentialStrategy
from sinkbot.core.errors import InvalidMoveError
from sinkbot.core.models import Ability
from sinkbot.core.ships import ShipType
from sinkbot.play.local import LocalGameTarget
from sinkbot.play.match import TurnRecord, play_game, play_match
from sinkbot.play.target import FireResponse


class _RejectingTarget:
    name = "rejecting"

    def status(self) -> FireResponse:
        return FireResponse.blank(1)

    def fire(self, row: int, col: int) -> FireResponse:
        return FireResponse(grid="*" * 144, result=False)

    def fire_with_ability(self, row: int, col: int, ability: Ability) -> FireResponse:
        return self.fire(row, col)

    def reset(self) -> int:
        return 0


def test_rejected_shot_raises_invalid_move() -> None:
    target = _RejectingTarget()
    with pytest.raises(InvalidMoveError):
        play_match(target, SequentialStrategy(), target.status())


def test_play_match_clears_single_map() -> None:
    target = LocalGameTarget(rng=random.Random(2), fleet=(ShipType.BOAT, ShipType.BATTLESHIP))
    turns: list[TurnRecord] = []

    result = play_match(target, SequentialStrategy(), target.status(), on_turn=turns.append)

    assert result.map_id == 0
    assert result.move_count == len(turns)
    assert target.status().finished
    assert turns[-1].strategy == "sequential"
    assert turns[-1].target_name == "Local simulator"
    fired = [record.target.position for record in turns]
    assert len(fired) == len(set(fired))


def test_play_game_plays_every_map_with_fresh_strategies() -> None:
    target = LocalGameTarget(map_count=3, rng=random.Random(3), fleet=(ShipType.BOAT,))
    created: list[SequentialStrategy] = []

    def _factory() -> SequentialStrategy:
        strategy = SequentialStrategy()
        created.append(strategy)
        return strategy

    turns: list[TurnRecord] = []
    result = play_game(target, _factory, on_turn=turns.append)

    assert [match.map_id for match in result.match_results] == [0, 1, 2]
    assert result.total_move_count == len(turns)
    assert len(created) == 3
    assert len({id(strategy) for strategy in created}) == 3
    assert target.status().finished
