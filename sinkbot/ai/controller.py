"""Probability-driven hunt/target controller composed of swappable policies."""

from __future__ import annotations

import logging

from sinkbot.ai.power_advisor import HeuristicPowerAdvisor, PowerAdvisor
from sinkbot.ai.probability import ProbabilityEstimator
from sinkbot.ai.state import EngineState
from sinkbot.ai.strategy import MatchStrategy
from sinkbot.ai.sunk_detection import CrossAwareSunkShipDetector, SunkShipDetector, sink_ship
from sinkbot.core.codec import decode_grid, merge_grid
from sinkbot.core.errors import MatchAlreadyFinishedError, NoCandidateFoundError
from sinkbot.core.grid import Grid
from sinkbot.core.models import Ability, CellState, PlayMode, Position
from sinkbot.core.observation import MatchObservation, TargetCell
from sinkbot.core.ships import ShipCatalog

logger = logging.getLogger(__name__)


class StrategyController(MatchStrategy):
    """Searches by placement probability, then finishes ships with a targeting session."""

    name = "probability"

    def __init__(
        self,
        *,
        estimator: ProbabilityEstimator | None = None,
        detector: SunkShipDetector | None = None,
        advisor: PowerAdvisor | None = None,
        catalog: ShipCatalog | None = None,
        state: EngineState | None = None,
        name: str | None = None,
    ) -> None:
        self._catalog = catalog or ShipCatalog()
        self._estimator = estimator or ProbabilityEstimator(self._catalog)
        self._detector = detector or CrossAwareSunkShipDetector()
        self._advisor = advisor or HeuristicPowerAdvisor()
        self._state = state or EngineState()
        if name is not None:
            self.name = name

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def mode(self) -> PlayMode:
        return self._state.mode

    def decide_next_target(self, observation: MatchObservation) -> TargetCell:
        self.assert_match_running(observation)
        state = self._state
        grid = self._merge_observation(observation)
        self._record_previous_shot(grid, observation)
        self._resolve_hit_islands(grid, observation)

        if grid.count(CellState.UNKNOWN) == 0:
            raise MatchAlreadyFinishedError("No unknown cells remain.")
        if state.inventory.is_empty and not state.session.hits and not state.unattributed_ship_cells():
            raise MatchAlreadyFinishedError("Every ship has been sunk.")

        self._update_mode(observation)

        position: Position | None = None
        if state.mode is PlayMode.TARGETING:
            position = state.session.next_target(
                grid,
                state.inventory,
                self._catalog,
                last_shot_was_hit=observation.last_shot_was_hit,
            )
            if position is None:
                self._abandon_session()
        if position is None:
            position = self._search(grid)

        ability = self._advisor.advise(state, observation)
        target = TargetCell(position=position, ability=ability)
        state.last_target = target
        if ability is not None:
            logger.info("ability_proposed ability=%s target=%s mode=%s", ability, position, state.mode)
        logger.debug("target_chosen target=%s mode=%s hits=%s", position, state.mode, len(state.session.hits))
        return target

    def _merge_observation(self, observation: MatchObservation) -> Grid[CellState]:
        state = self._state
        if state.grid is None:
            state.grid = decode_grid(observation.grid, observation.rows, observation.columns)
        else:
            merge_grid(state.grid, observation.grid)
        return state.grid

    def _record_previous_shot(self, grid: Grid[CellState], observation: MatchObservation) -> None:
        state = self._state
        previous = state.last_target
        if previous is None:
            return
        if observation.last_shot_was_hit and previous.position not in state.sunk:
            state.session.add_hit(previous.position)
        if previous.ability is Ability.REVEAL_SMALLEST_SHIP and observation.ability_reveals:
            state.pending_hint = observation.ability_reveals[0]
            logger.debug("ability_hint_received position=%s", state.pending_hint)

    def _resolve_hit_islands(self, grid: Grid[CellState], observation: MatchObservation) -> None:
        state = self._state
        while True:
            if not state.session.hits:
                lonely = state.unattributed_ship_cells()
                if not lonely:
                    return
                state.session.add_hit(lonely[0])
            state.session.absorb_connected_hits(grid, excluded=state.sunk)
            if not self._detector.is_sunk(
                state.session,
                grid,
                state.inventory,
                ability_available=observation.ability_available,
            ):
                return
            sink_ship(state)

    def _update_mode(self, observation: MatchObservation) -> None:
        state = self._state
        if state.mode is PlayMode.SEARCHING and (observation.last_shot_was_hit or state.session.hits):
            self._switch_mode(PlayMode.TARGETING)
        if state.mode is PlayMode.TARGETING and state.session.is_idle:
            self._switch_mode(PlayMode.SEARCHING)

    def _switch_mode(self, mode: PlayMode) -> None:
        if self._state.mode is not mode:
            logger.debug("mode_switch from=%s to=%s", self._state.mode, mode)
            self._state.mode = mode

    def _abandon_session(self) -> None:
        state = self._state
        if state.session.hits:
            logger.warning(
                "targeting_session_abandoned cells=%s",
                [str(position) for position in state.session.hits],
            )
            state.sunk.add_all(state.session.hits)
        state.session.clear()
        self._switch_mode(PlayMode.SEARCHING)

    def _search(self, grid: Grid[CellState]) -> Position:
        state = self._state
        hint = state.pending_hint
        if hint is not None:
            state.pending_hint = None
            if grid.in_bounds(hint) and grid.get(hint) is CellState.UNKNOWN:
                return hint

        surface = self._estimator.compute(grid, state.inventory)
        best = self._estimator.best_cell(grid, surface)
        if best is None:
            raise NoCandidateFoundError("No unknown cell left to search.")
        return best
