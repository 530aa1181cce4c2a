"""Ability usage policies."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sinkbot.ai.state import EngineState
from sinkbot.core.models import Ability, CellState, PlayMode
from sinkbot.core.observation import MatchObservation


class PowerAdvisor(ABC):
    """Proposes at most one ability per turn."""

    @abstractmethod
    def advise(self, state: EngineState, observation: MatchObservation) -> Ability | None:
        """Return the ability to attach to this turn's shot, if any."""


class NoPowerAdvisor(PowerAdvisor):
    def advise(self, state: EngineState, observation: MatchObservation) -> Ability | None:
        return None


class HeuristicPowerAdvisor(PowerAdvisor):
    """Spends the ability where it is most likely to save shots."""

    def advise(self, state: EngineState, observation: MatchObservation) -> Ability | None:
        if not observation.ability_available or observation.ability_used:
            return None
        grid = state.require_grid()
        unknown = grid.count(CellState.UNKNOWN)
        sizes = state.inventory.sizes

        if state.mode is PlayMode.SEARCHING:
            if sizes and all(size <= 3 for size in sizes) and unknown > grid.size // 4:
                return Ability.REVEAL_SMALLEST_SHIP
            if unknown > grid.size // 2:
                return Ability.AREA_REVEAL
            return None

        # Does not check that the tracked hit belongs to a ship that is still afloat.
        if (
            len(state.session.hits) == 1
            and 2 not in state.inventory
            and 3 not in state.inventory
            and (4 in state.inventory or 5 in state.inventory)
        ):
            return Ability.DESTROY_SHIP
        return None
