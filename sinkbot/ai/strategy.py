"""Match strategy interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sinkbot.core.errors import MatchAlreadyFinishedError
from sinkbot.core.observation import MatchObservation, TargetCell


class MatchStrategy(ABC):
    """Chooses one target per turn for a single match.

    Instances carry per-match state and must not be shared across matches.
    """

    name: str = "strategy"

    @abstractmethod
    def decide_next_target(self, observation: MatchObservation) -> TargetCell:
        """Return the next cell to fire at."""

    @staticmethod
    def assert_match_running(observation: MatchObservation) -> None:
        if observation.match_finished:
            raise MatchAlreadyFinishedError("Match is already finished.")
