"""Strategy construction by name."""

from __future__ import annotations

import random
from collections.abc import Callable

from sinkbot.ai.baselines import ParityHuntStrategy, SequentialStrategy
from sinkbot.ai.controller import StrategyController
from sinkbot.ai.power_advisor import HeuristicPowerAdvisor, NoPowerAdvisor
from sinkbot.ai.probability import ProbabilityEstimator, SurfaceObserver
from sinkbot.ai.strategy import MatchStrategy
from sinkbot.ai.sunk_detection import BasicSunkShipDetector, CrossAwareSunkShipDetector
from sinkbot.core.errors import InvalidConfigurationError

DEFAULT_STRATEGY = "probability"

_BUILDERS: dict[str, Callable[[random.Random, SurfaceObserver | None], MatchStrategy]] = {
    "sequential": lambda rng, observer: SequentialStrategy(),
    "parity": lambda rng, observer: ParityHuntStrategy(rng),
    "probability": lambda rng, observer: StrategyController(
        estimator=ProbabilityEstimator(on_surface_updated=observer),
        detector=CrossAwareSunkShipDetector(),
        advisor=HeuristicPowerAdvisor(),
    ),
    "probability-basic": lambda rng, observer: StrategyController(
        estimator=ProbabilityEstimator(on_surface_updated=observer),
        detector=BasicSunkShipDetector(),
        advisor=NoPowerAdvisor(),
        name="probability-basic",
    ),
}


def available_strategies() -> tuple[str, ...]:
    return tuple(_BUILDERS)


def create_strategy(
    name: str = DEFAULT_STRATEGY,
    *,
    rng: random.Random | None = None,
    on_surface_updated: SurfaceObserver | None = None,
) -> MatchStrategy:
    """Build a fresh strategy instance for one match."""
    builder = _BUILDERS.get(name.strip().lower())
    if builder is None:
        raise InvalidConfigurationError(
            f"Unknown strategy '{name}'. Available: {', '.join(available_strategies())}."
        )
    return builder(rng or random.Random(), on_surface_updated)
