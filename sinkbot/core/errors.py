"""Engine exception taxonomy and recoverable-error logging helper."""

from __future__ import annotations

import logging


class SinkbotError(Exception):
    """Base class for every error raised by sinkbot."""


class OutOfBoundsError(SinkbotError, IndexError):
    """Position or linear index falls outside the grid."""


class InvalidConfigurationError(SinkbotError, ValueError):
    """Upstream data or configuration violates the engine contract."""


class InvalidShipSizeError(InvalidConfigurationError):
    """Ship size has no catalog shape."""


class GridEncodingError(InvalidConfigurationError):
    """Encoded grid string has the wrong length or an unknown symbol."""


class PreconditionError(SinkbotError, RuntimeError):
    """Engine was called in a state where no decision is possible."""


class MatchAlreadyFinishedError(PreconditionError):
    """Match is over; the caller must not ask for another target."""


class NoCandidateFoundError(SinkbotError, RuntimeError):
    """Every heuristic came up empty while the match is still running."""


class InventoryError(SinkbotError, RuntimeError):
    """Ship inventory mutation does not match its contents."""


class InvalidMoveError(SinkbotError, RuntimeError):
    """Game target rejected a shot."""


class GameTargetError(SinkbotError, RuntimeError):
    """Game target could not be reached or answered with an error."""


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, exc_info=True)
