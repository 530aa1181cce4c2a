"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import random
from collections.abc import Sequence

from sinkbot.ai.registry import available_strategies, create_strategy
from sinkbot.core.errors import InvalidConfigurationError, SinkbotError
from sinkbot.infra.config import SinkbotSettings, load_default_env_files
from sinkbot.infra.logging import setup_logging, shutdown_logging
from sinkbot.play.api import ApiGameTarget
from sinkbot.play.local import LocalGameTarget
from sinkbot.play.match import GameResult, play_game
from sinkbot.play.target import GameTarget

logger = logging.getLogger(__name__)


def build_parser(settings: SinkbotSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sinkbot", description="Play the ship-sinking search game.")
    parser.add_argument(
        "--strategy",
        default=settings.strategy,
        choices=available_strategies(),
        help="Strategy used for every map.",
    )
    parser.add_argument("--seed", type=int, default=settings.seed, help="Seed for reproducible runs.")
    commands = parser.add_subparsers(dest="command", required=True)

    simulate = commands.add_parser("simulate", help="Play against the in-process simulator.")
    simulate.add_argument("--maps", type=int, default=settings.map_count)

    remote = commands.add_parser("remote", help="Play against the remote game API.")
    remote.add_argument("--base-url", default=settings.api_base_url)
    remote.add_argument("--token", default=settings.api_token)
    remote.add_argument("--test", action="store_true", default=settings.test_mode, help="Use the API test mode.")
    return parser


def run(args: argparse.Namespace) -> GameResult:
    """Build the target and play one full game."""
    rng = random.Random(args.seed)
    target: GameTarget
    if args.command == "simulate":
        target = LocalGameTarget(args.maps, rng=random.Random(rng.getrandbits(32)))
    else:
        if not args.token:
            raise InvalidConfigurationError("An API token is required for remote play.")
        target = ApiGameTarget(args.base_url, args.token, test_mode=args.test)
    return play_game(target, lambda: create_strategy(args.strategy, rng=random.Random(rng.getrandbits(32))))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the sinkbot command line."""
    load_default_env_files()
    settings = SinkbotSettings.from_env()
    args = build_parser(settings).parse_args(argv)
    setup_logging()
    try:
        result = run(args)
    except SinkbotError:
        logger.exception("game_failed command=%s strategy=%s", args.command, args.strategy)
        return 1
    finally:
        shutdown_logging()

    maps = len(result.match_results)
    average = result.total_move_count / maps if maps else 0.0
    print(f"maps={maps} total_moves={result.total_move_count} average_moves={average:.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
