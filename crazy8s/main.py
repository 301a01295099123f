"""Main entry point for the Crazy Eights self-play simulator."""

import argparse
import logging
import random
import sys
from datetime import datetime
from pathlib import Path

from crazy8s.config import GameLogConfig, load_config
from crazy8s.game.autoplay import SelfPlayRunner
from crazy8s.game.engine import GameEngine
from crazy8s.logging import GameLogger
from crazy8s.utils.logger import GameDisplay, setup_logging

logger = logging.getLogger(__name__)


def generate_log_filename(log_dir: str, variant: str, num_players: int) -> str:
    """Generate log filename with timestamp, rule variant and table size.

    Format: {ISO timestamp}_{variant}_{N}p.jsonl

    Args:
        log_dir: Directory for log files.
        variant: Rule variant name.
        num_players: Players per game.

    Returns:
        Full path to log file.
    """
    timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
    filename = f"{timestamp}_{variant}_{num_players}p.jsonl"
    return str(Path(log_dir) / filename)


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success)
    """
    parser = argparse.ArgumentParser(
        description="Crazy Eights self-play simulator"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config file (YAML)",
    )
    parser.add_argument(
        "-n",
        "--num-games",
        type=int,
        help="Number of games to play (overrides config)",
    )
    parser.add_argument(
        "-p",
        "--players",
        type=int,
        help="Players per game (overrides config)",
    )
    parser.add_argument(
        "--rules",
        choices=["enhanced", "classic"],
        help="Rule variant (overrides config)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed (overrides config)",
    )
    parser.add_argument(
        "--tournament",
        action="store_true",
        help="Play elimination rounds until one player is left",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--game-log",
        type=Path,
        help="Directory for game log files (filename auto-generated)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Write stack validation traces to the game log",
    )

    args = parser.parse_args()

    # Load config
    config = load_config(args.config)

    # Apply command-line overrides
    if args.num_games:
        config.simulation.num_games = args.num_games
    if args.players:
        config.simulation.num_players = args.players
    if args.rules:
        config.rules.variant = args.rules
    if args.seed is not None:
        config.simulation.seed = args.seed
    if args.tournament:
        config.simulation.tournament = True
    if args.verbose:
        config.logging.level = "DEBUG"

    # Determine game log directory (CLI argument overrides config file)
    game_log_enabled = args.game_log is not None or config.game_log.enabled
    game_log_dir = str(args.game_log) if args.game_log else str(
        Path(config.game_log.output_path).parent
    )

    # Setup logging
    setup_logging(config.logging.level)

    display = GameDisplay()

    print("Crazy Eights simulator starting...")
    print(f"Rules: {config.rules.variant}")
    print(f"Games: {config.simulation.num_games}")
    print(f"Players: {config.simulation.num_players}")
    if config.simulation.seed is not None:
        print(f"Seed: {config.simulation.seed}")
    print()

    if game_log_enabled:
        log_path = generate_log_filename(
            game_log_dir, config.rules.variant, config.simulation.num_players
        )
        game_log_config = GameLogConfig(
            enabled=True,
            output_path=log_path,
            trace=args.trace or config.game_log.trace,
        )
        print(f"Game log: {log_path}")
    else:
        game_log_config = GameLogConfig(enabled=False)

    try:
        with GameLogger(game_log_config) as game_logger:
            runner = SelfPlayRunner(
                config,
                game_logger=game_logger,
                rng=random.Random(config.simulation.seed),
            )

            # Set up display callbacks
            def on_game_end(game_num: int, standings: list[str], engine: GameEngine) -> None:
                display.print_game_end(
                    game_num, standings, engine.players, engine.round_number
                )

            runner.set_callbacks(on_game_end=on_game_end)

            print(f"Starting {config.simulation.num_games} games...")
            display.print_separator()

            points = runner.run_games()

            names = runner.player_names(runner.player_ids())
            display.print_final_results(points, names)

        return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1
    except ValueError as e:
        logger.error(f"Invalid setup: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
