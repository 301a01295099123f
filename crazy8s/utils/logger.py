"""Logging utilities and game result display."""

import logging
import sys
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crazy8s.models.player import Player


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def ordinal(n: int) -> str:
    """Format a position as 1st, 2nd, 3rd, ..."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


class GameDisplay:
    """Display game results to stdout."""

    def print_separator(self) -> None:
        """Print a separator line."""
        print("=" * 60)

    def print_game_end(
        self,
        game_number: int,
        standings: Sequence[str],
        players: Mapping[str, "Player"],
        rounds: int = 1,
    ) -> None:
        """Print game end results."""
        played = f" after {rounds} rounds" if rounds > 1 else ""
        print(f"\nGame {game_number} finished{played}!")
        print("Results:")
        for rank, player_id in enumerate(standings, 1):
            player = players[player_id]
            status = " (eliminated)" if player.is_eliminated else ""
            print(f"  {ordinal(rank)}: Player {player_id} ({player.name}){status}")

    def print_final_results(
        self,
        points: Mapping[str, int],
        names: Mapping[str, str],
    ) -> None:
        """Print final results over all games."""
        self.print_separator()
        print("FINAL RESULTS")
        self.print_separator()

        # Sort by points descending
        sorted_players = sorted(points.items(), key=lambda x: x[1], reverse=True)

        for rank, (player_id, pts) in enumerate(sorted_players, 1):
            print(f"  #{rank}: Player {player_id} ({names[player_id]}) - {pts} points")
