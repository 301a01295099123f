"""Game logger for detailed game replay."""

import json
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from crazy8s.config import GameLogConfig
from crazy8s.models.card import Card, Suit
from crazy8s.models.player import Player

from .formatters import format_card, format_cards, format_hands


class GameLogger:
    """Logger for detailed game events in JSONL format.

    Each line in the output file is a JSON object representing one event.
    This allows step-by-step replay of the game. Validator diagnostics are
    written as "trace" events when the config enables them.
    """

    def __init__(self, config: GameLogConfig | None = None):
        """Initialize game logger.

        Args:
            config: Logging configuration. If None, logging is disabled.
                `output_path` is the log file path.
        """
        self.config = config or GameLogConfig()
        self._file: TextIO | None = None

    def __enter__(self) -> "GameLogger":
        """Context manager entry."""
        if self.config.enabled and self.config.output_path:
            path = Path(self.config.output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(path, "a", encoding="utf-8")
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the log file."""
        if self._file:
            self._file.close()
            self._file = None

    def _write(self, event: dict[str, Any]) -> None:
        """Write an event to the log file.

        Args:
            event: Event dictionary to write as JSON.
        """
        if self._file:
            self._file.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._file.flush()

    def log_game_start(
        self,
        game_id: str,
        round_num: int,
        players: Sequence[Player],
        top_card: Card | None,
        first_player: str | None,
    ) -> None:
        """Log a deal with the initial hands.

        Args:
            game_id: Game identifier.
            round_num: Round number.
            players: Players in seat order.
            top_card: First card turned onto the discard pile.
            first_player: Player ID who plays first.
        """
        self._write({
            "type": "game_start",
            "timestamp": datetime.now().isoformat(),
            "game": game_id,
            "round": round_num,
            "players": [
                {"id": p.player_id, "name": p.name}
                for p in players
            ],
            "hands": format_hands({p.player_id: p.hand for p in players}),
            "top_card": format_card(top_card) if top_card else "",
            "first_player": first_player,
        })

    def log_play(
        self,
        game_id: str,
        round_num: int,
        turn_num: int,
        player_id: str,
        cards: Sequence[Card],
        declared_suit: Suit | None,
        draw_stack: int,
        direction: int,
        next_player: str | None,
        hands: Mapping[str, Sequence[Card]],
    ) -> None:
        """Log a successful play.

        Args:
            game_id: Game identifier.
            round_num: Round number.
            turn_num: Turn number within the round.
            player_id: Player who played.
            cards: Cards played, in order.
            declared_suit: Suit in force after the play.
            draw_stack: Pending forced draw after the play.
            direction: Direction after the play.
            next_player: Player whose turn it is now.
            hands: All players' hands after the play.
        """
        self._write({
            "type": "play",
            "game": game_id,
            "round": round_num,
            "turn": turn_num,
            "player": player_id,
            "cards": format_cards(cards),
            "state": {
                "declared_suit": declared_suit.value if declared_suit else None,
                "draw_stack": draw_stack,
                "direction": direction,
                "next_player": next_player,
            },
            "hands": format_hands(hands),
        })

    def log_draw(
        self,
        game_id: str,
        round_num: int,
        turn_num: int,
        player_id: str,
        requested: int,
        drawn: Sequence[Card],
        from_draw_stack: bool,
        next_player: str | None,
    ) -> None:
        """Log a draw.

        Args:
            game_id: Game identifier.
            round_num: Round number.
            turn_num: Turn number within the round.
            player_id: Player who drew.
            requested: Number of cards owed or asked for.
            drawn: Cards actually drawn.
            from_draw_stack: True if a forced draw was paid.
            next_player: Player whose turn it is now.
        """
        self._write({
            "type": "draw",
            "game": game_id,
            "round": round_num,
            "turn": turn_num,
            "player": player_id,
            "requested": requested,
            "cards": format_cards(drawn),
            "forced": from_draw_stack,
            "next_player": next_player,
        })

    def log_special(
        self,
        game_id: str,
        round_num: int,
        turn_num: int,
        event: str,
        player_id: str | None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        """Log a special event.

        Args:
            game_id: Game identifier.
            round_num: Round number.
            turn_num: Turn number when the event occurred.
            event: Event type (e.g., "player_safe", "player_eliminated", "reshuffle").
            player_id: Player concerned, if any.
            detail: Additional event details.
        """
        record: dict[str, Any] = {
            "type": "special",
            "game": game_id,
            "round": round_num,
            "turn": turn_num,
            "event": event,
            "player": player_id,
        }
        if detail:
            record["detail"] = detail
        self._write(record)

    def log_game_end(
        self,
        game_id: str,
        round_num: int,
        finish_order: Sequence[str],
        eliminated: Sequence[str],
        winner: str | None,
    ) -> None:
        """Log the end of a round.

        Args:
            game_id: Game identifier.
            round_num: Round number.
            finish_order: Player IDs in the order they went safe.
            eliminated: Player IDs eliminated so far, first out first.
            winner: Player ID of the round winner.
        """
        self._write({
            "type": "game_end",
            "game": game_id,
            "round": round_num,
            "finish_order": list(finish_order),
            "eliminated": list(eliminated),
            "winner": winner,
        })

    def log_session_end(
        self,
        total_games: int,
        final_points: Mapping[str, int],
        ranking: Sequence[str],
    ) -> None:
        """Log session end with final results.

        Args:
            total_games: Total number of games played.
            final_points: Dict mapping player_id to total points.
            ranking: Player IDs in ranking order (best first).
        """
        self._write({
            "type": "session_end",
            "total_games": total_games,
            "final_points": dict(final_points),
            "ranking": list(ranking),
        })

    def trace(self, event: str, detail: dict[str, Any]) -> None:
        """Trace sink for validator diagnostics."""
        if not self.config.trace:
            return
        self._write({"type": "trace", "event": event, **detail})
