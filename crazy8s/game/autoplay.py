"""Automated players and the self-play runner.

Strategy:
- Lead with the longest stack that can be built greedily from a valid card
- Prefer keeping 8s for later
- Declare the suit held most often after the play
- Draw when nothing can be played
"""

import logging
import random
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from crazy8s.config import Config
from crazy8s.logging import GameLogger
from crazy8s.models.card import Card, Rank, Suit
from crazy8s.models.game_state import GamePhase, GameStateSnapshot

from .engine import GameEngine
from .results import ErrorKind
from .rules import RuleSet

logger = logging.getLogger(__name__)


@dataclass
class Move:
    """A play chosen by a strategy."""

    cards: list[Card]
    declared_suit: Suit | None = None


class Strategy(ABC):
    """Abstract base class for automated players."""

    @abstractmethod
    def select_play(
        self,
        hand: Sequence[Card],
        valid_cards: Sequence[Card],
        state: GameStateSnapshot,
        rules: RuleSet,
    ) -> Move | None:
        """Select cards to play.

        Args:
            hand: The player's full hand
            valid_cards: Cards that may be played first this turn
            state: Snapshot of the table
            rules: Rules in force

        Returns:
            Move to play, or None to draw
        """


class GreedyStrategy(Strategy):
    """Plays the longest stack it can find by extending one card at a time."""

    def select_play(self, hand, valid_cards, state, rules):
        if not valid_cards:
            return None

        player_count = sum(
            1 for view in state.players if not view.is_safe and not view.is_eliminated
        )
        best: list[Card] = []
        for start in self._prefer_non_eights(valid_cards):
            stack = self._extend(start, hand, rules, player_count, state.direction)
            if len(stack) > len(best):
                best = stack

        declared = None
        if any(c.rank == Rank.EIGHT for c in best):
            declared = self._choose_suit(hand, best)
        return Move(cards=best, declared_suit=declared)

    @staticmethod
    def _prefer_non_eights(cards: Sequence[Card]) -> list[Card]:
        return sorted(cards, key=lambda c: c.rank == Rank.EIGHT)

    def _extend(
        self,
        start: Card,
        hand: Sequence[Card],
        rules: RuleSet,
        player_count: int,
        direction: int,
    ) -> list[Card]:
        """Greedily append cards while the stack stays legal."""
        stack = [start]
        remaining = list(hand)
        remaining.remove(start)

        extended = True
        while extended:
            extended = False
            for card in self._prefer_non_eights(remaining):
                candidate = stack + [card]
                if rules.validate_stack(candidate, player_count, direction).is_valid:
                    stack = candidate
                    remaining.remove(card)
                    extended = True
                    break
        return stack

    @staticmethod
    def _choose_suit(hand: Sequence[Card], played: Sequence[Card]) -> Suit:
        """Most common suit left in hand (the last card's suit if none left)."""
        left = list(hand)
        for card in played:
            left.remove(card)
        counts = Counter(c.suit for c in left if c.rank != Rank.EIGHT)
        if counts:
            return counts.most_common(1)[0][0]
        return played[-1].suit


class SelfPlayRunner:
    """Runs games between automated players."""

    def __init__(
        self,
        config: Config | None = None,
        strategy: Strategy | None = None,
        game_logger: GameLogger | None = None,
        rng: random.Random | None = None,
    ):
        """Initialize runner.

        Args:
            config: Configuration (uses defaults if not provided)
            strategy: Strategy shared by every seat
            game_logger: GameLogger instance for detailed logging
            rng: Random source (seeded from config if not provided)
        """
        self.config = config or Config()
        self.strategy = strategy or GreedyStrategy()
        self.game_logger = game_logger
        self.rng = rng or random.Random(self.config.simulation.seed)

        self._on_game_end: Callable[[int, list[str], GameEngine], None] | None = None

    def set_callbacks(
        self,
        on_game_end: Callable[[int, list[str], GameEngine], None] | None = None,
    ) -> None:
        """Set callbacks for game events.

        Args:
            on_game_end: Called with (game_number, standings, engine) after each game
        """
        self._on_game_end = on_game_end

    def player_ids(self, num_players: int | None = None) -> list[str]:
        """Seat ids for the configured number of players."""
        count = num_players or self.config.simulation.num_players
        return [f"p{i}" for i in range(1, count + 1)]

    def run_games(
        self,
        num_games: int | None = None,
        num_players: int | None = None,
    ) -> dict[str, int]:
        """Run multiple games.

        Args:
            num_games: Number of games (uses config if not specified)
            num_players: Players per game (uses config if not specified)

        Returns:
            Dict of player_id -> total points
        """
        num_games = num_games or self.config.simulation.num_games
        ids = self.player_ids(num_players)
        points = {pid: 0 for pid in ids}

        for game_num in range(1, num_games + 1):
            logger.info(f"Starting game {game_num}/{num_games}")
            engine = self.create_engine(ids)
            if self.config.simulation.tournament:
                self.play_tournament(engine)
            else:
                self.play_round(engine)
            standings = engine.get_standings()

            # Award points (N for 1st, N-1 for 2nd, etc.)
            for rank, player_id in enumerate(standings):
                points[player_id] += len(ids) - rank

            if self._on_game_end:
                self._on_game_end(game_num, standings, engine)

        if self.game_logger:
            ranking = sorted(points, key=lambda p: points[p], reverse=True)
            self.game_logger.log_session_end(num_games, points, ranking)

        return points

    def player_names(self, player_ids: Sequence[str]) -> dict[str, str]:
        """Display names by seat id."""
        return {pid: f"Bot {i}" for i, pid in enumerate(player_ids, 1)}

    def create_engine(self, player_ids: Sequence[str]) -> GameEngine:
        """Create an engine for one game."""
        return GameEngine(
            player_ids,
            list(self.player_names(player_ids).values()),
            config=self.config,
            game_logger=self.game_logger,
            rng=self.rng,
        )

    def play_tournament(self, engine: GameEngine) -> None:
        """Play rounds until one player is left in the tournament."""
        self.play_round(engine)
        while engine.tournament_winner is None:
            result = engine.start_next_round()
            if not result.success:
                break
            self.play_round(engine)

    def play_round(self, engine: GameEngine) -> None:
        """Play a round to the end, starting the game if needed."""
        if engine.phase == GamePhase.SETUP:
            engine.start_game()

        max_turns = self.config.simulation.max_turns
        turns = 0
        while engine.phase == GamePhase.PLAYING:
            player_id = engine.state.current_player_id
            if turns >= max_turns:
                logger.warning(f"Turn limit reached, eliminating {player_id}")
                engine.eliminate_player(player_id)
                continue

            self.take_turn(engine, player_id)
            turns += 1

    def take_turn(self, engine: GameEngine, player_id: str) -> None:
        """Let the strategy act for the current player."""
        player = engine.players[player_id]
        move = self.strategy.select_play(
            list(player.hand),
            engine.get_valid_cards(player_id),
            engine.get_game_state(player_id),
            engine.rules,
        )

        if move is not None:
            result = engine.play_cards(player_id, move.cards, move.declared_suit)
            if result.success:
                return
            logger.warning(
                f"Strategy chose an illegal play for {player_id}: {result.message}"
            )

        result = engine.draw_cards(player_id)
        if result.error == ErrorKind.DECK_EXHAUSTED:
            logger.info(f"No cards left to draw, eliminating {player_id}")
            engine.eliminate_player(player_id)
