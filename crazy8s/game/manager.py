"""Registry of running games."""

import logging
import random
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from crazy8s.config import Config
from crazy8s.logging import GameLogger
from crazy8s.models.card import Card
from crazy8s.models.game_state import GameStateSnapshot

from .engine import GameEngine
from .results import ActionResult, DrawResult, ErrorKind, PlayResult

logger = logging.getLogger(__name__)

CardRef = Card | str | Mapping[str, Any]


class GameManager:
    """Owns every game by id and exposes the player-facing operations.

    Cards may be passed as Card objects, text ("7 of Hearts", "H7") or
    {"suit", "rank"} mappings. There is no locking: callers serialize
    operations on the same game.
    """

    def __init__(
        self,
        config: Config | None = None,
        game_logger: GameLogger | None = None,
        rng: random.Random | None = None,
    ):
        """Initialize manager.

        Args:
            config: Configuration shared by all games
            game_logger: GameLogger shared by all games
            rng: Random source shared by all games
        """
        self.config = config or Config()
        self.game_logger = game_logger
        self._rng = rng or random.Random()
        self.games: dict[str, GameEngine] = {}

    def find_game(self, game_id: str) -> GameEngine | None:
        """Find a game by id."""
        return self.games.get(game_id)

    def start_game(
        self,
        player_ids: Sequence[str],
        player_names: Sequence[str] | None = None,
    ) -> ActionResult:
        """Create, register and start a new game."""
        try:
            engine = GameEngine(
                player_ids,
                player_names,
                config=self.config,
                game_logger=self.game_logger,
                rng=self._rng,
            )
        except ValueError as e:
            return ActionResult.fail(ErrorKind.INVALID_REQUEST, str(e))

        self.games[engine.game_id] = engine
        logger.info(f"Registered game {engine.game_id}")
        return engine.start_game()

    def play_cards(
        self,
        game_id: str,
        player_id: str,
        cards: CardRef | Iterable[CardRef],
        declared_suit: str | None = None,
    ) -> PlayResult:
        """Play cards in a game."""
        engine = self.find_game(game_id)
        if engine is None:
            return PlayResult.fail(ErrorKind.GAME_NOT_FOUND, f"Game {game_id!r} not found")

        refs = [cards] if isinstance(cards, (Card, str, Mapping)) else list(cards)
        try:
            parsed = [Card.parse(ref) for ref in refs]
        except ValueError as e:
            return PlayResult.fail(ErrorKind.INVALID_REQUEST, str(e))

        return engine.play_cards(player_id, parsed, declared_suit)

    def draw_cards(self, game_id: str, player_id: str, count: int = 1) -> DrawResult:
        """Draw cards in a game."""
        engine = self.find_game(game_id)
        if engine is None:
            return DrawResult.fail(ErrorKind.GAME_NOT_FOUND, f"Game {game_id!r} not found")
        return engine.draw_cards(player_id, count)

    def get_game_state(
        self, game_id: str, player_id: str | None = None
    ) -> GameStateSnapshot | None:
        """Snapshot a game, with `player_id`'s hand included."""
        engine = self.find_game(game_id)
        if engine is None:
            return None
        return engine.get_game_state(player_id)

    def get_valid_cards_for_player(self, game_id: str, player_id: str) -> list[Card]:
        """Cards the player could lead with right now (empty if unknown)."""
        engine = self.find_game(game_id)
        if engine is None:
            return []
        return engine.get_valid_cards(player_id)

    def eliminate_player(self, game_id: str, player_id: str) -> ActionResult:
        """Eliminate a player from a game."""
        engine = self.find_game(game_id)
        if engine is None:
            return ActionResult.fail(ErrorKind.GAME_NOT_FOUND, f"Game {game_id!r} not found")
        return engine.eliminate_player(player_id)

    def start_next_round(self, game_id: str) -> ActionResult:
        """Deal the next tournament round of a finished game."""
        engine = self.find_game(game_id)
        if engine is None:
            return ActionResult.fail(ErrorKind.GAME_NOT_FOUND, f"Game {game_id!r} not found")
        return engine.start_next_round()

    def remove_game(self, game_id: str) -> bool:
        """Drop a game from the registry.

        Returns:
            True if the game existed
        """
        removed = self.games.pop(game_id, None) is not None
        if removed:
            logger.info(f"Removed game {game_id}")
        return removed
