"""Game engine for Crazy Eights."""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Iterable, Sequence

from crazy8s.config import Config
from crazy8s.logging import GameLogger
from crazy8s.models.card import Card, EffectType, Suit
from crazy8s.models.deck import DECK_SIZE, Deck
from crazy8s.models.game_state import (
    GamePhase,
    GameState,
    GameStateSnapshot,
    PlayerView,
)
from crazy8s.models.player import Player

from .results import ActionResult, DrawResult, ErrorKind, PlayResult
from .rules import RuleSet, get_rule_set
from .validator import MoveValidator

logger = logging.getLogger(__name__)


class GameEngine:
    """State machine for one Crazy Eights game (Setup -> Playing -> Finished).

    Players live in a fixed arena keyed by id, in seat order. The turn
    rotation is every player that is neither safe nor eliminated; moving
    the turn scans the seats past inactive ids, so no index is ever
    invalidated when a player leaves the rotation.

    Operations run to completion synchronously and either apply fully or
    not at all. Callers must serialize operations on the same engine.
    """

    def __init__(
        self,
        player_ids: Sequence[str],
        player_names: Sequence[str] | None = None,
        config: Config | None = None,
        rules: RuleSet | None = None,
        game_logger: GameLogger | None = None,
        rng: random.Random | None = None,
        game_id: str | None = None,
    ):
        """Initialize game engine.

        Args:
            player_ids: Player IDs in seat order
            player_names: Display names, matched to ids by position
            config: Configuration (uses defaults if not provided)
            rules: Rule set (defaults to the configured variant)
            game_logger: GameLogger instance for detailed logging
            rng: Random source for shuffling
            game_id: Identifier (generated if not provided)

        Raises:
            ValueError: If the players cannot form a game
        """
        self.config = config or Config()
        game_config = self.config.game

        ids = [str(pid) for pid in player_ids]
        if len(ids) < game_config.min_players:
            raise ValueError(
                f"At least {game_config.min_players} players required, got {len(ids)}"
            )
        if len(ids) > game_config.max_players:
            raise ValueError(
                f"At most {game_config.max_players} players allowed, got {len(ids)}"
            )
        if len(set(ids)) != len(ids):
            raise ValueError("Player IDs must be unique")
        if len(ids) * game_config.hand_size + 1 > DECK_SIZE:
            raise ValueError(
                f"Not enough cards to deal {game_config.hand_size} to {len(ids)} players"
            )

        names = list(player_names or [])
        self.players: dict[str, Player] = {}
        for i, pid in enumerate(ids):
            name = names[i] if i < len(names) and names[i] else f"Player {i + 1}"
            self.players[pid] = Player(player_id=pid, name=name)
        self.seat_order: list[str] = ids

        self.rules = rules or get_rule_set(self.config.rules.variant)
        self.game_logger = game_logger
        self._rng = rng or random.Random()

        self.state = GameState(game_id=game_id or f"game_{uuid.uuid4().hex[:9]}")
        self.draw_pile = Deck(cards=[], rng=self._rng)
        self.discard_pile: list[Card] = []

        trace = game_logger.trace if game_logger else None
        self.validator = MoveValidator(self.rules, trace)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def game_id(self) -> str:
        return self.state.game_id

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def direction(self) -> int:
        return self.state.direction

    @property
    def draw_stack(self) -> int:
        return self.state.draw_stack

    @property
    def declared_suit(self) -> Suit | None:
        return self.state.declared_suit

    @property
    def round_number(self) -> int:
        return self.state.round_number

    @property
    def top_card(self) -> Card | None:
        """Top of the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def active_player_ids(self) -> list[str]:
        """Player IDs still in the turn rotation, in seat order."""
        return [pid for pid in self.seat_order if self.players[pid].in_play]

    @property
    def current_player(self) -> Player | None:
        """Player whose turn it is (None outside of play)."""
        pid = self.state.current_player_id
        return self.players[pid] if pid is not None else None

    @property
    def current_player_index(self) -> int | None:
        """Position of the current player within active_player_ids."""
        pid = self.state.current_player_id
        if pid is None:
            return None
        return self.active_player_ids.index(pid)

    @property
    def tournament_winner(self) -> Player | None:
        """The last player not eliminated, once only one remains."""
        contenders = [p for p in self.players.values() if not p.is_eliminated]
        if self.phase == GamePhase.FINISHED and len(contenders) == 1:
            return contenders[0]
        return None

    def card_count(self) -> int:
        """Total cards across draw pile, discard pile and hands."""
        return (
            len(self.draw_pile)
            + len(self.discard_pile)
            + sum(p.hand_size() for p in self.players.values())
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_game(self) -> ActionResult:
        """Deal hands, turn the first discard and start play."""
        if self.phase != GamePhase.SETUP:
            return ActionResult.fail(
                ErrorKind.INVALID_STATE_TRANSITION,
                f"Game {self.game_id} has already been started",
            )

        self._init_round()
        logger.info(
            f"Game {self.game_id} started with {len(self.players)} players, "
            f"first player: {self.state.current_player_id}"
        )
        return ActionResult(success=True, message="Game started", state=self.get_game_state())

    def start_next_round(self) -> ActionResult:
        """Re-deal a finished game among the players not yet eliminated."""
        if self.phase != GamePhase.FINISHED:
            return ActionResult.fail(
                ErrorKind.INVALID_STATE_TRANSITION,
                "A new round can only start after the current one has finished",
            )

        contenders = [pid for pid in self.seat_order if not self.players[pid].is_eliminated]
        if len(contenders) < 2:
            return ActionResult.fail(
                ErrorKind.INVALID_STATE_TRANSITION,
                "Tournament is over: fewer than two players remain",
            )

        for pid in contenders:
            self.players[pid].reset_for_new_round()
        self.state.reset_for_new_round()
        self.state.round_number += 1

        self._init_round()
        logger.info(
            f"Game {self.game_id} round {self.round_number} started with "
            f"{len(contenders)} players"
        )
        return ActionResult(
            success=True,
            message=f"Round {self.round_number} started",
            state=self.get_game_state(),
        )

    def _init_round(self) -> None:
        """Shuffle a fresh deck, deal, turn the first discard and start play."""
        deck = Deck(rng=self._rng).shuffle()
        seats = self.active_player_ids

        # Deal round-robin in seat order
        for _ in range(self.config.game.hand_size):
            for pid in seats:
                self.players[pid].add_cards(deck.deal(1))

        self.discard_pile = deck.deal(1)
        self.draw_pile = deck

        self.state.direction = 1
        self.state.draw_stack = 0
        self.state.declared_suit = None
        self.state.current_player_id = seats[0]
        self.state.phase = GamePhase.PLAYING

        logger.debug(f"Cards dealt, top card: {self.top_card}")
        if self.game_logger:
            self.game_logger.log_game_start(
                self.game_id,
                self.round_number,
                [self.players[pid] for pid in seats],
                self.top_card,
                self.state.current_player_id,
            )

    # ------------------------------------------------------------------
    # Playing
    # ------------------------------------------------------------------

    def _check_turn(self, player_id: str) -> tuple[ErrorKind, str] | None:
        """Common checks for the current player's actions."""
        if self.phase != GamePhase.PLAYING:
            return (
                ErrorKind.INVALID_STATE_TRANSITION,
                f"Game is not currently active ({self.phase.value})",
            )
        player = self.players.get(player_id)
        if player is None:
            return ErrorKind.PLAYER_NOT_FOUND, f"Player {player_id!r} not found"
        if player.is_eliminated:
            return ErrorKind.NOT_YOUR_TURN, "You have been eliminated from the game"
        if player.is_safe:
            return ErrorKind.NOT_YOUR_TURN, "You are already safe this round"
        if player_id != self.state.current_player_id:
            return ErrorKind.NOT_YOUR_TURN, "Not your turn"
        return None

    def play_cards(
        self,
        player_id: str,
        cards: Card | Iterable[Card],
        declared_suit: Suit | str | None = None,
    ) -> PlayResult:
        """Play one card or a stack of cards.

        Args:
            player_id: Acting player
            cards: Cards in play order; the last becomes the new top card
            declared_suit: Suit named for any 8 in the play

        Returns:
            PlayResult. On failure nothing has changed.
        """
        problem = self._check_turn(player_id)
        if problem:
            return PlayResult.fail(*problem)

        cards_to_play = [cards] if isinstance(cards, Card) else list(cards)
        if declared_suit is not None:
            try:
                declared_suit = Suit.parse(declared_suit)
            except ValueError as e:
                return PlayResult.fail(ErrorKind.INVALID_REQUEST, str(e))

        player = self.players[player_id]
        rotation = self.active_player_ids
        validation = self.validator.validate(
            player,
            cards_to_play,
            declared_suit,
            self.top_card,
            self.state.declared_suit,
            self.state.draw_stack,
            len(rotation),
            self.state.direction,
        )
        if not validation.is_valid:
            logger.debug(
                f"Rejected play by {player_id}: {validation.error.value}: "
                f"{validation.error_message}"
            )
            return PlayResult.fail(validation.error, validation.error_message)

        message = self._play_message(cards_to_play, declared_suit)

        self._apply_effects(cards_to_play, declared_suit)
        player.remove_cards(cards_to_play)
        self.discard_pile.extend(cards_to_play)

        outcome = self.rules.resolve_turn(
            cards_to_play, len(rotation), self.state.direction
        )
        self.state.direction = outcome.direction
        target = rotation[(rotation.index(player_id) + outcome.offset) % len(rotation)]
        last_effect = self.rules.classify_effect(cards_to_play[-1])
        if outcome.retains_control and last_effect.is_force_draw:
            # A stack ending on a forced draw always passes the turn
            target = self._next_active(player_id, outcome.direction)
        self.state.turn_number += 1

        logger.debug(f"Player {player_id} played: {', '.join(c.short() for c in cards_to_play)}")

        player_safe = False
        if player.has_won():
            player_safe = True
            self._mark_safe(player)

        if self.phase == GamePhase.PLAYING:
            if self.players[target].in_play:
                self.state.current_player_id = target
            else:
                # The acting player kept control but has gone safe
                self.state.current_player_id = self._next_active(
                    target, self.state.direction
                )

        if self.game_logger:
            self.game_logger.log_play(
                self.game_id,
                self.round_number,
                self.state.turn_number,
                player_id,
                cards_to_play,
                self.state.declared_suit,
                self.state.draw_stack,
                self.state.direction,
                self.state.current_player_id,
                {pid: p.hand for pid, p in self.players.items()},
            )

        game_won = self.phase == GamePhase.FINISHED
        winner = self.get_winner() if game_won else None
        return PlayResult(
            success=True,
            message=message,
            state=self.get_game_state(player_id),
            cards_played=cards_to_play,
            player_safe=player_safe,
            game_won=game_won,
            winner=winner.player_id if winner else None,
        )

    def _apply_effects(self, cards: Sequence[Card], declared_suit: Suit | None) -> None:
        """Apply suit declarations and forced draws left to right."""
        for card in cards:
            effect = self.rules.classify_effect(card)
            if effect.type == EffectType.WILD:
                self.state.declared_suit = declared_suit
                continue

            # Any other card overrides an earlier declaration
            self.state.declared_suit = None
            if effect.is_force_draw:
                cap = self.config.game.max_draw_stack
                self.state.draw_stack = min(self.state.draw_stack + effect.amount, cap)

    def _play_message(self, cards: Sequence[Card], declared_suit: Suit | None) -> str:
        """Build a human-readable description of a play."""
        if len(cards) == 1:
            message = f"Played {cards[0]}"
        elif all(c.rank == cards[0].rank for c in cards):
            suits = ", ".join(c.suit.value for c in cards)
            message = f"Played {len(cards)} {cards[0].rank.value}s: {suits}"
        else:
            message = f"Played {', '.join(c.short() for c in cards)}"

        if declared_suit and any(
            self.rules.classify_effect(c).type == EffectType.WILD for c in cards
        ):
            message += f" and declared {declared_suit.value}"
        return message

    def draw_cards(self, player_id: str, count: int = 1) -> DrawResult:
        """Draw cards and end the turn.

        With a forced draw pending, the whole pending amount is drawn
        whatever `count` says, and the draw stack is cleared. If the draw
        pile runs short, the discard pile (except its top card) is shuffled
        back in; if that is still not enough, every remaining card is drawn.

        Args:
            player_id: Acting player
            count: Number of cards for a voluntary draw

        Returns:
            DrawResult. On failure nothing has changed.
        """
        problem = self._check_turn(player_id)
        if problem:
            return DrawResult.fail(*problem)
        if count < 1:
            return DrawResult.fail(ErrorKind.INVALID_REQUEST, f"Cannot draw {count} cards")

        available = len(self.draw_pile) + max(0, len(self.discard_pile) - 1)
        if available == 0:
            return DrawResult.fail(
                ErrorKind.DECK_EXHAUSTED,
                "No cards left in the draw pile or the discard pile",
            )

        from_stack = self.state.draw_stack > 0
        amount = self.state.draw_stack if from_stack else count

        reshuffled = False
        if len(self.draw_pile) < amount and len(self.discard_pile) > 1:
            self._reshuffle_discard_pile()
            reshuffled = True

        player = self.players[player_id]
        drawn = self.draw_pile.deal(amount)
        player.add_cards(drawn)
        if len(drawn) < amount:
            logger.warning(
                f"Player {player_id} owed {amount} cards but only {len(drawn)} were available"
            )

        self.state.draw_stack = 0
        self.state.turn_number += 1
        self.state.current_player_id = self._next_active(player_id, self.state.direction)

        logger.debug(f"Player {player_id} drew {len(drawn)} card(s)")
        if self.game_logger:
            self.game_logger.log_draw(
                self.game_id,
                self.round_number,
                self.state.turn_number,
                player_id,
                amount,
                drawn,
                from_stack,
                self.state.current_player_id,
            )

        return DrawResult(
            success=True,
            message=f"Drew {len(drawn)} card(s)",
            state=self.get_game_state(player_id),
            drawn_cards=drawn,
            requested=amount,
            from_draw_stack=from_stack,
            reshuffled=reshuffled,
        )

    def _reshuffle_discard_pile(self) -> None:
        """Shuffle all discards but the top card under the draw pile."""
        top = self.discard_pile[-1]
        rest = self.discard_pile[:-1]
        self._rng.shuffle(rest)
        self.draw_pile.add_cards(rest)
        self.discard_pile = [top]

        logger.info(f"Reshuffled {len(rest)} discards into the draw pile")
        if self.game_logger:
            self.game_logger.log_special(
                self.game_id,
                self.round_number,
                self.state.turn_number,
                "reshuffle",
                self.state.current_player_id,
                {"cards": len(rest)},
            )

    def _next_active(self, from_id: str, direction: int) -> str | None:
        """Find the next player in the rotation after `from_id` (exclusive)."""
        seats = len(self.seat_order)
        start = self.seat_order.index(from_id)
        for step in range(1, seats + 1):
            candidate = self.seat_order[(start + direction * step) % seats]
            if self.players[candidate].in_play:
                return candidate
        return None

    # ------------------------------------------------------------------
    # Safety, elimination and results
    # ------------------------------------------------------------------

    def _mark_safe(self, player: Player) -> None:
        """Record a player emptying their hand; ends the round if one player is left."""
        player.is_safe = True
        player.finish_position = len(self.state.finish_order)
        self.state.finish_order.append(player.player_id)
        logger.info(
            f"Player {player.player_id} is safe in position {player.finish_position + 1}"
        )
        if self.game_logger:
            self.game_logger.log_special(
                self.game_id,
                self.round_number,
                self.state.turn_number,
                "player_safe",
                player.player_id,
                {"position": player.finish_position + 1},
            )

        remaining = self.active_player_ids
        if len(remaining) <= 1:
            if remaining:
                self._eliminate(self.players[remaining[0]])
            self._finish_round()

    def _eliminate(self, player: Player) -> None:
        """Take a player out of the tournament and return their hand to the draw pile."""
        player.is_eliminated = True
        self.state.elimination_order.append(player.player_id)

        if player.hand:
            self.draw_pile.add_cards(player.hand)
            self.draw_pile.shuffle()
            player.hand = []

        logger.info(f"Player {player.player_id} eliminated")
        if self.game_logger:
            self.game_logger.log_special(
                self.game_id,
                self.round_number,
                self.state.turn_number,
                "player_eliminated",
                player.player_id,
            )

    def _finish_round(self) -> None:
        """Enter the terminal phase for this round."""
        self.state.phase = GamePhase.FINISHED
        self.state.current_player_id = None

        winner = self.get_winner()
        logger.info(
            f"Game {self.game_id} round {self.round_number} finished, "
            f"winner: {winner.player_id if winner else None}"
        )
        if self.game_logger:
            self.game_logger.log_game_end(
                self.game_id,
                self.round_number,
                self.state.finish_order,
                self.state.elimination_order,
                winner.player_id if winner else None,
            )

    def eliminate_player(self, player_id: str) -> ActionResult:
        """Remove a player from the rotation (e.g. on a turn timeout).

        If the player held the turn, it moves on in the current direction
        and any pending forced draw, which was theirs to pay, is dropped.
        The round finishes once one player is left in the rotation.
        """
        if self.phase != GamePhase.PLAYING:
            return ActionResult.fail(
                ErrorKind.INVALID_STATE_TRANSITION,
                f"Game is not currently active ({self.phase.value})",
            )
        player = self.players.get(player_id)
        if player is None:
            return ActionResult.fail(ErrorKind.PLAYER_NOT_FOUND, f"Player {player_id!r} not found")
        if not player.in_play:
            return ActionResult.fail(
                ErrorKind.INVALID_REQUEST,
                f"Player {player_id!r} is already safe or eliminated",
            )

        was_current = player_id == self.state.current_player_id
        self._eliminate(player)

        if len(self.active_player_ids) <= 1:
            self._finish_round()
        elif was_current:
            self.state.draw_stack = 0
            self.state.current_player_id = self._next_active(player_id, self.state.direction)

        return ActionResult(
            success=True,
            message=f"{player.name} has been eliminated",
            state=self.get_game_state(),
        )

    def get_winner(self) -> Player | None:
        """Get the round winner once finished: the first player to go safe.

        If nobody went safe (everyone else was eliminated), the player left
        standing wins.
        """
        if self.phase != GamePhase.FINISHED:
            return None
        if self.state.finish_order:
            return self.players[self.state.finish_order[0]]
        survivors = [p for p in self.players.values() if not p.is_eliminated]
        return survivors[0] if survivors else None

    def get_standings(self) -> list[str]:
        """Player IDs best first: safe order, players still standing, then eliminated (latest first)."""
        standing = [
            pid
            for pid in self.seat_order
            if not self.players[pid].is_eliminated and pid not in self.state.finish_order
        ]
        return (
            list(self.state.finish_order)
            + standing
            + list(reversed(self.state.elimination_order))
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_valid_cards(self, player_id: str) -> list[Card]:
        """Cards the player could legally lead with right now."""
        player = self.players.get(player_id)
        if player is None or self.phase != GamePhase.PLAYING or not player.in_play:
            return []
        return player.get_valid_cards(
            self.top_card, self.state.declared_suit, self.state.draw_stack
        )

    def get_game_state(self, viewer_id: str | None = None) -> GameStateSnapshot:
        """Take a read-only snapshot.

        Args:
            viewer_id: Player whose full hand is included; others show sizes only
        """
        current = self.state.current_player_id
        winner = self.get_winner()
        return GameStateSnapshot(
            game_id=self.game_id,
            phase=self.phase,
            round_number=self.round_number,
            turn_number=self.state.turn_number,
            current_player=current,
            direction=self.state.direction,
            draw_stack=self.state.draw_stack,
            declared_suit=self.state.declared_suit,
            top_card=self.top_card,
            draw_pile_size=len(self.draw_pile),
            discard_pile_size=len(self.discard_pile),
            players=tuple(
                PlayerView(
                    player_id=p.player_id,
                    name=p.name,
                    hand_size=p.hand_size(),
                    is_safe=p.is_safe,
                    is_eliminated=p.is_eliminated,
                    is_current_player=p.player_id == current,
                    hand=tuple(p.hand) if p.player_id == viewer_id else None,
                )
                for p in (self.players[pid] for pid in self.seat_order)
            ),
            finish_order=tuple(self.state.finish_order),
            winner=winner.player_id if winner else None,
        )
