"""Move validation for submitted plays."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from crazy8s.logging.formatters import format_card, format_cards
from crazy8s.models.card import Card, Rank, Suit
from crazy8s.models.player import Player, is_playable

from .results import ErrorKind

if TYPE_CHECKING:
    from .rules import RuleSet

# Receives structured diagnostic events: (event name, detail)
TraceSink = Callable[[str, dict[str, Any]], None]


@dataclass
class ValidationResult:
    """Result of move validation."""

    is_valid: bool
    error: ErrorKind | None = None
    error_message: str = ""

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> ValidationResult:
        return cls(is_valid=False, error=error, error_message=message)


class StackValidator:
    """Validates the card-to-card transitions of a multi-card play.

    The first card is checked against the table elsewhere; this only looks
    at adjacent pairs inside the stack. Each pair is judged by the rule set,
    which may re-simulate the turn pointer over the cards before the pair.
    Silent unless a trace sink is given.
    """

    def __init__(self, rules: RuleSet, trace: TraceSink | None = None):
        """Initialize validator.

        Args:
            rules: Rule set that judges each transition
            trace: Optional sink for diagnostic events
        """
        self.rules = rules
        self.trace = trace

    def _emit(self, event: str, **detail: Any) -> None:
        if self.trace is not None:
            self.trace(event, detail)

    def validate(
        self,
        cards: Sequence[Card],
        player_count: int,
        direction: int,
    ) -> ValidationResult:
        """Validate every adjacent pair of a stack.

        Args:
            cards: Cards in play order
            player_count: Players in the rotation, including the acting player
            direction: Current direction of play

        Returns:
            ValidationResult naming the first offending pair, if any
        """
        self._emit(
            "stack_validation_start",
            cards=format_cards(cards),
            player_count=player_count,
            direction=direction,
        )

        for i in range(1, len(cards)):
            prev_card, card = cards[i - 1], cards[i]
            reason = self.rules.check_transition(
                cards[:i], card, player_count, direction
            )
            self._emit(
                "stack_transition",
                index=i,
                previous=format_card(prev_card),
                card=format_card(card),
                legal=reason is None,
                reason=reason,
            )
            if reason is not None:
                self._emit("stack_validation_end", valid=False, failed_at=i)
                return ValidationResult.fail(
                    ErrorKind.ILLEGAL_STACK,
                    f"Cannot stack {card} after {prev_card}. {reason}",
                )

        self._emit("stack_validation_end", valid=True)
        return ValidationResult.ok()


class MoveValidator:
    """Validates a player's submitted play against their hand and the table."""

    def __init__(self, rules: RuleSet, trace: TraceSink | None = None):
        """Initialize validator.

        Args:
            rules: Rule set used for stacked plays
            trace: Optional sink for diagnostic events
        """
        self.rules = rules
        self.trace = trace

    def validate(
        self,
        player: Player,
        cards: Sequence[Card],
        declared_suit: Suit | None,
        top_card: Card | None,
        active_declared_suit: Suit | None,
        draw_stack: int,
        player_count: int,
        direction: int,
    ) -> ValidationResult:
        """Validate a submitted play.

        Checks run in a fixed order and the first failure is reported:
        hand ownership, first card against the table, stack transitions,
        then the suit declaration for 8s.

        Args:
            player: Acting player
            cards: Cards in play order
            declared_suit: Suit the player names for any 8 in the play
            top_card: Top of the discard pile
            active_declared_suit: Suit currently in force from an earlier 8
            draw_stack: Pending forced-draw amount
            player_count: Players in the rotation
            direction: Current direction of play

        Returns:
            ValidationResult
        """
        if not cards:
            return ValidationResult.fail(ErrorKind.INVALID_REQUEST, "No cards specified")

        missing = self._find_missing(player, cards)
        if missing is not None:
            return ValidationResult.fail(
                ErrorKind.CARD_NOT_IN_HAND,
                f"You do not have the {missing}",
            )

        first = cards[0]
        if not is_playable(first, top_card, active_declared_suit, draw_stack):
            if draw_stack > 0:
                message = (
                    f"{first} cannot counter the pending draw of {draw_stack}; "
                    "counter with a matching Ace or 2, or draw"
                )
            else:
                target = active_declared_suit or (top_card.suit if top_card else None)
                message = (
                    f"{first} does not match {top_card}"
                    + (f" (declared suit {target.value})" if active_declared_suit else "")
                )
            return ValidationResult.fail(ErrorKind.ILLEGAL_FIRST_CARD, message)

        if len(cards) > 1:
            result = StackValidator(self.rules, self.trace).validate(
                cards, player_count, direction
            )
            if not result.is_valid:
                return result

        if declared_suit is None and any(c.rank == Rank.EIGHT for c in cards):
            return ValidationResult.fail(
                ErrorKind.SUIT_DECLARATION_REQUIRED,
                "You must declare a suit when playing an 8",
            )

        return ValidationResult.ok()

    def _find_missing(self, player: Player, cards: Sequence[Card]) -> Card | None:
        """Find the first card not covered by the player's hand, counting repeats."""
        held = Counter(player.hand)
        for card in cards:
            if held[card] <= 0:
                return card
            held[card] -= 1
        return None
