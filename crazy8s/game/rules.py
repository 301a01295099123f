"""Rule sets: effect classification, turn control and stack transitions.

The engine is parameterized by one RuleSet. Two interchangeable variants
are provided:

- EnhancedRules: turn control is decided by walking the turn pointer over
  every card of the prefix (see turn_control).
- ClassicRules: turn control is decided from the cards the prefix ends
  with, and an 8 may follow any card while the player holds control.

Both variants resolve the real turn pointer with the same walk.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from crazy8s.models.card import DRAW_RANKS, Card, CardEffect, EffectType, Rank

from . import turn_control
from .turn_control import TurnOutcome, is_pure_skip_stack, simulate_turn
from .validator import StackValidator, TraceSink, ValidationResult


def is_ace_two_cross(prev_card: Card, card: Card) -> bool:
    """Check for an Ace followed by a 2 (or the reverse) of the same suit."""
    return (
        prev_card.suit == card.suit
        and prev_card.rank != card.rank
        and prev_card.rank in DRAW_RANKS
        and card.rank in DRAW_RANKS
    )


class RuleSet(ABC):
    """Capability object consulted by the validator and the engine."""

    name: str = "base"

    def classify_effect(self, card: Card) -> CardEffect:
        """Get the effect a card has under these rules."""
        return card.get_effect()

    def resolve_turn(
        self,
        cards: Sequence[Card],
        player_count: int,
        direction: int,
    ) -> TurnOutcome:
        """Resolve where the turn goes after a completed play."""
        return simulate_turn(cards, player_count, direction, self.classify_effect)

    @abstractmethod
    def simulate_turn_control(
        self,
        cards: Sequence[Card],
        player_count: int,
        direction: int,
    ) -> bool:
        """Check if the acting player keeps the turn after `cards`."""

    @abstractmethod
    def check_transition(
        self,
        prefix: Sequence[Card],
        card: Card,
        player_count: int,
        direction: int,
    ) -> str | None:
        """Judge stacking `card` on top of `prefix`.

        Returns:
            None if legal, otherwise the reason it is not.
        """

    def validate_stack(
        self,
        cards: Sequence[Card],
        player_count: int,
        direction: int,
        trace: TraceSink | None = None,
    ) -> ValidationResult:
        """Validate every transition of a multi-card play."""
        return StackValidator(self, trace).validate(cards, player_count, direction)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EnhancedRules(RuleSet):
    """Pointer-walk rules.

    A pair may stack when it shares a rank or is an Ace/2 cross of one
    suit. A pair sharing only the suit additionally needs the player to
    keep the turn after every card before it.
    """

    name = "enhanced"

    def simulate_turn_control(self, cards, player_count, direction):
        return turn_control.simulate_turn_control(
            cards, player_count, direction, self.classify_effect
        )

    def check_transition(self, prefix, card, player_count, direction):
        prev_card = prefix[-1]
        if prev_card.rank == card.rank or is_ace_two_cross(prev_card, card):
            return None
        if prev_card.suit != card.suit:
            return "Cards must match suit or rank."
        if not self.simulate_turn_control(prefix, player_count, direction):
            return "Previous cards don't maintain turn control."
        return None


# Ranks whose presence at the end of a stack hands the turn on
_PASSING_RANKS = frozenset(
    {
        Rank.TWO,
        Rank.THREE,
        Rank.FOUR,
        Rank.FIVE,
        Rank.SIX,
        Rank.SEVEN,
        Rank.EIGHT,
        Rank.NINE,
        Rank.TEN,
        Rank.KING,
        Rank.ACE,
    }
)


class ClassicRules(RuleSet):
    """End-of-stack rules.

    Turn control after a prefix: a pure Jack stack with two players keeps
    it; a prefix ending on a passing card loses it; otherwise an even
    number of Queens keeps it, an odd number loses it, and Jacks alone
    keep it. An 8 may follow any card when control is kept.
    """

    name = "classic"

    def simulate_turn_control(self, cards, player_count, direction):
        if not cards:
            return True
        if player_count == 2 and is_pure_skip_stack(cards, self.classify_effect):
            return True
        if cards[-1].rank in _PASSING_RANKS:
            return False

        effects = [self.classify_effect(c).type for c in cards]
        queens = effects.count(EffectType.REVERSE)
        jacks = effects.count(EffectType.SKIP)
        if queens:
            return queens % 2 == 0
        return jacks > 0

    def check_transition(self, prefix, card, player_count, direction):
        prev_card = prefix[-1]
        if prev_card.rank == card.rank or is_ace_two_cross(prev_card, card):
            return None

        wild_with_control = card.rank == Rank.EIGHT and self.simulate_turn_control(
            prefix, player_count, direction
        )
        if wild_with_control:
            return None
        if prev_card.suit != card.suit:
            if card.rank == Rank.EIGHT:
                return (
                    "Cards must match suit or rank, or 8s can be played "
                    "if you maintain turn control."
                )
            return "Cards must match suit or rank."
        if not self.simulate_turn_control(prefix, player_count, direction):
            return "You don't maintain turn control after playing the previous cards."
        return None


RULE_SETS: dict[str, type[RuleSet]] = {
    EnhancedRules.name: EnhancedRules,
    ClassicRules.name: ClassicRules,
}


def get_rule_set(name: str) -> RuleSet:
    """Create a rule set by variant name.

    Raises:
        ValueError: If the variant is unknown.
    """
    try:
        return RULE_SETS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown rule variant {name!r}; expected one of {sorted(RULE_SETS)}"
        ) from None
