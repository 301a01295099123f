"""Turn progression simulation for a sequence of played cards.

Everything here is a pure function of (cards, player count, direction):
no game state is read or written, so the same prefix can be re-simulated
as often as the stack validator needs.

The pointer walk, relative to the acting player at offset 0:

- Jack: adds one pending skip (ignored with two players).
- Pending skips resolve at the next non-Jack card, or at the end of the
  stack, moving the pointer `pending + 1` seats in the current direction.
- Queen: flips the direction, then moves one seat.
- Every other card (8, Ace, 2, numbers, King): moves one seat.

A stack made only of Jacks in a two-player game always returns the turn
to the acting player; that case is decided before the walk.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from crazy8s.models.card import Card, CardEffect, EffectType

EffectClassifier = Callable[[Card], CardEffect]


@dataclass(frozen=True)
class TurnOutcome:
    """Where the turn ends up after a stack.

    offset: Seats from the acting player in rotation order, 0 <= offset < count.
    direction: Direction of play after the stack.
    """

    offset: int
    direction: int

    @property
    def retains_control(self) -> bool:
        """Check if the acting player gets the turn back."""
        return self.offset == 0


def _default_classify(card: Card) -> CardEffect:
    return card.get_effect()


def is_pure_skip_stack(cards: Sequence[Card], classify: EffectClassifier) -> bool:
    """Check if every card in a non-empty stack is a skip."""
    return bool(cards) and all(classify(c).type == EffectType.SKIP for c in cards)


def simulate_turn(
    cards: Sequence[Card],
    player_count: int,
    direction: int,
    classify: EffectClassifier | None = None,
) -> TurnOutcome:
    """Simulate the turn pointer over a stack of cards.

    Args:
        cards: Cards in play order.
        player_count: Players in the rotation, including the acting player.
        direction: Direction of play before the stack (1 or -1).
        classify: Effect lookup (defaults to Card.get_effect).

    Returns:
        TurnOutcome for the whole stack.

    Raises:
        ValueError: On a non-positive player count or an invalid direction.
    """
    if player_count < 1:
        raise ValueError(f"player_count must be positive, got {player_count}")
    if direction not in (1, -1):
        raise ValueError(f"direction must be 1 or -1, got {direction}")
    classify = classify or _default_classify

    if player_count == 2 and is_pure_skip_stack(cards, classify):
        return TurnOutcome(offset=0, direction=direction)

    index = 0
    pending_skips = 0
    for card in cards:
        effect = classify(card)
        if effect.type == EffectType.SKIP:
            if player_count != 2:
                pending_skips += 1
            continue

        if pending_skips:
            index = (index + direction * (pending_skips + 1)) % player_count
            pending_skips = 0

        if effect.type == EffectType.REVERSE:
            direction = -direction
        index = (index + direction) % player_count

    if pending_skips:
        index = (index + direction * (pending_skips + 1)) % player_count

    return TurnOutcome(offset=index, direction=direction)


def simulate_turn_control(
    cards: Sequence[Card],
    player_count: int,
    direction: int,
    classify: EffectClassifier | None = None,
) -> bool:
    """Check if the acting player keeps the turn after playing `cards`.

    An empty stack trivially keeps control.
    """
    if not cards:
        return True
    return simulate_turn(cards, player_count, direction, classify).retains_control
