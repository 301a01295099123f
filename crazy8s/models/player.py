"""Player model."""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from .card import Card, Rank, Suit


def is_playable(
    card: Card,
    top_card: Card | None,
    declared_suit: Suit | None = None,
    draw_stack: int = 0,
) -> bool:
    """Check if a card may be played onto the table as the first card of a turn."""
    if top_card is None:
        return True
    if draw_stack > 0:
        # Only counters; 8s do not answer a forced draw
        return card.can_counter(top_card)
    if card.rank == Rank.EIGHT:
        return True
    return card.suit == (declared_suit or top_card.suit) or card.rank == top_card.rank


class Player(BaseModel):
    """Player state.

    The hand keeps acquisition order, which has no gameplay meaning.
    Only the game engine mutates a player.
    """

    player_id: str
    name: str = "Player"
    hand: list[Card] = Field(default_factory=list)

    is_safe: bool = False  # Emptied their hand this round
    is_eliminated: bool = False  # Out of the tournament
    finish_position: int = -1  # Order of going safe (-1 if not safe)

    @property
    def in_play(self) -> bool:
        """Check if the player is still in the turn rotation."""
        return not self.is_safe and not self.is_eliminated

    def add_cards(self, cards: Card | Iterable[Card]) -> None:
        """Add cards to the hand."""
        if isinstance(cards, Card):
            cards = [cards]
        self.hand.extend(cards)

    def remove_cards(self, cards: Card | Iterable[Card]) -> None:
        """Remove one copy of each given card from the hand (missing cards are ignored)."""
        if isinstance(cards, Card):
            cards = [cards]
        for card in cards:
            if card in self.hand:
                self.hand.remove(card)

    def get_valid_cards(
        self,
        top_card: Card | None,
        declared_suit: Suit | None = None,
        draw_stack: int = 0,
    ) -> list[Card]:
        """Get the cards that may legally be played first this turn.

        Args:
            top_card: Top of the discard pile (None before the game starts).
            declared_suit: Suit named by the last 8, if still in force.
            draw_stack: Pending forced-draw amount.

        Returns:
            Playable cards in hand order.
        """
        return [
            c for c in self.hand if is_playable(c, top_card, declared_suit, draw_stack)
        ]

    def has_won(self) -> bool:
        """Check if the hand is empty."""
        return not self.hand

    def hand_size(self) -> int:
        """Get number of cards in hand."""
        return len(self.hand)

    def reset_for_new_round(self) -> None:
        """Reset round state (called when a new round is dealt)."""
        self.hand = []
        self.is_safe = False
        self.finish_position = -1

    def __str__(self) -> str:
        status = ""
        if self.is_eliminated:
            status = " (eliminated)"
        elif self.is_safe:
            status = f" (safe #{self.finish_position + 1})"
        return f"Player[{self.name}]{status}"

    def __repr__(self) -> str:
        return (
            f"Player(id={self.player_id!r}, name={self.name!r}, "
            f"cards={len(self.hand)}, safe={self.is_safe}, "
            f"eliminated={self.is_eliminated})"
        )
