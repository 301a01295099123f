"""Deck model."""

import random
from collections.abc import Iterable, Iterator

from .card import Card, Rank, Suit

DECK_SIZE = 52


def create_full_deck() -> list[Card]:
    """Create the 52 standard cards in canonical order (suit by suit, 2 to Ace)."""
    return [Card(suit=suit, rank=rank) for suit in Suit for rank in Rank]


class Deck:
    """Ordered pile of cards. The top of the deck is the last element."""

    def __init__(
        self,
        cards: Iterable[Card] | None = None,
        rng: random.Random | None = None,
    ):
        """Initialize deck.

        Args:
            cards: Initial cards, bottom first. Defaults to a full 52-card deck.
            rng: Random source used by shuffle (module random if omitted).
        """
        self._cards: list[Card] = list(cards) if cards is not None else create_full_deck()
        self._rng = rng or random.Random()

    def shuffle(self) -> "Deck":
        """Shuffle in place (random.shuffle is a Fisher-Yates permutation)."""
        self._rng.shuffle(self._cards)
        return self

    def deal(self, count: int = 1) -> list[Card]:
        """Remove and return up to `count` cards from the top.

        Never raises on exhaustion: fewer cards (possibly none) are returned
        when the deck runs short.
        """
        dealt: list[Card] = []
        while len(dealt) < count and self._cards:
            dealt.append(self._cards.pop())
        return dealt

    def add_cards(self, cards: Iterable[Card]) -> None:
        """Put cards on the bottom of the deck."""
        self._cards[:0] = list(cards)

    def size(self) -> int:
        """Get number of cards."""
        return len(self._cards)

    def is_empty(self) -> bool:
        """Check if deck is empty."""
        return not self._cards

    def to_list(self) -> list[Card]:
        """Get a copy of the cards, bottom first."""
        return list(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def __repr__(self) -> str:
        return f"Deck({len(self._cards)} cards)"
