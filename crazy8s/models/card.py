"""Card models."""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel


class Suit(str, Enum):
    """Card suit."""

    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"
    SPADES = "Spades"

    @classmethod
    def parse(cls, value: "Suit | str") -> "Suit":
        """Parse a suit from its name, initial or symbol.

        Raises:
            ValueError: If the value does not name a suit.
        """
        if isinstance(value, Suit):
            return value
        text = str(value).strip()
        for suit in cls:
            if text.lower() in (suit.value.lower(), SUIT_CODES[suit].lower()):
                return suit
            if text == SUIT_SYMBOLS[suit]:
                return suit
        raise ValueError(f"Unknown suit: {value!r}")


class Rank(str, Enum):
    """Card rank. Declaration order is the canonical deck order."""

    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "Jack"
    QUEEN = "Queen"
    KING = "King"
    ACE = "Ace"

    @classmethod
    def parse(cls, value: "Rank | str") -> "Rank":
        """Parse a rank from its name or short code ("J", "Q", "K", "A").

        Raises:
            ValueError: If the value does not name a rank.
        """
        if isinstance(value, Rank):
            return value
        text = str(value).strip()
        for rank in cls:
            if text.lower() in (rank.value.lower(), RANK_CODES[rank].lower()):
                return rank
        raise ValueError(f"Unknown rank: {value!r}")


SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

# Single-letter suit codes
SUIT_CODES = {
    Suit.HEARTS: "H",
    Suit.DIAMONDS: "D",
    Suit.CLUBS: "C",
    Suit.SPADES: "S",
}

# Short rank codes
RANK_CODES = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

SPECIAL_RANKS = frozenset({Rank.EIGHT, Rank.JACK, Rank.QUEEN, Rank.ACE, Rank.TWO})
DRAW_RANKS = frozenset({Rank.ACE, Rank.TWO})


class EffectType(str, Enum):
    """Effect tag attached to a rank."""

    WILD = "wild"
    SKIP = "skip"
    REVERSE = "reverse"
    FORCE_DRAW = "force_draw"
    NONE = "none"


class CardEffect(BaseModel, frozen=True):
    """Effect of playing a card. `amount` is only set for forced draws."""

    type: EffectType
    amount: int = 0

    @property
    def is_force_draw(self) -> bool:
        return self.type == EffectType.FORCE_DRAW


RANK_EFFECTS = {
    Rank.EIGHT: CardEffect(type=EffectType.WILD),
    Rank.JACK: CardEffect(type=EffectType.SKIP),
    Rank.QUEEN: CardEffect(type=EffectType.REVERSE),
    Rank.ACE: CardEffect(type=EffectType.FORCE_DRAW, amount=4),
    Rank.TWO: CardEffect(type=EffectType.FORCE_DRAW, amount=2),
}

NO_EFFECT = CardEffect(type=EffectType.NONE)


class Card(BaseModel, frozen=True):
    """Single card. Equality and hashing are by (suit, rank)."""

    suit: Suit
    rank: Rank

    def matches(self, other: "Card") -> bool:
        """Check if the cards share a suit or a rank."""
        return self.suit == other.suit or self.rank == other.rank

    def is_special(self) -> bool:
        """Check if the rank carries a special effect."""
        return self.rank in SPECIAL_RANKS

    def get_effect(self) -> CardEffect:
        """Get the effect of playing this card."""
        return RANK_EFFECTS.get(self.rank, NO_EFFECT)

    def can_counter(self, top_card: "Card") -> bool:
        """Check if this card may answer a pending forced draw from top_card.

        Aces answer Aces and 2s answer 2s of any suit; an Ace and a 2 only
        answer each other within the same suit.
        """
        if top_card.rank == Rank.ACE:
            return self.rank == Rank.ACE or (
                self.rank == Rank.TWO and self.suit == top_card.suit
            )
        if top_card.rank == Rank.TWO:
            return self.rank == Rank.TWO or (
                self.rank == Rank.ACE and self.suit == top_card.suit
            )
        return False

    def short(self) -> str:
        """Short display form, e.g. "7♥" or "A♠"."""
        return f"{RANK_CODES[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    @classmethod
    def parse(cls, value: "Card | str | Mapping[str, Any]") -> "Card":
        """Parse a card reference.

        Accepts a Card, a mapping with "suit" and "rank" keys, the long form
        "7 of Hearts" or a compact code such as "H7", "SA" or "D10".

        Raises:
            ValueError: If the value is not a recognizable card.
        """
        if isinstance(value, Card):
            return value
        if isinstance(value, Mapping):
            if "suit" not in value or "rank" not in value:
                raise ValueError(f"Card mapping needs suit and rank: {value!r}")
            return cls(suit=Suit.parse(value["suit"]), rank=Rank.parse(value["rank"]))
        if not isinstance(value, str):
            raise ValueError(f"Cannot parse card from {type(value).__name__}")

        text = value.strip()
        if " of " in text:
            rank_text, _, suit_text = text.partition(" of ")
            return cls(suit=Suit.parse(suit_text), rank=Rank.parse(rank_text))
        if len(text) < 2:
            raise ValueError(f"Card code too short: {value!r}")
        return cls(suit=Suit.parse(text[0]), rank=Rank.parse(text[1:]))

    def __str__(self) -> str:
        return f"{self.rank.value} of {self.suit.value}"

    def __repr__(self) -> str:
        return f"Card({self.short()})"
