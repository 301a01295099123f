"""Formatters for game log output."""

from collections.abc import Iterable, Mapping

from crazy8s.models.card import RANK_CODES, SUIT_CODES, Card


def format_card(card: Card) -> str:
    """Format a single card to string.

    Args:
        card: Card to format.

    Returns:
        Compact code, suit letter first (e.g., "H7", "SA", "D10").
    """
    return f"{SUIT_CODES[card.suit]}{RANK_CODES[card.rank]}"


def format_cards(cards: Iterable[Card]) -> str:
    """Format cards to a comma-separated string, keeping their order.

    Returns:
        e.g. "H7,C7,S7". Empty string if no cards.
    """
    return ",".join(format_card(c) for c in cards)


def format_hands(hands: Mapping[str, Iterable[Card]]) -> dict[str, str]:
    """Format all players' hands.

    Args:
        hands: Mapping of player_id to hand.

    Returns:
        Dict mapping player_id to formatted hand string.
    """
    return {player_id: format_cards(hand) for player_id, hand in hands.items()}
