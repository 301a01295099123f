"""Game models."""

from .card import Card, CardEffect, EffectType, Rank, Suit
from .deck import DECK_SIZE, Deck, create_full_deck
from .game_state import GamePhase, GameState, GameStateSnapshot, PlayerView
from .player import Player

__all__ = [
    "Card",
    "CardEffect",
    "EffectType",
    "Rank",
    "Suit",
    "DECK_SIZE",
    "Deck",
    "create_full_deck",
    "Player",
    "GamePhase",
    "GameState",
    "GameStateSnapshot",
    "PlayerView",
]
