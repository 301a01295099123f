"""Shared fixtures for engine tests."""

import random
from collections.abc import Iterable, Mapping

import pytest

from crazy8s.config import Config, RulesConfig
from crazy8s.game.engine import GameEngine
from crazy8s.models.card import Card, Suit
from crazy8s.models.deck import Deck, create_full_deck


def rig_table(
    engine: GameEngine,
    hands: Mapping[str, Iterable[str]],
    top: str,
    draw_top: Iterable[str] = (),
    leftover: str = "draw",
    current: str | None = None,
    direction: int = 1,
    draw_stack: int = 0,
    declared_suit: Suit | None = None,
) -> None:
    """Lay out a started game with chosen cards.

    Every card not named goes to `leftover`: "draw" (under `draw_top`),
    "discard" (under the top card) or a player id. The table always holds
    the full 52 cards.

    Args:
        engine: Started engine
        hands: Player id -> card codes; unnamed players get empty hands
        top: Top card of the discard pile
        draw_top: Cards dealt next from the draw pile, in dealing order
    """
    hand_cards = {pid: [Card.parse(c) for c in cards] for pid, cards in hands.items()}
    top_card = Card.parse(top)
    next_cards = [Card.parse(c) for c in draw_top]

    used = [top_card, *next_cards]
    for cards in hand_cards.values():
        used.extend(cards)
    assert len(used) == len(set(used)), "card named twice"
    rest = [c for c in create_full_deck() if c not in used]

    for pid, player in engine.players.items():
        player.hand = list(hand_cards.get(pid, []))

    discard = [top_card]
    draw = list(reversed(next_cards))
    if leftover == "draw":
        draw = rest + draw
    elif leftover == "discard":
        discard = rest + discard
    else:
        engine.players[leftover].hand.extend(rest)

    engine.discard_pile = discard
    engine.draw_pile = Deck(cards=draw, rng=engine._rng)

    engine.state.current_player_id = current or engine.active_player_ids[0]
    engine.state.direction = direction
    engine.state.draw_stack = draw_stack
    engine.state.declared_suit = declared_suit

    assert engine.card_count() == 52


@pytest.fixture
def make_engine():
    """Factory for engines with seeded shuffling."""

    def _make(
        num_players: int = 3,
        variant: str = "enhanced",
        seed: int = 7,
        start: bool = True,
        **kwargs,
    ) -> GameEngine:
        config = Config(rules=RulesConfig(variant=variant))
        engine = GameEngine(
            [f"p{i}" for i in range(1, num_players + 1)],
            config=config,
            rng=random.Random(seed),
            **kwargs,
        )
        if start:
            engine.start_game()
        return engine

    return _make


@pytest.fixture
def engine(make_engine) -> GameEngine:
    """Started three-player game."""
    return make_engine(3)


@pytest.fixture
def rig():
    """Table rigging helper."""
    return rig_table
