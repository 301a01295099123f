"""Operation results and error kinds."""

from dataclasses import dataclass, field
from enum import Enum

from crazy8s.models.card import Card
from crazy8s.models.game_state import GameStateSnapshot


class ErrorKind(str, Enum):
    """Reasons an operation was refused. State is unchanged for all of them."""

    NOT_YOUR_TURN = "NotYourTurn"
    CARD_NOT_IN_HAND = "CardNotInHand"
    ILLEGAL_FIRST_CARD = "IllegalFirstCard"
    ILLEGAL_STACK = "IllegalStack"
    SUIT_DECLARATION_REQUIRED = "SuitDeclarationRequired"
    INVALID_STATE_TRANSITION = "InvalidStateTransition"
    DECK_EXHAUSTED = "DeckExhausted"
    PLAYER_NOT_FOUND = "PlayerNotFound"
    GAME_NOT_FOUND = "GameNotFound"
    INVALID_REQUEST = "InvalidRequest"


@dataclass
class ActionResult:
    """Result of an engine operation."""

    success: bool
    error: ErrorKind | None = None
    message: str = ""
    state: GameStateSnapshot | None = None

    @classmethod
    def fail(cls, error: ErrorKind, message: str):
        """Build a failed result of this type."""
        return cls(success=False, error=error, message=message)


@dataclass
class PlayResult(ActionResult):
    """Result of playing cards."""

    cards_played: list[Card] = field(default_factory=list)
    player_safe: bool = False  # The acting player emptied their hand
    game_won: bool = False  # The play finished the round
    winner: str | None = None


@dataclass
class DrawResult(ActionResult):
    """Result of drawing cards."""

    drawn_cards: list[Card] = field(default_factory=list)
    requested: int = 0
    from_draw_stack: bool = False  # Paid a forced draw
    reshuffled: bool = False  # Discard pile was shuffled back in
