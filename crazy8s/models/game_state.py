"""Game state models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .card import Card, Suit


class GamePhase(str, Enum):
    """Lifecycle phase of a game."""

    SETUP = "setup"
    PLAYING = "playing"
    FINISHED = "finished"  # Terminal for the round


class GameState(BaseModel):
    """Mutable table state owned by one engine."""

    game_id: str = ""
    phase: GamePhase = GamePhase.SETUP

    # Progress
    round_number: int = 1
    turn_number: int = 0

    # Turn control
    current_player_id: str | None = None
    direction: int = 1  # 1 = seat order, -1 = reversed

    # Pending effects
    draw_stack: int = 0  # Cards owed by the next player who cannot counter
    declared_suit: Suit | None = None  # Named by the last 8

    # Results (player ids)
    finish_order: list[str] = Field(default_factory=list)  # Went safe, best first
    elimination_order: list[str] = Field(default_factory=list)  # First out first

    def reset_for_new_round(self) -> None:
        """Reset per-round state before a re-deal."""
        self.turn_number = 0
        self.current_player_id = None
        self.direction = 1
        self.draw_stack = 0
        self.declared_suit = None
        self.finish_order = []

    def __str__(self) -> str:
        parts = [f"Round {self.round_number}, Turn {self.turn_number}"]
        if self.draw_stack:
            parts.append(f"[DRAW {self.draw_stack}]")
        if self.declared_suit:
            parts.append(f"[{self.declared_suit.value}]")
        if self.current_player_id is not None:
            parts.append(f"{self.current_player_id}'s turn")
        return " ".join(parts)


class PlayerView(BaseModel):
    """Read-only projection of a player.

    `hand` is only filled in for the player the snapshot was taken for.
    """

    model_config = ConfigDict(frozen=True)

    player_id: str
    name: str
    hand_size: int
    is_safe: bool
    is_eliminated: bool
    is_current_player: bool
    hand: tuple[Card, ...] | None = None


class GameStateSnapshot(BaseModel):
    """Immutable projection of a game for rendering or broadcast."""

    model_config = ConfigDict(frozen=True)

    game_id: str
    phase: GamePhase
    round_number: int
    turn_number: int
    current_player: str | None
    direction: int
    draw_stack: int
    declared_suit: Suit | None
    top_card: Card | None
    draw_pile_size: int
    discard_pile_size: int
    players: tuple[PlayerView, ...]
    finish_order: tuple[str, ...] = ()
    winner: str | None = None

    def player(self, player_id: str) -> PlayerView | None:
        """Find a player's view by id."""
        for view in self.players:
            if view.player_id == player_id:
                return view
        return None
