"""Configuration management."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel


class GameConfig(BaseModel):
    """Game configuration."""

    hand_size: int = 8
    min_players: int = 2
    max_players: int = 4
    max_draw_stack: int = 200  # Cap for accumulated forced draws


class RulesConfig(BaseModel):
    """Rules configuration."""

    # "enhanced" simulates every card's effect on the turn pointer,
    # "classic" decides turn control from the end of the stack.
    variant: Literal["enhanced", "classic"] = "enhanced"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"


class GameLogConfig(BaseModel):
    """Game log (JSONL) configuration."""

    enabled: bool = False
    output_path: str = "game_log.jsonl"
    trace: bool = False  # Write validator diagnostics to the log


class SimulationConfig(BaseModel):
    """Self-play simulation configuration."""

    num_games: int = 10
    num_players: int = 4
    seed: int | None = None
    max_turns: int = 2000  # Per round; afterwards the player to move is eliminated
    tournament: bool = False  # Play rounds until one player is left


class Config(BaseModel):
    """Root configuration."""

    game: GameConfig = GameConfig()
    rules: RulesConfig = RulesConfig()
    logging: LoggingConfig = LoggingConfig()
    game_log: GameLogConfig = GameLogConfig()
    simulation: SimulationConfig = SimulationConfig()


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses default config.

    Returns:
        Config object.
    """
    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        return Config()

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return Config(**data) if data else Config()
