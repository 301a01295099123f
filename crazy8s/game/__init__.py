"""Game logic module."""

from .autoplay import GreedyStrategy, Move, SelfPlayRunner, Strategy
from .engine import GameEngine
from .manager import GameManager
from .results import ActionResult, DrawResult, ErrorKind, PlayResult
from .rules import ClassicRules, EnhancedRules, RuleSet, get_rule_set
from .turn_control import TurnOutcome, simulate_turn, simulate_turn_control
from .validator import MoveValidator, StackValidator, ValidationResult

__all__ = [
    "GameEngine",
    "GameManager",
    "ActionResult",
    "DrawResult",
    "ErrorKind",
    "PlayResult",
    "RuleSet",
    "EnhancedRules",
    "ClassicRules",
    "get_rule_set",
    "TurnOutcome",
    "simulate_turn",
    "simulate_turn_control",
    "MoveValidator",
    "StackValidator",
    "ValidationResult",
    "Strategy",
    "GreedyStrategy",
    "Move",
    "SelfPlayRunner",
]
