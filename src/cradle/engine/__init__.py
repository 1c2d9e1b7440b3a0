"""Deterministic, headless rules engine for Cradle.

IMPORTANT: This package must never import a UI library.
"""

from .actions import (
    Action,
    AttackAction,
    HeartBonusAction,
    PurchaseAction,
    RestAction,
    SkipAttackAction,
    ToggleSelectionAction,
    WeakenAction,
)
from .game import Game, new_game, replay, step
from .gateway import DecisionGateway, NullGateway, ScriptedGateway
from .state import EngineInvariantError, ErrorCode, GameConfig, GameState, Notice, StepResult, check_integrity
from .types import Card, Phase, Rank, Suit, rank_value

__all__ = [
    "Action",
    "AttackAction",
    "Card",
    "DecisionGateway",
    "EngineInvariantError",
    "ErrorCode",
    "Game",
    "GameConfig",
    "GameState",
    "HeartBonusAction",
    "Notice",
    "NullGateway",
    "Phase",
    "PurchaseAction",
    "Rank",
    "RestAction",
    "ScriptedGateway",
    "SkipAttackAction",
    "StepResult",
    "Suit",
    "ToggleSelectionAction",
    "WeakenAction",
    "check_integrity",
    "new_game",
    "rank_value",
    "replay",
    "step",
]
