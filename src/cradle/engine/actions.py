from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ToggleSelectionAction:
    player: int
    card_id: str


@dataclass(frozen=True)
class AttackAction:
    player: int


@dataclass(frozen=True)
class SkipAttackAction:
    player: int


@dataclass(frozen=True)
class RestAction:
    player: int


@dataclass(frozen=True)
class WeakenAction:
    player: int
    card_id: str


@dataclass(frozen=True)
class PurchaseAction:
    player: int
    row_index: int
    # Upgrade decision. None means "ask the gateway".
    confirmed: bool | None = None


@dataclass(frozen=True)
class HeartBonusAction:
    player: int
    card_id: str


Action = (
    ToggleSelectionAction
    | AttackAction
    | SkipAttackAction
    | RestAction
    | WeakenAction
    | PurchaseAction
    | HeartBonusAction
)
