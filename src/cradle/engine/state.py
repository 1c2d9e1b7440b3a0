from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .types import Card, Phase, Rank, Suit, card_id

if TYPE_CHECKING:
    from .actions import Action

Event = dict[str, object]


class ErrorCode(Enum):
    INVALID_SELECTION = "invalid_selection"
    NO_SELECTION = "no_selection"
    INSUFFICIENT_VALUE = "insufficient_value"
    ILLEGAL_TRANSITION = "illegal_transition"
    CONFIRMATION_REQUIRED = "confirmation_required"
    CANCELLED = "cancelled"


class EngineInvariantError(RuntimeError):
    """Raised when the engine detects a defect rather than a user error."""


@dataclass(frozen=True)
class GameConfig:
    starting_village: int = 4
    row_size: int = 4
    surcharge: int = 2
    upgraded_two_value: int = 3
    player_names: tuple[str, str] = ("Player 1", "Player 2")


@dataclass(frozen=True)
class Notice:
    title: str
    message: str


@dataclass
class PlayerState:
    id: int
    name: str
    village: list[Card] = field(default_factory=list)

    def face_up(self) -> list[Card]:
        return [c for c in self.village if c.is_face_up]

    def face_down(self) -> list[Card]:
        return [c for c in self.village if not c.is_face_up]

    def find(self, cid: str) -> Card | None:
        for c in self.village:
            if c.id == cid:
                return c
        return None


@dataclass
class TurnState:
    """Everything that lives for one turn only. Replaced wholesale on end of turn."""

    phase: Phase = Phase.ATTACK
    selected_card_ids: list[str] = field(default_factory=list)
    bonus_options: list[str] = field(default_factory=list)
    bonus_target_player: int | None = None
    purchase_bonus: Card | None = None
    was_attack_auto_skipped: bool = False


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None
    code: ErrorCode | None = None
    notices: list[Notice] = field(default_factory=list)

    @staticmethod
    def fail(code: ErrorCode, error: str, notices: list[Notice] | None = None) -> "StepResult":
        return StepResult(ok=False, events=[], error=error, code=code, notices=list(notices or []))


@dataclass
class GameState:
    config: GameConfig
    seed: int
    rng: random.Random
    players: list[PlayerState]
    purchase_row: list[Card]
    central_deck: list[Card]
    aces: list[Card]
    discard: list[Card] = field(default_factory=list)
    current_player: int = 0
    turn: int = 1
    local: TurnState = field(default_factory=TurnState)
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def phase(self) -> Phase:
        return self.local.phase

    def opponent(self, player: int) -> int:
        return 1 - player

    def current(self) -> PlayerState:
        return self.players[self.current_player]

    def defender(self) -> PlayerState:
        return self.players[self.opponent(self.current_player)]

    def village_card(self, player: int, cid: str) -> Card:
        card = self.players[player].find(cid)
        if card is None:
            raise EngineInvariantError(f"Card {cid} is not in {self.players[player].name}'s village.")
        return card

    def selected_cards(self) -> list[Card]:
        return [self.village_card(self.current_player, cid) for cid in self.local.selected_card_ids]

    def all_cards(self) -> list[Card]:
        cards: list[Card] = []
        for p in self.players:
            cards.extend(p.village)
        cards.extend(self.purchase_row)
        cards.extend(self.central_deck)
        cards.extend(self.aces)
        cards.extend(self.discard)
        return cards


def check_integrity(state: GameState) -> None:
    """Every (suit, rank) pair must be owned by exactly one container."""
    ids = [c.id for c in state.all_cards()]
    expected = {card_id(s, r) for s in Suit for r in Rank}
    if len(ids) != len(set(ids)):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        raise EngineInvariantError(f"Duplicated cards: {', '.join(dupes)}")
    missing = expected - set(ids)
    if missing:
        raise EngineInvariantError(f"Missing cards: {', '.join(sorted(missing))}")
