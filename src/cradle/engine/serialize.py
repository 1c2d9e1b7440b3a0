from __future__ import annotations

import random
from typing import Mapping

from cradle.paths import get_paths
from cradle.services.schema import SchemaService

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
from .state import GameConfig, GameState, PlayerState, TurnState, check_integrity
from .types import Card, Phase, Rank, Suit

_ACTION_TYPES: dict[str, type] = {
    "toggle_selection": ToggleSelectionAction,
    "attack": AttackAction,
    "skip_attack": SkipAttackAction,
    "rest": RestAction,
    "weaken": WeakenAction,
    "purchase": PurchaseAction,
    "heart_bonus": HeartBonusAction,
}
_ACTION_NAMES = {cls: name for name, cls in _ACTION_TYPES.items()}


def action_to_dict(a: Action) -> dict[str, object]:
    out: dict[str, object] = {"type": _ACTION_NAMES[type(a)], "player": a.player}
    if isinstance(a, (ToggleSelectionAction, WeakenAction, HeartBonusAction)):
        out["card_id"] = a.card_id
    elif isinstance(a, PurchaseAction):
        out["row_index"] = a.row_index
        out["confirmed"] = a.confirmed
    return out


def action_from_dict(raw: Mapping[str, object]) -> Action:
    kind = raw.get("type")
    cls = _ACTION_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise ValueError(f"Unknown action type: {kind!r}")
    fields = {k: v for k, v in raw.items() if k != "type"}
    return cls(**fields)


def _card_to_dict(c: Card) -> dict[str, object]:
    return {"id": c.id, "suit": c.suit.value, "rank": c.rank.value, "face_up": c.is_face_up}


def _card_from_dict(raw: Mapping[str, object]) -> Card:
    return Card(suit=Suit(raw["suit"]), rank=Rank(raw["rank"]), is_face_up=bool(raw["face_up"]))


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {"id": p.id, "name": p.name, "village": [_card_to_dict(c) for c in p.village]}


def _turn_to_dict(t: TurnState) -> dict[str, object]:
    return {
        "phase": t.phase.value,
        "selected_card_ids": list(t.selected_card_ids),
        "bonus_options": list(t.bonus_options),
        "bonus_target_player": t.bonus_target_player,
        "purchase_bonus": t.purchase_bonus.id if t.purchase_bonus else None,
        "was_attack_auto_skipped": t.was_attack_auto_skipped,
    }


def snapshot(state: GameState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    cfg = state.config
    return {
        "seed": state.seed,
        "config": {
            "starting_village": cfg.starting_village,
            "row_size": cfg.row_size,
            "surcharge": cfg.surcharge,
            "upgraded_two_value": cfg.upgraded_two_value,
            "player_names": list(cfg.player_names),
        },
        "turn": state.turn,
        "current_player": state.current_player,
        "players": [_player_to_dict(p) for p in state.players],
        "purchase_row": [_card_to_dict(c) for c in state.purchase_row],
        "central_deck": [_card_to_dict(c) for c in state.central_deck],
        "aces": [_card_to_dict(c) for c in state.aces],
        "discard": [_card_to_dict(c) for c in state.discard],
        "local": _turn_to_dict(state.local),
        "action_log": [action_to_dict(a) for a in state.action_log],
    }


def restore(snap: Mapping[str, object]) -> GameState:
    """Rebuild a GameState from `snapshot` output. The event log starts empty."""
    raw_cfg = snap["config"]
    cfg = GameConfig(
        starting_village=raw_cfg["starting_village"],
        row_size=raw_cfg["row_size"],
        surcharge=raw_cfg["surcharge"],
        upgraded_two_value=raw_cfg["upgraded_two_value"],
        player_names=tuple(raw_cfg["player_names"]),
    )
    players = [
        PlayerState(id=p["id"], name=p["name"], village=[_card_from_dict(c) for c in p["village"]])
        for p in snap["players"]
    ]
    seed = snap["seed"]
    state = GameState(
        config=cfg,
        seed=seed,
        rng=random.Random(seed),
        players=players,
        purchase_row=[_card_from_dict(c) for c in snap["purchase_row"]],
        central_deck=[_card_from_dict(c) for c in snap["central_deck"]],
        aces=[_card_from_dict(c) for c in snap["aces"]],
        discard=[_card_from_dict(c) for c in snap["discard"]],
        current_player=snap["current_player"],
        turn=snap["turn"],
        action_log=[action_from_dict(a) for a in snap["action_log"]],
    )
    check_integrity(state)

    raw_local = snap["local"]
    bonus_id = raw_local["purchase_bonus"]
    bonus = None
    if bonus_id is not None:
        bonus = next(c for c in state.all_cards() if c.id == bonus_id)
    state.local = TurnState(
        phase=Phase(raw_local["phase"]),
        selected_card_ids=list(raw_local["selected_card_ids"]),
        bonus_options=list(raw_local["bonus_options"]),
        bonus_target_player=raw_local["bonus_target_player"],
        purchase_bonus=bonus,
        was_attack_auto_skipped=raw_local["was_attack_auto_skipped"],
    )
    return state


def validate_snapshot(snap: Mapping[str, object]) -> None:
    SchemaService(get_paths().schema_dir).validate(dict(snap), "game_state", context="game snapshot")
