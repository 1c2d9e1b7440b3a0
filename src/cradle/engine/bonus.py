from __future__ import annotations

from collections.abc import Collection

from .state import EngineInvariantError, ErrorCode, GameConfig, GameState, Notice, StepResult
from .types import Card, Color, Phase, Suit, rank_value


def surcharge(payer: Card, card_to_buy: Card, config: GameConfig) -> int:
    """Diamonds pay extra toward red cards, Clubs toward black ones."""
    if payer.suit is Suit.DIAMONDS and card_to_buy.color is Color.RED:
        return config.surcharge
    if payer.suit is Suit.CLUBS and card_to_buy.color is Color.BLACK:
        return config.surcharge
    return 0


def bonus_value(bonus: Card | None, card_to_buy: Card, config: GameConfig) -> int:
    if bonus is None:
        return 0
    return rank_value(bonus) + surcharge(bonus, card_to_buy, config)


def weaken(state: GameState, cid: str) -> StepResult:
    options = state.local.bonus_options
    if not options or state.local.bonus_target_player is None:
        raise EngineInvariantError("Weaken phase entered without any target.")
    if cid not in options:
        return StepResult.fail(ErrorCode.INVALID_SELECTION, "Choose one of the opponent's face-up cards.")

    target = state.village_card(state.local.bonus_target_player, cid)
    target.is_face_up = False
    state.local.purchase_bonus = target
    state.local.bonus_options = []
    state.local.bonus_target_player = None
    state.local.phase = Phase.PURCHASE
    state.event_log.append({"type": "OPPONENT_WEAKENED", "player": state.current_player, "card_id": cid})
    notice = Notice(
        "Bonus Gained!",
        f"You gained the power of the {target.rank.value} of {target.suit.value} for this purchase phase.",
    )
    return StepResult(ok=True, events=state.event_log[-1:], notices=[notice])


def heart_bonus_targets(state: GameState, new_card_id: str, payment_ids: Collection[str]) -> list[str]:
    return [
        c.id
        for c in state.current().village
        if not c.is_face_up and c.id != new_card_id and c.id not in payment_ids
    ]


def recover(state: GameState, cid: str) -> StepResult:
    options = state.local.bonus_options
    if not options:
        raise EngineInvariantError("Hearts bonus phase entered without any target.")
    if cid not in options:
        return StepResult.fail(ErrorCode.INVALID_SELECTION, "Choose one of your eligible face-down cards.")

    state.village_card(state.current_player, cid).is_face_up = True
    state.local.bonus_options = []
    state.event_log.append({"type": "HEART_RECOVERED", "player": state.current_player, "card_id": cid})
    return StepResult(ok=True, events=state.event_log[-1:])
