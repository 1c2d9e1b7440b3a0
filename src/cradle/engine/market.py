"""Purchase valuation and settlement.

Purchasing is split in two so that a confirmation can sit between them:
`propose_purchase` validates and prices the offer without touching the state,
`commit_purchase` applies a plan. Abandoning a plan is simply not committing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .bonus import bonus_value, heart_bonus_targets, surcharge
from .state import EngineInvariantError, ErrorCode, GameState, Notice, StepResult
from .types import Card, Rank, Suit, parse_card_id, rank_value

PurchaseMode = Literal["upgrade", "standard"]


@dataclass(frozen=True)
class PurchasePlan:
    row_index: int
    card_id: str
    cost: int
    mode: PurchaseMode
    payment_ids: tuple[str, ...]
    total: int
    upgrade_card_id: str | None = None
    notices: tuple[Notice, ...] = ()

    @property
    def requires_confirmation(self) -> bool:
        return self.mode == "upgrade"

    def confirmation(self) -> Notice:
        if self.upgrade_card_id is None:
            raise EngineInvariantError("Standard purchases need no confirmation.")
        suit_enum, rank_enum = parse_card_id(self.upgrade_card_id)
        rank, suit = rank_enum.value, suit_enum.value
        others = len(self.payment_ids) - 1
        return Notice(
            "Confirm Upgrade",
            f"Upgrade with {rank} of {suit} and pay with {others} other card(s)?\n\n"
            f"The {rank} of {suit} will be discarded.",
        )


def has_same_suit_neighbor(row: list[Card], index: int) -> bool:
    suit = row[index].suit
    for j in (index - 1, index + 1):
        if 0 <= j < len(row) and row[j].suit is suit:
            return True
    return False


def payment_value(card: Card, card_to_buy: Card, state: GameState) -> int:
    return rank_value(card) + surcharge(card, card_to_buy, state.config)


def upgrade_value(card: Card, state: GameState) -> int:
    if card.rank is Rank.TWO:
        return state.config.upgraded_two_value
    return rank_value(card)


def propose_purchase(state: GameState, row_index: int) -> PurchasePlan | StepResult:
    if not state.local.selected_card_ids:
        return StepResult.fail(
            ErrorCode.NO_SELECTION,
            "Please select card(s) from your village to pay or a single card to upgrade.",
            [Notice("Selection Required", "Please select card(s) from your village to pay or a single card to upgrade.")],
        )
    row = state.purchase_row
    if not 0 <= row_index < len(row):
        return StepResult.fail(ErrorCode.INVALID_SELECTION, f"No card in purchase row slot {row_index}.")

    to_buy = row[row_index]
    cost = rank_value(to_buy)
    selected = state.selected_cards()
    matching = [c for c in selected if c.suit is to_buy.suit]
    adjacent = has_same_suit_neighbor(row, row_index)
    bonus = bonus_value(state.local.purchase_bonus, to_buy, state.config)
    payment_ids = tuple(c.id for c in selected)

    if len(matching) == 1 and not adjacent:
        upgrade_card = matching[0]
        others = [c for c in selected if c is not upgrade_card]
        total = upgrade_value(upgrade_card, state) + sum(payment_value(c, to_buy, state) for c in others) + bonus
        if total < cost:
            msg = f"Your total offer value of {total} (including bonus) is not enough for the card costing {cost}."
            return StepResult.fail(ErrorCode.INSUFFICIENT_VALUE, msg, [Notice("Insufficient Value", msg)])
        return PurchasePlan(
            row_index=row_index,
            card_id=to_buy.id,
            cost=cost,
            mode="upgrade",
            payment_ids=payment_ids,
            total=total,
            upgrade_card_id=upgrade_card.id,
        )

    notices: list[Notice] = []
    if len(matching) > 1:
        notices.append(
            Notice(
                "Standard Purchase",
                "You cannot upgrade with more than one card of the matching suit. This will be a standard purchase.",
            )
        )
    elif len(matching) == 1:
        suit = to_buy.suit.value
        notices.append(
            Notice(
                "Standard Purchase",
                f"You cannot upgrade a {suit} when it is adjacent to another {suit}. This will be a standard purchase.",
            )
        )

    total = sum(payment_value(c, to_buy, state) for c in selected) + bonus
    if total < cost:
        msg = f"Cost is {cost}, but you only offered {total} (including bonus)."
        return StepResult.fail(ErrorCode.INSUFFICIENT_VALUE, msg, [*notices, Notice("Insufficient Value", msg)])
    return PurchasePlan(
        row_index=row_index,
        card_id=to_buy.id,
        cost=cost,
        mode="standard",
        payment_ids=payment_ids,
        total=total,
        notices=tuple(notices),
    )


def refill_row(state: GameState) -> Card | None:
    if not state.central_deck:
        return None
    card = state.central_deck.pop()
    card.is_face_up = True
    state.purchase_row.append(card)
    return card


def commit_purchase(state: GameState, plan: PurchasePlan) -> list[str]:
    """Apply `plan` and return the hearts-bonus targets it unlocked (possibly none)."""
    row = state.purchase_row
    if not 0 <= plan.row_index < len(row) or row[plan.row_index].id != plan.card_id:
        raise EngineInvariantError(f"Purchase row changed under plan for {plan.card_id}.")
    if list(plan.payment_ids) != state.local.selected_card_ids:
        raise EngineInvariantError("Selection changed under a pending purchase plan.")

    buyer = state.current()
    payment = [state.village_card(state.current_player, cid) for cid in plan.payment_ids]
    bought = row.pop(plan.row_index)

    for card in payment:
        if card.id == plan.upgrade_card_id:
            buyer.village.remove(card)
            card.is_face_up = False
            state.discard.append(card)
        else:
            card.is_face_up = False
    bought.is_face_up = False
    buyer.village.append(bought)
    refilled = refill_row(state)
    state.local.selected_card_ids = []

    state.event_log.append(
        {
            "type": "CARD_PURCHASED",
            "player": state.current_player,
            "card_id": bought.id,
            "mode": plan.mode,
            "payment": list(plan.payment_ids),
            "discarded": plan.upgrade_card_id,
            "refill": refilled.id if refilled else None,
        }
    )

    if bought.suit is not Suit.HEARTS:
        return []
    return heart_bonus_targets(state, bought.id, plan.payment_ids)
