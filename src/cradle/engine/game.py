from __future__ import annotations

import dataclasses
import random
from typing import Iterable

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
from .bonus import recover, weaken
from .combat import apply_auto_skip, resolve_attack, should_auto_skip, skip_attack
from .deck import build_deck
from .gateway import DecisionGateway
from .market import PurchasePlan, commit_purchase, propose_purchase
from .serialize import snapshot
from .state import (
    ErrorCode,
    GameConfig,
    GameState,
    Notice,
    PlayerState,
    StepResult,
    TurnState,
)
from .types import Card, Phase, Rank, Suit, rank_value

_PHASE_NAMES = {
    Phase.ATTACK: "the attack phase",
    Phase.WEAKEN_OPPONENT: "the weaken-opponent phase",
    Phase.PURCHASE: "the purchase phase",
    Phase.HEART_BONUS: "the hearts bonus phase",
}


def deal(seed: int, config: GameConfig | None = None) -> GameState:
    """Build the deck and lay out the table. No turn logic runs yet."""
    cfg = config or GameConfig()
    rng = random.Random(seed)
    piles = build_deck(rng)

    n = cfg.starting_village
    if 2 * n > len(piles.twos_threes):
        raise ValueError(f"Cannot deal {n} starting cards to each player from {len(piles.twos_threes)}.")
    villages = [piles.twos_threes[:n], piles.twos_threes[n : 2 * n]]
    for village in villages:
        for card in village:
            card.is_face_up = True
    for card in piles.aces:
        card.is_face_up = True

    # Draw end is the end of this list, for the opening row and every refill.
    central_deck = [*piles.twos_threes[2 * n :], *piles.fours_sixes, *piles.sevens_tens, *piles.face_cards]
    purchase_row: list[Card] = []
    for _ in range(cfg.row_size):
        if not central_deck:
            break
        card = central_deck.pop()
        card.is_face_up = True
        purchase_row.append(card)

    twos = [sum(1 for c in v if c.rank is Rank.TWO) for v in villages]
    first = 0 if twos[0] >= twos[1] else 1

    players = [
        PlayerState(id=i + 1, name=cfg.player_names[i], village=list(villages[i]))
        for i in range(2)
    ]
    state = GameState(
        config=cfg,
        seed=seed,
        rng=rng,
        players=players,
        purchase_row=purchase_row,
        central_deck=central_deck,
        aces=list(piles.aces),
        current_player=first,
    )
    state.event_log.append({"type": "GAME_STARTED", "seed": seed, "first_player": first})
    return state


def start_turn(state: GameState) -> list[Notice]:
    state.event_log.append({"type": "TURN_STARTED", "player": state.current_player, "turn": state.turn})
    if should_auto_skip(state):
        return [apply_auto_skip(state)]
    return []


def end_turn(state: GameState) -> list[Notice]:
    state.event_log.append({"type": "TURN_ENDED", "player": state.current_player})
    state.local = TurnState()
    state.current_player = state.opponent(state.current_player)
    if state.current_player == 0:
        state.turn += 1
    return start_turn(state)


def new_game(seed: int, config: GameConfig | None = None) -> GameState:
    state = deal(seed, config)
    start_turn(state)
    return state


def max_payment(state: GameState) -> int:
    face_up = sum(rank_value(c) for c in state.current().face_up())
    return face_up + rank_value(state.local.purchase_bonus)


def should_auto_rest(state: GameState) -> bool:
    if state.local.was_attack_auto_skipped or not state.purchase_row:
        return False
    min_cost = min(rank_value(c) for c in state.purchase_row)
    return max_payment(state) < min_cost


def _rest(state: GameState, *, automatic: bool) -> list[Notice]:
    player = state.current()
    for card in player.village:
        card.is_face_up = True
    state.local.selected_card_ids = []
    state.event_log.append({"type": "RESTED", "player": state.current_player, "automatic": automatic})
    notices: list[Notice] = []
    if automatic:
        notices.append(Notice("Auto-Rest", f"{player.name} has no available moves and automatically rests."))
    notices.extend(end_turn(state))
    return notices


def _require_phase(state: GameState, *phases: Phase) -> StepResult | None:
    if state.phase in phases:
        return None
    return StepResult.fail(ErrorCode.ILLEGAL_TRANSITION, f"Not allowed during {_PHASE_NAMES[state.phase]}.")


def _toggle(state: GameState, action: ToggleSelectionAction) -> StepResult:
    chk = _require_phase(state, Phase.ATTACK, Phase.PURCHASE)
    if chk:
        return chk
    card = state.current().find(action.card_id)
    if card is None:
        return StepResult.fail(ErrorCode.INVALID_SELECTION, "You can only select cards from your own village.")
    if not card.is_face_up:
        return StepResult.fail(ErrorCode.INVALID_SELECTION, "Face-down cards cannot be selected.")
    if state.phase is Phase.ATTACK and card.suit is not Suit.SPADES:
        return StepResult.fail(ErrorCode.INVALID_SELECTION, "Only Spades can attack.")

    selected = state.local.selected_card_ids
    if action.card_id in selected:
        selected.remove(action.card_id)
    else:
        selected.append(action.card_id)
    state.event_log.append(
        {
            "type": "SELECTION_CHANGED",
            "player": action.player,
            "card_id": action.card_id,
            "selected": action.card_id in selected,
        }
    )
    return StepResult(ok=True, events=[])


def _purchase(
    state: GameState, action: PurchaseAction, gateway: DecisionGateway | None
) -> tuple[StepResult, Action]:
    chk = _require_phase(state, Phase.PURCHASE)
    if chk:
        return chk, action
    proposal = propose_purchase(state, action.row_index)
    if isinstance(proposal, StepResult):
        return proposal, action
    plan: PurchasePlan = proposal
    notices = list(plan.notices)

    decision: bool | None = None
    if plan.requires_confirmation:
        decision = action.confirmed
        if decision is None:
            if gateway is None:
                return (
                    StepResult.fail(ErrorCode.CONFIRMATION_REQUIRED, "This upgrade must be confirmed.", notices),
                    action,
                )
            ask = plan.confirmation()
            decision = gateway.request_confirmation(ask.title, ask.message)
        if not decision:
            return StepResult.fail(ErrorCode.CANCELLED, "Upgrade cancelled.", notices), action

    heart_targets = commit_purchase(state, plan)
    if heart_targets:
        state.local.phase = Phase.HEART_BONUS
        state.local.bonus_options = heart_targets
        notices.append(Notice("Hearts Bonus", "Select a face-down card to recover."))
    else:
        notices.extend(end_turn(state))
    return StepResult(ok=True, events=[], notices=notices), dataclasses.replace(action, confirmed=decision)


def _dispatch(
    state: GameState, action: Action, gateway: DecisionGateway | None
) -> tuple[StepResult, Action]:
    if action.player != state.current_player:
        return StepResult.fail(ErrorCode.ILLEGAL_TRANSITION, "Not your turn."), action

    if isinstance(action, ToggleSelectionAction):
        return _toggle(state, action), action

    if isinstance(action, AttackAction):
        return (_require_phase(state, Phase.ATTACK) or resolve_attack(state)), action

    if isinstance(action, SkipAttackAction):
        return (_require_phase(state, Phase.ATTACK) or skip_attack(state)), action

    if isinstance(action, RestAction):
        chk = _require_phase(state, Phase.ATTACK, Phase.PURCHASE)
        if chk:
            return chk, action
        return StepResult(ok=True, events=[], notices=_rest(state, automatic=False)), action

    if isinstance(action, WeakenAction):
        return (_require_phase(state, Phase.WEAKEN_OPPONENT) or weaken(state, action.card_id)), action

    if isinstance(action, PurchaseAction):
        return _purchase(state, action, gateway)

    if isinstance(action, HeartBonusAction):
        chk = _require_phase(state, Phase.HEART_BONUS)
        if chk:
            return chk, action
        res = recover(state, action.card_id)
        if res.ok:
            res.notices.extend(end_turn(state))
        return res, action

    return StepResult.fail(ErrorCode.ILLEGAL_TRANSITION, "Unknown action."), action


def step(state: GameState, action: Action, gateway: DecisionGateway | None = None) -> StepResult:
    """Apply a single command to the game state.

    Mutates `state` in place. A failed command leaves it untouched; only
    successful commands are appended to `state.action_log`, with any upgrade
    decision recorded so `replay` does not need a gateway.
    """
    before_events = len(state.event_log)
    before_phase = state.phase
    before_turn = (state.turn, state.current_player)

    result, logged = _dispatch(state, action, gateway)

    if result.ok:
        state.action_log.append(logged)
        entered_purchase = state.phase is Phase.PURCHASE and (
            before_phase is not Phase.PURCHASE or before_turn != (state.turn, state.current_player)
        )
        if entered_purchase and should_auto_rest(state):
            result.notices.extend(_rest(state, automatic=True))
        result.events = state.event_log[before_events:]

    if gateway is not None:
        for notice in result.notices:
            gateway.notify(notice.title, notice.message)
    return result


def replay(
    seed: int,
    actions: Iterable[Action],
    config: GameConfig | None = None,
) -> GameState:
    state = new_game(seed, config)
    for a in actions:
        step(state, a)
    return state


class Game:
    """Command surface over a single game, forwarding notices to a gateway."""

    def __init__(
        self,
        gateway: DecisionGateway | None = None,
        seed: int | None = None,
        config: GameConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.config = config or GameConfig()
        self._seeds = random.Random()
        self.state: GameState = self.restart(seed)

    def restart(self, seed: int | None = None) -> GameState:
        if seed is None:
            seed = self._seeds.randrange(2**31)
        self.state = deal(seed, self.config)
        for notice in start_turn(self.state):
            if self.gateway is not None:
                self.gateway.notify(notice.title, notice.message)
        return self.state

    def _run(self, action: Action) -> StepResult:
        return step(self.state, action, self.gateway)

    @property
    def _me(self) -> int:
        return self.state.current_player

    # Commands

    def toggle_card_selection(self, card_id: str) -> StepResult:
        return self._run(ToggleSelectionAction(player=self._me, card_id=card_id))

    def attack(self) -> StepResult:
        return self._run(AttackAction(player=self._me))

    def skip_attack(self) -> StepResult:
        return self._run(SkipAttackAction(player=self._me))

    def rest(self) -> StepResult:
        return self._run(RestAction(player=self._me))

    def choose_weaken_target(self, card_id: str) -> StepResult:
        return self._run(WeakenAction(player=self._me, card_id=card_id))

    def purchase(self, row_index: int) -> StepResult:
        return self._run(PurchaseAction(player=self._me, row_index=row_index))

    def choose_heart_bonus_target(self, card_id: str) -> StepResult:
        return self._run(HeartBonusAction(player=self._me, card_id=card_id))

    # Queries

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def selected_card_ids(self) -> tuple[str, ...]:
        return tuple(self.state.local.selected_card_ids)

    @property
    def bonus_options(self) -> tuple[str, ...]:
        return tuple(self.state.local.bonus_options)

    @property
    def purchase_bonus(self) -> Card | None:
        return self.state.local.purchase_bonus

    @property
    def was_attack_auto_skipped(self) -> bool:
        return self.state.local.was_attack_auto_skipped

    def snapshot(self) -> dict[str, object]:
        return snapshot(self.state)
