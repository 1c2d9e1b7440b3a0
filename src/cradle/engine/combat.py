from __future__ import annotations

from .state import ErrorCode, GameState, Notice, PlayerState, StepResult
from .types import Phase, Suit, rank_value


def spades_power(player: PlayerState) -> int:
    """Defensive strength: rank value of the player's face-up Spades."""
    return sum(rank_value(c) for c in player.village if c.is_face_up and c.suit is Suit.SPADES)


def should_auto_skip(state: GameState) -> bool:
    return spades_power(state.current()) <= spades_power(state.defender())


def apply_auto_skip(state: GameState) -> Notice:
    attacker = state.current()
    own = spades_power(attacker)
    theirs = spades_power(state.defender())
    state.local.was_attack_auto_skipped = True
    state.local.selected_card_ids = []
    state.local.phase = Phase.PURCHASE
    state.event_log.append(
        {"type": "ATTACK_AUTO_SKIPPED", "player": state.current_player, "spades": own, "opponent_spades": theirs}
    )
    return Notice(
        "Attack Skipped",
        f"{attacker.name}'s total Spades rank ({own}) is not greater than the opponent's ({theirs}).",
    )


def resolve_attack(state: GameState) -> StepResult:
    if not state.local.selected_card_ids:
        return StepResult.fail(ErrorCode.NO_SELECTION, "Select at least one face-up Spade to attack with.")

    attacking = state.selected_cards()
    defender_index = state.opponent(state.current_player)
    defender = state.players[defender_index]
    attack_power = sum(rank_value(c) for c in attacking)
    defense_power = spades_power(defender)

    state.local.selected_card_ids = []
    notices: list[Notice] = []
    base = {"player": state.current_player, "attack": attack_power, "defense": defense_power}

    if attack_power > defense_power:
        for card in attacking:
            card.is_face_up = False
        targets = [c.id for c in defender.village if c.is_face_up]
        state.event_log.append({"type": "ATTACK_SUCCEEDED", **base, "spent": [c.id for c in attacking]})
        if targets:
            state.local.phase = Phase.WEAKEN_OPPONENT
            state.local.bonus_options = targets
            state.local.bonus_target_player = defender_index
            notices.append(
                Notice(
                    "Attack Succeeded!",
                    "Select an opponent's face-up card to weaken and gain its power for your purchase.",
                )
            )
        else:
            state.local.phase = Phase.PURCHASE
            notices.append(
                Notice(
                    "Attack Succeeded!",
                    "The opponent has no face-up cards to weaken. Moving to purchase phase.",
                )
            )
    else:
        state.local.phase = Phase.PURCHASE
        state.event_log.append({"type": "ATTACK_FAILED", **base})
        notices.append(
            Notice("Attack Failed", "The opponent's defense was too strong. Moving to purchase phase.")
        )

    return StepResult(ok=True, events=state.event_log[-1:], notices=notices)


def skip_attack(state: GameState) -> StepResult:
    state.local.selected_card_ids = []
    state.local.phase = Phase.PURCHASE
    state.event_log.append({"type": "ATTACK_SKIPPED", "player": state.current_player})
    return StepResult(ok=True, events=state.event_log[-1:])
