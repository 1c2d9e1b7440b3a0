from __future__ import annotations

import pytest

from builders import card, cid, make_state
from cradle.engine import (
    AttackAction,
    EngineInvariantError,
    ErrorCode,
    Phase,
    RestAction,
    ScriptedGateway,
    SkipAttackAction,
    ToggleSelectionAction,
    WeakenAction,
    check_integrity,
    step,
)
from cradle.engine.combat import spades_power
from cradle.engine.game import end_turn, start_turn
from cradle.engine.serialize import snapshot

ROW = ["4C", "KH", "QD", "10S"]


def _select(state, *codes: str) -> None:
    for code in codes:
        res = step(state, ToggleSelectionAction(player=state.current_player, card_id=cid(code)))
        assert res.ok, res.error


def test_attack_success_flips_attackers_and_offers_weaken_targets() -> None:
    state = make_state(["9S", "8S", "2C"], ["5S", "3H", "~4D"], ROW)
    _select(state, "9S")

    res = step(state, AttackAction(player=0))
    assert res.ok
    assert res.events[-1]["type"] == "ATTACK_SUCCEEDED"
    assert state.phase is Phase.WEAKEN_OPPONENT
    assert set(state.local.bonus_options) == {cid("5S"), cid("3H")}
    assert state.local.bonus_target_player == 1
    assert not card(state, "9S").is_face_up
    assert card(state, "8S").is_face_up
    assert state.local.selected_card_ids == []
    check_integrity(state)


def test_equal_power_is_a_failed_attack() -> None:
    state = make_state(["5S", "3C"], ["3S", "2S"], ROW)
    _select(state, "5S")
    before = [(c.id, c.is_face_up) for p in state.players for c in p.village]

    gw = ScriptedGateway()
    res = step(state, AttackAction(player=0), gw)
    assert res.ok
    assert state.phase is Phase.PURCHASE
    assert "Attack Failed" in gw.titles()
    assert [(c.id, c.is_face_up) for p in state.players for c in p.village] == before


def test_attack_against_empty_defense_goes_straight_to_purchase() -> None:
    state = make_state(["9S", "5C"], ["~5S", "~3H"], ROW)
    _select(state, "9S")

    res = step(state, AttackAction(player=0))
    assert res.ok
    assert state.phase is Phase.PURCHASE
    assert state.local.bonus_options == []
    assert not card(state, "9S").is_face_up


def test_attack_outcome_depends_only_on_power() -> None:
    for own, theirs, wins in [(["7S"], ["6S"], True), (["7S"], ["4S", "3S"], False)]:
        state = make_state([*own, "5C"], [*theirs, "2H"], ROW)
        _select(state, *own)
        step(state, AttackAction(player=0))
        assert (state.phase is Phase.WEAKEN_OPPONENT) is wins


def test_attack_requires_a_selection() -> None:
    state = make_state(["9S"], ["5S"], ROW)
    res = step(state, AttackAction(player=0))
    assert not res.ok
    assert res.code is ErrorCode.NO_SELECTION
    assert state.phase is Phase.ATTACK


def test_selection_rules_during_attack() -> None:
    state = make_state(["9S", "~8S", "2C"], ["5S"], ROW)
    cases = {
        "2C": "Only Spades",
        "~8S": "Face-down",
        "5S": "own village",
    }
    for code, msg in cases.items():
        res = step(state, ToggleSelectionAction(player=0, card_id=cid(code)))
        assert not res.ok
        assert res.code is ErrorCode.INVALID_SELECTION
        assert res.error is not None and msg in res.error
    assert state.local.selected_card_ids == []

    _select(state, "9S")
    assert state.local.selected_card_ids == [cid("9S")]
    _select(state, "9S")
    assert state.local.selected_card_ids == []


def test_commands_outside_their_phase_are_rejected() -> None:
    state = make_state(["9S"], ["5S", "3H"], ROW, phase=Phase.WEAKEN_OPPONENT)
    state.local.bonus_options = [cid("5S"), cid("3H")]
    state.local.bonus_target_player = 1
    before = snapshot(state)

    for action in (
        ToggleSelectionAction(player=0, card_id=cid("9S")),
        AttackAction(player=0),
        SkipAttackAction(player=0),
        RestAction(player=0),
    ):
        res = step(state, action)
        assert not res.ok
        assert res.code is ErrorCode.ILLEGAL_TRANSITION
    assert snapshot(state) == before


def test_not_your_turn() -> None:
    state = make_state(["9S"], ["5S"], ROW)
    res = step(state, SkipAttackAction(player=1))
    assert not res.ok
    assert res.code is ErrorCode.ILLEGAL_TRANSITION
    assert res.error == "Not your turn."


def test_weaken_sets_purchase_bonus() -> None:
    state = make_state(["~9S", "5C"], ["5S", "3H"], ROW, phase=Phase.WEAKEN_OPPONENT)
    state.local.bonus_options = [cid("5S"), cid("3H")]
    state.local.bonus_target_player = 1

    res = step(state, WeakenAction(player=0, card_id=cid("9S")))
    assert not res.ok
    assert res.code is ErrorCode.INVALID_SELECTION

    gw = ScriptedGateway()
    res = step(state, WeakenAction(player=0, card_id=cid("3H")), gw)
    assert res.ok
    assert "Bonus Gained!" in gw.titles()
    assert state.phase is Phase.PURCHASE
    assert state.local.purchase_bonus is card(state, "3H")
    assert not card(state, "3H").is_face_up
    assert state.local.bonus_options == []


def test_weaken_phase_without_targets_is_a_defect() -> None:
    state = make_state(["9S"], ["~5S"], ROW, phase=Phase.WEAKEN_OPPONENT)
    with pytest.raises(EngineInvariantError):
        step(state, WeakenAction(player=0, card_id=cid("5S")))


def test_auto_skip_when_spades_do_not_exceed_opponent() -> None:
    state = make_state(["6S", "~2H"], ["8S"], ROW)
    notices = start_turn(state)
    assert [n.title for n in notices] == ["Attack Skipped"]
    assert state.phase is Phase.PURCHASE
    assert state.local.was_attack_auto_skipped


def test_auto_skip_suppresses_auto_rest() -> None:
    # Player 2 rests; Player 1 (6 spades vs 8) is auto-skipped into purchase
    # and cannot afford anything, but must still be allowed to act.
    state = make_state(["6S", "~2H"], ["8S", "~2C"], ["JC", "QD", "KH", "10S"], current=1)

    gw = ScriptedGateway()
    res = step(state, RestAction(player=1), gw)
    assert res.ok
    assert state.current_player == 0
    assert state.turn == 2
    assert state.phase is Phase.PURCHASE
    assert state.local.was_attack_auto_skipped
    assert "Auto-Rest" not in gw.titles()
    assert not card(state, "2H").is_face_up
    assert card(state, "2C").is_face_up


def test_auto_rest_when_nothing_is_affordable() -> None:
    state = make_state(["9S", "~3H"], ["~7S", "2D"], ["JC", "QD", "KH", "10S"])
    assert spades_power(state.players[0]) > spades_power(state.players[1])

    gw = ScriptedGateway()
    res = step(state, SkipAttackAction(player=0), gw)
    assert res.ok
    assert gw.titles()[:2] == ["Auto-Rest", "Attack Skipped"]
    assert card(state, "3H").is_face_up
    assert state.current_player == 1
    assert [e["type"] for e in res.events if e["type"] == "RESTED"] == ["RESTED"]
    # Player 2 (0 spades vs 9) was auto-skipped, so no second auto-rest.
    assert state.phase is Phase.PURCHASE
    assert state.local.was_attack_auto_skipped


def test_auto_rest_counts_purchase_bonus() -> None:
    state = make_state(["~9S", "5C"], ["5S", "5H"], ["JC", "QD", "KH", "10S"], phase=Phase.WEAKEN_OPPONENT)
    state.local.bonus_options = [cid("5S"), cid("5H")]
    state.local.bonus_target_player = 1

    res = step(state, WeakenAction(player=0, card_id=cid("5S")))
    assert res.ok
    # 5 face-up + 5 bonus reaches the cheapest card (10).
    assert state.current_player == 0
    assert state.phase is Phase.PURCHASE


def test_empty_row_never_auto_rests() -> None:
    state = make_state(["9S"], ["5D"], [], empty_deck=True)
    res = step(state, SkipAttackAction(player=0))
    assert res.ok
    assert state.current_player == 0
    assert state.phase is Phase.PURCHASE


def test_manual_rest_flips_village_and_ends_turn() -> None:
    state = make_state(["9S", "~3H", "~4D"], ["~2S", "2D"], ROW)
    _select(state, "9S")

    res = step(state, RestAction(player=0))
    assert res.ok
    assert all(c.is_face_up for c in state.players[0].village)
    assert state.current_player == 1
    assert state.turn == 1


def test_turn_counter_advances_only_when_player_one_moves_again() -> None:
    state = make_state(["9S"], ["8S"], ROW, current=0, turn=3)
    end_turn(state)
    assert (state.current_player, state.turn) == (1, 3)
    end_turn(state)
    assert (state.current_player, state.turn) == (0, 4)


def test_end_turn_resets_turn_local_state() -> None:
    state = make_state(["~9S"], ["5S", "2H"], ROW, phase=Phase.PURCHASE)
    state.local.purchase_bonus = card(state, "5S")
    state.local.selected_card_ids = [cid("9S")]
    state.local.was_attack_auto_skipped = True

    end_turn(state)
    assert state.local.purchase_bonus is None
    assert state.local.selected_card_ids == []
    assert state.local.bonus_options == []
    # Player 2 has 5 spades against 0, so they keep the attack phase.
    assert state.phase is Phase.ATTACK
    assert not state.local.was_attack_auto_skipped
