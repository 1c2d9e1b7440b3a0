from __future__ import annotations

import json

import pytest

from cradle.client.console import ConsoleGateway, parse_card_code, render, run_command
from cradle.engine import Game, ScriptedGateway
from cradle.services.telemetry import TelemetryService


def test_parse_card_code() -> None:
    assert parse_card_code("5d") == "5-of-Diamonds"
    assert parse_card_code("10S") == "10-of-Spades"
    assert parse_card_code("qh") == "Q-of-Hearts"
    with pytest.raises(ValueError):
        parse_card_code("5X")
    with pytest.raises(ValueError):
        parse_card_code("1C")


def test_console_gateway_reads_answers() -> None:
    shown: list[str] = []
    answers = iter(["y", ""])
    gw = ConsoleGateway(ask=lambda _prompt: next(answers), out=shown.append)
    assert gw.request_confirmation("Confirm Upgrade", "Sure?") is True
    assert gw.request_confirmation("Confirm Upgrade", "Sure?") is False
    gw.notify("Attack Failed", "Too strong.")
    assert any("Attack Failed" in s for s in shown)


def test_run_command_drives_the_game() -> None:
    game = Game(gateway=ScriptedGateway(), seed=3)
    assert run_command(game, "") is None
    before = game.state.current_player
    res = run_command(game, "rest")
    assert res is not None and res.ok
    assert game.state.current_player != before
    with pytest.raises(ValueError):
        run_command(game, "dance")
    assert "Turn" in render(game)


def test_telemetry_appends_json_lines(tmp_path) -> None:
    path = tmp_path / "nested" / "telemetry.jsonl"
    svc = TelemetryService(path)
    svc.log_many([{"type": "ATTACK_FAILED", "player": 0, "attack": 3, "defense": 5}])
    svc.log("RESTED", {"player": 1, "automatic": True})
    svc.log_many([])

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [rec["type"] for rec in lines] == ["ATTACK_FAILED", "RESTED"]
    assert lines[0]["payload"] == {"player": 0, "attack": 3, "defense": 5}
    assert "ts" in lines[1]
