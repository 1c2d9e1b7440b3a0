"""Hot-seat console front end. Presentation only; all rules live in cradle.engine."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable

from cradle.engine import Game, Phase, StepResult
from cradle.engine.types import SUIT_SYMBOLS, Card, Rank, Suit, card_id, village_sort_key
from cradle.paths import get_paths
from cradle.services.telemetry import TelemetryService

_SUIT_LETTERS = {"C": Suit.CLUBS, "D": Suit.DIAMONDS, "H": Suit.HEARTS, "S": Suit.SPADES}

HELP = """Commands:
  sel <card>      toggle a village card (e.g. sel 5D, sel 10S)
  attack          attack with the selected Spades
  skip            skip the attack
  rest            flip your village face-up and end your turn
  buy <slot>      buy the purchase-row card in <slot> (0-based)
  weaken <card>   pick the opponent card to weaken
  recover <card>  pick the face-down card to recover
  restart         start a new game
  quit            leave"""


class ConsoleGateway:
    def __init__(self, ask: Callable[[str], str] = input, out: Callable[[str], None] = print) -> None:
        self._ask = ask
        self._out = out

    def request_confirmation(self, title: str, message: str) -> bool:
        self._out(f"\n== {title} ==\n{message}")
        return self._ask("Confirm? [y/N] ").strip().lower() in ("y", "yes")

    def notify(self, title: str, message: str) -> None:
        self._out(f"\n[{title}] {message}")


def parse_card_code(code: str) -> str:
    code = code.strip().upper()
    suit = _SUIT_LETTERS.get(code[-1:])
    if suit is None:
        raise ValueError(f"Unknown suit in {code!r}; use C, D, H or S.")
    return card_id(suit, Rank(code[:-1]))


def _show(card: Card, selected: bool = False) -> str:
    face = f"{card.rank.value}{SUIT_SYMBOLS[card.suit]}" if card.is_face_up else f"({card.rank.value}{SUIT_SYMBOLS[card.suit]})"
    return f"*{face}*" if selected else face


def render(game: Game) -> str:
    state = game.state
    me = state.current()
    lines = [f"\nTurn {state.turn}: {me.name}'s turn, {game.phase.value.replace('_', ' ')} phase"]
    lines.append("Row: " + "  ".join(f"[{i}] {_show(c)}" for i, c in enumerate(state.purchase_row)))
    lines.append(f"Central deck: {len(state.central_deck)} cards left   Aces: {' '.join(_show(c) for c in state.aces)}")
    for p in state.players:
        village = sorted(p.village, key=village_sort_key)
        shown = " ".join(_show(c, p is me and c.id in game.selected_card_ids) for c in village)
        lines.append(f"{p.name}: {shown}")
    if game.purchase_bonus is not None:
        lines.append(f"Purchase bonus: {_show(game.purchase_bonus)}")
    if game.bonus_options:
        lines.append("Options: " + ", ".join(game.bonus_options))
    return "\n".join(lines)


def run_command(game: Game, line: str) -> StepResult | None:
    words = line.split()
    if not words:
        return None
    cmd, args = words[0].lower(), words[1:]
    if cmd in ("sel", "select"):
        return game.toggle_card_selection(parse_card_code(args[0]))
    if cmd == "attack":
        return game.attack()
    if cmd == "skip":
        return game.skip_attack()
    if cmd == "rest":
        return game.rest()
    if cmd == "buy":
        return game.purchase(int(args[0]))
    if cmd == "weaken":
        return game.choose_weaken_target(parse_card_code(args[0]))
    if cmd == "recover":
        return game.choose_heart_bonus_target(parse_card_code(args[0]))
    raise ValueError(f"Unknown command {cmd!r}. Type 'help'.")


def main() -> int:
    parser = argparse.ArgumentParser(prog="cradle")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--telemetry", type=Path, default=None, help="append engine events to this JSONL file")
    parser.add_argument("--no-telemetry", action="store_true")
    args = parser.parse_args()

    telemetry = None
    if not args.no_telemetry:
        telemetry = TelemetryService(args.telemetry or get_paths().userdata_dir / "telemetry.jsonl")

    game = Game(gateway=ConsoleGateway(), seed=args.seed)
    print(HELP)
    while True:
        print(render(game))
        if game.phase is Phase.PURCHASE and not game.state.purchase_row:
            print("The purchase row is empty. Type 'restart' to play again.")
        try:
            line = input("> ").strip()
        except EOFError:
            return 0
        if line in ("quit", "exit"):
            return 0
        if line == "help":
            print(HELP)
            continue
        if line == "restart":
            game.restart()
            continue
        try:
            result = run_command(game, line)
        except (ValueError, IndexError) as e:
            print(f"! {e}")
            continue
        if result is None:
            continue
        if not result.ok:
            print(f"! {result.error}")
        elif telemetry is not None:
            telemetry.log_many(result.events)


if __name__ == "__main__":
    raise SystemExit(main())
