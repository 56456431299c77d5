"""
Coup CLI - Command-line interface for the engine.

Usage:
    coup simulate [--players N] [--seed S]     Play an all-automated game
    coup play NAME [NAME ...] [--ai N]          Hot-seat game in the terminal
"""

import argparse
import json
import logging
import sys

from .api.schemas import SnapshotView
from .bots.driver import describe_choice
from .config import EngineConfig
from .engine_core.action_generator import awaiting_players, legal_actions
from .session.game_loop import GameLoop, LoopState

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Coup - rules engine with automated opponents",
        prog="coup",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a game between automated players")
    simulate_parser.add_argument("--players", type=int, default=4, help="Number of automated players (2-5)")
    simulate_parser.add_argument("--seed", type=int, help="Seed for a reproducible game")
    simulate_parser.add_argument("--personality", help="Bot personality")
    simulate_parser.add_argument("--json", action="store_true", help="Print the final snapshot as JSON")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a hot-seat game in the terminal")
    play_parser.add_argument("names", nargs="+", help="Human player names")
    play_parser.add_argument("--ai", type=int, default=2, help="Number of automated players")
    play_parser.add_argument("--seed", type=int, help="Seed for a reproducible game")
    play_parser.add_argument("--personality", help="Bot personality")

    args = parser.parse_args(argv)

    config = EngineConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if getattr(args, "seed", None) is not None:
        config.seed = args.seed
    if getattr(args, "personality", None):
        config.personality = args.personality.lower()

    if args.command == "simulate":
        return cmd_simulate(args, config)
    elif args.command == "play":
        return cmd_play(args, config)
    else:
        parser.print_help()
        return 1


def cmd_simulate(args, config: EngineConfig) -> int:
    """Play an all-automated game and print its log, one decision at a time."""
    try:
        loop = GameLoop(config=config)
        state = loop.new_game([], ai_count=args.players)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    # The game log is bounded, so print new lines after every step.
    printed = 0
    while True:
        printed = _print_new_log(state, printed, quiet=args.json)
        if loop.driver.next_automated_player(state) is None:
            break
        state = loop.driver.step(state)

    if args.json:
        print(json.dumps(SnapshotView.from_state(state).model_dump(), indent=2))
    elif state.winner:
        print(f"\nWinner: {state.winner.name} after {state.turn_number} turns")
    return 0


def cmd_play(args, config: EngineConfig) -> int:
    """Hot-seat game: every human takes input at the same terminal."""
    try:
        loop = GameLoop(config=config)
        result = loop.initialize(args.names, ai_count=args.ai)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    printed = 0
    while True:
        printed = _print_new_log(result.state, printed)
        if result.loop_state == LoopState.GAME_OVER:
            print(f"\n{result.state.winner.name} wins!")
            return 0
        if result.loop_state == LoopState.RUNNING_AUTOMATED:
            result = loop.advance(result.state)
            continue

        state = result.state
        player = state.get_player(awaiting_players(state)[0])
        options = legal_actions(state, player.player_id)
        _show_player(state, player.player_id)
        for index, command in enumerate(options, start=1):
            print(f"  {index}. {describe_choice(state, command)}")

        try:
            choice = _ask_index(f"{player.name}, choose 1-{len(options)}: ", len(options))
        except (EOFError, KeyboardInterrupt):
            print("\nGame abandoned.")
            return 1
        result = loop.submit(state, options[choice])
        if not result.success:
            print(f"Error: {result.error}")


def _print_new_log(state, printed: int, quiet: bool = False) -> int:
    if not quiet:
        for line in state.log.since(printed):
            print(line)
    return state.log.total


def _show_player(state, player_id: str) -> None:
    view = SnapshotView.for_viewer(state, player_id)
    me = next(p for p in view.players if p.player_id == player_id)
    print(f"\n{me.name}: {me.money} coins, cards {', '.join(me.hidden_cards or [])}")
    for p in view.players:
        if p.player_id == player_id:
            continue
        status = "out" if p.is_eliminated else f"{p.influence_count} card(s)"
        shown = f", revealed {', '.join(p.revealed_cards)}" if p.revealed_cards else ""
        print(f"  {p.name}: {p.money} coins, {status}{shown}")


def _ask_index(prompt: str, count: int) -> int:
    while True:
        raw = input(prompt).strip()
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw) - 1
        print(f"Enter a number from 1 to {count}.")


if __name__ == "__main__":
    sys.exit(main())
