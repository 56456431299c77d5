"""
Game Setup - Creates the initial game snapshot.

This module handles:
- Seating human and automated players
- Shuffling the court deck
- Dealing 2 influence cards and 2 coins to each player
- Picking a random starting player
"""

from __future__ import annotations
import random
import uuid

from .cards import build_deck, draw, shuffle
from .catalog import INFLUENCE_PER_PLAYER, STARTING_COINS, TOTAL_COINS
from .game_log import GameLog, MAX_LOG_ENTRIES
from .state import GameState, GamePhase, InfluenceSlot, PlayerState

MIN_PLAYERS = 2
MAX_PLAYERS = 6
MAX_AUTOMATED_PLAYERS = 5


def setup_game(
    human_names: list[str],
    ai_count: int,
    rng: random.Random | None = None,
    game_id: str | None = None,
    max_log_entries: int = MAX_LOG_ENTRIES,
) -> GameState:
    """
    Set up a new game.

    Args:
        human_names: Display names for the human players, in seating order
        ai_count: Number of automated players, seated after the humans
        rng: Random source for the shuffle and the starting player
        game_id: Identifier for the snapshot (generated if not provided)
        max_log_entries: Game log bound

    Returns:
        Initial GameState, in play, with the starter's turn announced
    """
    if ai_count < 0 or ai_count > MAX_AUTOMATED_PLAYERS:
        raise ValueError(f"ai_count must be between 0 and {MAX_AUTOMATED_PLAYERS}")
    seats = len(human_names) + ai_count
    if seats < MIN_PLAYERS or seats > MAX_PLAYERS:
        raise ValueError(f"Coup supports {MIN_PLAYERS}-{MAX_PLAYERS} players, got {seats}")
    if any(not name or not name.strip() for name in human_names):
        raise ValueError("Player names must not be empty")

    rng = rng or random.Random()
    deck = shuffle(build_deck(), rng)

    players, deck = _deal_players(human_names, ai_count, deck)
    starter = rng.randrange(len(players))

    log = GameLog(max_entries=max_log_entries).append(
        "Game started!",
        f"--- {players[starter].name}'s turn ---",
    )

    return GameState(
        game_id=game_id or f"coup_{uuid.uuid4().hex[:12]}",
        phase=GamePhase.PLAYING,
        turn_number=1,
        current_player_idx=starter,
        players=players,
        deck=deck,
        treasury=TOTAL_COINS - STARTING_COINS * len(players),
        log=log,
    )


def _deal_players(
    human_names: list[str],
    ai_count: int,
    deck: list,
) -> tuple[list[PlayerState], list]:
    """Create player states, dealing influence off the top of the deck."""
    seats = [(f"player-{i}", name.strip(), False) for i, name in enumerate(human_names)]
    seats += [(f"ai-{i}", f"AI Player {i + 1}", True) for i in range(ai_count)]

    players = []
    for player_id, name, is_automated in seats:
        influence = []
        for _ in range(INFLUENCE_PER_PLAYER):
            card, deck = draw(deck)
            influence.append(InfluenceSlot(card=card))
        players.append(PlayerState(
            player_id=player_id,
            name=name,
            is_automated=is_automated,
            money=STARTING_COINS,
            influence=influence,
        ))

    return players, deck
