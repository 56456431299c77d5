"""
Game Loop - The public entry points over game snapshots.

Every entry point takes a snapshot and returns a TurnResult holding
the next one. The loop:
1. Applies the caller's command through the reducer
2. Runs automated players until a human must act or the game ends
3. Reports what the snapshot is now waiting for

Rejected commands are not driven: the result carries the input
snapshot plus one diagnostic log line.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random

from ..bots.driver import AutomatedPlayerDriver
from ..bots.heuristic_oracle import HeuristicOracle
from ..bots.oracle_bot import OracleBot
from ..bots.personality import get_personality
from ..config import EngineConfig
from ..engine_core.cards import CardType, parse_card
from ..engine_core.catalog import ActionType, Response, parse_action, parse_response
from ..engine_core.command import Command
from ..engine_core.errors import ErrorCode
from ..engine_core.reducer import Reducer
from ..engine_core.setup import setup_game
from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """What the snapshot is waiting for."""
    WAITING_HUMAN_TURN = "waiting_human_turn"
    WAITING_HUMAN_RESPONSE = "waiting_human_response"
    WAITING_EXCHANGE = "waiting_exchange"
    WAITING_REVEAL = "waiting_reveal"
    RUNNING_AUTOMATED = "running_automated"  # Step limit hit; call advance()
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of one entry-point call.

    state is always a usable snapshot, whether or not the call succeeded.
    """
    success: bool
    state: GameState
    loop_state: LoopState

    error: str | None = None
    error_code: str | None = None

    # Automated decisions applied after the command, in order
    automated_actions: list[str] = field(default_factory=list)

    # Game over info
    winner: str | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop()
        result = loop.initialize(["Alice"], ai_count=2)

        while result.loop_state != LoopState.GAME_OVER:
            # Ask the human, then e.g.
            result = loop.declare_action(result.state, "player-0", "Income")
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        driver: AutomatedPlayerDriver | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or EngineConfig.from_env()
        self.rng = rng or random.Random(self.config.seed)
        if driver is None:
            oracle = HeuristicOracle(
                personality=get_personality(self.config.personality),
                rng=self.rng,
            )
            driver = AutomatedPlayerDriver(
                reducer=Reducer(rng=self.rng),
                default_policy=OracleBot(oracle=oracle),
                max_steps=self.config.max_automated_steps,
            )
        self.driver = driver
        self.reducer = driver.reducer
        self.state = LoopState.WAITING_HUMAN_TURN

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def initialize(
        self,
        human_names: list[str],
        ai_count: int,
        game_id: str | None = None,
    ) -> TurnResult:
        """
        Start a new game and play automated seats up to the first human input.

        Raises ValueError for an invalid seat count or empty names.
        """
        return self._drive(self.new_game(human_names, ai_count, game_id))

    def new_game(
        self,
        human_names: list[str],
        ai_count: int,
        game_id: str | None = None,
    ) -> GameState:
        """Deal a new game without playing any automated seat."""
        state = setup_game(
            human_names,
            ai_count,
            rng=self.rng,
            game_id=game_id,
            max_log_entries=self.config.max_log_entries,
        )
        logger.info(
            "game %s started: %d human(s), %d automated", state.game_id, len(human_names), ai_count
        )
        return state

    def declare_action(
        self,
        state: GameState,
        player_id: str,
        action: ActionType | str,
        target_id: str | None = None,
    ) -> TurnResult:
        """The current player declares a turn action."""
        try:
            action = parse_action(action)
        except ValueError as e:
            return self._reject(state, str(e), ErrorCode.UNKNOWN_COMMAND)
        return self.submit(state, Command.declare(player_id, action, target_id))

    def submit_response(
        self,
        state: GameState,
        player_id: str,
        response: Response | str,
    ) -> TurnResult:
        """An eligible player answers the pending claim."""
        try:
            response = parse_response(response)
        except ValueError as e:
            return self._reject(state, str(e), ErrorCode.INVALID_RESPONSE)
        return self.submit(state, Command.respond(player_id, response))

    def submit_exchange_selection(
        self,
        state: GameState,
        player_id: str,
        cards: list[CardType | str],
    ) -> TurnResult:
        """The exchanging player picks the cards to keep."""
        try:
            cards = [parse_card(c) for c in cards]
        except ValueError as e:
            return self._reject(state, str(e), ErrorCode.INVALID_SELECTION)
        return self.submit(state, Command.select_exchange(player_id, cards))

    def submit_forced_reveal(
        self,
        state: GameState,
        player_id: str,
        card: CardType | str | None = None,
    ) -> TurnResult:
        """
        A player who must lose influence picks the card to reveal.

        An unknown or already revealed card reveals the first hidden one.
        """
        try:
            card = parse_card(card) if card is not None else None
        except ValueError as e:
            return self._reject(state, str(e), ErrorCode.INVALID_SELECTION)
        return self.submit(state, Command.reveal(player_id, card))

    def advance(self, state: GameState) -> TurnResult:
        """Resume automated play from any snapshot. Never acts for a human."""
        return self._drive(state)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def loop_state_for(self, state: GameState) -> LoopState:
        if state.is_over:
            return LoopState.GAME_OVER
        if self.driver.next_automated_player(state) is not None:
            return LoopState.RUNNING_AUTOMATED
        if state.pending_reveal:
            return LoopState.WAITING_REVEAL
        if state.pending_exchange:
            return LoopState.WAITING_EXCHANGE
        if state.pending_response:
            return LoopState.WAITING_HUMAN_RESPONSE
        return LoopState.WAITING_HUMAN_TURN

    def submit(self, state: GameState, command: Command) -> TurnResult:
        """Apply any prepared command, then drive automated players."""
        result = self.reducer.apply(state, command)
        if not result.success:
            self.state = self.loop_state_for(result.new_state)
            return TurnResult(
                success=False,
                state=result.new_state,
                loop_state=self.state,
                error=result.error,
                error_code=result.error_code,
            )
        return self._drive(result.new_state)

    def _drive(self, state: GameState) -> TurnResult:
        drive = self.driver.run(state)
        state = drive.state
        self.state = self.loop_state_for(state)
        if self.state == LoopState.GAME_OVER:
            logger.info("game %s over, winner %s", state.game_id, state.winner_id)
        return TurnResult(
            success=True,
            state=state,
            loop_state=self.state,
            automated_actions=drive.decisions,
            winner=state.winner_id,
        )

    def _reject(self, state: GameState, message: str, code: ErrorCode) -> TurnResult:
        logger.info("rejected input: %s", message)
        state = state.with_log(f"Rejected: {message}")
        self.state = self.loop_state_for(state)
        return TurnResult(
            success=False,
            state=state,
            loop_state=self.state,
            error=message,
            error_code=code.value,
        )
