"""
Game session loop.

A session moves through three phases:

- STARTING: fresh initial position, next game id, publish "Game N in progress".
- IN_PROGRESS: one half-move per transition (agent turn, publish, pause,
  outcome check). No legal moves -> FINISHED with an abnormal end.
- FINISHED: count the win if decisive, publish the final status, pause; the
  next phase is STARTING of a new session.

GameLoop.advance() performs exactly one transition and returns the next
phase; run_session() drives it until the session is finished or the stop
event is set. Fault handling lives in the supervisor, not here.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import chess

from .outcome import IN_PROGRESS, Outcome, abnormal_end, player_text, resolve_outcome, status_text
from .referee import Referee, side_name
from .state import GameStateStore
from .turn_sequencer import TurnSequencer

log = logging.getLogger("game_loop")


class Phase(str, Enum):
    STARTING = "starting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class Session:
    game_id: int = 0
    board: Optional[chess.Board] = None
    phase: Phase = Phase.STARTING
    outcome: Outcome = IN_PROGRESS
    history: List[str] = field(default_factory=list)
    fallbacks: int = 0

    @property
    def side_to_move(self) -> str:
        return side_name(self.board.turn) if self.board is not None else "white"


class GameLoop:
    def __init__(
        self,
        store: GameStateStore,
        sequencer: TurnSequencer,
        referee: Referee | None = None,
        move_delay_s: float = 0.0,
        game_delay_s: float = 0.0,
        start_fen: str | None = None,
        stop_event: threading.Event | None = None,
    ):
        self.store = store
        self.sequencer = sequencer
        self.referee = referee or sequencer.referee
        self.move_delay_s = move_delay_s
        self.game_delay_s = game_delay_s
        self.start_fen = start_fen
        self.stop_event = stop_event or threading.Event()
        self.games_started = 0

    @property
    def labels(self) -> dict[str, str]:
        return {s: self.sequencer.label_for(s) for s in ("white", "black")}

    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self.stop_event.wait(seconds)

    # ---------------- Transitions -----------------
    def advance(self, session: Session) -> Phase:
        if session.phase == Phase.STARTING:
            self._start(session)
            return session.phase
        if session.phase == Phase.IN_PROGRESS:
            self._play_half_move(session)
            return session.phase
        self._finish(session)
        return Phase.STARTING

    def _start(self, session: Session) -> None:
        self.games_started += 1
        session.game_id = self.games_started
        session.board = self.referee.initial_position(self.start_fen)
        session.history = []
        session.outcome = IN_PROGRESS
        session.phase = Phase.IN_PROGRESS
        log.info("Starting game %d", session.game_id)
        self.store.publish(
            fen=self.referee.fen(session.board),
            game_id=session.game_id,
            status=status_text(IN_PROGRESS, session.game_id, self.labels),
            current_player=player_text(session.side_to_move, self.labels),
            move_history=(),
            last_move=None,
            move_in_progress=False,
            termination_reason=None,
        )

    def _play_half_move(self, session: Session) -> None:
        side = session.side_to_move
        self.store.publish(current_player=player_text(side, self.labels), move_in_progress=True)
        turn = self.sequencer.play_turn(session.board)
        if turn is None:
            log.warning("Game %d: %s has no legal moves, ending game", session.game_id, self.labels[side])
            session.outcome = abnormal_end()
            session.phase = Phase.FINISHED
            return

        session.board = turn.board
        session.history.append(turn.applied.san)
        if turn.applied.fallback:
            session.fallbacks += 1
        self.store.publish(
            fen=self.referee.fen(session.board),
            move_history=session.history,
            last_move=turn.applied.san,
            move_in_progress=False,
        )
        self._pause(self.move_delay_s)

        outcome = resolve_outcome(session.board, self.referee)
        if outcome.terminal:
            session.outcome = outcome
            session.phase = Phase.FINISHED

    def _finish(self, session: Session) -> None:
        outcome = session.outcome
        text = status_text(outcome, session.game_id, self.labels)
        self.store.record_result(
            outcome.winner,
            status=text,
            current_player="",
            move_in_progress=False,
            termination_reason=outcome.reason,
        )
        log.info(
            "Game %d finished: %s reason=%s plies=%d fallbacks=%d",
            session.game_id, text, outcome.reason, len(session.history), session.fallbacks,
        )
        self._pause(self.game_delay_s)

    # ---------------- Driver -----------------
    def run_session(self) -> Session:
        """Play one game from STARTING through FINISHED (or until stopped)."""
        session = Session()
        while not self.stopped():
            if self.advance(session) == Phase.STARTING:
                break
        return session
