"""
Turn sequencing: one half-move for whichever side is to move.

- The agent for board.turn is asked for a move on a worker thread; the loop
  waits at most agent_timeout_s. A late reply is discarded.
- Timeouts, transport errors and agent exceptions are agent-call faults: they
  are logged and the turn proceeds with no candidate (random fallback).
- Raw reply -> move_extractor -> move_applier.

Alternation is enforced by the position itself: after a move is pushed the
side to move flips, so the same agent can never be asked twice in a row.
"""
from __future__ import annotations

import concurrent.futures
import logging
import random
from dataclasses import dataclass
from typing import Mapping, Optional

import chess

from .move_applier import AppliedMove, apply_candidate
from .move_extractor import extract_move
from .referee import Referee, side_name

log = logging.getLogger("turn_sequencer")


@dataclass(frozen=True)
class TurnResult:
    side: str
    applied: AppliedMove
    raw: Optional[str] = None
    candidate: Optional[str] = None
    agent_error: Optional[str] = None

    @property
    def board(self) -> chess.Board:
        return self.applied.board


class TurnSequencer:
    def __init__(
        self,
        agents: Mapping[str, object],
        referee: Referee,
        rng: random.Random,
        agent_timeout_s: float,
        executor: concurrent.futures.Executor | None = None,
    ):
        missing = [s for s in ("white", "black") if s not in agents]
        if missing:
            raise ValueError(f"missing agent for: {', '.join(missing)}")
        self.agents = dict(agents)
        self.referee = referee
        self.rng = rng
        self.agent_timeout_s = agent_timeout_s
        self._own_executor = executor is None
        self._executor = executor

    @property
    def executor(self) -> concurrent.futures.Executor:
        # created on first use and again after close(), so a stopped arena can be restarted
        if self._executor is None:
            # two workers so one hung call past its timeout does not block the other side
            self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="agent")
        return self._executor

    def agent_for(self, board: chess.Board):
        return self.agents[side_name(board.turn)]

    def label_for(self, side: str) -> str:
        agent = self.agents[side]
        return agent.label() if hasattr(agent, "label") else getattr(agent, "name", side)

    def request_raw(self, side: str, fen: str) -> tuple[Optional[str], Optional[str]]:
        """Return (raw_reply, error); raw_reply is None whenever error is set."""
        agent = self.agents[side]
        try:
            future = self.executor.submit(agent.request_move, fen)
            raw = future.result(timeout=self.agent_timeout_s)
        except concurrent.futures.TimeoutError:
            future.cancel()
            log.warning("%s agent timed out after %.1fs", self.label_for(side), self.agent_timeout_s)
            return None, "timeout"
        except Exception as exc:  # noqa: BLE001
            log.warning("%s agent call failed: %s", self.label_for(side), exc, exc_info=True)
            return None, f"agent_error:{type(exc).__name__}"
        if raw is not None and not isinstance(raw, str):
            log.warning("%s agent returned %s instead of text", self.label_for(side), type(raw).__name__)
            return None, "malformed_reply"
        return raw, None

    def play_turn(self, board: chess.Board) -> TurnResult | None:
        """Play one half-move; None when the position has no legal moves."""
        side = side_name(board.turn)
        label = self.label_for(side)
        raw, error = self.request_raw(side, self.referee.fen(board))
        candidate = extract_move(raw)
        if raw is not None and candidate is None:
            log.info("%s reply had no move: %r", label, raw[:140])
        applied = apply_candidate(board, candidate, self.referee, self.rng, label=label)
        if applied is None:
            return None
        return TurnResult(side=side, applied=applied, raw=raw, candidate=candidate, agent_error=error)

    def close(self):
        for agent in self.agents.values():
            close = getattr(agent, "close", None)
            if close:
                close()
        if self._own_executor and self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
