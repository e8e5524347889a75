"""
Outcome classification and viewer-facing status text.

- resolve_outcome(): checks the position after each half-move (checkmate,
  stalemate, other draws, or still in progress).
- abnormal_end(): terminal outcome for a game that could not continue.
- status_text(): renders the strings shown to viewers.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

import chess

from .referee import Referee, side_name

STARTING_TEXT = "Starting..."
ERROR_TEXT = "Error occurred, restarting..."


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"
    ABNORMAL_END = "abnormal_end"


@dataclass(frozen=True)
class Outcome:
    status: GameStatus
    winner: Optional[str] = None  # "white" | "black"
    reason: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.status != GameStatus.IN_PROGRESS

    @property
    def decisive(self) -> bool:
        return self.winner is not None


IN_PROGRESS = Outcome(GameStatus.IN_PROGRESS)


def resolve_outcome(board: chess.Board, referee: Referee) -> Outcome:
    if referee.is_checkmate(board):
        # the side to move is the one that got mated
        return Outcome(GameStatus.CHECKMATE, winner=side_name(not board.turn), reason="checkmate")
    if referee.is_stalemate(board):
        return Outcome(GameStatus.STALEMATE, reason="stalemate")
    reason = referee.draw_reason(board)
    if reason:
        return Outcome(GameStatus.DRAW, reason=reason)
    return IN_PROGRESS


def abnormal_end(reason: str = "no_legal_moves") -> Outcome:
    return Outcome(GameStatus.ABNORMAL_END, reason=reason)


def status_text(outcome: Outcome, game_id: int, labels: Mapping[str, str]) -> str:
    if outcome.status == GameStatus.IN_PROGRESS:
        return f"Game {game_id} in progress"
    if outcome.status == GameStatus.CHECKMATE:
        return f"Checkmate! {labels.get(outcome.winner, outcome.winner)} wins!"
    if outcome.status == GameStatus.STALEMATE:
        return "Stalemate - Draw!"
    if outcome.status == GameStatus.DRAW:
        return "Draw!"
    return "Game ended unexpectedly"


def player_text(side: str, labels: Mapping[str, str]) -> str:
    """'GPT (White)' style label for the side to move."""
    return f"{labels.get(side, side)} ({side.capitalize()})"
