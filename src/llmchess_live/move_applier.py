"""
Apply an agent's candidate move, falling back to a random legal move.

Shared by the turn sequencer for both sides so White and Black are treated
symmetrically. The random source is injected (random.Random) so games can be
replayed deterministically in tests.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

import chess

from .move_extractor import is_uci_shaped
from .referee import IllegalMoveError, MoveRequest, Referee

log = logging.getLogger("move_applier")


@dataclass(frozen=True)
class AppliedMove:
    board: chess.Board
    uci: str
    san: str
    fallback: bool = False
    # why the fallback was used: no_candidate | bad_shape | illegal_move
    reason: Optional[str] = None


def apply_candidate(
    board: chess.Board,
    candidate: Optional[str],
    referee: Referee,
    rng: random.Random,
    label: str = "agent",
) -> AppliedMove | None:
    """Apply candidate to board, or a uniformly random legal move if it cannot be applied.

    Returns None only when the position has no legal moves at all.
    """
    legal = referee.legal_moves(board)
    if not legal:
        log.warning("%s: no legal moves in %s", label, board.fen())
        return None

    reason = "no_candidate"
    if candidate:
        if not is_uci_shaped(candidate):
            reason = "bad_shape"
        else:
            try:
                new_board, mv, san = referee.apply_move(board, MoveRequest.from_token(candidate))
            except IllegalMoveError as exc:
                reason = "illegal_move"
                log.info("%s's move %s was invalid: %s", label, candidate, exc)
            else:
                log.info("%s played: %s (%s)", label, mv.uci(), san)
                return AppliedMove(new_board, mv.uci(), san)

    mv = rng.choice(legal)
    new_board, san = referee.apply_legal(board, mv)
    log.info("%s fallback to random move: %s (%s)", label, san, reason)
    return AppliedMove(new_board, mv.uci(), san, fallback=True, reason=reason)
