"""
Referee: rules capability over python-chess.

- Boards are treated as values: apply_* copies the board (move stack included,
  so repetition rules keep working) and pushes onto the copy.
- MoveRequest carries from/to/promotion parsed from a UCI token.
- Terminal checks: checkmate, stalemate and the draw rules (insufficient
  material, fifty/seventy-five move rules, threefold/fivefold repetition).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import chess

from .move_extractor import is_uci_shaped

PROMOTION_PIECES = {"q", "r", "b", "n"}


class IllegalMoveError(ValueError):
    """Raised when a move request cannot be applied to the position."""


@dataclass(frozen=True)
class MoveRequest:
    from_square: str
    to_square: str
    promotion: Optional[str] = None

    @classmethod
    def from_token(cls, token: str) -> "MoveRequest":
        if not is_uci_shaped(token):
            raise ValueError(f"not a UCI move token: {token!r}")
        token = token.lower()
        return cls(token[0:2], token[2:4], token[4] if len(token) == 5 else None)

    def uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"


def side_name(color: chess.Color) -> str:
    return "white" if color == chess.WHITE else "black"


class Referee:
    """Stateless chess rules around python-chess Board."""

    # ---------------- Positions -----------------
    def initial_position(self, fen: str | None = None) -> chess.Board:
        if not fen or fen == chess.STARTING_FEN:
            return chess.Board()
        return chess.Board(fen=fen)

    def fen(self, board: chess.Board) -> str:
        return board.fen()

    def legal_moves(self, board: chess.Board) -> list[chess.Move]:
        return list(board.legal_moves)

    # ---------------- Move Application -----------------
    def apply_move(self, board: chess.Board, request: MoveRequest) -> tuple[chess.Board, chess.Move, str]:
        """Apply a requested move; returns (new_board, move, san) or raises IllegalMoveError."""
        promotion = request.promotion
        if promotion is not None and promotion.lower() not in PROMOTION_PIECES:
            raise IllegalMoveError(f"invalid promotion piece: {promotion}")
        try:
            mv = chess.Move.from_uci(request.uci().lower())
        except ValueError:
            raise IllegalMoveError(f"invalid move format: {request.uci()}")
        if mv not in board.legal_moves and promotion is None:
            # a bare pawn push to the last rank means a queen
            queened = chess.Move(mv.from_square, mv.to_square, promotion=chess.QUEEN)
            if queened in board.legal_moves:
                mv = queened
        elif mv not in board.legal_moves:
            # a promotion letter on a move that does not promote is ignored
            plain = chess.Move(mv.from_square, mv.to_square)
            if plain in board.legal_moves:
                mv = plain
        if mv not in board.legal_moves:
            raise IllegalMoveError(f"illegal move: {request.uci()}")
        new_board, san = self.apply_legal(board, mv)
        return new_board, mv, san

    def apply_legal(self, board: chess.Board, mv: chess.Move) -> tuple[chess.Board, str]:
        san = board.san(mv)
        new_board = board.copy()
        new_board.push(mv)
        return new_board, san

    # ---------------- Status -----------------
    def is_checkmate(self, board: chess.Board) -> bool:
        return board.is_checkmate()

    def is_stalemate(self, board: chess.Board) -> bool:
        return board.is_stalemate()

    def is_draw(self, board: chess.Board) -> bool:
        return self.draw_reason(board) is not None

    def draw_reason(self, board: chess.Board) -> str | None:
        """Readable reason for a non-stalemate draw, or None."""
        if board.is_insufficient_material():
            return "insufficient_material"
        if board.is_seventyfive_moves():
            return "seventyfive_move_rule"
        if board.is_fivefold_repetition():
            return "fivefold_repetition"
        if board.is_fifty_moves():
            return "fifty_move_rule"
        if board.is_repetition(3):
            return "threefold_repetition"
        return None
