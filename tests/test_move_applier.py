import random
import unittest

import chess

from llmchess_live.move_applier import apply_candidate
from llmchess_live.referee import Referee

POSITIONS = [
    chess.STARTING_FEN,
    "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5Q2/PPPP1PPP/RNB1K1NR b KQkq - 3 3",
    "8/4P3/8/8/8/8/k7/4K3 w - - 0 1",
    "4k3/8/8/8/8/8/3n4/4K3 w - - 0 1",
]
STALEMATE_FEN = "7k/5K2/6Q1/8/8/8/8/8 b - - 0 1"
CHECKMATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


class MoveApplierTests(unittest.TestCase):
    def setUp(self):
        self.ref = Referee()
        self.rng = random.Random(1234)

    def test_legal_candidate_applied(self):
        board = chess.Board()
        applied = apply_candidate(board, "e2e4", self.ref, self.rng)
        self.assertFalse(applied.fallback)
        self.assertIsNone(applied.reason)
        self.assertEqual(applied.uci, "e2e4")
        self.assertEqual(applied.san, "e4")
        self.assertEqual(board.fen(), chess.STARTING_FEN, "input board must not be mutated")

    def test_illegal_candidate_falls_back_to_legal_move(self):
        for fen in POSITIONS:
            board = chess.Board(fen)
            applied = apply_candidate(board, "h1h8", self.ref, self.rng)
            self.assertTrue(applied.fallback, fen)
            self.assertEqual(applied.reason, "illegal_move")
            mv = chess.Move.from_uci(applied.uci)
            self.assertIn(mv, board.legal_moves)
            expected = board.copy()
            expected.push(mv)
            self.assertEqual(applied.board.fen(), expected.fen())

    def test_trailing_promotion_letter_keeps_agent_move(self):
        applied = apply_candidate(chess.Board(), "g1f3n", self.ref, self.rng)
        self.assertFalse(applied.fallback)
        self.assertEqual(applied.uci, "g1f3")
        self.assertEqual(applied.san, "Nf3")

    def test_missing_candidate(self):
        applied = apply_candidate(chess.Board(), None, self.ref, self.rng)
        self.assertTrue(applied.fallback)
        self.assertEqual(applied.reason, "no_candidate")

    def test_malformed_candidate(self):
        applied = apply_candidate(chess.Board(), "Nf3", self.ref, self.rng)
        self.assertTrue(applied.fallback)
        self.assertEqual(applied.reason, "bad_shape")

    def test_no_legal_moves_signals_failure(self):
        for fen in (STALEMATE_FEN, CHECKMATE_FEN):
            board = chess.Board(fen)
            self.assertIsNone(apply_candidate(board, "e2e4", self.ref, self.rng))
            self.assertIsNone(apply_candidate(board, None, self.ref, self.rng))

    def test_fallback_is_deterministic_for_seeded_rng(self):
        first = apply_candidate(chess.Board(), None, self.ref, random.Random(7))
        second = apply_candidate(chess.Board(), None, self.ref, random.Random(7))
        self.assertEqual(first.uci, second.uci)

    def test_fallback_uses_injected_rng(self):
        legal = list(chess.Board().legal_moves)
        rng = random.Random()
        rng.choice = lambda seq: seq[-1]
        applied = apply_candidate(chess.Board(), None, self.ref, rng)
        self.assertEqual(applied.uci, legal[-1].uci())


if __name__ == "__main__":
    unittest.main()
