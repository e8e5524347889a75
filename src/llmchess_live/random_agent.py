"""
RandomAgent: replies with a uniformly random legal move.

- Offline stand-in for an LLM side (model name "random" in settings); no API key needed.
- Takes its own random.Random so runs can be seeded.
"""
from __future__ import annotations

import random

import chess


class RandomAgent:
    name: str = "Random"

    def __init__(self, name: str | None = None, rng: random.Random | None = None):
        if name:
            self.name = name
        self.rng = rng or random.Random()

    def label(self) -> str:
        return self.name

    def request_move(self, fen: str) -> str:
        legal = list(chess.Board(fen=fen).legal_moves)
        return self.rng.choice(legal).uci() if legal else ""

    def close(self):
        # No resources to release
        pass
