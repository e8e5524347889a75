"""
Shared game state: one immutable Snapshot behind a lock.

The orchestration thread is the only writer of position, session and tally;
web threads read snapshots and bump the viewer count. Every write builds a
new Snapshot and swaps the reference under the lock, so a reader always sees
a single complete publish (never a new position with a stale game id).
"""
from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

import chess

from .outcome import STARTING_TEXT


SIDES = ("white", "black")


def _frozen(d: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class Snapshot:
    fen: str = chess.STARTING_FEN
    game_id: int = 0
    status: str = STARTING_TEXT
    current_player: str = ""
    wins: Mapping[str, int] = field(default_factory=lambda: _frozen({s: 0 for s in SIDES}))
    viewers: int = 0
    players: Mapping[str, str] = field(default_factory=lambda: _frozen({"white": "White", "black": "Black"}))
    move_history: Tuple[str, ...] = ()
    last_move: Optional[str] = None
    move_in_progress: bool = False
    termination_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "fen": self.fen,
            "game_id": self.game_id,
            "status": self.status,
            "current_player": self.current_player,
            "wins": dict(self.wins),
            "viewers": self.viewers,
            "players": dict(self.players),
            "move_history": list(self.move_history),
            "last_move": self.last_move,
            "move_in_progress": self.move_in_progress,
            "termination_reason": self.termination_reason,
        }


class GameStateStore:
    """Single-writer/many-reader holder of the current Snapshot."""

    def __init__(self, players: Mapping[str, str] | None = None):
        self._lock = threading.Lock()
        initial = Snapshot()
        if players:
            initial = dataclasses.replace(initial, players=_frozen(players))
        self._snapshot = initial

    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def publish(self, **changes: Any) -> Snapshot:
        """Atomically replace any subset of snapshot fields."""
        if "wins" in changes or "viewers" in changes:
            raise ValueError("wins and viewers are only changed through record_result / add_viewer / remove_viewer")
        if "move_history" in changes:
            changes["move_history"] = tuple(changes["move_history"])
        with self._lock:
            self._snapshot = dataclasses.replace(self._snapshot, **changes)
            return self._snapshot

    def record_result(self, winner: Optional[str], **changes: Any) -> Snapshot:
        """Publish a finished game's status and, if decisive, count the win in the same swap."""
        if winner is not None and winner not in SIDES:
            raise ValueError(f"unknown side: {winner!r}")
        if "move_history" in changes:
            changes["move_history"] = tuple(changes["move_history"])
        with self._lock:
            snap = self._snapshot
            if winner is not None:
                wins = dict(snap.wins)
                wins[winner] += 1
                changes["wins"] = _frozen(wins)
            self._snapshot = dataclasses.replace(snap, **changes)
            return self._snapshot

    # ---------------- Viewers -----------------
    def add_viewer(self) -> int:
        with self._lock:
            self._snapshot = dataclasses.replace(self._snapshot, viewers=self._snapshot.viewers + 1)
            return self._snapshot.viewers

    def remove_viewer(self) -> int:
        with self._lock:
            self._snapshot = dataclasses.replace(self._snapshot, viewers=max(0, self._snapshot.viewers - 1))
            return self._snapshot.viewers
