"""
Orchestrator: keeps games running forever on a background thread.

- run_cycle(): one full session inside a fault boundary. Any exception is
  logged, viewers see "Error occurred, restarting...", and after a cooldown
  the next cycle starts a brand-new session (with the next game id).
- run_forever(): cycles until stop() (or max_sessions cycles, for scripts).
- build_orchestrator(): wires store, referee, agents and loop from Settings.
"""
from __future__ import annotations

import logging
import random
import threading
from typing import Optional

import chess

from .config import SETTINGS, Settings, is_random_model, validate_settings
from .llm_agent import LLMAgent
from .outcome import ERROR_TEXT
from .random_agent import RandomAgent
from .referee import Referee
from .session import GameLoop, Session
from .state import GameStateStore
from .turn_sequencer import TurnSequencer

log = logging.getLogger("orchestrator")


class Orchestrator:
    def __init__(self, loop: GameLoop, error_cooldown_s: float = 3.0, max_sessions: Optional[int] = None):
        self.loop = loop
        self.store = loop.store
        self.error_cooldown_s = error_cooldown_s
        self.max_sessions = max_sessions
        self.cycles = 0
        self.faults = 0
        self._thread: Optional[threading.Thread] = None

    @property
    def stop_event(self) -> threading.Event:
        return self.loop.stop_event

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def run_cycle(self) -> Session | None:
        """Run one session; returns it, or None if the cycle faulted."""
        self.cycles += 1
        try:
            return self.loop.run_session()
        except Exception:
            self.faults += 1
            log.exception("Error in game loop (cycle %d)", self.cycles)
            self.store.publish(status=ERROR_TEXT, current_player="", move_in_progress=False)
            if self.error_cooldown_s > 0:
                self.stop_event.wait(self.error_cooldown_s)
            return None

    def run_forever(self) -> None:
        log.info("Starting global game loop...")
        while not self.stop_event.is_set():
            if self.max_sessions is not None and self.cycles >= self.max_sessions:
                break
            self.run_cycle()
        log.info("Game loop stopped after %d cycles (%d faults)", self.cycles, self.faults)

    def start(self) -> threading.Thread:
        if self.running:
            return self._thread
        self.stop_event.clear()
        self._thread = threading.Thread(target=self.run_forever, name="orchestrator", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self.stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self.loop.sequencer.close()


def create_agent(model: str, label: str, rng: random.Random | None = None, settings: Settings | None = None):
    """'random' selects the offline RandomAgent; anything else is a gateway model name."""
    if is_random_model(model):
        return RandomAgent(name=label, rng=rng)
    return LLMAgent(model=model, name=label, settings=settings)


def build_orchestrator(
    settings: Settings = SETTINGS,
    store: GameStateStore | None = None,
    max_sessions: Optional[int] = None,
) -> Orchestrator:
    # validate up front rather than failing every cycle
    validate_settings(settings)
    chess.Board(fen=settings.start_fen)
    rng = random.Random(settings.seed)
    agents = {
        "white": create_agent(settings.white_model, settings.white_label, random.Random(rng.random()), settings),
        "black": create_agent(settings.black_model, settings.black_label, random.Random(rng.random()), settings),
    }
    referee = Referee()
    sequencer = TurnSequencer(agents, referee, rng, agent_timeout_s=settings.agent_timeout_s)
    store = store or GameStateStore(players={"white": settings.white_label, "black": settings.black_label})
    loop = GameLoop(
        store,
        sequencer,
        referee,
        move_delay_s=settings.move_delay_s,
        game_delay_s=settings.game_delay_s,
        start_fen=settings.start_fen,
    )
    return Orchestrator(loop, error_cooldown_s=settings.error_cooldown_s, max_sessions=max_sessions)
