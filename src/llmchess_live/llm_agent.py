"""LLM-backed agent: one side of the arena, reached through the gateway client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .llm_client import ask_for_move
from .prompting import PromptConfig, build_move_messages

log = logging.getLogger("llm_agent")


@dataclass
class LLMAgent:
    model: str
    name: Optional[str] = None
    prompt_cfg: Optional[PromptConfig] = None
    settings: Optional[Settings] = None

    def label(self) -> str:
        return self.name or self.model

    def request_move(self, fen: str) -> str:
        """Ask the model for a move in the given position and return its raw reply."""
        messages = build_move_messages(fen, self.prompt_cfg)
        raw = ask_for_move(messages, model=self.model, settings=self.settings)
        log.debug("%s raw reply: %r", self.label(), raw)
        return raw

    def close(self):
        # Nothing to release for API-based agents
        return
