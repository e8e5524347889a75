"""
Configuration and environment loading for the live arena.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables.
- Exposes SETTINGS with keys used across the project (API keys, agent models, pacing delays).
- load_settings() rebuilds a Settings object from an explicit YAML path (used by scripts and tests).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import chess
import yaml
from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger("config")


def _repo_root() -> str:
    # this file: src/llmchess_live/config.py -> repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        log.warning("Could not read %s; using environment only", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: top level is not a mapping", path)
        return {}
    return data


def _optional_int(val: Any) -> int | None:
    if val is None or val == "":
        return None
    return int(val)


@dataclass(frozen=True)
class Settings:
    # Auth / endpoint (OpenAI-compatible gateway)
    llm_api_key: str
    api_base: str

    # Agents, one per side
    white_model: str
    white_label: str
    black_model: str
    black_label: str

    # Transport knobs
    responses_timeout_s: float
    responses_retries: int
    max_tokens: int
    temperature: float

    # Orchestration
    agent_timeout_s: float
    move_delay_s: float
    game_delay_s: float
    error_cooldown_s: float
    start_fen: str
    seed: int | None

    # HTTP adapter
    host: str
    port: int


def load_settings(path: str | None = None, env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings with precedence YAML > environment > defaults."""
    cfg = _load_yaml(path or os.path.join(_repo_root(), "settings.yml"))
    environ = os.environ if env is None else env

    def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
        if name in cfg:
            val = cfg[name]
            return cast(val) if cast else val
        val = environ.get(name)
        if val is not None:
            return cast(val) if cast else val
        return default

    settings = Settings(
        llm_api_key=_get("LLMCHESS_LLM_API_KEY", _get("AI_GATEWAY_API_KEY", "")),
        api_base=_get("LLMCHESS_LLM_BASE_URL", _get("AI_GATEWAY_BASE_URL", "https://ai-gateway.vercel.sh/v1")),
        white_model=_get("LLMCHESS_WHITE_MODEL", "openai/gpt-4o"),
        white_label=_get("LLMCHESS_WHITE_LABEL", "GPT"),
        black_model=_get("LLMCHESS_BLACK_MODEL", "anthropic/claude-3-haiku"),
        black_label=_get("LLMCHESS_BLACK_LABEL", "Claude"),
        responses_timeout_s=_get("LLMCHESS_RESPONSES_TIMEOUT_S", 20.0, cast=float),
        responses_retries=_get("LLMCHESS_RESPONSES_RETRIES", 1, cast=int),
        max_tokens=_get("LLMCHESS_MAX_TOKENS", 10, cast=int),
        temperature=_get("LLMCHESS_TEMPERATURE", 0.2, cast=float),
        agent_timeout_s=_get("LLMCHESS_AGENT_TIMEOUT_S", 45.0, cast=float),
        move_delay_s=_get("LLMCHESS_MOVE_DELAY_S", 2.0, cast=float),
        game_delay_s=_get("LLMCHESS_GAME_DELAY_S", 5.0, cast=float),
        error_cooldown_s=_get("LLMCHESS_ERROR_COOLDOWN_S", 3.0, cast=float),
        start_fen=_get("LLMCHESS_START_FEN", chess.STARTING_FEN),
        seed=_get("LLMCHESS_SEED", None, cast=_optional_int),
        host=_get("LLMCHESS_HOST", "0.0.0.0"),
        port=_get("LLMCHESS_PORT", 8000, cast=int),
    )
    validate_settings(settings)
    return settings


def is_random_model(model: str | None) -> bool:
    """'random' selects the offline agent instead of a gateway model."""
    return (model or "").strip().lower() == "random"


def validate_settings(settings: Settings) -> None:
    """Raise ValueError for settings the game loop cannot run with."""
    for name in ("agent_timeout_s", "move_delay_s", "game_delay_s", "error_cooldown_s"):
        if getattr(settings, name) < 0:
            raise ValueError(f"{name} must be >= 0")
    if is_random_model(settings.white_model) and is_random_model(settings.black_model):
        return
    # every gateway attempt must fit inside one agent turn, or late calls pile up on the workers
    budget = settings.responses_timeout_s * (settings.responses_retries + 1)
    if budget > settings.agent_timeout_s:
        raise ValueError(
            f"responses_timeout_s * (responses_retries + 1) = {budget:g}s exceeds agent_timeout_s = {settings.agent_timeout_s:g}s"
        )


SETTINGS = load_settings()
