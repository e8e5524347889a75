"""
LLM client facade over an OpenAI-compatible gateway (configurable base URL).

The rest of the code should not care which SDK is in use. This module talks to
the gateway with `model` + `messages` and returns raw text responses; both
agents (e.g. openai/gpt-4o and anthropic/claude-3-haiku) go through it.
"""
from __future__ import annotations

import logging
import random
import time
from functools import lru_cache
from typing import Dict, List, Optional

from openai import OpenAI

from .config import SETTINGS, Settings

log = logging.getLogger("llm_client")


@lru_cache(maxsize=4)
def _client(api_key: str, base_url: str) -> OpenAI:
    # built lazily so importing the package does not require an API key
    return OpenAI(api_key=api_key or None, base_url=base_url or None, max_retries=0)


def ask_for_move(messages: List[Dict[str, str]], model: Optional[str] = None, settings: Optional[Settings] = None) -> str:
    """Send a chat conversation and return the reply text, or "" after exhausting retries.

    Gateway and transport knobs come from `settings`, or the module SETTINGS when omitted.
    """
    cfg = settings or SETTINGS
    if not model:
        raise ValueError("Model is required; set LLMCHESS_WHITE_MODEL / LLMCHESS_BLACK_MODEL.")
    delay = 0.5
    for attempt in range(cfg.responses_retries + 1):
        try:
            rsp = _client(cfg.llm_api_key, cfg.api_base).chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=cfg.max_tokens,
                temperature=cfg.temperature,
                timeout=cfg.responses_timeout_s,
            )
            text = _extract_text(rsp)
            if text:
                return text.strip()
            log.warning("Empty reply from %s (attempt %d)", model, attempt + 1)
        except Exception:
            if attempt >= cfg.responses_retries:
                log.exception("Chat request to %s failed after %d attempts", model, attempt + 1)
                break
            sleep_s = delay * (2 ** attempt) * (0.8 + 0.4 * random.random())
            time.sleep(min(sleep_s, 10.0))
    return ""


def _extract_text(rsp) -> str:
    try:
        if hasattr(rsp, "choices") and rsp.choices:
            msg = rsp.choices[0].message
            content = getattr(msg, "content", None)
            if isinstance(content, str):
                return content
            if isinstance(content, list):
                parts = []
                for c in content:
                    if isinstance(c, dict):
                        if c.get("type") == "text" and isinstance(c.get("text"), str):
                            parts.append(c["text"])
                        continue
                    t = getattr(c, "text", None)
                    if isinstance(t, str):
                        parts.append(t)
                if parts:
                    return "\n".join(parts)
    except (AttributeError, IndexError, TypeError):
        log.exception("Failed to extract text from response")
    return ""
