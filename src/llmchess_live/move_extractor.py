"""
Move extraction for raw agent replies.

Agents are asked for a single UCI move but frequently wrap it in commentary,
code fences or punctuation. extract_move() pulls the first move-shaped token
out of whatever came back:

1) token bounded by non-alphanumeric context (e2e4 in "play e2e4.")
2) otherwise a bare substring match (e2e4 in "e2e4e5")

Returns lowercase UCI (with promotion letter) or None. Never raises.
"""
from __future__ import annotations

import re
from typing import Any

BOUNDED_UCI_RE = re.compile(r"(?<![A-Za-z0-9])([a-h][1-8][a-h][1-8][qrbn]?)(?![A-Za-z0-9])", re.I)
BARE_UCI_RE = re.compile(r"([a-h][1-8][a-h][1-8][qrbn]?)", re.I)
UCI_RE = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$", re.I)


def extract_move(text: Any) -> str | None:
    if not isinstance(text, str) or not text:
        return None
    m = BOUNDED_UCI_RE.search(text) or BARE_UCI_RE.search(text)
    if m:
        return m.group(1).lower()
    return None


def is_uci_shaped(token: Any) -> bool:
    """True if token is exactly a four/five character UCI move."""
    return isinstance(token, str) and bool(UCI_RE.match(token))


__all__ = ["extract_move", "is_uci_shaped"]
