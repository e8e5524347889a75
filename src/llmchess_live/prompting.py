"""
Prompt builder and config for agent move requests.

Callers supply system instructions and a template string with placeholders
({FEN}, {SIDE_TO_MOVE}) that are substituted per turn.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

DEFAULT_SYSTEM_INSTRUCTIONS = "You are a chess engine that always returns legal moves in UCI format."
DEFAULT_TEMPLATE = (
    "You are a chess engine playing strictly according to FIDE rules. "
    'Given the board position represented by the following FEN string: "{FEN}", '
    "you must output the best legal move for the side to move ({SIDE_TO_MOVE}). "
    "Respond with exactly one move in plain UCI notation, such as e2e4 or b8c6. "
    "Do not include any additional text or commentary."
)


@dataclass
class PromptConfig:
    """Configuration for shaping move prompts using a custom template."""

    system_instructions: str = DEFAULT_SYSTEM_INSTRUCTIONS
    template: str = DEFAULT_TEMPLATE


def render_custom_prompt(template: str, values: Dict[str, str]) -> str:
    """Replace known placeholders in the template. Unknown tokens are left intact."""
    rendered = template or ""
    for key, val in values.items():
        rendered = rendered.replace(f"{{{key}}}", val)
    return rendered


def build_move_messages(fen: str, prompt_cfg: PromptConfig | None = None) -> List[Dict[str, str]]:
    cfg = prompt_cfg or PromptConfig()
    side = "white" if fen.split()[1:2] == ["w"] else "black"
    user_content = render_custom_prompt(cfg.template, {"FEN": fen, "SIDE_TO_MOVE": side})
    return [
        {"role": "system", "content": cfg.system_instructions},
        {"role": "user", "content": user_content},
    ]
