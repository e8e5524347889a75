import dataclasses
import random
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import chess

from llmchess_live import llm_client
from llmchess_live.config import SETTINGS
from llmchess_live.llm_agent import LLMAgent
from llmchess_live.prompting import PromptConfig, build_move_messages, render_custom_prompt
from llmchess_live.random_agent import RandomAgent


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class PromptingTests(unittest.TestCase):
    def test_messages_include_fen_and_side(self):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        msgs = build_move_messages(fen)
        self.assertEqual([m["role"] for m in msgs], ["system", "user"])
        self.assertIn(fen, msgs[1]["content"])
        self.assertIn("(black)", msgs[1]["content"])
        self.assertIn("UCI", msgs[0]["content"])

    def test_custom_template(self):
        cfg = PromptConfig(system_instructions="sys", template="{SIDE_TO_MOVE} to move: {FEN} {UNKNOWN}")
        msgs = build_move_messages(chess.STARTING_FEN, cfg)
        self.assertEqual(msgs[0]["content"], "sys")
        self.assertEqual(msgs[1]["content"], f"white to move: {chess.STARTING_FEN} {{UNKNOWN}}")
        self.assertEqual(render_custom_prompt("", {"FEN": "x"}), "")


class LLMClientTests(unittest.TestCase):
    def setUp(self):
        patcher = patch.object(llm_client, "SETTINGS", dataclasses.replace(SETTINGS, responses_retries=1))
        patcher.start()
        self.addCleanup(patcher.stop)
        sleeper = patch.object(llm_client.time, "sleep")
        sleeper.start()
        self.addCleanup(sleeper.stop)

    def test_returns_stripped_text(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _completion("  e2e4 \n")
        with patch.object(llm_client, "_client", return_value=client):
            self.assertEqual(llm_client.ask_for_move([{"role": "user", "content": "hi"}], model="m"), "e2e4")
        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "m")
        self.assertIn("timeout", kwargs)

    def test_failures_return_empty_after_retries(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("503")
        with patch.object(llm_client, "_client", return_value=client):
            self.assertEqual(llm_client.ask_for_move([], model="m"), "")
        self.assertEqual(client.chat.completions.create.call_count, 2)

    def test_content_parts(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _completion([{"type": "text", "text": "g1f3"}])
        with patch.object(llm_client, "_client", return_value=client):
            self.assertEqual(llm_client.ask_for_move([], model="m"), "g1f3")

    def test_explicit_settings_override_module_settings(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("503")
        cfg = dataclasses.replace(
            SETTINGS, llm_api_key="k2", api_base="http://gw.local/v1", responses_retries=2,
            responses_timeout_s=7.0, max_tokens=16, temperature=0.0,
        )
        with patch.object(llm_client, "_client", return_value=client) as factory:
            self.assertEqual(llm_client.ask_for_move([], model="m", settings=cfg), "")
        factory.assert_called_with("k2", "http://gw.local/v1")
        self.assertEqual(client.chat.completions.create.call_count, 3)
        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual((kwargs["timeout"], kwargs["max_tokens"], kwargs["temperature"]), (7.0, 16, 0.0))

    def test_model_required(self):
        with self.assertRaises(ValueError):
            llm_client.ask_for_move([], model=None)


class AgentTests(unittest.TestCase):
    def test_llm_agent_returns_raw_reply(self):
        agent = LLMAgent(model="anthropic/claude-3-haiku", name="Claude")
        with patch("llmchess_live.llm_agent.ask_for_move", return_value="I play e7e5") as ask:
            raw = agent.request_move(chess.STARTING_FEN)
        self.assertEqual(raw, "I play e7e5")
        messages = ask.call_args.args[0]
        self.assertIn(chess.STARTING_FEN, messages[-1]["content"])
        self.assertEqual(ask.call_args.kwargs["model"], "anthropic/claude-3-haiku")
        self.assertEqual(agent.label(), "Claude")
        self.assertEqual(LLMAgent(model="m").label(), "m")

    def test_llm_agent_forwards_settings(self):
        cfg = dataclasses.replace(SETTINGS, responses_timeout_s=3.0)
        agent = LLMAgent(model="openai/gpt-4o", name="GPT", settings=cfg)
        with patch("llmchess_live.llm_agent.ask_for_move", return_value="e2e4") as ask:
            agent.request_move(chess.STARTING_FEN)
        self.assertIs(ask.call_args.kwargs["settings"], cfg)

    def test_random_agent_plays_legal_moves(self):
        agent = RandomAgent(name="Bot", rng=random.Random(4))
        board = chess.Board()
        mv = chess.Move.from_uci(agent.request_move(board.fen()))
        self.assertIn(mv, board.legal_moves)
        self.assertEqual(agent.label(), "Bot")
        self.assertEqual(agent.request_move("7k/5K2/6Q1/8/8/8/8/8 b - - 0 1"), "")


if __name__ == "__main__":
    unittest.main()
