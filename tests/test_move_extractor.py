import unittest

from llmchess_live.move_extractor import extract_move, is_uci_shaped


class MoveExtractorTests(unittest.TestCase):
    def test_move_inside_commentary(self):
        self.assertEqual(extract_move("I recommend e2e4 as the strongest move."), "e2e4")

    def test_empty_and_missing_text(self):
        self.assertIsNone(extract_move(""))
        self.assertIsNone(extract_move(None))
        self.assertIsNone(extract_move(42))

    def test_no_move_found(self):
        self.assertIsNone(extract_move("1. e4 e5 is a classical opening"))
        self.assertIsNone(extract_move("I resign."))

    def test_case_is_normalized(self):
        self.assertEqual(extract_move("E2E4"), "e2e4")
        self.assertEqual(extract_move("Best: G1F3!"), "g1f3")

    def test_promotion_letter_kept(self):
        self.assertEqual(extract_move("e7e8Q"), "e7e8q")
        self.assertEqual(extract_move("play a2a1n, then resign"), "a2a1n")

    def test_bounded_match_preferred_over_embedded(self):
        self.assertEqual(extract_move("hash xe2e4x, move g1f3"), "g1f3")

    def test_bare_match_as_fallback(self):
        self.assertEqual(extract_move("xxe2e4xx"), "e2e4")

    def test_code_fence(self):
        self.assertEqual(extract_move("```\ne7e5\n```"), "e7e5")

    def test_first_match_wins(self):
        self.assertEqual(extract_move("d2d4 or maybe c2c4"), "d2d4")

    def test_is_uci_shaped(self):
        self.assertTrue(is_uci_shaped("e2e4"))
        self.assertTrue(is_uci_shaped("E7E8q"))
        self.assertFalse(is_uci_shaped("e2e9"))
        self.assertFalse(is_uci_shaped("e2e4x"))
        self.assertFalse(is_uci_shaped(None))


if __name__ == "__main__":
    unittest.main()
