"""测试文本规范化与发音变体。"""

import unittest

from home_interpreter.models import Language
from home_interpreter.text import (
    generate_phonetic_variations,
    normalize,
    remove_definite_articles,
)


class TestNormalize(unittest.TestCase):
    """测试 normalize。"""

    def test_folds_diacritics_and_case(self):
        self.assertEqual(normalize("Trädgården"), "tradgarden")
        self.assertEqual(normalize("Kök"), "kok")
        self.assertEqual(normalize("Küche"), "kuche")

    def test_special_letters(self):
        """NFKD 无法拆分的字母也被折叠。"""
        self.assertEqual(normalize("Straße"), "strasse")
        self.assertEqual(normalize("Søndre Stue"), "sondre stue")

    def test_whitespace_and_apostrophes(self):
        self.assertEqual(normalize("  living   room \t"), "living room")
        self.assertEqual(normalize("l’entrée"), "l'entree")

    def test_non_string_returns_empty(self):
        self.assertEqual(normalize(None), "")
        self.assertEqual(normalize(42), "")
        self.assertEqual(normalize(""), "")

    def test_idempotent(self):
        """规范化结果再次规范化保持不变。"""
        for text in ("Trädgården", "  LIVING room", "Straße", "l’entrée", "Sovrum 2"):
            once = normalize(text)
            self.assertEqual(normalize(once), once)


class TestRemoveDefiniteArticles(unittest.TestCase):
    """测试 remove_definite_articles。"""

    def test_swedish_suffix(self):
        self.assertEqual(remove_definite_articles("koket", "sv"), "kok")
        self.assertEqual(remove_definite_articles("tradgarden", Language.SV), "tradgard")

    def test_prefix_articles(self):
        self.assertEqual(remove_definite_articles("the kitchen", "en"), "kitchen")
        self.assertEqual(remove_definite_articles("la cuisine", "fr"), "cuisine")
        self.assertEqual(remove_definite_articles("l'entree", "fr"), "entree")
        self.assertEqual(remove_definite_articles("der garten", "de"), "garten")
        self.assertEqual(remove_definite_articles("el salon", "es"), "salon")

    def test_unknown_language_passthrough(self):
        self.assertEqual(remove_definite_articles("koket", "xx"), "koket")
        self.assertEqual(remove_definite_articles("koket", None), "koket")

    def test_keeps_original_when_result_empty(self):
        """去除后为空时保留原文。"""
        self.assertEqual(remove_definite_articles("en", "sv"), "en")


class TestPhoneticVariations(unittest.TestCase):
    """测试 generate_phonetic_variations。"""

    def test_starts_with_lowercased_word(self):
        variants = generate_phonetic_variations("Kitchen")
        self.assertEqual(variants[0], "kitchen")

    def test_includes_folded_form(self):
        variants = generate_phonetic_variations("Köket")
        self.assertEqual(variants[:2], ["köket", "koket"])

    def test_digraph_rule(self):
        self.assertIn("fone", generate_phonetic_variations("phone"))
        self.assertIn("kiten", generate_phonetic_variations("kithen"))

    def test_no_duplicates(self):
        variants = generate_phonetic_variations("hallway")
        self.assertEqual(len(variants), len(set(variants)))

    def test_empty_input(self):
        self.assertEqual(generate_phonetic_variations(""), [])
        self.assertEqual(generate_phonetic_variations(None), [])


if __name__ == "__main__":
    unittest.main()
