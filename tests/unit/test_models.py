"""数据模型测试。"""

import unittest

from home_interpreter.models import (
    Language,
    MatchCandidate,
    ParsedCommand,
    QueryType,
    StatusQuery,
    StatusResult,
)


class TestLanguage(unittest.TestCase):
    """测试 Language.parse。"""

    def test_parse_codes(self):
        self.assertEqual(Language.parse("sv"), Language.SV)
        self.assertEqual(Language.parse("sv-SE"), Language.SV)
        self.assertEqual(Language.parse("pt_BR"), Language.PT)
        self.assertEqual(Language.parse(" EN "), Language.EN)
        self.assertIs(Language.parse(Language.DE), Language.DE)

    def test_unknown_returns_none(self):
        self.assertIsNone(Language.parse("xx"))
        self.assertIsNone(Language.parse(None))
        self.assertIsNone(Language.parse(7))


class TestMatchCandidate(unittest.TestCase):
    """测试 MatchCandidate。"""

    def test_not_found(self):
        candidate = MatchCandidate.not_found(("Kitchen",))
        self.assertIsNone(candidate.value)
        self.assertEqual(candidate.confidence, 0.0)
        self.assertEqual(candidate.method, "none")
        self.assertFalse(candidate.matched)
        self.assertEqual(candidate.suggestions, ("Kitchen",))

    def test_matched(self):
        self.assertTrue(MatchCandidate("Kitchen", 1.0, "exact").matched)


class TestParsedCommand(unittest.TestCase):
    """测试 ParsedCommand 的目标约束。"""

    def test_requires_exactly_one_target(self):
        with self.assertRaises(ValueError):
            ParsedCommand(command="turn_on")
        with self.assertRaises(ValueError):
            ParsedCommand(command="turn_on", room="Kitchen", device_id="light-1")

    def test_single_requires_command(self):
        with self.assertRaises(ValueError):
            ParsedCommand(room="Kitchen")

    def test_flatten_preserves_order(self):
        first = ParsedCommand(command="turn_on", room="Kitchen")
        second = ParsedCommand(command="play_music", room="Living Room")
        nested = ParsedCommand(commands=(first, ParsedCommand(commands=(second,))))
        self.assertTrue(nested.is_multi)
        self.assertEqual(nested.flatten(), [first, second])
        self.assertEqual(first.flatten(), [first])


class TestStatusResult(unittest.TestCase):
    """测试 StatusResult.device_count。"""

    def test_device_count_without_statuses(self):
        query = StatusQuery(QueryType.GLOBAL_STATUS, "status", Language.EN)
        result = StatusResult(success=True, query=query)
        self.assertEqual(result.device_count, 0)


if __name__ == "__main__":
    unittest.main()
