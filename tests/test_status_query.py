"""状态查询分类测试。"""

import unittest

from home_interpreter.models import Language, QueryType, StatusQuery
from home_interpreter.status_query import classify, determine_query_scope, is_status_query


class TestClassify(unittest.TestCase):
    """测试 classify。"""

    def test_device_type_with_room(self):
        result = classify("What's the status of kitchen lights?", "en")
        self.assertEqual(result.type, QueryType.DEVICE_TYPE_STATUS)
        self.assertEqual(result.room, "kitchen")
        self.assertEqual(result.target, "lights")
        self.assertEqual(result.confidence, 0.9)

    def test_not_a_query(self):
        result = classify("Turn on the lights", "en")
        self.assertIsNone(result.type)
        self.assertEqual(result.confidence, 0.0)
        self.assertEqual(result.original_query, "Turn on the lights")

    def test_room_status(self):
        result = classify("Show me all devices in the bedroom", "en")
        self.assertEqual(result.type, QueryType.ROOM_STATUS)
        self.assertEqual(result.room, "bedroom")
        self.assertEqual(result.confidence, 0.9)

    def test_global_status(self):
        result = classify("What is the status of everything?", "en")
        self.assertEqual(result.type, QueryType.GLOBAL_STATUS)
        self.assertEqual(result.target, "all devices")
        self.assertIsNone(result.room)

    def test_device_status(self):
        result = classify("How is the toaster doing?", "en")
        self.assertEqual(result.type, QueryType.DEVICE_STATUS)
        self.assertEqual(result.target, "toaster")
        self.assertEqual(result.confidence, 0.8)

    def test_yes_no_question(self):
        result = classify("Is the front door lock locked?", "en")
        self.assertEqual(result.type, QueryType.DEVICE_TYPE_STATUS)
        self.assertEqual(result.target, "lock")
        self.assertEqual(result.room, "front door")

    def test_keyword_fallback(self):
        result = classify("check kitchen", "en")
        self.assertEqual(result.type, QueryType.DEVICE_STATUS)
        self.assertEqual(result.confidence, 0.5)

    def test_swedish(self):
        result = classify("Vad är status på lamporna i köket?", "sv")
        self.assertEqual(result.type, QueryType.DEVICE_TYPE_STATUS)
        self.assertEqual(result.target, "lamporna")
        self.assertEqual(result.room, "köket")
        self.assertEqual(result.language, Language.SV)

    def test_swedish_room_status(self):
        result = classify("Visa alla enheter i vardagsrummet", "sv")
        self.assertEqual(result.type, QueryType.ROOM_STATUS)
        self.assertEqual(result.room, "vardagsrummet")

    def test_unknown_language_uses_english(self):
        result = classify("What's the status of kitchen lights?", "xx")
        self.assertEqual(result.type, QueryType.DEVICE_TYPE_STATUS)
        self.assertEqual(result.language, Language.EN)

    def test_invalid_input(self):
        self.assertIsNone(classify(None, "en").type)
        self.assertIsNone(classify("   ", "en").type)

    def test_idempotent(self):
        text = "Show me all devices in the living room"
        self.assertEqual(classify(text, "en"), classify(text, "en"))


class TestHelpers(unittest.TestCase):
    """测试 is_status_query / determine_query_scope。"""

    def test_is_status_query(self):
        self.assertTrue(is_status_query("What's the status of kitchen lights?", "en"))
        self.assertFalse(is_status_query("Turn on the lights", "en"))

    def test_scope(self):
        def scope(query_type):
            return determine_query_scope(StatusQuery(query_type, "q", Language.EN))

        self.assertEqual(scope(None), "none")
        self.assertEqual(scope(QueryType.GLOBAL_STATUS), "global")
        self.assertEqual(scope(QueryType.ROOM_STATUS), "room")
        self.assertEqual(scope(QueryType.DEVICE_TYPE_STATUS), "device_type")
        self.assertEqual(scope(QueryType.DEVICE_STATUS), "device")


if __name__ == "__main__":
    unittest.main()
