"""MCP server 工具函数测试。"""

import os
import unittest
from types import SimpleNamespace
from unittest import mock

import mcp_server
from home_interpreter.demo_data import DEMO_ROOMS


class FakeMeta:
    """模拟带额外字段的 pydantic meta。"""

    def __init__(self, **extra):
        self.__pydantic_extra__ = extra

    def model_dump(self):
        return dict(self.__pydantic_extra__)


def _ctx_with_meta(**extra):
    return SimpleNamespace(request_context=SimpleNamespace(request=None, meta=FakeMeta(**extra)))


DEVICE_PAYLOAD = [
    {
        "id": "light-3",
        "name": "Kitchen Spots",
        "room": "Kitchen",
        "device_class": "light",
        "capabilities": {"onoff": True, "dim": 0.5},
    },
    {"id": "socket-1", "name": "Coffee Machine", "room": "Kitchen", "class": "socket"},
]


class TestMeta(unittest.TestCase):
    """测试 meta 提取。"""

    def test_request_context_meta(self):
        ctx = _ctx_with_meta(rooms=["Kök"], language="sv")
        self.assertEqual(mcp_server.get_meta_from_context(ctx), {"rooms": ["Kök"], "language": "sv"})
        self.assertEqual(mcp_server.get_meta_value(ctx, "language"), "sv")

    def test_params_meta_preferred(self):
        params = SimpleNamespace(meta=FakeMeta(language="de"))
        ctx = SimpleNamespace(
            request_context=SimpleNamespace(
                request=SimpleNamespace(params=params), meta=FakeMeta(language="sv")
            )
        )
        self.assertEqual(mcp_server.get_meta_value(ctx, "language"), "de")

    def test_missing_context(self):
        self.assertEqual(mcp_server.get_meta_from_context(None), {})
        self.assertEqual(mcp_server.get_meta_value(SimpleNamespace(), "rooms", []), [])


class TestPayloadHelpers(unittest.TestCase):
    """测试 payload 转换。"""

    def test_devices_from_payload(self):
        payload = DEVICE_PAYLOAD + [{"name": "No Id"}, "bogus"]
        with self.assertLogs("mcp_server", level="WARNING"):
            devices = mcp_server.devices_from_payload(payload)
        self.assertEqual([d.id for d in devices], ["light-3", "socket-1"])
        self.assertEqual(devices[1].device_class, "socket")
        self.assertEqual(devices[1].capabilities, {})
        self.assertIsNone(mcp_server.devices_from_payload(None))

    def test_semantic_resolver_requires_key(self):
        with mock.patch.dict(os.environ, {"DASHSCOPE_API_KEY": ""}):
            self.assertIsNone(mcp_server.build_semantic_resolver())


class TestTools(unittest.IsolatedAsyncioTestCase):
    """测试 MCP 工具。"""

    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"DASHSCOPE_API_KEY": ""})
        patcher.start()
        self.addCleanup(patcher.stop)

    async def test_interpret_command(self):
        payload = await mcp_server.interpret("Turn on the lights in the kitchen", "en", DEMO_ROOMS)
        self.assertTrue(payload["success"])
        self.assertEqual(payload["language"], "en")
        self.assertEqual(payload["command"]["room"], "Kitchen")
        self.assertEqual(payload["command"]["command"], "turn_on")

    async def test_interpret_status_with_devices(self):
        payload = await mcp_server.interpret(
            "What's the status of kitchen lights?", "en", DEMO_ROOMS, DEVICE_PAYLOAD
        )
        self.assertEqual(payload["query_type"], "device_type_status")
        self.assertEqual([d["id"] for d in payload["devices"]], ["light-3"])
        self.assertIn("Kitchen Spots", payload["formatted_text"])

    async def test_interpret_uses_meta(self):
        """未传房间与语言时从 meta 读取。"""
        ctx = _ctx_with_meta(rooms=["Kök", "Sovrum"], language="sv")
        payload = await mcp_server.interpret("Släck lamporna i köket", ctx=ctx)
        self.assertEqual(payload["language"], "sv")
        self.assertEqual(payload["command"]["room"], "Kök")

    async def test_match_room(self):
        payload = await mcp_server.match_room("kithen", ["Kitchen", "Bedroom"], "en")
        self.assertTrue(payload["valid"])
        self.assertEqual(payload["match"]["value"], "Kitchen")
        self.assertEqual(payload["match"]["method"], "fuzzy")

    def test_classify_status(self):
        payload = mcp_server.classify_status("Show me all devices in the bedroom", "en")
        self.assertEqual(payload["type"], "room_status")
        self.assertEqual(payload["room"], "bedroom")

    def test_parse_llm_output(self):
        payload = mcp_server.parse_llm_output(
            '{"command": {"room": "Kitchen", "command": "turn_on"}}', ["Kitchen"]
        )
        self.assertTrue(payload["success"])
        self.assertEqual(payload["command"]["room"], "Kitchen")
        self.assertGreaterEqual(payload["metrics"]["total_outputs"], 1)


if __name__ == "__main__":
    unittest.main()
