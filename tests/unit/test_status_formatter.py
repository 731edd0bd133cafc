"""状态文本格式化测试。"""

import unittest

from home_interpreter.models import (
    DeviceStatus,
    Language,
    MatchCandidate,
    QueryType,
    RoomMatchValidation,
    StatusQuery,
    StatusResult,
)
from home_interpreter.status_formatter import (
    MAX_GLOBAL_DETAILS,
    format_global_status,
    format_single_device_status,
    format_status,
    get_localized_text,
)


def _status(name, device_class="light", online=True, summary="💡 On"):
    return DeviceStatus(
        id=name.lower().replace(" ", "-"),
        name=name,
        device_class=device_class,
        summary=summary,
        is_online=online,
    )


class TestLocalizedText(unittest.TestCase):
    """测试 get_localized_text。"""

    def test_swedish_template(self):
        self.assertEqual(
            get_localized_text("room_not_found", "sv", room="Garage"),
            '❌ Rummet "Garage" hittades inte',
        )

    def test_language_fallback(self):
        """未收录语言回退到英语。"""
        self.assertEqual(
            get_localized_text("room_not_found", "it", room="Garage"),
            '❌ Room "Garage" not found',
        )

    def test_key_fallback(self):
        """法语缺少的键回退到英语模板，未知键返回键名。"""
        self.assertEqual(get_localized_text("device_types", "fr"), "**Device Types:**")
        self.assertEqual(get_localized_text("unknown_key", "en"), "unknown_key")

    def test_missing_placeholder_kept(self):
        self.assertEqual(get_localized_text("room_header", "en"), "🏠 **{room}** Status")


class TestFormatStatus(unittest.TestCase):
    """测试 format_status 按类型分派。"""

    def test_room_status_with_match_info(self):
        query = StatusQuery(QueryType.ROOM_STATUS, "visa vardagsrummet", Language.SV, room="vardagsrummet")
        match = RoomMatchValidation(
            original="vardagsrummet",
            match=MatchCandidate("Living Room", 0.9, "fuzzy"),
            valid=True,
            confidence=0.9,
        )
        result = StatusResult(
            success=True,
            query=query,
            query_type=QueryType.ROOM_STATUS,
            room="Living Room",
            room_match=match,
            devices=(_status("Ceiling Light"), _status("Garden Lights", online=False)),
        )

        text = format_status(result)

        self.assertTrue(text.startswith("🏠 **Living Room** Status"))
        self.assertIn('🎯 Matchade "vardagsrummet" → "Living Room" (90% säkerhet, fuzzy)', text)
        self.assertIn("📱 2 enheter hittade", text)
        self.assertIn("📴 Offline: 1", text)
        self.assertIn("• **Ceiling Light** (light): 💡 On", text)

    def test_room_status_without_details(self):
        query = StatusQuery(QueryType.ROOM_STATUS, "q", Language.EN, room="kitchen")
        result = StatusResult(
            success=True,
            query=query,
            query_type=QueryType.ROOM_STATUS,
            room="Kitchen",
            devices=(_status("Kitchen Spots"),),
        )
        text = format_status(result, "en", include_details=False)
        self.assertNotIn("Device Details", text)

    def test_empty_room(self):
        query = StatusQuery(QueryType.ROOM_STATUS, "q", Language.EN, room="office")
        result = StatusResult(success=True, query=query, query_type=QueryType.ROOM_STATUS, room="Office")
        self.assertIn("❌ No devices found in Office", format_status(result))

    def test_room_not_found_failure(self):
        query = StatusQuery(QueryType.ROOM_STATUS, "q", Language.EN, room="garage")
        result = StatusResult(
            success=False,
            query=query,
            query_type=QueryType.ROOM_STATUS,
            error="room_not_found",
            suggestions=("Kitchen", "Bedroom"),
        )
        self.assertEqual(
            format_status(result),
            '❌ Room "garage" not found\nAvailable rooms: Kitchen, Bedroom',
        )

    def test_device_not_found_failure(self):
        query = StatusQuery(QueryType.DEVICE_STATUS, "q", Language.EN, target="toaster")
        result = StatusResult(
            success=False,
            query=query,
            query_type=QueryType.DEVICE_STATUS,
            error="device_not_found",
            suggestions=("Kitchen",),
        )
        self.assertEqual(
            format_status(result),
            '❌ Device "toaster" not found\nDid you mean: Kitchen',
        )

    def test_single_device_offline(self):
        text = format_single_device_status(_status("Garden Lights", online=False, summary="💡 Off"))
        self.assertEqual(text, "🔧 **Garden Lights** (light)\nStatus: 💡 Off\n⚠️ 📴 Offline")

    def test_multiple_devices(self):
        query = StatusQuery(QueryType.DEVICE_STATUS, "q", Language.EN, target="lamp")
        result = StatusResult(
            success=True,
            query=query,
            query_type=QueryType.DEVICE_STATUS,
            devices=(_status("Floor Lamp"), _status("Desk Lamp")),
        )
        text = format_status(result)
        self.assertTrue(text.startswith("📱 2 devices found"))
        self.assertIn("🔧 **Desk Lamp** (light)", text)


class TestGlobalStatus(unittest.TestCase):
    """测试 format_global_status。"""

    def test_device_types_breakdown(self):
        devices = [
            _status("Ceiling Light"),
            _status("Garden Lights", online=False),
            _status("Front Door Lock", device_class="lock", summary="🔒 Locked"),
        ]
        text = format_global_status(devices, "en", include_details=True)
        self.assertIn("**Device Types:**", text)
        self.assertIn("• light: 1/2 online", text)
        self.assertIn("• lock: 1/1 online", text)
        self.assertIn("📋 **Device Details**", text)

    def test_too_many_devices(self):
        devices = [_status(f"Lamp {i}") for i in range(MAX_GLOBAL_DETAILS + 1)]
        text = format_global_status(devices, "en", include_details=True)
        self.assertNotIn("Device Types", text)
        self.assertIn("Too many devices", text)


if __name__ == "__main__":
    unittest.main()
