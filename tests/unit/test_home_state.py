"""设备快照与状态摘要测试。"""

import asyncio
import unittest

from home_interpreter.demo_data import DEMO_DEVICES
from home_interpreter.home_state import (
    device_matches_type,
    filter_by_room,
    filter_by_type,
    find_by_name,
    generate_device_summary,
    snapshot_status,
    socket_controls,
)
from home_interpreter.models import Device


def _device(device_id):
    return next(device for device in DEMO_DEVICES if device.id == device_id)


class TestDeviceSummary(unittest.TestCase):
    """测试 generate_device_summary。"""

    def test_light(self):
        self.assertEqual(generate_device_summary(_device("light-1")), "💡 On, 75% brightness")
        self.assertEqual(
            generate_device_summary(_device("light-3")),
            "💡 On, 100% brightness, 3000K color temp",
        )

    def test_light_off_hides_brightness(self):
        self.assertEqual(generate_device_summary(_device("light-2")), "💡 Off")

    def test_offline_prefix(self):
        self.assertEqual(generate_device_summary(_device("light-4")), "📴 Offline, 💡 Off")

    def test_socket_label(self):
        """插座按名称推断所控制的设备。"""
        self.assertEqual(
            generate_device_summary(_device("socket-2")),
            "🔌 On, 7.5W, (controlling lighting device)",
        )
        self.assertTrue(generate_device_summary(_device("socket-1")).endswith("(smart plug)"))

    def test_other_classes(self):
        self.assertEqual(generate_device_summary(_device("lock-1")), "🔒 Locked")
        self.assertEqual(
            generate_device_summary(_device("thermostat-1")),
            "🌡️ Set to 21°C, Currently 19.5°C",
        )

    def test_no_capabilities(self):
        device = Device(id="x", name="Mystery Box")
        self.assertEqual(generate_device_summary(device), "No status available")


class TestDeviceFilters(unittest.TestCase):
    """测试按类型、房间、名称筛选。"""

    def test_socket_controls(self):
        self.assertEqual(socket_controls(_device("socket-2")), "light")
        self.assertIsNone(socket_controls(_device("socket-1")))

    def test_type_matching(self):
        self.assertTrue(device_matches_type(_device("socket-2"), "light"))
        self.assertFalse(device_matches_type(_device("socket-1"), "light"))
        self.assertTrue(device_matches_type(Device(id="b", name="B", device_class="lightbulb"), "light"))
        self.assertFalse(device_matches_type(Device(id="c", name="C", device_class=""), "light"))
        self.assertTrue(device_matches_type(Device(id="m", name="M", device_class="mediaplayer"), "speaker"))

    def test_filter_by_type(self):
        ids = [device.id for device in filter_by_type(DEMO_DEVICES, "light")]
        self.assertEqual(ids, ["light-1", "light-2", "light-3", "socket-2", "light-4"])

    def test_filter_by_room(self):
        ids = [device.id for device in filter_by_room(DEMO_DEVICES, "living room")]
        self.assertEqual(ids, ["light-1", "light-2", "speaker-1"])

    def test_find_by_name(self):
        self.assertEqual([d.id for d in find_by_name(DEMO_DEVICES, "coffee machine")], ["socket-1"])
        self.assertEqual(find_by_name(DEMO_DEVICES, ""), [])
        self.assertEqual(find_by_name(DEMO_DEVICES, "toaster"), [])


class TestSnapshotStatus(unittest.TestCase):
    """测试默认状态读取。"""

    def test_snapshot(self):
        status = asyncio.run(snapshot_status(_device("light-4")))
        self.assertEqual(status.id, "light-4")
        self.assertEqual(status.room, "Trägården")
        self.assertFalse(status.is_online)
        self.assertEqual(status.summary, "📴 Offline, 💡 Off")


if __name__ == "__main__":
    unittest.main()
