"""设备快照与默认状态读取。

根据设备类型与能力值生成状态摘要，并提供按类型、房间筛选设备的工具。
"""

from __future__ import annotations

import re
from typing import Awaitable, Callable, Iterable

from home_interpreter.models import Device, DeviceStatus
from home_interpreter.text import normalize

StatusRetriever = Callable[[Device], Awaitable[DeviceStatus]]

# 设备类型的别名，命中设备 class 子串即视为同类
TYPE_ALIASES: dict[str, tuple[str, ...]] = {
    "light": ("lamp", "bulb", "lighting"),
    "speaker": ("audio", "music", "sound", "mediaplayer"),
    "thermostat": ("heating", "temperature", "climate", "heater"),
    "sensor": ("detector", "monitor"),
    "lock": ("door", "security"),
    "socket": ("outlet", "plug", "power"),
    "curtain": ("blinds", "windowcoverings", "shade"),
    "tv": ("television",),
}

# 插座按名称判断所控制的设备
_SOCKET_NAME_PATTERNS: dict[str, re.Pattern[str]] = {
    "light": re.compile(r"light|lamp|ljus|lampa|belysning|licht|lumiere|luz"),
    "tv": re.compile(r"\btv\b|television|fernseher|teve"),
    "speaker": re.compile(r"speaker|audio|musik|music|ljud|hogtalare"),
}

_SOCKET_LABELS = {
    "light": "(controlling lighting device)",
    "tv": "(controlling TV/entertainment device)",
    "speaker": "(controlling audio device)",
}


def socket_controls(device: Device) -> str | None:
    """根据插座名称推断其控制的设备类型。"""
    name = normalize(device.name)
    for device_type, pattern in _SOCKET_NAME_PATTERNS.items():
        if pattern.search(name):
            return device_type
    return None


def device_matches_type(device: Device, device_type: str) -> bool:
    """判断设备是否属于指定类型。

    依次比较 class 相等、别名子串，以及插座所控制的设备。
    """
    device_class = (device.device_class or "").lower()
    target = device_type.lower()
    if not device_class:
        return False
    if device_class == target:
        return True
    if device_class == "socket" and socket_controls(device) == target:
        return True
    return any(alias in device_class for alias in TYPE_ALIASES.get(target, ()))


def filter_by_type(devices: Iterable[Device], device_type: str) -> list[Device]:
    return [device for device in devices if device_matches_type(device, device_type)]


def filter_by_room(devices: Iterable[Device], room: str) -> list[Device]:
    """按房间名筛选设备（规范化后比较）。"""
    key = normalize(room)
    return [device for device in devices if device.room and normalize(device.room) == key]


def find_by_name(devices: Iterable[Device], name: str) -> list[Device]:
    """名称互相包含即视为命中。"""
    key = normalize(name)
    if not key:
        return []
    matched = []
    for device in devices:
        device_key = normalize(device.name)
        if device_key and (key in device_key or device_key in key):
            matched.append(device)
    return matched


def generate_device_summary(device: Device) -> str:
    """按设备类型生成一行状态摘要。"""
    caps = device.capabilities
    parts: list[str] = []
    device_class = (device.device_class or "").lower()

    if device_class == "light":
        if "onoff" in caps:
            parts.append("💡 On" if caps["onoff"] else "💡 Off")
        if "dim" in caps and caps.get("onoff"):
            parts.append(f"{_percent(caps['dim'])}% brightness")
        if "light_temperature" in caps:
            parts.append(f"{caps['light_temperature']}K color temp")
    elif device_class == "socket":
        if "onoff" in caps:
            parts.append("🔌 On" if caps["onoff"] else "🔌 Off")
        if "measure_power" in caps:
            parts.append(f"{caps['measure_power']}W")
        parts.append(_SOCKET_LABELS.get(socket_controls(device) or "", "(smart plug)"))
    elif device_class == "thermostat":
        if "target_temperature" in caps:
            parts.append(f"🌡️ Set to {caps['target_temperature']}°C")
        if "measure_temperature" in caps:
            parts.append(f"Currently {caps['measure_temperature']}°C")
    elif device_class == "speaker":
        if "speaker_playing" in caps:
            parts.append("🔊 Playing" if caps["speaker_playing"] else "🔊 Stopped")
        if "volume_set" in caps:
            parts.append(f"Volume {_percent(caps['volume_set'])}%")
    elif device_class == "sensor":
        if "measure_temperature" in caps:
            parts.append(f"🌡️ {caps['measure_temperature']}°C")
        if "measure_humidity" in caps:
            parts.append(f"💧 {caps['measure_humidity']}% humidity")
        if "alarm_motion" in caps:
            parts.append("🚶 Motion detected" if caps["alarm_motion"] else "🚶 No motion")
        if "alarm_contact" in caps:
            parts.append("🚪 Open" if caps["alarm_contact"] else "🚪 Closed")
    elif device_class == "lock":
        if "locked" in caps:
            parts.append("🔒 Locked" if caps["locked"] else "🔓 Unlocked")
    elif device_class in ("curtain", "blinds"):
        if "windowcoverings_set" in caps:
            parts.append(f"🪟 {_percent(caps['windowcoverings_set'])}% open")
    elif device_class == "fan":
        if "onoff" in caps:
            parts.append("🌀 On" if caps["onoff"] else "🌀 Off")
        if "fan_speed" in caps and caps.get("onoff"):
            parts.append(f"Speed {_percent(caps['fan_speed'])}%")
    elif "onoff" in caps:
        parts.append("✅ On" if caps["onoff"] else "❌ Off")

    if not device.available:
        parts.insert(0, "📴 Offline")

    return ", ".join(parts) if parts else "No status available"


async def snapshot_status(device: Device) -> DeviceStatus:
    """默认状态读取：直接使用快照中的能力值。"""
    return DeviceStatus(
        id=device.id,
        name=device.name,
        device_class=device.device_class,
        summary=generate_device_summary(device),
        is_online=device.available,
        room=device.room,
    )


def _percent(value: object) -> int:
    try:
        return round(float(value) * 100)
    except (TypeError, ValueError):
        return 0
