"""多语言状态文本格式化。"""

from __future__ import annotations

from collections import Counter

from home_interpreter.models import DeviceStatus, Language, QueryType, StatusResult

DEFAULT_LANGUAGE = Language.EN
MAX_GLOBAL_DETAILS = 10

STATUS_TEMPLATES: dict[Language, dict[str, str]] = {
    Language.EN: {
        "room_header": "🏠 **{room}** Status",
        "device_count": "📱 {count} devices found",
        "no_devices": "❌ No devices found in {room}",
        "device_offline": "📴 Offline",
        "device_online": "✅ Online",
        "summary_header": "📊 **Summary**",
        "details_header": "📋 **Device Details**",
        "room_not_found": '❌ Room "{room}" not found',
        "available_rooms": "Available rooms: {rooms}",
        "global_status": "🌍 **Global Home Status**",
        "device_type_status": "🔧 **{type} Devices Status**",
        "no_devices_of_type": "❌ No {type} devices found",
        "device_not_found": '❌ Device "{target}" not found',
        "suggestions": "Did you mean: {suggestions}",
        "device_types": "**Device Types:**",
        "too_many_devices": "_Too many devices to show details. Use room-specific queries for details._",
        "match_info": '🎯 Matched "{input}" → "{matched}" ({confidence}% confidence, {method})',
    },
    Language.SV: {
        "room_header": "🏠 **{room}** Status",
        "device_count": "📱 {count} enheter hittade",
        "no_devices": "❌ Inga enheter hittade i {room}",
        "device_offline": "📴 Offline",
        "device_online": "✅ Online",
        "summary_header": "📊 **Sammanfattning**",
        "details_header": "📋 **Enhetsdetaljer**",
        "room_not_found": '❌ Rummet "{room}" hittades inte',
        "available_rooms": "Tillgängliga rum: {rooms}",
        "global_status": "🌍 **Global Hemstatus**",
        "device_type_status": "🔧 **{type} Enheter Status**",
        "no_devices_of_type": "❌ Inga {type} enheter hittade",
        "device_not_found": '❌ Enheten "{target}" hittades inte',
        "suggestions": "Menade du: {suggestions}",
        "device_types": "**Enhetstyper:**",
        "too_many_devices": "_För många enheter för detaljer. Fråga om ett specifikt rum._",
        "match_info": '🎯 Matchade "{input}" → "{matched}" ({confidence}% säkerhet, {method})',
    },
    Language.FR: {
        "room_header": "🏠 **{room}** Statut",
        "device_count": "📱 {count} appareils trouvés",
        "no_devices": "❌ Aucun appareil trouvé dans {room}",
        "device_offline": "📴 Hors ligne",
        "device_online": "✅ En ligne",
        "summary_header": "📊 **Résumé**",
        "details_header": "📋 **Détails des Appareils**",
        "room_not_found": '❌ Pièce "{room}" non trouvée',
        "available_rooms": "Pièces disponibles: {rooms}",
        "global_status": "🌍 **Statut Global de la Maison**",
        "device_type_status": "🔧 **Statut des Appareils {type}**",
        "no_devices_of_type": "❌ Aucun appareil {type} trouvé",
        "device_not_found": '❌ Appareil "{target}" non trouvé',
        "suggestions": "Vouliez-vous dire: {suggestions}",
        "match_info": '🎯 Correspondance "{input}" → "{matched}" ({confidence}% confiance, {method})',
    },
    Language.DE: {
        "room_header": "🏠 **{room}** Status",
        "device_count": "📱 {count} Geräte gefunden",
        "no_devices": "❌ Keine Geräte in {room} gefunden",
        "device_offline": "📴 Offline",
        "device_online": "✅ Online",
        "summary_header": "📊 **Zusammenfassung**",
        "details_header": "📋 **Gerätedetails**",
        "room_not_found": '❌ Raum "{room}" nicht gefunden',
        "available_rooms": "Verfügbare Räume: {rooms}",
        "global_status": "🌍 **Globaler Hausstatus**",
        "device_type_status": "🔧 **{type} Geräte Status**",
        "no_devices_of_type": "❌ Keine {type} Geräte gefunden",
        "device_not_found": '❌ Gerät "{target}" nicht gefunden',
        "suggestions": "Meinten Sie: {suggestions}",
        "match_info": '🎯 Übereinstimmung "{input}" → "{matched}" ({confidence}% Vertrauen, {method})',
    },
    Language.ES: {
        "room_header": "🏠 **{room}** Estado",
        "device_count": "📱 {count} dispositivos encontrados",
        "no_devices": "❌ No se encontraron dispositivos en {room}",
        "device_offline": "📴 Desconectado",
        "device_online": "✅ Conectado",
        "summary_header": "📊 **Resumen**",
        "details_header": "📋 **Detalles de Dispositivos**",
        "room_not_found": '❌ Habitación "{room}" no encontrada',
        "available_rooms": "Habitaciones disponibles: {rooms}",
        "global_status": "🌍 **Estado Global del Hogar**",
        "device_type_status": "🔧 **Estado de Dispositivos {type}**",
        "no_devices_of_type": "❌ No se encontraron dispositivos {type}",
        "device_not_found": '❌ Dispositivo "{target}" no encontrado',
        "suggestions": "¿Quisiste decir: {suggestions}?",
        "match_info": '🎯 Coincidencia "{input}" → "{matched}" ({confidence}% confianza, {method})',
    },
}


class _SafeParams(dict):
    """缺失的占位符原样保留。"""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def get_localized_text(key: str, language: Language | str | None = None, **params: object) -> str:
    """取本地化模板并替换参数。

    语言或键缺失时依次回退到英语模板与键名本身。
    """
    lang = Language.parse(language) or DEFAULT_LANGUAGE
    templates = STATUS_TEMPLATES.get(lang, STATUS_TEMPLATES[DEFAULT_LANGUAGE])
    template = templates.get(key) or STATUS_TEMPLATES[DEFAULT_LANGUAGE].get(key) or key
    return template.format_map(_SafeParams(params))


def format_status(
    result: StatusResult,
    language: Language | str | None = None,
    include_details: bool = True,
) -> str:
    """按查询类型选择对应的格式化方式。"""
    language = language or result.query.language
    if not result.success:
        return format_failure(result, language)
    if result.query_type == QueryType.ROOM_STATUS:
        return format_room_status(result, language, include_details)
    if result.query_type == QueryType.DEVICE_TYPE_STATUS:
        return format_device_type_status(result, language, include_details)
    if result.query_type == QueryType.GLOBAL_STATUS:
        return format_global_status(list(result.devices), language, include_details)
    if len(result.devices) == 1:
        return format_single_device_status(result.devices[0], language)
    return format_multiple_device_status(list(result.devices), language)


def format_failure(result: StatusResult, language: Language | str | None = None) -> str:
    """格式化失败结果，附带建议。"""
    if result.error == "room_not_found":
        mention = result.query.room or result.query.target or ""
        parts = [get_localized_text("room_not_found", language, room=mention)]
        if result.suggestions:
            parts.append(
                get_localized_text("available_rooms", language, rooms=", ".join(result.suggestions))
            )
        return "\n".join(parts)

    if result.error == "device_type_unknown" or result.query_type == QueryType.DEVICE_TYPE_STATUS:
        text = get_localized_text(
            "no_devices_of_type", language, type=result.device_type or result.query.target or ""
        )
    else:
        text = get_localized_text("device_not_found", language, target=result.query.target or "")
    if result.suggestions:
        text += "\n" + get_localized_text(
            "suggestions", language, suggestions=", ".join(result.suggestions)
        )
    return text


def format_room_status(
    result: StatusResult,
    language: Language | str | None = None,
    include_details: bool = True,
) -> str:
    """格式化房间状态。"""
    room = result.room or result.query.room or ""
    parts = [get_localized_text("room_header", language, room=room)]

    match = result.room_match
    if match is not None and match.match.method != "exact" and match.confidence < 1.0:
        parts.append(
            get_localized_text(
                "match_info",
                language,
                input=match.original,
                matched=room,
                confidence=round(match.confidence * 100),
                method=match.match.method,
            )
        )

    parts.append("")
    parts.append(get_localized_text("summary_header", language))

    if not result.devices:
        parts.append(get_localized_text("no_devices", language, room=room))
        return "\n".join(parts)

    parts.extend(_overview(list(result.devices), language))

    if include_details:
        parts.append("")
        parts.append(get_localized_text("details_header", language))
        for device in result.devices:
            parts.append(f"• **{device.name}** ({device.device_class}): {device.summary}")

    return "\n".join(parts)


def format_device_type_status(
    result: StatusResult,
    language: Language | str | None = None,
    include_details: bool = True,
) -> str:
    """格式化设备类型状态。"""
    device_type = result.device_type or result.query.target or ""
    parts = [get_localized_text("device_type_status", language, type=device_type)]
    parts.append("")
    parts.append(get_localized_text("summary_header", language))

    if not result.devices:
        parts.append(get_localized_text("no_devices_of_type", language, type=device_type))
        return "\n".join(parts)

    parts.extend(_overview(list(result.devices), language))

    if include_details:
        parts.append("")
        parts.append(get_localized_text("details_header", language))
        for device in result.devices:
            parts.append(f"• **{device.name}**: {device.summary}")

    return "\n".join(parts)


def format_global_status(
    devices: list[DeviceStatus],
    language: Language | str | None = None,
    include_details: bool = False,
) -> str:
    """格式化全屋状态，设备较多时省略明细。"""
    parts = [get_localized_text("global_status", language)]
    parts.append("")
    parts.append(get_localized_text("summary_header", language))
    parts.extend(_overview(devices, language, always_count=True))

    totals = Counter(device.device_class or "unknown" for device in devices)
    online = Counter(device.device_class or "unknown" for device in devices if device.is_online)
    if len(totals) > 1:
        parts.append("")
        parts.append(get_localized_text("device_types", language))
        for device_class, total in totals.items():
            parts.append(f"• {device_class}: {online[device_class]}/{total} online")

    if include_details and len(devices) <= MAX_GLOBAL_DETAILS:
        parts.append("")
        parts.append(get_localized_text("details_header", language))
        for device in devices:
            parts.append(f"• **{device.name}** ({device.device_class}): {device.summary}")
    elif include_details:
        parts.append("")
        parts.append(get_localized_text("too_many_devices", language))

    return "\n".join(parts)


def format_single_device_status(device: DeviceStatus, language: Language | str | None = None) -> str:
    """格式化单个设备状态。"""
    parts = [f"🔧 **{device.name}** ({device.device_class})", f"Status: {device.summary}"]
    if not device.is_online:
        parts.append(f"⚠️ {get_localized_text('device_offline', language)}")
    return "\n".join(parts)


def format_multiple_device_status(
    devices: list[DeviceStatus],
    language: Language | str | None = None,
) -> str:
    """多个设备同名命中时逐个列出。"""
    parts = [get_localized_text("device_count", language, count=len(devices))]
    for device in devices:
        parts.append(format_single_device_status(device, language))
    return "\n\n".join(parts)


def _overview(
    devices: list[DeviceStatus],
    language: Language | str | None,
    *,
    always_count: bool = False,
) -> list[str]:
    """设备数量与在线 / 离线统计。"""
    lines: list[str] = []
    if devices or always_count:
        lines.append(get_localized_text("device_count", language, count=len(devices)))
    online = sum(1 for device in devices if device.is_online)
    offline = len(devices) - online
    if online:
        lines.append(f"{get_localized_text('device_online', language)}: {online}")
    if offline:
        lines.append(f"{get_localized_text('device_offline', language)}: {offline}")
    return lines
