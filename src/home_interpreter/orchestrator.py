"""查询 / 命令编排。

分类后把状态查询与控制命令分派到各自的解析路径，
解析房间与设备，组装交给外部执行方的结构化结果。
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import replace
from typing import Callable, Iterable

from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.entity_resolver import (
    comprehensive_resolve,
    scan_mentions,
    validate_match,
)
from home_interpreter.extractor import extract, suggest_improvement
from home_interpreter.home_state import (
    StatusRetriever,
    filter_by_room,
    filter_by_type,
    find_by_name,
    snapshot_status,
)
from home_interpreter.lexicon import DEFAULT_LANGUAGE, canonical_room_for, room_aliases
from home_interpreter.models import (
    ALL_ROOMS,
    CommandResult,
    Device,
    DeviceStatus,
    Language,
    ParsedCommand,
    QueryType,
    RoomMatchValidation,
    StatusQuery,
    StatusResult,
)
from home_interpreter.multi_command import detect_multi, split
from home_interpreter.semantic import SemanticResolver
from home_interpreter.similarity import rank_by_similarity
from home_interpreter.status_query import classify

logger = logging.getLogger(__name__)

Formatter = Callable[[StatusResult, Language, bool], str]

_CONTROL_CHARS_RE = re.compile(r"[\r\n\t]")
_DEVICE_SUGGESTION_MIN_SIMILARITY = 0.3
_ROOM_SUGGESTION_LIMIT = 5


async def handle_query(
    text: object,
    language: Language | str | None,
    rooms: list[str] | tuple[str, ...],
    *,
    devices: Iterable[Device] | None = None,
    semantic_resolver: SemanticResolver | None = None,
    status_retriever: StatusRetriever | None = None,
    formatter: Formatter | None = None,
    include_details: bool = True,
    config: EngineConfig | None = None,
) -> StatusResult | CommandResult:
    """解释一句用户输入。

    状态查询（置信度达到阈值）走状态路径，其余按控制命令解释。

    Args:
        text: 原始用户输入
        language: 语言代码
        rooms: 当前已知房间名，每次调用由调用方提供
        devices: 可选设备快照，用于选出状态查询的目标设备
        semantic_resolver: 可选语义兜底回调
        status_retriever: 设备状态读取回调，默认读取快照能力值
        formatter: 可选格式化回调，提供时生成 formatted_text
        include_details: 传给格式化回调
        config: 可选阈值配置

    Returns:
        StatusResult 或 CommandResult

    Raises:
        TypeError: rooms 不是 list 或 tuple
    """
    _check_rooms(rooms)
    config = config or DEFAULT_CONFIG
    lang = Language.parse(language) or DEFAULT_LANGUAGE

    query = classify(text, lang, config=config)
    if query.type is None or query.confidence < config.status_min_confidence:
        return await interpret_command(
            text, lang, rooms, semantic_resolver=semantic_resolver, config=config
        )

    device_list = list(devices) if devices is not None else None
    result = await _status_path(query, lang, rooms, device_list, semantic_resolver, config)

    if result.success and result.targets:
        retriever = status_retriever or snapshot_status
        statuses = await _retrieve_statuses(result.targets, retriever)
        result = replace(result, devices=tuple(statuses))

    if formatter is not None:
        result = replace(result, formatted_text=formatter(result, lang, include_details))

    logger.info(
        "status_query text=%s type=%s room=%s device_type=%s targets=%d success=%s error=%s",
        _sanitize_log_value(text, config.max_log_chars),
        result.query_type.value if result.query_type else "-",
        result.room or "-",
        result.device_type or "-",
        len(result.targets),
        result.success,
        result.error or "-",
    )
    return result


async def interpret_command(
    text: object,
    language: Language | str | None,
    rooms: list[str] | tuple[str, ...],
    *,
    semantic_resolver: SemanticResolver | None = None,
    config: EngineConfig | None = None,
) -> CommandResult:
    """把控制命令解释为 ParsedCommand，并把房间解析为已知房间名。

    复合命令按原文顺序拆分；未提到房间的命令展开到全部已知房间。
    """
    _check_rooms(rooms)
    config = config or DEFAULT_CONFIG
    lang = Language.parse(language) or DEFAULT_LANGUAGE

    if not isinstance(text, str) or not text.strip():
        return CommandResult(success=False, original_text="", language=lang, error="empty_input")
    if len(text) > config.max_text_length:
        return CommandResult(success=False, original_text=text, language=lang, error="text_too_long")

    is_multi = detect_multi(text, lang)
    sub_commands = split(text, lang, rooms, config=config)

    resolved: list[ParsedCommand] = []
    validations: list[RoomMatchValidation] = []
    validation_cache: dict[str, RoomMatchValidation] = {}
    suggestions: list[str] = []
    error: str | None = None
    confidence = 1.0

    for sub in sub_commands:
        entities = sub.entities
        if entities is not None:
            confidence = min(confidence, entities.confidence)

        if sub.room == ALL_ROOMS:
            if entities is not None and not entities.actions and not entities.device_types:
                error = error or "command_not_understood"
                hint = suggest_improvement(entities)
                if hint:
                    suggestions.append(hint)
                continue
            if not rooms:
                error = error or "no_rooms"
                continue
            for room in rooms:
                resolved.append(replace(sub, room=room))
            continue

        validation = validation_cache.get(sub.room)
        if validation is None:
            validation = await resolve_room(
                sub.room, rooms, lang, semantic_resolver, config=config
            )
            validation_cache[sub.room] = validation
            validations.append(validation)
        if not validation.match.matched or validation.match.value is None:
            error = error or "room_not_found"
            suggestions.extend(validation.match.suggestions or tuple(rooms[:_ROOM_SUGGESTION_LIMIT]))
            continue
        confidence = min(confidence, validation.confidence)
        resolved.append(replace(sub, room=validation.match.value))

    command: ParsedCommand | None = None
    if len(resolved) == 1:
        command = resolved[0]
    elif resolved:
        command = ParsedCommand(commands=tuple(resolved), source_text=text)

    success = error is None and command is not None
    if command is None and error is None:
        error = "command_not_understood"

    logger.info(
        "command text=%s multi=%s commands=%d success=%s error=%s confidence=%.3f",
        _sanitize_log_value(text, config.max_log_chars),
        is_multi,
        len(resolved),
        success,
        error or "-",
        confidence if resolved else 0.0,
    )

    return CommandResult(
        success=success,
        original_text=text,
        language=lang,
        command=command,
        room_matching=tuple(validations),
        confidence=round(confidence, 4) if resolved else 0.0,
        error=error,
        suggestions=_unique(suggestions),
    )


async def resolve_room(
    mention: str,
    rooms: list[str] | tuple[str, ...],
    language: Language | str | None,
    semantic_resolver: SemanticResolver | None = None,
    *,
    config: EngineConfig | None = None,
) -> RoomMatchValidation:
    """把房间提及解析为已知房间，并做列表校验。

    依次尝试原始提及、各语言的同义别名、整句扫描，最后才是语义兜底。
    """
    config = config or DEFAULT_CONFIG
    canonical = canonical_room_for(mention)
    if canonical is None:
        extracted = extract(mention, language, config=config)
        canonical = extracted.rooms[0] if extracted.rooms else None
    aliases = room_aliases(canonical) if canonical else []

    match = await comprehensive_resolve(
        mention,
        rooms,
        language,
        None,
        aliases=aliases,
        config=config,
    )
    if not match.matched:
        # 提及中夹带了其他词时，扫描其中的已知房间名
        scanned = scan_mentions(mention, rooms, language, config=config)
        if scanned:
            match = max(scanned, key=lambda item: item.confidence)
    if not match.matched and semantic_resolver is not None:
        match = await comprehensive_resolve(
            mention, rooms, language, semantic_resolver, aliases=aliases, config=config
        )
    return validate_match(mention, match, rooms, config=config)


def detect_device_type(text: str | None, language: Language | str | None) -> str | None:
    """从目标文本中识别设备类型（规范类型名）。"""
    if not text:
        return None
    entities = extract(text, language)
    return entities.device_types[0] if entities.device_types else None


async def _status_path(
    query: StatusQuery,
    language: Language,
    rooms: list[str] | tuple[str, ...],
    devices: list[Device] | None,
    semantic_resolver: SemanticResolver | None,
    config: EngineConfig,
) -> StatusResult:
    """按查询类型选出目标设备。"""
    all_devices = devices or []
    query_type = query.type

    if query_type == QueryType.GLOBAL_STATUS:
        return StatusResult(
            success=True,
            query=query,
            query_type=query_type,
            targets=tuple(all_devices[: config.max_devices]),
            confidence=query.confidence,
        )

    room_match: RoomMatchValidation | None = None
    room_name: str | None = None
    if query.room:
        room_match = await resolve_room(
            query.room, rooms, language, semantic_resolver, config=config
        )
        if room_match.match.matched:
            room_name = room_match.match.value

    if query_type == QueryType.ROOM_STATUS:
        if room_name is None:
            return _room_failure(query, rooms, room_match)
        return StatusResult(
            success=True,
            query=query,
            query_type=query_type,
            room=room_name,
            room_match=room_match,
            targets=tuple(filter_by_room(all_devices, room_name)[: config.max_devices]),
            confidence=round(min(query.confidence, room_match.confidence), 4),
        )

    # 设备名优先：完整短语（含房间）命中具体设备时按设备查询处理
    named = _find_named(query, all_devices, room_name)
    if named:
        return StatusResult(
            success=True,
            query=query,
            query_type=QueryType.DEVICE_STATUS,
            room=room_name,
            room_match=room_match,
            targets=tuple(named[: config.max_devices]),
            confidence=query.confidence,
        )

    if query.room and room_name is None:
        return _room_failure(query, rooms, room_match)

    device_type = detect_device_type(query.target, language)
    if device_type is None and query_type == QueryType.DEVICE_STATUS and room_name is not None:
        # 只提到房间的设备查询按房间状态处理
        return StatusResult(
            success=True,
            query=query,
            query_type=QueryType.ROOM_STATUS,
            room=room_name,
            room_match=room_match,
            targets=tuple(filter_by_room(all_devices, room_name)[: config.max_devices]),
            confidence=query.confidence,
        )

    if device_type is not None:
        targets = filter_by_type(all_devices, device_type)
        if room_name is not None:
            targets = filter_by_room(targets, room_name)
        confidence = query.confidence
        if room_match is not None:
            confidence = min(confidence, room_match.confidence)
        return StatusResult(
            success=True,
            query=query,
            query_type=QueryType.DEVICE_TYPE_STATUS,
            room=room_name,
            room_match=room_match,
            device_type=device_type,
            targets=tuple(targets[: config.max_devices]),
            confidence=round(confidence, 4),
        )

    if query_type == QueryType.DEVICE_TYPE_STATUS:
        return StatusResult(
            success=False,
            query=query,
            query_type=query_type,
            room=room_name,
            room_match=room_match,
            error="device_type_unknown",
            suggestions=_device_suggestions(query.target, all_devices, rooms),
        )

    if not query.target:
        return StatusResult(
            success=False,
            query=query,
            query_type=query_type,
            error="no_target",
            suggestions=tuple(rooms[:_ROOM_SUGGESTION_LIMIT]),
        )

    if room_name is None:
        # 目标本身可能是词表之外的房间名
        target_match = await resolve_room(
            query.target, rooms, language, semantic_resolver, config=config
        )
        if target_match.match.matched and target_match.match.value is not None:
            return StatusResult(
                success=True,
                query=query,
                query_type=QueryType.ROOM_STATUS,
                room=target_match.match.value,
                room_match=target_match,
                targets=tuple(
                    filter_by_room(all_devices, target_match.match.value)[: config.max_devices]
                ),
                confidence=round(min(query.confidence, target_match.confidence), 4),
            )

    if devices is None:
        # 没有设备快照时无法判断目标是哪台设备
        return StatusResult(
            success=False,
            query=query,
            query_type=QueryType.DEVICE_STATUS,
            room=room_name,
            room_match=room_match,
            error="no_target",
            suggestions=tuple(rooms[:_ROOM_SUGGESTION_LIMIT]),
        )

    return StatusResult(
        success=False,
        query=query,
        query_type=QueryType.DEVICE_STATUS,
        room=room_name,
        room_match=room_match,
        error="device_not_found",
        suggestions=_device_suggestions(query.target, all_devices, rooms),
    )


def _find_named(query: StatusQuery, devices: list[Device], room_name: str | None) -> list[Device]:
    if not query.target or not devices:
        return []
    if query.room:
        named = find_by_name(devices, f"{query.room} {query.target}")
        if named:
            return named
    if query.type == QueryType.DEVICE_TYPE_STATUS:
        return []
    named = find_by_name(devices, query.target)
    if room_name is not None:
        named = filter_by_room(named, room_name)
    return named


def _room_failure(
    query: StatusQuery,
    rooms: list[str] | tuple[str, ...],
    room_match: RoomMatchValidation | None,
) -> StatusResult:
    suggestions: tuple[str, ...] = ()
    if room_match is not None:
        suggestions = room_match.match.suggestions
    return StatusResult(
        success=False,
        query=query,
        query_type=query.type,
        room_match=room_match,
        error="room_not_found",
        suggestions=suggestions or tuple(rooms[:_ROOM_SUGGESTION_LIMIT]),
    )


def _device_suggestions(
    target: str | None,
    devices: list[Device],
    rooms: list[str] | tuple[str, ...],
) -> tuple[str, ...]:
    """相近的设备名（相似度高于下限），没有时给出房间名。"""
    names = [device.name for device in devices if device.name]
    ranked = [
        name
        for name, score in rank_by_similarity(target or "", names, 3)
        if score > _DEVICE_SUGGESTION_MIN_SIMILARITY
    ]
    if ranked:
        return tuple(ranked)
    return tuple(rooms[:_ROOM_SUGGESTION_LIMIT])


async def _retrieve_statuses(
    targets: Iterable[Device],
    retriever: StatusRetriever,
) -> list[DeviceStatus]:
    """按顺序读取设备状态，单个设备失败时记为状态不可用。"""
    statuses: list[DeviceStatus] = []
    for device in targets:
        try:
            statuses.append(await retriever(device))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "status_retrieval_failed device_id=%s error_type=%s",
                device.id,
                type(exc).__name__,
            )
            statuses.append(
                DeviceStatus(
                    id=device.id,
                    name=device.name,
                    device_class=device.device_class,
                    summary="Status unavailable",
                    is_online=False,
                    room=device.room,
                )
            )
    return statuses


def _check_rooms(rooms: object) -> None:
    if not isinstance(rooms, (list, tuple)):
        raise TypeError(f"rooms must be a list or tuple of names, got {type(rooms).__name__}")


def _sanitize_log_value(value: object, max_chars: int) -> str:
    text = _CONTROL_CHARS_RE.sub(" ", str(value or ""))
    if len(text) > max_chars:
        return text[:max_chars] + "..."
    return text


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(value for value in values if value))
