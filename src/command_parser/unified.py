"""LLM 优先的统一解析，失败时回退到确定性引擎。"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Iterable

from command_parser.parser import CommandParser, UnifiedParseResult
from command_parser.prompt import DEFAULT_MAX_DEVICES, build_unified_prompt
from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.lexicon import DEFAULT_LANGUAGE
from home_interpreter.models import (
    ALL_ROOMS,
    CommandResult,
    Device,
    Language,
    ParsedCommand,
    StatusResult,
)
from home_interpreter.orchestrator import handle_query, interpret_command
from home_interpreter.semantic import SemanticResolver

logger = logging.getLogger(__name__)

Completer = Callable[[str], Awaitable[str]]


@dataclass
class UnifiedOutcome:
    """统一解析结果。method 为 "unified" 或 "fallback"。"""

    method: str
    result: CommandResult | StatusResult
    parse_result: UnifiedParseResult | None = None
    fallback_reason: str | None = None


async def parse_with_llm(
    text: str,
    rooms: list[str] | tuple[str, ...],
    language: Language | str | None,
    completer: Completer,
    *,
    devices: Iterable[Device] | None = None,
    semantic_resolver: SemanticResolver | None = None,
    parser: CommandParser | None = None,
    max_devices: int = DEFAULT_MAX_DEVICES,
    config: EngineConfig | None = None,
) -> UnifiedOutcome:
    """一次 LLM 调用完成命令解析与房间匹配。

    LLM 调用失败、输出无法解析或缺少动作时，改用确定性引擎解释；
    LLM 识别为状态查询时交给确定性的状态查询路径。
    """
    config = config or DEFAULT_CONFIG
    lang = Language.parse(language) or DEFAULT_LANGUAGE
    parser = parser or CommandParser()
    device_list = list(devices) if devices is not None else None

    if not isinstance(text, str) or not text.strip() or len(text) > config.max_text_length:
        result = await interpret_command(text, lang, rooms, config=config)
        return UnifiedOutcome(method="fallback", result=result, fallback_reason="invalid_input")

    prompt = build_unified_prompt(text, rooms, lang, device_list, max_devices)
    try:
        raw = await completer(prompt)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning("unified_llm_failed error_type=%s", type(exc).__name__)
        return await _fallback(text, lang, rooms, semantic_resolver, config, "llm_error", None)

    parsed = parser.parse(raw, rooms)
    if parsed.fallback_needed:
        return await _fallback(text, lang, rooms, semantic_resolver, config, "unusable_output", parsed)

    if parsed.is_status_query:
        status = await handle_query(
            text,
            lang,
            rooms,
            devices=device_list,
            semantic_resolver=semantic_resolver,
            config=config,
        )
        return UnifiedOutcome(method="unified", result=status, parse_result=parsed)

    if not parsed.success or parsed.command is None:
        result = CommandResult(
            success=False,
            original_text=text,
            language=lang,
            room_matching=tuple(parsed.room_matching),
            error=parsed.error or "llm_reported_failure",
            suggestions=tuple(parsed.suggestions),
        )
        return UnifiedOutcome(method="unified", result=result, parse_result=parsed)

    command = _expand_all_rooms(parsed.command, rooms, text)
    if command is None:
        return await _fallback(text, lang, rooms, semantic_resolver, config, "no_rooms", parsed)

    confidences = [validation.confidence for validation in parsed.room_matching]
    confidence = min(confidences) if confidences else config.max_non_exact_confidence
    result = CommandResult(
        success=True,
        original_text=text,
        language=lang,
        command=command,
        room_matching=tuple(parsed.room_matching),
        confidence=round(confidence, 4),
    )
    logger.info(
        "unified_parse commands=%d confidence=%.3f degraded=%s",
        len(command.flatten()),
        confidence,
        parsed.degraded,
    )
    return UnifiedOutcome(method="unified", result=result, parse_result=parsed)


async def _fallback(
    text: str,
    language: Language,
    rooms: list[str] | tuple[str, ...],
    semantic_resolver: SemanticResolver | None,
    config: EngineConfig,
    reason: str,
    parsed: UnifiedParseResult | None,
) -> UnifiedOutcome:
    logger.info("unified_fallback reason=%s", reason)
    result = await interpret_command(
        text, language, rooms, semantic_resolver=semantic_resolver, config=config
    )
    return UnifiedOutcome(
        method="fallback",
        result=result,
        parse_result=parsed,
        fallback_reason=reason,
    )


def _expand_all_rooms(
    command: ParsedCommand,
    rooms: list[str] | tuple[str, ...],
    text: str,
) -> ParsedCommand | None:
    """未指明房间的命令展开到全部已知房间，没有房间时返回 None。"""
    expanded: list[ParsedCommand] = []
    for sub in command.flatten():
        if sub.room != ALL_ROOMS:
            expanded.append(sub)
            continue
        if not rooms:
            return None
        expanded.extend(replace(sub, room=room) for room in rooms)
    if len(expanded) == 1:
        return expanded[0]
    return ParsedCommand(commands=tuple(expanded), source_text=text)
