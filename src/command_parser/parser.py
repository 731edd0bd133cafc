"""Strict parser for unified LLM outputs."""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Iterable

from home_interpreter.config import EngineConfig
from home_interpreter.entity_resolver import validate_match
from home_interpreter.models import (
    ALL_ROOMS,
    MatchCandidate,
    ParsedCommand,
    RoomMatchValidation,
)

logger = logging.getLogger(__name__)

VALID_METHODS = {"exact", "fuzzy", "semantic"}
VALID_SCOPES = {"room", "global"}
MAX_NON_EXACT_CONFIDENCE = 0.95
_CONTROL_CHARS_RE = re.compile(r"[\r\n\t]")
_WHITESPACE_RE = re.compile(r"\s+")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class UnifiedParseResult:
    success: bool
    raw_output: str
    command: ParsedCommand | None = None
    query_type: str | None = None
    query_scope: str | None = None
    room: str | None = None
    room_matching: list[RoomMatchValidation] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    degraded: bool = False
    fallback_needed: bool = False
    error: str | None = None
    suggestions: list[str] = field(default_factory=list)

    @property
    def is_status_query(self) -> bool:
        return self.query_type is not None


@dataclass
class ParserMetrics:
    total_outputs: int = 0
    degraded_outputs: int = 0
    fallback_outputs: int = 0

    @property
    def fallback_ratio(self) -> float:
        if self.total_outputs == 0:
            return 0.0
        return self.fallback_outputs / self.total_outputs

    def record(self, *, degraded: bool, fallback: bool) -> None:
        self.total_outputs += 1
        if degraded:
            self.degraded_outputs += 1
        if fallback:
            self.fallback_outputs += 1


@dataclass
class CommandParserConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    max_log_chars: int = 400


class CommandParser:
    """Parse unified LLM outputs into structured commands."""

    def __init__(
        self,
        config: CommandParserConfig | None = None,
        logger_override: logging.Logger | None = None,
    ) -> None:
        self.config = config or CommandParserConfig()
        self.metrics = ParserMetrics()
        self._logger = logger_override or logger

    def parse(
        self,
        raw_output: object,
        available_rooms: list[str] | tuple[str, ...],
    ) -> UnifiedParseResult:
        """将 LLM 输出解析为结构化结果。"""
        return parse_unified_output(
            raw_output,
            available_rooms,
            config=self.config,
            logger_override=self._logger,
            metrics=self.metrics,
        )


def parse_unified_output(
    raw_output: object,
    available_rooms: list[str] | tuple[str, ...],
    *,
    config: CommandParserConfig | None = None,
    logger_override: logging.Logger | None = None,
    metrics: ParserMetrics | None = None,
) -> UnifiedParseResult:
    """解析统一 prompt 的 LLM 输出。

    支持 JSON 文本（可夹杂说明文字）或已解析的 dict。
    结构不可用时 fallback_needed 为 True，由调用方改走确定性解析。
    """
    config = config or CommandParserConfig()
    metrics = metrics or ParserMetrics()
    active_logger = logger_override or logger

    errors: list[str] = []
    payload: dict[str, object] | None = None
    raw_text = ""

    if isinstance(raw_output, dict):
        payload = raw_output
        try:
            raw_text = json.dumps(raw_output, ensure_ascii=False)
        except (TypeError, ValueError):
            raw_text = repr(raw_output)
    elif isinstance(raw_output, str):
        raw_text = raw_output
        if not raw_text.strip():
            errors.append("output_empty")
        else:
            payload = _load_json_object(raw_text)
            if payload is None:
                errors.append("json_decode_error")
    else:
        errors.append("output_not_string")

    result = UnifiedParseResult(success=False, raw_output=raw_text, errors=errors)

    if payload is not None:
        _fill_result(result, payload, available_rooms, config)

    if result.fallback_needed or payload is None:
        result.fallback_needed = True
        result.degraded = True
        result.success = False
        result.command = None
    elif errors:
        result.degraded = True

    metrics.record(degraded=result.degraded, fallback=result.fallback_needed)
    _log_parse_result(
        active_logger,
        raw_text,
        result.errors,
        result,
        metrics,
        config.max_log_chars,
    )
    return result


def _fill_result(
    result: UnifiedParseResult,
    payload: dict[str, object],
    available_rooms: list[str] | tuple[str, ...],
    config: CommandParserConfig,
) -> None:
    """按 payload 类型填充命令、状态查询或失败信息。"""
    result.room_matching = _parse_room_matching(
        payload.get("room_matching"), available_rooms, result.errors, config
    )

    if payload.get("success") is False:
        result.error = _coerce_text(payload.get("error")) or "llm_reported_failure"
        result.suggestions = _coerce_text_list(payload.get("suggestions"))
        result.errors.append("llm_reported_failure")
        result.degraded = True
        return

    single = payload.get("command")
    multiple = payload.get("commands")

    if isinstance(single, dict):
        command = _parse_command_object(single, result.errors)
        if command is None:
            result.fallback_needed = True
            return
        result.command = command
    elif isinstance(multiple, list) and multiple:
        parsed: list[ParsedCommand] = []
        for entry in multiple:
            if not isinstance(entry, dict):
                result.errors.append("command_item_invalid")
                result.fallback_needed = True
                return
            command = _parse_command_object(entry, result.errors)
            if command is None:
                result.fallback_needed = True
                return
            parsed.append(command)
        result.command = parsed[0] if len(parsed) == 1 else ParsedCommand(commands=tuple(parsed))
    elif _has_value(payload.get("query_type")):
        result.query_type = _coerce_text(payload.get("query_type")) or "status"
        scope = _coerce_text(payload.get("scope")).lower()
        room = _coerce_text(payload.get("room")) or None
        if scope not in VALID_SCOPES:
            if scope:
                result.errors.append("query_scope_invalid")
            scope = "room" if room else "global"
        result.query_scope = scope
        result.room = room
    else:
        result.errors.append("no_command_or_query")
        result.fallback_needed = True
        return

    result.success = True


def _parse_command_object(
    item: dict[str, object],
    errors: list[str],
) -> ParsedCommand | None:
    """解析单个命令对象，缺少动作时返回 None。"""
    action = _coerce_text(item.get("command"))
    if not action:
        errors.append("command_action_missing")
        return None
    action = _WHITESPACE_RE.sub("_", action.lower())

    device_id = _coerce_text(item.get("device_id")) or None
    room = _coerce_text(item.get("room")) or None
    if device_id is None and room is None:
        errors.append("command_room_missing")
        room = ALL_ROOMS
    if device_id is not None and room is not None:
        room = None

    device_filter = _coerce_text(item.get("device_filter")) or None

    parameters: dict[str, int | float | str] = {}
    raw_parameters = item.get("parameters")
    if isinstance(raw_parameters, dict):
        for key, value in raw_parameters.items():
            if isinstance(value, bool) or not isinstance(value, (int, float, str)):
                errors.append("command_parameter_invalid")
                continue
            parameters[str(key)] = value
    elif _has_value(raw_parameters):
        errors.append("command_parameters_invalid")

    return ParsedCommand(
        command=action,
        room=room,
        device_id=device_id,
        device_filter=device_filter,
        parameters=parameters,
        source_text=_serialize_command_object(item),
    )


def _parse_room_matching(
    value: object,
    available_rooms: list[str] | tuple[str, ...],
    errors: list[str],
    config: CommandParserConfig,
) -> list[RoomMatchValidation]:
    """解析 room_matching，支持单条对象与 {原文: 对象} 映射两种写法。"""
    if not _has_value(value):
        return []
    if not isinstance(value, dict):
        errors.append("room_matching_invalid")
        return []

    if "matched" in value or "original" in value:
        entries = [(_coerce_text(value.get("original")), value)]
    else:
        entries = [
            (str(original), entry)
            for original, entry in value.items()
            if isinstance(entry, dict)
        ]

    validations: list[RoomMatchValidation] = []
    for original, entry in entries:
        match = _match_from_entry(entry, errors)
        validation = validate_match(
            original or (match.value or ""), match, available_rooms, config=config.engine
        )
        if not validation.valid and match.matched:
            errors.append("room_matching_not_in_list")
        validations.append(validation)
    return validations


def _match_from_entry(entry: dict[str, object], errors: list[str]) -> MatchCandidate:
    """把 LLM 的匹配描述转换为满足不变量的 MatchCandidate。"""
    matched = _coerce_text(entry.get("matched"))
    alternatives = tuple(_coerce_text_list(entry.get("alternatives")))
    if not matched:
        return MatchCandidate.not_found(alternatives)

    method = _coerce_text(entry.get("method")).lower()
    if method not in VALID_METHODS:
        if method:
            errors.append("room_matching_method_invalid")
        method = "semantic"

    confidence = _coerce_confidence(entry.get("confidence"))
    if confidence is None:
        errors.append("room_matching_confidence_invalid")
        confidence = 0.0

    if method == "exact":
        confidence = 1.0
    else:
        confidence = min(confidence, MAX_NON_EXACT_CONFIDENCE)

    reasoning = _coerce_text(entry.get("reasoning")) or None
    return MatchCandidate(
        value=matched,
        confidence=confidence,
        method=method,  # type: ignore[arg-type]
        reasoning=reasoning,
        suggestions=alternatives,
    )


def _load_json_object(content: str) -> dict[str, object] | None:
    """先整体解析，失败再提取第一个花括号对象。"""
    try:
        data = json.loads(content)
        return data if isinstance(data, dict) else None
    except json.JSONDecodeError:
        pass
    matched = _JSON_OBJECT_RE.search(content)
    if not matched:
        return None
    try:
        data = json.loads(matched.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _coerce_text(value: object) -> str:
    """将值安全转换为去空白字符串。"""
    return value.strip() if isinstance(value, str) else ""


def _coerce_text_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _coerce_confidence(value: object) -> float | None:
    """取 [0, 1] 范围内的置信度，非法取值返回 None。"""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return max(0.0, min(1.0, number))


def _has_value(value: object) -> bool:
    """判断字段是否存在且非空。"""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _serialize_command_object(item: dict[str, object]) -> str:
    """序列化命令对象用于日志或调试。"""
    try:
        return json.dumps(item, ensure_ascii=False, sort_keys=True)
    except (TypeError, ValueError):
        return repr(item)


def _log_parse_result(
    active_logger: logging.Logger,
    raw_output: str,
    errors: Iterable[str],
    result: UnifiedParseResult,
    metrics: ParserMetrics,
    max_log_chars: int,
) -> None:
    """记录解析结果、错误与统计指标。"""
    error_text = ",".join(errors) if errors else "-"
    parsed_count = len(result.command.flatten()) if result.command is not None else 0
    active_logger.info(
        "command_parser parsed=%d query=%s degraded=%s fallback=%s errors=%s fallback_ratio=%.3f raw=%s",
        parsed_count,
        result.query_type or "-",
        result.degraded,
        result.fallback_needed,
        _sanitize_log_value(error_text, max_log_chars),
        metrics.fallback_ratio,
        _sanitize_log_value(raw_output, max_log_chars),
    )


def _sanitize_log_value(value: str, max_len: int) -> str:
    """清理日志文本中的控制字符并截断长度。"""
    if not isinstance(value, str):
        value = repr(value)
    cleaned = _CONTROL_CHARS_RE.sub(" ", value)
    if len(cleaned) > max_len:
        cleaned = cleaned[: max_len - 3] + "..."
    return cleaned
