"""意图与实体抽取。

基于按语言划分的词表，从原始文本中抽取房间、动作、设备类型、
数值与修饰词，并给出抽取置信度。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.lexicon import (
    LEXICONS,
    Lexicon,
    TermHit,
    contains_term,
    find_terms,
    get_lexicon,
    other_lexicons,
)
from home_interpreter.models import Language, ResolvedEntities
from home_interpreter.text import normalize

logger = logging.getLogger(__name__)

_TEMPERATURE_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(?:°\s*c?|(?:degrees?|celsius|grader|grad|grados|gradi|graus|graden|degres|c)(?!\w))"
)
_PERCENTAGE_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(?:%|(?:percent|procent|prozent|pourcent|por ciento|per cento|por cento)(?!\w))"
)

_PHRASE_NORMALIZATIONS = {
    "switch on": "turn on",
    "switch off": "turn off",
    "power on": "turn on",
    "power off": "turn off",
    "shut off": "turn off",
    "shut down": "turn off",
    "activate": "turn on",
    "deactivate": "turn off",
    "enable": "turn on",
    "disable": "turn off",
    "illuminate": "turn on",
}

_ALL_MODIFIER = "all"
_SOME_MODIFIER = "some"


@dataclass(frozen=True)
class PreprocessedCommand:
    """预处理后的命令。"""

    original: str
    processed: str
    entities: ResolvedEntities
    is_multi_command: bool
    suggestion: str | None = None


def extract(
    text: object,
    language: Language | str | None,
    *,
    config: EngineConfig | None = None,
) -> ResolvedEntities:
    """从文本中抽取实体。

    Args:
        text: 原始用户输入
        language: 语言代码，未知语言使用英语词表
        config: 可选阈值配置

    Returns:
        ResolvedEntities，无效输入返回零置信度的空结果
    """
    config = config or DEFAULT_CONFIG
    lexicon = get_lexicon(language)
    lang = lexicon.language

    if not isinstance(text, str) or not text.strip():
        return ResolvedEntities(text="", language=lang, confidence=0.0)

    normalized = normalize(text)

    room_hits = _find_with_fallback(normalized, lexicon, "rooms")
    action_hits = _find_with_fallback(normalized, lexicon, "actions")
    device_hits = _find_with_fallback(normalized, lexicon, "device_types")

    rooms = _unique(hit.canonical for hit in room_hits)
    room_mentions = _unique(hit.surface for hit in room_hits)
    actions = _unique(hit.canonical for hit in action_hits)
    device_types = _unique(hit.canonical for hit in device_hits)

    values = _extract_values(normalized)
    modifiers = _extract_modifiers(normalized)

    if actions:
        intent = actions[0]
    elif _ALL_MODIFIER in modifiers:
        intent = "turn_off"
    else:
        intent = "turn_on"

    confidence = calculate_confidence(
        text,
        has_action=bool(actions),
        has_room=bool(rooms),
        has_device=bool(device_types),
        config=config,
    )

    return ResolvedEntities(
        text=text,
        language=lang,
        rooms=rooms,
        room_mentions=room_mentions,
        actions=actions,
        device_types=device_types,
        values=values,
        modifiers=modifiers,
        intent=intent,
        confidence=confidence,
    )


def calculate_confidence(
    text: str,
    *,
    has_action: bool,
    has_room: bool,
    has_device: bool,
    config: EngineConfig | None = None,
) -> float:
    """计算抽取置信度。

    基础分加上动作、房间、设备类型的加分；
    既无房间也无设备类型、或文本过短时扣分。结果裁剪到 [0, 1]。
    """
    config = config or DEFAULT_CONFIG
    score = config.base_confidence
    if has_action:
        score += config.action_bonus
    if has_room:
        score += config.room_bonus
    if has_device:
        score += config.device_bonus
    if not has_room and not has_device:
        score -= config.missing_target_penalty
    if len(text.strip()) < config.short_text_length:
        score -= config.short_text_penalty
    return round(max(0.0, min(1.0, score)), 4)


def preprocess_command(
    text: object,
    language: Language | str | None,
    *,
    config: EngineConfig | None = None,
) -> PreprocessedCommand:
    """去除客套词、统一常见说法后再抽取。"""
    from home_interpreter.multi_command import detect_multi

    config = config or DEFAULT_CONFIG
    lexicon = get_lexicon(language)
    original = text if isinstance(text, str) else ""

    processed = original.strip()
    for filler in lexicon.filler_words:
        processed = re.sub(rf"\b{re.escape(filler)}\b", " ", processed, flags=re.IGNORECASE)
    if lexicon.language == Language.EN:
        for phrase, replacement in _PHRASE_NORMALIZATIONS.items():
            processed = re.sub(rf"\b{phrase}\b", replacement, processed, flags=re.IGNORECASE)
    processed = re.sub(r"\s+", " ", processed).strip(" ,")

    entities = extract(processed, lexicon.language, config=config)
    return PreprocessedCommand(
        original=original,
        processed=processed,
        entities=entities,
        is_multi_command=detect_multi(processed, lexicon.language),
        suggestion=suggest_improvement(entities),
    )


def suggest_improvement(entities: ResolvedEntities) -> str | None:
    """低置信度时给出改写建议，置信度足够时返回 None。"""
    if entities.confidence >= 0.7:
        return None
    missing: list[str] = []
    if not entities.actions:
        missing.append("an action (turn on, turn off, dim, ...)")
    if not entities.rooms:
        missing.append("a room")
    if not entities.device_types:
        missing.append("a device type (lights, speaker, ...)")
    if not missing:
        return None
    return "Try to include " + ", ".join(missing) + "."


def _find_with_fallback(normalized: str, lexicon: Lexicon, category: str) -> list[TermHit]:
    """先查声明语言的词表，无命中时依次尝试其他语言。"""
    hits = find_terms(normalized, getattr(lexicon, category))
    if hits:
        return hits
    for other in other_lexicons(lexicon):
        hits = find_terms(normalized, getattr(other, category))
        if hits:
            logger.debug(
                "extractor cross_language category=%s declared=%s matched=%s",
                category,
                lexicon.language.value,
                other.language.value,
            )
            return hits
    return []


def _extract_values(normalized: str) -> dict[str, int | float]:
    """抽取温度与百分比。"""
    values: dict[str, int | float] = {}
    temperature = _TEMPERATURE_RE.search(normalized)
    if temperature:
        values["temperature"] = _to_number(temperature.group(1))
    percentage = _PERCENTAGE_RE.search(normalized)
    if percentage:
        values["percentage"] = _to_number(percentage.group(1))
    return values


def _extract_modifiers(normalized: str) -> tuple[str, ...]:
    modifiers: list[str] = []
    all_words = tuple(word for lex in LEXICONS.values() for word in lex.all_words)
    some_words = tuple(word for lex in LEXICONS.values() for word in lex.some_words)
    if contains_term(normalized, all_words):
        modifiers.append(_ALL_MODIFIER)
    if contains_term(normalized, some_words):
        modifiers.append(_SOME_MODIFIER)
    return tuple(modifiers)


def _to_number(raw: str) -> int | float:
    value = float(raw.replace(",", "."))
    return int(value) if value.is_integer() else value


def _unique(items) -> tuple[str, ...]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)
