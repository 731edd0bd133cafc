"""复合命令检测与拆分。

"Turn on lights and play music in living room" 这类一句多令的输入，
按连接词拆成有序的子命令，每段重新抽取实体。
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from home_interpreter.config import EngineConfig
from home_interpreter.entity_resolver import scan_mentions
from home_interpreter.extractor import extract
from home_interpreter.lexicon import Lexicon, contains_term, find_terms, get_lexicon
from home_interpreter.models import ALL_ROOMS, Language, ParsedCommand, ResolvedEntities
from home_interpreter.text import normalize

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[\w'-]+")


def detect_multi(text: object, language: Language | str | None) -> bool:
    """判断是否为复合命令。

    出现多个不同的规范动作，或出现连接词 / 逗号紧跟动作动词时返回 True。
    """
    if not isinstance(text, str) or not text.strip():
        return False
    entities = extract(text, language)
    if len(entities.actions) > 1:
        return True
    lexicon = get_lexicon(language)
    return _split_pattern(lexicon.language).search(text) is not None


def split(
    text: object,
    language: Language | str | None,
    known_rooms: list[str] | tuple[str, ...] | None = None,
    *,
    config: EngineConfig | None = None,
) -> list[ParsedCommand]:
    """把复合命令拆成有序的子命令。

    Args:
        text: 原始输入
        language: 语言代码
        known_rooms: 可选的已知房间名，用于识别词表之外的房间名
        config: 可选阈值配置

    Returns:
        子命令列表，顺序与原文从左到右一致；
        无法拆分时整句作为一条命令返回
    """
    if not isinstance(text, str) or not text.strip():
        return []
    lexicon = get_lexicon(language)

    segments = [
        segment.strip(" ,.;")
        for segment in _split_pattern(lexicon.language).split(text)
    ]
    segments = [segment for segment in segments if segment]
    if not segments:
        logger.debug("multi_command no_segments text=%s", text[:80])
        segments = [text.strip()]

    parsed = [
        (segment, extract(segment, lexicon.language, config=config))
        for segment in segments
    ]
    segment_rooms = [
        _segment_rooms(segment, entities, lexicon.language, known_rooms, config)
        for segment, entities in parsed
    ]

    intents: list[str] = []
    for _, entities in parsed:
        if not entities.actions and intents:
            intents.append(intents[-1])
        else:
            intents.append(entities.intent)
    filters = [
        entities.device_types[0] if entities.device_types else None
        for _, entities in parsed
    ]

    commands: list[ParsedCommand] = []
    for index, (segment, entities) in enumerate(parsed):
        rooms = segment_rooms[index] or _inherit_rooms(segment_rooms, index) or (ALL_ROOMS,)
        device_filter = filters[index] or _inherit_filter(filters, intents, index)
        for room in rooms:
            commands.append(
                ParsedCommand(
                    command=intents[index],
                    room=room,
                    device_filter=device_filter,
                    parameters=dict(entities.values),
                    source_text=segment,
                    entities=entities,
                )
            )

    logger.debug(
        "multi_command split segments=%d commands=%d",
        len(segments),
        len(commands),
    )
    return commands


def _segment_rooms(
    segment: str,
    entities: ResolvedEntities,
    language: Language,
    known_rooms: list[str] | tuple[str, ...] | None,
    config: EngineConfig | None,
) -> tuple[str, ...]:
    """段内提到的房间。

    依次取词表命中的表面形式、已知房间名扫描结果、方位介词后的短语。
    方位短语原样返回，由调用方按模糊阈值解析，解析不到时报告找不到房间。
    """
    if entities.room_mentions:
        return entities.room_mentions
    if known_rooms:
        hits = scan_mentions(segment, known_rooms, language, config=config)
        if hits:
            return tuple(hit.value for hit in hits if hit.value)
    mention = locative_mention(segment, language)
    return (mention,) if mention else ()


def locative_mention(text: object, language: Language | str | None) -> str | None:
    """取方位介词（in / i / dans / im ...）之后的名词短语。

    短语在断词、数字或设备类型与动作词处截止，并去掉首尾限定词；
    含 "全部" 类词语时返回 None，表示作用于全部房间。
    """
    if not isinstance(text, str):
        return None
    lexicon = get_lexicon(language)
    if not lexicon.locatives:
        return None
    matched = _locative_pattern(lexicon.language).search(normalize(text))
    if not matched:
        return None

    breaks = {normalize(word) for word in lexicon.phrase_breaks}
    breaks.update(normalize(word) for word in lexicon.locatives if " " not in word)
    words: list[str] = []
    for token in _TOKEN_RE.findall(matched.group("phrase")):
        if token in breaks or any(ch.isdigit() for ch in token):
            break
        words.append(token)

    phrase = " ".join(words)
    hits = find_terms(phrase, lexicon.device_types) + find_terms(phrase, lexicon.actions)
    if hits:
        phrase = phrase[: min(hit.start for hit in hits)]
    phrase = " ".join(_strip_determiners(phrase.split(), lexicon))
    if not phrase or contains_term(phrase, lexicon.all_words):
        return None
    return phrase


def _strip_determiners(words: list[str], lexicon: Lexicon) -> list[str]:
    determiners = {normalize(word) for word in lexicon.determiners}
    elided = tuple(word for word in determiners if word.endswith("'"))
    while words and words[0] in determiners:
        words = words[1:]
    while words and words[-1] in determiners:
        words = words[:-1]
    if words and elided and words[0].startswith(elided):
        prefix = next(word for word in elided if words[0].startswith(word))
        words = [words[0][len(prefix):]] + words[1:]
    return [word for word in words if word]


def _inherit_rooms(segment_rooms: list[tuple[str, ...]], index: int) -> tuple[str, ...]:
    """无房间的片段先继承其后最近一段的房间，再退到之前最近一段。"""
    for rooms in segment_rooms[index + 1:]:
        if rooms:
            return rooms
    for rooms in reversed(segment_rooms[:index]):
        if rooms:
            return rooms
    return ()


def _inherit_filter(
    filters: list[str | None],
    intents: list[str],
    index: int,
) -> str | None:
    """无设备类型的片段取动作相同的最近一段的设备类型，距离相同时取前一段。"""
    for offset in range(1, len(filters)):
        for other in (index - offset, index + offset):
            if 0 <= other < len(filters) and filters[other] and intents[other] == intents[index]:
                return filters[other]
    return None


@lru_cache(maxsize=None)
def _locative_pattern(language: Language) -> re.Pattern[str]:
    lexicon = get_lexicon(language)
    return re.compile(rf"(?<!\w)(?:{_alternation(lexicon.locatives)})\s+(?P<phrase>.+)$")


@lru_cache(maxsize=None)
def _split_pattern(language: Language) -> re.Pattern[str]:
    """组合连接词与 "逗号 + 动作动词" 为单一模式，从左到右切分。"""
    lexicon = get_lexicon(language)
    connectors = _alternation(lexicon.connectors)
    verbs = _alternation(lexicon.action_verbs)
    return re.compile(
        rf"\s*,?\s+(?:{connectors})\s+|\s*,\s*(?=(?:{verbs})(?!\w))",
        re.IGNORECASE,
    )


def _alternation(terms: tuple[str, ...]) -> str:
    """生成可选分支，原文形式与去附加符号形式都接受，长词优先。"""
    variants: list[str] = []
    for term in terms:
        for form in (term, normalize(term)):
            if form and form not in variants:
                variants.append(form)
    variants.sort(key=len, reverse=True)
    return "|".join(re.escape(form) for form in variants)

