"""实体解析（房间 / 设备名匹配）。

按 精确 → 模糊 → 语义兜底 的顺序，把用户提到的名称
解析为候选列表中的一项，并给出置信度与匹配方式。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.models import Language, MatchCandidate, RoomMatchValidation
from home_interpreter.semantic import SemanticResolver, semantic_match
from home_interpreter.similarity import rank_by_similarity, similarity
from home_interpreter.text import (
    generate_phonetic_variations,
    normalize,
    remove_definite_articles,
)

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[\w'-]+")
_MIN_SCAN_LENGTH = 3


@dataclass(frozen=True)
class _Scored:
    candidate: str
    score: float
    index: int
    length_gap: int


def resolve(
    mention: object,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    *,
    config: EngineConfig | None = None,
) -> MatchCandidate:
    """同步解析：精确匹配优先，其次模糊匹配。

    Args:
        mention: 用户提到的名称
        candidates: 已知名称列表
        language: 语言代码，用于去定冠词
        config: 可选阈值配置

    Returns:
        MatchCandidate；未命中时 method 为 "none" 并附带最接近的候选

    Raises:
        TypeError: candidates 不是 list 或 tuple
    """
    _check_candidates(candidates)
    config = config or DEFAULT_CONFIG
    if not isinstance(mention, str) or not normalize(mention):
        return MatchCandidate.not_found()

    exact = _exact_match(mention, candidates)
    if exact is not None:
        return exact

    best, scored = _best_fuzzy(mention, candidates, language, config)
    if best is not None and best.score >= config.fuzzy_accept_threshold:
        logger.debug(
            "room_match mention=%s value=%s method=fuzzy confidence=%.3f",
            mention[:80],
            best.candidate,
            best.score,
        )
        return MatchCandidate(value=best.candidate, confidence=best.score, method="fuzzy")

    return MatchCandidate.not_found(_suggestions_from(scored, config.suggestion_limit))


def resolve_with_aliases(
    mention: object,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    aliases: list[str] | tuple[str, ...] = (),
    *,
    config: EngineConfig | None = None,
) -> MatchCandidate:
    """先按原始提及解析，再尝试同一房间概念在各语言中的别名。

    别名命中视为模糊匹配，分数乘以 alias_weight 并受非精确上限约束。
    """
    config = config or DEFAULT_CONFIG
    direct = resolve(mention, candidates, language, config=config)
    if direct.method == "exact":
        return direct

    best = direct
    for alias in aliases:
        result = resolve(alias, candidates, language, config=config)
        if not result.matched:
            continue
        score = min(result.confidence * config.alias_weight, config.max_non_exact_confidence)
        if score >= config.fuzzy_accept_threshold and score > best.confidence:
            best = MatchCandidate(value=result.value, confidence=score, method="fuzzy")
    if best is not direct:
        logger.debug(
            "room_match alias mention=%s value=%s confidence=%.3f",
            str(mention)[:80],
            best.value,
            best.confidence,
        )
    return best


async def comprehensive_resolve(
    mention: object,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    semantic_resolver: SemanticResolver | None = None,
    *,
    aliases: list[str] | tuple[str, ...] = (),
    config: EngineConfig | None = None,
) -> MatchCandidate:
    """完整解析：确定性匹配不足阈值时才调用语义兜底。

    语义结果仅在置信度高于最佳模糊分数时采用；
    语义调用失败时返回确定性结果。
    """
    _check_candidates(candidates)
    config = config or DEFAULT_CONFIG
    deterministic = resolve_with_aliases(mention, candidates, language, aliases, config=config)
    if deterministic.matched or semantic_resolver is None:
        return deterministic
    if not isinstance(mention, str) or not mention.strip() or not candidates:
        return deterministic

    best, _ = _best_fuzzy(mention, candidates, language, config)
    fuzzy_score = best.score if best is not None else 0.0

    semantic = await semantic_match(
        mention, candidates, language, semantic_resolver, config=config
    )
    if semantic is not None and semantic.confidence > fuzzy_score:
        logger.info(
            "room_match mention=%s value=%s method=semantic confidence=%.3f",
            mention[:80],
            semantic.value,
            semantic.confidence,
        )
        return semantic
    return deterministic


async def batch_resolve(
    mentions: list[str] | tuple[str, ...],
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    semantic_resolver: SemanticResolver | None = None,
    *,
    config: EngineConfig | None = None,
) -> list[tuple[str, MatchCandidate]]:
    """按顺序逐个解析多个提及。"""
    _check_candidates(candidates)
    results: list[tuple[str, MatchCandidate]] = []
    for mention in mentions:
        match = await comprehensive_resolve(
            mention, candidates, language, semantic_resolver, config=config
        )
        results.append((mention, match))
    return results


def validate_match(
    original: str,
    match: MatchCandidate,
    candidates: list[str] | tuple[str, ...],
    *,
    config: EngineConfig | None = None,
) -> RoomMatchValidation:
    """校验匹配结果是否在已知列表中。

    不在列表中时置信度扣减固定惩罚并附加告警，但不丢弃结果。
    """
    _check_candidates(candidates)
    config = config or DEFAULT_CONFIG
    if not match.matched or match.value is None:
        return RoomMatchValidation(
            original=original,
            match=match,
            valid=False,
            confidence=0.0,
            warning="room_not_found",
        )

    value_key = normalize(match.value)
    if any(isinstance(c, str) and normalize(c) == value_key for c in candidates):
        return RoomMatchValidation(
            original=original,
            match=match,
            valid=True,
            confidence=match.confidence,
        )

    penalized = max(0.0, round(match.confidence - config.validation_penalty, 4))
    logger.warning(
        "room_match_invalid original=%s value=%s confidence=%.3f",
        original[:80],
        match.value,
        penalized,
    )
    return RoomMatchValidation(
        original=original,
        match=match,
        valid=False,
        confidence=penalized,
        warning=f"Room '{match.value}' not found in available rooms",
    )


def scan_mentions(
    text: object,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    *,
    config: EngineConfig | None = None,
) -> list[MatchCandidate]:
    """在整句中查找已知名称的出现位置。

    以候选名的词数为窗口滑动比较，重叠命中保留分数更高者，
    结果按出现位置排序。用于识别词表之外的自定义房间名。
    """
    _check_candidates(candidates)
    config = config or DEFAULT_CONFIG
    if not isinstance(text, str):
        return []
    tokens = _TOKEN_RE.findall(normalize(text))
    if not tokens:
        return []

    hits: list[tuple[float, int, int, int, str]] = []
    for index, candidate in enumerate(candidates):
        if not isinstance(candidate, str):
            continue
        cand_norm = normalize(candidate)
        if len(cand_norm) < _MIN_SCAN_LENGTH:
            continue
        cand_stripped = remove_definite_articles(cand_norm, language)
        width = len(cand_norm.split())
        best: tuple[float, int] | None = None
        for start in range(len(tokens) - width + 1):
            window = " ".join(tokens[start:start + width])
            if window == cand_norm:
                score = 1.0
            else:
                score = min(
                    max(
                        similarity(window, cand_norm),
                        similarity(remove_definite_articles(window, language), cand_stripped),
                    ),
                    config.max_non_exact_confidence,
                )
            if score >= config.mention_scan_threshold and (best is None or score > best[0]):
                best = (score, start)
        if best is not None:
            hits.append((best[0], best[1], best[1] + width, index, candidate))

    # 分数高者优先占用区间
    hits.sort(key=lambda hit: (-hit[0], hit[3]))
    chosen: list[tuple[float, int, int, int, str]] = []
    for hit in hits:
        if any(hit[1] < other[2] and other[1] < hit[2] for other in chosen):
            continue
        chosen.append(hit)
    chosen.sort(key=lambda hit: hit[1])

    return [
        MatchCandidate(
            value=candidate,
            confidence=score,
            method="exact" if score == 1.0 else "fuzzy",
        )
        for score, _, _, _, candidate in chosen
    ]


def suggest(
    query: object,
    candidates: list[str] | tuple[str, ...],
    limit: int = 3,
) -> tuple[str, ...]:
    """返回与查询最接近的候选名，相似度相同时保持原有顺序。"""
    _check_candidates(candidates)
    return tuple(name for name, _ in rank_by_similarity(str(query or ""), candidates, limit))


class EntityResolver:
    """绑定配置与语义兜底的解析器。"""

    def __init__(
        self,
        config: EngineConfig | None = None,
        semantic_resolver: SemanticResolver | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.semantic_resolver = semantic_resolver

    def resolve(
        self,
        mention: object,
        candidates: list[str] | tuple[str, ...],
        language: Language | str | None,
    ) -> MatchCandidate:
        return resolve(mention, candidates, language, config=self.config)

    async def comprehensive_resolve(
        self,
        mention: object,
        candidates: list[str] | tuple[str, ...],
        language: Language | str | None,
        aliases: list[str] | tuple[str, ...] = (),
    ) -> MatchCandidate:
        return await comprehensive_resolve(
            mention,
            candidates,
            language,
            self.semantic_resolver,
            aliases=aliases,
            config=self.config,
        )

    async def batch_resolve(
        self,
        mentions: list[str] | tuple[str, ...],
        candidates: list[str] | tuple[str, ...],
        language: Language | str | None,
    ) -> list[tuple[str, MatchCandidate]]:
        return await batch_resolve(
            mentions, candidates, language, self.semantic_resolver, config=self.config
        )

    def validate(
        self,
        original: str,
        match: MatchCandidate,
        candidates: list[str] | tuple[str, ...],
    ) -> RoomMatchValidation:
        return validate_match(original, match, candidates, config=self.config)


def _check_candidates(candidates: object) -> None:
    if not isinstance(candidates, (list, tuple)):
        raise TypeError(
            f"candidates must be a list or tuple of names, got {type(candidates).__name__}"
        )


def _exact_match(mention: str, candidates: list[str] | tuple[str, ...]) -> MatchCandidate | None:
    key = normalize(mention)
    for candidate in candidates:
        if isinstance(candidate, str) and normalize(candidate) == key:
            logger.debug("room_match mention=%s value=%s method=exact", mention[:80], candidate)
            return MatchCandidate(value=candidate, confidence=1.0, method="exact")
    return None


def _mention_forms(mention: str, language: Language | str | None) -> list[tuple[str, float]]:
    """提及的比较形式及权重：规范化原形与去冠词形。"""
    normalized = normalize(mention)
    stripped = remove_definite_articles(normalized, language)
    forms = [(normalized, 1.0)]
    if stripped != normalized:
        forms.append((stripped, 1.0))
    return forms


def _best_fuzzy(
    mention: str,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    config: EngineConfig,
) -> tuple[_Scored | None, list[_Scored]]:
    """计算每个候选的模糊分数并挑出最佳者。

    最佳者按分数、与提及的长度差（越小越好）、候选顺序依次比较。
    """
    forms = _mention_forms(mention, language)
    base_stripped = forms[-1][0]
    known = {form for form, _ in forms}
    for variant in generate_phonetic_variations(base_stripped):
        if variant not in known:
            known.add(variant)
            forms.append((variant, config.phonetic_weight))

    mention_len = len(normalize(mention))
    scored: list[_Scored] = []
    for index, candidate in enumerate(candidates):
        if not isinstance(candidate, str):
            continue
        cand_norm = normalize(candidate)
        if not cand_norm:
            continue
        cand_forms = {cand_norm, remove_definite_articles(cand_norm, language)}
        score = max(
            similarity(form, cand_form) * weight
            for form, weight in forms
            for cand_form in cand_forms
        )
        score = round(min(score, config.max_non_exact_confidence), 4)
        scored.append(
            _Scored(
                candidate=candidate,
                score=score,
                index=index,
                length_gap=abs(len(cand_norm) - mention_len),
            )
        )

    if not scored:
        return None, scored
    best = max(scored, key=lambda item: (item.score, -item.length_gap, -item.index))
    return best, scored


def _suggestions_from(scored: list[_Scored], limit: int) -> tuple[str, ...]:
    ranked = sorted(scored, key=lambda item: (-item.score, item.index))
    return tuple(item.candidate for item in ranked[:limit])
