"""编辑距离与相似度。

基于 rapidfuzz 的 Levenshtein 实现。
"""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from home_interpreter.text import normalize


def distance(a: str, b: str) -> int:
    """经典 Levenshtein 距离（插入、删除、替换代价均为 1）。"""
    return Levenshtein.distance(a or "", b or "")


def similarity(a: str, b: str) -> float:
    """归一化相似度 (maxLen - distance) / maxLen。

    两个空串相似度为 1.0，仅一侧为空时为 0.0。
    """
    a = a or ""
    b = b or ""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    max_len = max(len(a), len(b))
    return (max_len - distance(a, b)) / max_len


def normalized_similarity(a: str, b: str) -> float:
    """对规范化后的文本计算相似度。"""
    return similarity(normalize(a), normalize(b))


def rank_by_similarity(
    query: str,
    candidates: list[str] | tuple[str, ...],
    limit: int | None = None,
) -> list[tuple[str, float]]:
    """按相似度降序排列候选，分数相同时保持原有顺序。

    Args:
        query: 查询文本
        candidates: 候选名称
        limit: 最多返回条数，None 表示全部

    Returns:
        (候选, 相似度) 列表
    """
    query_norm = normalize(query)
    scored = [
        (candidate, similarity(query_norm, normalize(candidate)))
        for candidate in candidates
        if isinstance(candidate, str)
    ]
    scored.sort(key=lambda item: item[1], reverse=True)
    if limit is not None:
        scored = scored[:limit]
    return scored
