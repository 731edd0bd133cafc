"""文本规范化工具。

提供比较用的 Unicode 折叠、按语言去除定冠词与发音变体生成。
规范化结果只用于比较，不用于展示。
"""

from __future__ import annotations

import re
import unicodedata

from home_interpreter.models import Language

# NFKD 之后仍无法拆分的字母
_SPECIAL_LETTERS = str.maketrans(
    {
        "ß": "ss",
        "æ": "ae",
        "Æ": "ae",
        "ø": "o",
        "Ø": "o",
        "œ": "oe",
        "Œ": "oe",
        "ł": "l",
        "Ł": "l",
        "đ": "d",
        "Đ": "d",
        "ð": "d",
        "Ð": "d",
        "þ": "th",
        "Þ": "th",
        "ı": "i",
    }
)

# 统一各种撇号与连字符
_PUNCT_TRANSLATION = str.maketrans(
    {
        "‘": "'",
        "’": "'",
        "ʼ": "'",
        "`": "'",
        "‐": "-",
        "‑": "-",
        "‒": "-",
        "–": "-",
        "—": "-",
        "−": "-",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")

# 北欧语言的定冠词是后缀，其余语言是前置冠词
_ARTICLE_RULES: dict[Language, re.Pattern[str]] = {
    Language.SV: re.compile(r"(en|et|n)$"),
    Language.NO: re.compile(r"(en|et|a)$"),
    Language.DA: re.compile(r"(en|et)$"),
    Language.DE: re.compile(r"^(der|die|das|den|dem)\s+"),
    Language.FR: re.compile(r"^(?:(le|la|les)\s+|l')"),
    Language.ES: re.compile(r"^(el|la|los|las)\s+"),
    Language.IT: re.compile(r"^(?:(il|la|lo|gli|le|i)\s+|l')"),
    Language.PT: re.compile(r"^(o|a|os|as)\s+"),
    Language.NL: re.compile(r"^(de|het)\s+"),
    Language.EN: re.compile(r"^(the)\s+"),
}

_DOUBLE_LETTER_RE = re.compile(r"([a-z])\1+")
_SINGLE_CONSONANT_RE = re.compile(r"(?<=[aeiouy])([bcdfgklmnprst])(?=[aeiouy])")

_DIGRAPH_RULES = (
    ("ph", "f"),
    ("th", "t"),
    ("ck", "k"),
    ("x", "ks"),
    ("z", "s"),
    ("v", "w"),
    ("w", "v"),
)

_VOWEL_RULES = (
    ("y", "i"),
    ("ee", "i"),
    ("oo", "u"),
    ("ae", "e"),
)


def normalize(text: object) -> str:
    """规范化文本用于比较。

    NFKD 分解后去掉组合附加符号，折叠特殊字母，
    统一撇号与连字符，转小写并压缩空白。

    Args:
        text: 任意输入，非字符串返回空串

    Returns:
        规范化后的字符串
    """
    if not isinstance(text, str) or not text:
        return ""
    folded = text.translate(_SPECIAL_LETTERS).translate(_PUNCT_TRANSLATION)
    decomposed = unicodedata.normalize("NFKD", folded)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    lowered = stripped.lower()
    return _WHITESPACE_RE.sub(" ", lowered).strip()


def remove_definite_articles(text: object, language: Language | str | None) -> str:
    """按语言规则去掉定冠词。

    未知语言原样返回；去除后为空时保留原文。
    """
    if not isinstance(text, str):
        return ""
    lang = Language.parse(language)
    rule = _ARTICLE_RULES.get(lang) if lang is not None else None
    if rule is None:
        return text
    stripped = rule.sub("", text, count=1).strip()
    return stripped or text


def generate_phonetic_variations(word: object) -> list[str]:
    """生成单词的发音变体。

    结果以原词（小写）开头，按固定顺序去重。
    只用于扩大模糊匹配的候选形式。
    """
    if not isinstance(word, str):
        return []
    base = word.strip().lower()
    if not base:
        return []

    variants = [base]

    folded = normalize(base)
    if folded:
        variants.append(folded)

    variants.append(_DOUBLE_LETTER_RE.sub(r"\1", folded))
    variants.append(_SINGLE_CONSONANT_RE.sub(r"\1\1", folded))

    for source, target in _DIGRAPH_RULES:
        if source in folded:
            variants.append(folded.replace(source, target))

    for source, target in _VOWEL_RULES:
        if source in folded:
            variants.append(folded.replace(source, target))

    seen: set[str] = set()
    result: list[str] = []
    for variant in variants:
        if variant and variant not in seen:
            seen.add(variant)
            result.append(variant)
    return result
