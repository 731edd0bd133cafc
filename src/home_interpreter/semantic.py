"""语义兜底匹配。

模糊匹配分数不足时，把提及与候选列表交给 LLM 判断。
LLM 的任何失败都只会让兜底失效，不会影响确定性结果。
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.injection import summarize_rooms_for_prompt
from home_interpreter.models import Language, MatchCandidate
from home_interpreter.text import normalize

logger = logging.getLogger(__name__)

SemanticResolver = Callable[[str], Awaitable[str]]

SEMANTIC_SYSTEM_PROMPT = (
    "You are a multilingual smart home assistant. "
    "Answer with a single JSON object and nothing else."
)

SEMANTIC_PROMPT_TEMPLATE = """Help match a room name mentioned by the user to one of the rooms in their home.

User said: "{mention}"
Language: {language}

{rooms_yaml}
Consider:
1. Translations between languages (e.g. "kitchen" = "kök" = "cocina")
2. Definite articles and suffixes (e.g. "köket" = "kök", "the kitchen" = "kitchen")
3. Spelling mistakes and speech-to-text errors
4. Synonyms and colloquial names (e.g. "lounge" = "living room")

Respond with JSON only:
{{"match": "<exact room name from the list, or null>", "confidence": <0.0-1.0>, "reasoning": "<short explanation>"}}
"""

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class SemanticAnswer:
    """LLM 返回的匹配判断。"""

    match: str | None
    confidence: float
    reasoning: str | None = None


def build_semantic_prompt(
    mention: str,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
) -> str:
    """构造语义匹配 prompt，候选房间以 YAML 注入。"""
    lang = Language.parse(language)
    return SEMANTIC_PROMPT_TEMPLATE.format(
        mention=mention.replace('"', "'"),
        language=lang.value if lang else "unknown",
        rooms_yaml=summarize_rooms_for_prompt(list(candidates), lang, with_hints=True),
    )


def parse_semantic_response(raw: object) -> SemanticAnswer | None:
    """解析 LLM 输出，支持已解析的 dict 或夹杂说明文字的 JSON 文本。

    无法解析或字段非法时返回 None。
    """
    data = raw if isinstance(raw, dict) else _safe_json_loads(raw)
    if not isinstance(data, dict):
        return None

    match = data.get("match")
    if match is not None and not isinstance(match, str):
        return None
    if isinstance(match, str) and (not match.strip() or match.strip().lower() == "null"):
        match = None

    try:
        confidence = float(data.get("confidence", 0.0))
    except (TypeError, ValueError):
        return None
    if confidence != confidence:  # NaN
        return None
    confidence = max(0.0, min(1.0, confidence))

    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str):
        reasoning = None

    return SemanticAnswer(
        match=match.strip() if isinstance(match, str) else None,
        confidence=confidence,
        reasoning=reasoning,
    )


async def semantic_match(
    mention: str,
    candidates: list[str] | tuple[str, ...],
    language: Language | str | None,
    resolver: SemanticResolver,
    *,
    config: EngineConfig | None = None,
) -> MatchCandidate | None:
    """调用语义解析回调并转换为 MatchCandidate。

    回调抛错、超时或输出非法时记录日志并返回 None。
    结果名称与候选规范化相等时替换为候选原文；
    不在候选中的名称原样返回，由上层校验降权。
    """
    config = config or DEFAULT_CONFIG
    prompt = build_semantic_prompt(mention, candidates, language)
    try:
        raw = await resolver(prompt)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning(
            "semantic_resolver_failed mention=%s error=%s",
            mention[:80],
            type(exc).__name__,
        )
        return None

    answer = parse_semantic_response(raw)
    if answer is None:
        logger.warning("semantic_response_invalid mention=%s", mention[:80])
        return None
    if answer.match is None or answer.confidence <= 0.0:
        logger.debug("semantic_no_match mention=%s", mention[:80])
        return None

    value = answer.match
    match_key = normalize(value)
    for candidate in candidates:
        if isinstance(candidate, str) and normalize(candidate) == match_key:
            value = candidate
            break

    confidence = min(answer.confidence, config.max_non_exact_confidence)
    return MatchCandidate(
        value=value,
        confidence=confidence,
        method="semantic",
        reasoning=answer.reasoning,
    )


def _safe_json_loads(content: object) -> dict[str, Any] | None:
    """安全解析 JSON，先整体解析，失败再提取第一个花括号对象。"""
    if not isinstance(content, str) or not content.strip():
        return None
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


class FakeSemanticResolver:
    """用于测试和离线 demo 的假语义解析器。"""

    def __init__(
        self,
        preset_responses: dict[str, object] | None = None,
        *,
        error: Exception | None = None,
    ):
        """初始化。

        Args:
            preset_responses: 预设响应，key 是提及文本，value 是 dict 或原始字符串
            error: 设置后每次调用都抛出该异常
        """
        self._presets = preset_responses or {}
        self._error = error
        self.prompts: list[str] = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._error is not None:
            raise self._error
        for mention, preset in self._presets.items():
            if f'"{mention}"' in prompt:
                if isinstance(preset, str):
                    return preset
                return json.dumps(preset, ensure_ascii=False)
        return json.dumps({"match": None, "confidence": 0.0, "reasoning": "no preset"})


class DashScopeSemanticResolver:
    """基于 dashscope 的语义解析器。

    同步的 Generation.call 在线程中执行，不阻塞事件循环。
    """

    def __init__(
        self,
        model: str = "qwen-flash",
        api_key: str | None = None,
        generation_client: Any | None = None,
        system_prompt: str | None = None,
    ):
        """初始化。

        Args:
            model: dashscope 模型名称
            api_key: API Key，未提供时从环境变量 `DASHSCOPE_API_KEY` 读取
            generation_client: 可注入的 Generation 客户端，便于测试
            system_prompt: 可选自定义 system prompt
        """
        self.model = model
        self._system_prompt = system_prompt or SEMANTIC_SYSTEM_PROMPT

        if generation_client is not None:
            self._generation = generation_client
            return

        import dashscope
        from dashscope import Generation

        api_key = api_key or os.getenv("DASHSCOPE_API_KEY")
        if api_key:
            dashscope.api_key = api_key

        self._generation = Generation

    async def __call__(self, prompt: str) -> str:
        return await asyncio.to_thread(self.generate, prompt)

    def generate(self, prompt: str) -> str:
        """调用 dashscope 返回原始文本。"""
        messages = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": prompt},
        ]

        response = self._generation.call(
            model=self.model,
            messages=messages,  # type: ignore
            result_format="message",
        )

        return self._extract_content(response)

    def _extract_content(self, response: Any) -> str:
        """从 dashscope 响应中提取文本内容。

        dashscope 响应结构：response.output.choices[0].message.content
        """
        if response.status_code != 200:
            raise RuntimeError(
                f"dashscope 调用失败: code={response.code}, message={response.message}"
            )

        try:
            return response.output.choices[0].message.content
        except (AttributeError, IndexError, KeyError) as exc:
            raise RuntimeError(f"dashscope 响应结构异常: {exc}") from exc
