"""
MCP server exposing the home interpreter.

Rooms and language may be passed as tool arguments or through the
request meta (`rooms`, `language`), so a client can bind them once
per conversation.
"""
import logging
import os
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

import uvicorn
from mcp.server.fastmcp import Context, FastMCP

from command_parser import CommandParser
from home_interpreter import (
    DashScopeSemanticResolver,
    Device,
    EngineConfig,
    classify_status_query,
    format_status,
    handle_query,
    resolve_room,
)
from home_interpreter.semantic import SemanticResolver

logger = logging.getLogger(__name__)

# 创建 MCP 服务器实例
mcp = FastMCP("home-interpreter")

_parser = CommandParser()


def get_meta_from_context(ctx: Context | None) -> dict[str, Any]:
    """
    从 Context 中提取 meta 数据。

    依次尝试 request.params.meta 与 request_context.meta 的额外字段，
    都没有时返回空字典。
    """
    if ctx is None:
        return {}
    try:
        rc = ctx.request_context
    except (AttributeError, ValueError, LookupError):
        return {}

    request = getattr(rc, "request", None)
    params = getattr(request, "params", None)
    params_meta = getattr(params, "meta", None)
    if params_meta is not None and getattr(params_meta, "__pydantic_extra__", None):
        return params_meta.model_dump()

    meta = getattr(rc, "meta", None)
    if meta is not None and getattr(meta, "__pydantic_extra__", None):
        return meta.model_dump()
    return {}


def get_meta_value(ctx: Context | None, key: str, default: Any = None) -> Any:
    """从 Context 中获取指定的 meta 字段值。"""
    return get_meta_from_context(ctx).get(key, default)


def build_semantic_resolver() -> SemanticResolver | None:
    """配置了 DASHSCOPE_API_KEY 时启用语义兜底。"""
    if not os.getenv("DASHSCOPE_API_KEY"):
        return None
    model = os.getenv("HOME_INTERPRETER_SEMANTIC_MODEL", "qwen-flash")
    return DashScopeSemanticResolver(model=model)


def to_payload(value: Any) -> Any:
    """把结果 dataclass 转为可 JSON 序列化的结构。"""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value


def devices_from_payload(items: list[dict[str, Any]] | None) -> list[Device] | None:
    """把客户端传入的设备字典转换为 Device，缺少 id 或 name 的条目跳过。"""
    if items is None:
        return None
    devices: list[Device] = []
    for item in items:
        if not isinstance(item, dict) or not item.get("id") or not item.get("name"):
            logger.warning("mcp_device_skipped reason=missing_id_or_name")
            continue
        capabilities = item.get("capabilities")
        devices.append(
            Device(
                id=str(item["id"]),
                name=str(item["name"]),
                room=item.get("room"),
                device_class=str(item.get("device_class") or item.get("class") or "other"),
                available=bool(item.get("available", True)),
                capabilities=capabilities if isinstance(capabilities, dict) else {},
            )
        )
    return devices


def _resolve_rooms(ctx: Context | None, rooms: list[str] | None) -> list[str]:
    if rooms is not None:
        return list(rooms)
    meta_rooms = get_meta_value(ctx, "rooms", [])
    return [room for room in meta_rooms if isinstance(room, str)] if isinstance(meta_rooms, list) else []


def _resolve_language(ctx: Context | None, language: str | None) -> str:
    return language or get_meta_value(ctx, "language", None) or "en"


@mcp.tool()
async def interpret(
    text: str,
    language: str | None = None,
    rooms: list[str] | None = None,
    devices: list[dict[str, Any]] | None = None,
    include_details: bool = True,
    ctx: Context = None,
) -> dict[str, Any]:
    """
    解释一句用户输入（控制命令或状态查询）。

    Args:
        text: 用户输入
        language: 语言代码，缺省时读取 meta.language，再缺省为 en
        rooms: 已知房间名，缺省时读取 meta.rooms
        devices: 可选设备快照，字段 id/name/room/device_class/available/capabilities
        include_details: 状态文本是否包含设备明细
    """
    result = await handle_query(
        text,
        _resolve_language(ctx, language),
        _resolve_rooms(ctx, rooms),
        devices=devices_from_payload(devices),
        semantic_resolver=build_semantic_resolver(),
        formatter=format_status,
        include_details=include_details,
        config=EngineConfig.from_env(),
    )
    return to_payload(result)


@mcp.tool()
def classify_status(text: str, language: str | None = None, ctx: Context = None) -> dict[str, Any]:
    """判断输入是否为状态查询，并给出类型、目标与房间。"""
    query = classify_status_query(
        text, _resolve_language(ctx, language), config=EngineConfig.from_env()
    )
    return to_payload(query)


@mcp.tool()
async def match_room(
    mention: str,
    rooms: list[str] | None = None,
    language: str | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """把房间提及匹配到已知房间（精确、模糊、语义兜底）。"""
    candidates = _resolve_rooms(ctx, rooms)
    validation = await resolve_room(
        mention,
        candidates,
        _resolve_language(ctx, language),
        build_semantic_resolver(),
        config=EngineConfig.from_env(),
    )
    return to_payload(validation)


@mcp.tool()
def parse_llm_output(
    raw_output: str,
    rooms: list[str] | None = None,
    ctx: Context = None,
) -> dict[str, Any]:
    """校验统一 prompt 的 LLM 输出并转换为结构化命令。"""
    result = _parser.parse(raw_output, _resolve_rooms(ctx, rooms))
    payload = to_payload(result)
    payload["metrics"] = to_payload(_parser.metrics)
    return payload


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = mcp.streamable_http_app()
    uvicorn.run(
        app,
        host=os.getenv("MCP_HOST", "0.0.0.0"),
        port=int(os.getenv("MCP_PORT", "8002")),
    )


if __name__ == "__main__":
    main()
