"""Multilingual home command and status-query interpreter."""

from home_interpreter.config import DEFAULT_CONFIG, EngineConfig
from home_interpreter.entity_resolver import (
    EntityResolver,
    batch_resolve,
    comprehensive_resolve,
    resolve,
    scan_mentions,
    validate_match,
)
from home_interpreter.extractor import extract, preprocess_command, suggest_improvement
from home_interpreter.models import (
    ALL_ROOMS,
    CommandResult,
    Device,
    DeviceStatus,
    Language,
    MatchCandidate,
    ParsedCommand,
    QueryType,
    ResolvedEntities,
    RoomMatchValidation,
    StatusQuery,
    StatusResult,
)
from home_interpreter.multi_command import detect_multi, split
from home_interpreter.orchestrator import handle_query, interpret_command, resolve_room
from home_interpreter.semantic import DashScopeSemanticResolver, FakeSemanticResolver
from home_interpreter.status_formatter import format_status
from home_interpreter.status_query import classify, determine_query_scope, is_status_query

classify_status_query = classify

__all__ = [
    "ALL_ROOMS",
    "DEFAULT_CONFIG",
    "CommandResult",
    "DashScopeSemanticResolver",
    "Device",
    "DeviceStatus",
    "EngineConfig",
    "EntityResolver",
    "FakeSemanticResolver",
    "Language",
    "MatchCandidate",
    "ParsedCommand",
    "QueryType",
    "ResolvedEntities",
    "RoomMatchValidation",
    "StatusQuery",
    "StatusResult",
    "batch_resolve",
    "classify",
    "classify_status_query",
    "comprehensive_resolve",
    "detect_multi",
    "determine_query_scope",
    "extract",
    "format_status",
    "handle_query",
    "interpret_command",
    "is_status_query",
    "preprocess_command",
    "resolve",
    "resolve_room",
    "scan_mentions",
    "split",
    "suggest_improvement",
    "validate_match",
]
