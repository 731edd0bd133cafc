"""Command parser package."""

from command_parser.parser import (
    CommandParser,
    CommandParserConfig,
    ParserMetrics,
    UnifiedParseResult,
    parse_unified_output,
)
from command_parser.prompt import (
    DEFAULT_SYSTEM_PROMPT,
    PROMPT_REGRESSION_CASES,
    build_unified_prompt,
)
from command_parser.unified import UnifiedOutcome, parse_with_llm

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "PROMPT_REGRESSION_CASES",
    "CommandParser",
    "CommandParserConfig",
    "ParserMetrics",
    "UnifiedOutcome",
    "UnifiedParseResult",
    "build_unified_prompt",
    "parse_unified_output",
    "parse_with_llm",
]
