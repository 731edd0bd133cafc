"""数据模型定义。

解释引擎在单次调用内产生的全部实体，均为不可变 dataclass。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

MatchMethod = Literal["exact", "fuzzy", "semantic", "none"]

# 未指明房间的命令作用于全部房间
ALL_ROOMS = "all"


class Language(str, Enum):
    """支持的语言代码。"""

    EN = "en"
    SV = "sv"
    NO = "no"
    DA = "da"
    DE = "de"
    FR = "fr"
    ES = "es"
    IT = "it"
    PT = "pt"
    NL = "nl"

    @classmethod
    def parse(cls, code: object) -> Language | None:
        """解析语言代码，支持 "sv-SE" 这类区域写法。

        无法识别时返回 None，由调用方决定回退策略。
        """
        if isinstance(code, Language):
            return code
        if not isinstance(code, str):
            return None
        primary = code.strip().lower().replace("_", "-").split("-", 1)[0]
        try:
            return cls(primary)
        except ValueError:
            return None


class QueryType(str, Enum):
    """状态查询类型。"""

    ROOM_STATUS = "room_status"
    DEVICE_STATUS = "device_status"
    DEVICE_TYPE_STATUS = "device_type_status"
    GLOBAL_STATUS = "global_status"


@dataclass(frozen=True)
class MatchCandidate:
    """一次实体解析的结果。

    method 为 "exact" 当且仅当 confidence == 1.0；
    method 为 "none" 当且仅当 value 为 None 且 confidence == 0。
    """

    value: str | None
    confidence: float
    method: MatchMethod
    reasoning: str | None = None
    suggestions: tuple[str, ...] = ()

    @property
    def matched(self) -> bool:
        return self.method != "none"

    @classmethod
    def not_found(cls, suggestions: tuple[str, ...] = ()) -> MatchCandidate:
        return cls(value=None, confidence=0.0, method="none", suggestions=suggestions)


@dataclass(frozen=True)
class RoomMatchValidation:
    """校验后的房间匹配结果。"""

    original: str
    match: MatchCandidate
    valid: bool
    confidence: float
    warning: str | None = None


@dataclass(frozen=True)
class ResolvedEntities:
    """从一句话中抽取出的实体。"""

    text: str
    language: Language
    rooms: tuple[str, ...] = ()
    room_mentions: tuple[str, ...] = ()
    actions: tuple[str, ...] = ()
    device_types: tuple[str, ...] = ()
    values: dict[str, int | float] = field(default_factory=dict)
    modifiers: tuple[str, ...] = ()
    intent: str = "turn_on"
    confidence: float = 0.0


@dataclass(frozen=True)
class ParsedCommand:
    """结构化命令。

    单条命令或由 commands 组成的多条命令；
    room / device_id / device_ids / commands 必须恰好存在一个。
    """

    command: str | None = None
    room: str | None = None
    device_id: str | None = None
    device_ids: tuple[str, ...] | None = None
    device_filter: str | None = None
    parameters: dict[str, int | float | str] = field(default_factory=dict)
    commands: tuple[ParsedCommand, ...] | None = None
    source_text: str = ""
    entities: ResolvedEntities | None = None

    def __post_init__(self) -> None:
        targets = [
            self.room is not None,
            self.device_id is not None,
            self.device_ids is not None,
            self.commands is not None,
        ]
        if sum(targets) != 1:
            raise ValueError(
                "ParsedCommand requires exactly one of room, device_id, device_ids, commands"
            )
        if self.commands is None and not self.command:
            raise ValueError("single ParsedCommand requires a command")

    @property
    def is_multi(self) -> bool:
        return self.commands is not None

    def flatten(self) -> list[ParsedCommand]:
        """展开为单条命令列表，保持原有顺序。"""
        if self.commands is None:
            return [self]
        flat: list[ParsedCommand] = []
        for sub in self.commands:
            flat.extend(sub.flatten())
        return flat


@dataclass(frozen=True)
class StatusQuery:
    """状态查询分类结果。type 为 None 表示不是状态查询。"""

    type: QueryType | None
    original_query: str
    language: Language
    target: str | None = None
    room: str | None = None
    confidence: float = 0.0


@dataclass(frozen=True)
class CommandResult:
    """命令解释结果。"""

    success: bool
    original_text: str
    language: Language
    command: ParsedCommand | None = None
    room_matching: tuple[RoomMatchValidation, ...] = ()
    confidence: float = 0.0
    error: str | None = None
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class Device:
    """家庭设备快照。

    capabilities 显式列出设备当前的能力值，例如
    {"onoff": True, "dim": 0.4, "measure_temperature": 21.5}。
    """

    id: str
    name: str
    room: str | None = None
    device_class: str = "other"
    available: bool = True
    capabilities: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class DeviceStatus:
    """单个设备的状态摘要。"""

    id: str
    name: str
    device_class: str
    summary: str
    is_online: bool
    room: str | None = None


@dataclass(frozen=True)
class StatusResult:
    """状态查询的处理结果。"""

    success: bool
    query: StatusQuery
    query_type: QueryType | None = None
    room: str | None = None
    room_match: RoomMatchValidation | None = None
    device_type: str | None = None
    targets: tuple[Device, ...] = ()
    devices: tuple[DeviceStatus, ...] = ()
    formatted_text: str | None = None
    confidence: float = 0.0
    error: str | None = None
    suggestions: tuple[str, ...] = ()

    @property
    def device_count(self) -> int:
        return len(self.devices) if self.devices else len(self.targets)
