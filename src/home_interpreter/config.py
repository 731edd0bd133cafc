"""引擎可调参数。"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

ENV_PREFIX = "HOME_INTERPRETER_"


@dataclass
class EngineConfig:
    """解释引擎的阈值与限制。

    默认值沿用线上行为，修改前应先补齐回归用例。
    """

    # 实体解析
    fuzzy_accept_threshold: float = 0.6
    phonetic_weight: float = 0.9
    alias_weight: float = 0.9
    max_non_exact_confidence: float = 0.95
    validation_penalty: float = 0.2
    mention_scan_threshold: float = 0.8
    suggestion_limit: int = 3

    # 实体抽取置信度
    base_confidence: float = 0.5
    action_bonus: float = 0.2
    room_bonus: float = 0.2
    device_bonus: float = 0.1
    missing_target_penalty: float = 0.3
    short_text_penalty: float = 0.2
    short_text_length: int = 5

    # 状态查询
    room_status_confidence: float = 0.9
    status_confidence: float = 0.8
    keyword_confidence: float = 0.5
    status_long_query_length: int = 100
    status_adjustment: float = 0.1
    status_min_confidence: float = 0.5

    # 限制
    max_text_length: int = 10000
    max_devices: int = 50
    max_log_chars: int = 400

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> EngineConfig:
        """从 HOME_INTERPRETER_* 环境变量覆盖默认值。

        例如 HOME_INTERPRETER_FUZZY_ACCEPT_THRESHOLD=0.7。
        非法取值会被忽略并记录告警。
        """
        environ = os.environ if environ is None else environ
        config = cls()
        for item in fields(cls):
            raw = environ.get(ENV_PREFIX + item.name.upper())
            if raw is None or not raw.strip():
                continue
            caster = int if isinstance(getattr(config, item.name), int) else float
            try:
                setattr(config, item.name, caster(raw.strip()))
            except ValueError:
                logger.warning(
                    "engine_config invalid_env name=%s value=%s",
                    item.name,
                    raw[:40],
                )
        return config


DEFAULT_CONFIG = EngineConfig()
