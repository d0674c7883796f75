"""
运行时配置模块，基于 pydantic-settings 实现。

配置值通过 PTRAP_ 前缀的环境变量注入，未设置时回落到 ptrap.config 中的默认常量。
使用 lru_cache 保证配置对象在进程生命周期内只实例化一次。
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ptrap.config import DEBOUNCE_MS, DEFAULT_SHELL, LOG_LEVEL, LOG_PATH


class PtrapSettings(BaseSettings):
    """ptrap 运行配置，环境变量前缀为 PTRAP_。"""

    model_config = SettingsConfigDict(env_prefix="PTRAP_", extra="ignore")

    # 编辑后等待多久才重新执行管线（毫秒）
    debounce_ms: int = Field(default=DEBOUNCE_MS, ge=0)
    # 日志级别，接受 "DEBUG" / "INFO" 等名称
    log_level: int = Field(default=LOG_LEVEL)
    # 日志目录
    log_dir: Path = Field(default=LOG_PATH)
    # 执行 --run 命令的 shell
    shell: str = Field(default=DEFAULT_SHELL, min_length=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value):
        if isinstance(value, str) and not value.isdigit():
            level = logging.getLevelName(value.upper())
            if not isinstance(level, int):
                raise ValueError(f"未知日志级别: {value}")
            return level
        return value


@lru_cache
def get_settings() -> PtrapSettings:
    return PtrapSettings()
