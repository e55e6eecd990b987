#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
统一环境配置管理

环境判断与环境变量读取的唯一入口
"""

import logging
import os
from typing import Literal, Optional

logger = logging.getLogger(__name__)

# 环境类型定义
Environment = Literal["local", "staging", "production"]

_ENV_ALIASES = {
    "local": "local",
    "dev": "local",
    "development": "local",
    "test": "local",
    "staging": "staging",
    "stage": "staging",
    "prod": "production",
    "production": "production",
}


class EnvConfig:
    """
    统一环境配置管理器

    ENV 优先，其次 APP_ENV，默认 local；未知值按 local 处理。
    """

    # 生产环境必需的环境变量列表
    PRODUCTION_REQUIRED_VARS = [
        "GEMINI_API_KEY",
    ]

    def __init__(self):
        raw = os.getenv("ENV", os.getenv("APP_ENV", "local")).lower()
        self._env: Environment = _ENV_ALIASES.get(raw, "local")
        if self.is_production:
            self._validate_production_vars()

    def _validate_production_vars(self):
        """生产环境启动时校验必需环境变量（只告警，不阻止启动）"""
        missing = [var for var in self.PRODUCTION_REQUIRED_VARS if not os.getenv(var)]
        if missing:
            logger.error(
                f"❌ 生产环境缺少必需环境变量: {', '.join(missing)}。"
                f"请在 .env 文件或系统环境变量中配置。"
            )

    @property
    def env(self) -> Environment:
        """获取当前环境"""
        return self._env

    @property
    def is_production(self) -> bool:
        """是否为生产环境"""
        return self._env == "production"

    def get_config(self, key: str, default: str = None, required: bool = False) -> Optional[str]:
        """
        获取配置值（从环境变量）

        Raises:
            ValueError: 如果 required=True 且配置不存在
        """
        value = os.getenv(key, default)
        if required and value is None:
            raise ValueError(f"必需的环境变量 {key} 未设置")
        return value

    def get_bool_config(self, key: str, default: bool = False) -> bool:
        """获取布尔类型配置"""
        value = os.getenv(key, str(default)).lower()
        return value in ("true", "1", "yes", "on")

    def get_int_config(self, key: str, default: int = 0) -> int:
        """获取整数类型配置，非法值回退默认值"""
        value = os.getenv(key, str(default))
        try:
            return int(value)
        except ValueError:
            logger.warning(f"环境变量 {key}={value!r} 不是整数，使用默认值 {default}")
            return default


# 全局单例实例
_env_config: Optional[EnvConfig] = None


def get_env_config() -> EnvConfig:
    """获取环境配置实例（全局单例）"""
    global _env_config
    if _env_config is None:
        _env_config = EnvConfig()
    return _env_config


def reset_env_config():
    """丢弃单例，下次访问时重新读取环境变量（测试用）"""
    global _env_config
    _env_config = None


def is_production() -> bool:
    """是否为生产环境（便捷函数）"""
    return get_env_config().is_production
