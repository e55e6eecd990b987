#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
统一应用配置管理
所有配置统一从这里读取，避免配置分散
"""

from dataclasses import dataclass, field
from typing import Optional

from server.config.env_config import get_env_config


@dataclass
class RedisConfig:
    """Redis 配置"""
    host: str = 'localhost'
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    max_connections: int = 100
    ttl: int = 0  # 写入过期秒数，0 表示不过期

    @classmethod
    def from_env(cls) -> 'RedisConfig':
        """从环境变量创建配置"""
        env_config = get_env_config()
        return cls(
            host=env_config.get_config('REDIS_HOST', 'localhost'),
            port=env_config.get_int_config('REDIS_PORT', 6379),
            db=env_config.get_int_config('REDIS_DB', 0),
            password=env_config.get_config('REDIS_PASSWORD') or None,
            max_connections=env_config.get_int_config('REDIS_MAX_CONNECTIONS', 100),
            ttl=env_config.get_int_config('REDIS_TTL', 0)
        )


@dataclass
class StorageConfig:
    """键值存储配置"""
    backend: str = 'memory'  # memory / file / redis
    file_path: str = '.zen_destiny_store.json'

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """从环境变量创建配置"""
        env_config = get_env_config()
        return cls(
            backend=env_config.get_config('STORAGE_BACKEND', 'memory').lower(),
            file_path=env_config.get_config('STORAGE_FILE_PATH', '.zen_destiny_store.json')
        )


@dataclass
class GeminiConfig:
    """Gemini 大模型配置"""
    api_key: Optional[str] = None
    model: str = 'gemini-2.5-flash'
    timeout: int = 60

    @classmethod
    def from_env(cls) -> 'GeminiConfig':
        """从环境变量创建配置（GEMINI_API_KEY 优先，兼容 API_KEY）"""
        env_config = get_env_config()
        return cls(
            api_key=env_config.get_config('GEMINI_API_KEY') or env_config.get_config('API_KEY'),
            model=env_config.get_config('GEMINI_MODEL', 'gemini-2.5-flash'),
            timeout=env_config.get_int_config('GEMINI_TIMEOUT', 60)
        )


@dataclass
class AppConfig:
    """应用配置"""
    env: str = 'local'
    debug: bool = False
    log_level: str = 'INFO'

    # 子配置
    redis: RedisConfig = field(default_factory=RedisConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """从环境变量创建完整配置"""
        env_config = get_env_config()
        return cls(
            env=env_config.env,
            debug=env_config.get_bool_config('DEBUG', default=False),
            log_level=env_config.get_config('LOG_LEVEL', default='INFO').upper(),
            redis=RedisConfig.from_env(),
            storage=StorageConfig.from_env(),
            gemini=GeminiConfig.from_env()
        )


# 全局配置实例（单例模式）
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """获取全局配置实例（单例）"""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reload_config() -> AppConfig:
    """重新加载配置（环境变量变化后调用）"""
    global _config
    _config = AppConfig.from_env()
    return _config
