#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
键值存储 - 历史档案、每日运势缓存、对话记录共用的持久化层

后端：内存 / JSON 文件 / Redis，整值覆盖写，后写者胜。
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import redis

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """键值存储接口，值一律为字符串（通常是 JSON）"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """读取，不存在返回 None"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """整值覆盖写"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """删除，不存在时忽略"""


class InMemoryKeyValueStore(KeyValueStore):
    """进程内存存储（默认，重启即丢失）"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """单个 JSON 文件存储，每次写入整体重写文件"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"存储文件读取失败，按空处理: {self.file_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: Dict[str, str]) -> None:
        tmp_path = f"{self.file_path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.file_path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)


class RedisKeyValueStore(KeyValueStore):
    """Redis 存储，支持多实例共享"""

    def __init__(self, redis_client, ttl: int = 0):
        """
        Args:
            redis_client: Redis 客户端对象
            ttl: 写入过期秒数，0 表示不过期
        """
        self.redis = redis_client
        self.ttl = ttl

    def get(self, key: str) -> Optional[str]:
        try:
            data = self.redis.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis 读取失败 {key}: {e}")
            return None
        if isinstance(data, bytes):
            data = data.decode('utf-8')
        return data

    def set(self, key: str, value: str) -> None:
        try:
            if self.ttl > 0:
                self.redis.setex(key, self.ttl, value)
            else:
                self.redis.set(key, value)
        except redis.RedisError as e:
            logger.warning(f"Redis 写入失败 {key}: {e}")

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis 删除失败 {key}: {e}")


# 全局存储实例（延迟初始化）
_kv_store: Optional[KeyValueStore] = None


def _create_store() -> KeyValueStore:
    from server.config.app_config import get_config

    config = get_config()
    backend = config.storage.backend

    if backend == 'redis':
        from server.config.redis_config import get_redis_client
        client = get_redis_client()
        if client is not None:
            return RedisKeyValueStore(client, ttl=config.redis.ttl)
        logger.warning("Redis 不可用，降级为内存存储")
        return InMemoryKeyValueStore()

    if backend == 'file':
        logger.info(f"使用文件存储: {config.storage.file_path}")
        return JsonFileKeyValueStore(config.storage.file_path)

    if backend != 'memory':
        logger.warning(f"未知存储后端 {backend!r}，使用内存存储")
    return InMemoryKeyValueStore()


def get_kv_store() -> KeyValueStore:
    """获取键值存储实例（单例模式）"""
    global _kv_store
    if _kv_store is None:
        _kv_store = _create_store()
    return _kv_store


def set_kv_store(store: KeyValueStore) -> None:
    """替换全局存储实例（测试注入用）"""
    global _kv_store
    _kv_store = store


def reset_kv_store() -> None:
    """丢弃全局存储实例，下次访问时按配置重建"""
    global _kv_store
    _kv_store = None
