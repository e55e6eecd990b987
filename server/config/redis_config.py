#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Redis 配置模块（仅 STORAGE_BACKEND=redis 时使用）
"""

import logging
from typing import Optional

import redis
from redis.connection import ConnectionPool

from server.config.app_config import RedisConfig, get_config

logger = logging.getLogger(__name__)

# 全局 Redis 连接池
redis_pool: Optional[ConnectionPool] = None
redis_client: Optional[redis.Redis] = None


def init_redis(config: Optional[RedisConfig] = None) -> bool:
    """
    初始化 Redis 连接

    Args:
        config: Redis 配置，默认取应用配置

    Returns:
        bool: 连接（ping）是否成功
    """
    global redis_pool, redis_client

    config = config or get_config().redis

    # decode_responses=True：读取结果直接是 str，上层按 JSON 解析
    redis_pool = ConnectionPool(
        host=config.host,
        port=config.port,
        db=config.db,
        password=config.password,
        max_connections=config.max_connections,
        decode_responses=True
    )
    redis_client = redis.Redis(connection_pool=redis_pool)

    try:
        redis_client.ping()
        logger.info(f"✓ Redis 连接成功: {config.host}:{config.port}")
        return True
    except redis.RedisError as e:
        logger.warning(f"✗ Redis 连接失败: {e}")
        redis_client = None
        return False


def get_redis_client() -> Optional[redis.Redis]:
    """获取 Redis 客户端（首次调用时初始化，失败返回 None）"""
    if redis_client is None:
        init_redis()
    return redis_client
