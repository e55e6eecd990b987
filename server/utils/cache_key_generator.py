#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
缓存键生成器 - 统一管理所有存储键的生成逻辑
"""

import hashlib
from datetime import date
from typing import Union

# 历史档案的固定存储键
PROFILES_KEY = "zen_destiny_profiles"

# Redis 键长度限制
MAX_KEY_LENGTH = 200


class CacheKeyGenerator:
    """缓存键生成器"""

    @staticmethod
    def _join(prefix: str, *parts: str) -> str:
        """冒号拼接，超长时改用 MD5"""
        key_str = ':'.join([prefix, *parts])
        if len(key_str) > MAX_KEY_LENGTH:
            hash_str = hashlib.md5(key_str.encode('utf-8')).hexdigest()
            return f"{prefix}:hash:{hash_str}"
        return key_str

    @staticmethod
    def generate_fortune_key(
        birth_place: str,
        birth_date: str,
        gender: str,
        language: str,
        today: Union[date, str]
    ) -> str:
        """
        生成每日运势缓存键

        Args:
            birth_place: 出生地
            birth_date: 出生日期（仅日期 YYYY-MM-DD）
            gender: 性别
            language: 语言 en / zh
            today: 当天日期（读者本地时区）

        Returns:
            str: 缓存键，同一命盘身份 + 语言 + 日期唯一
        """
        if isinstance(today, date):
            today = today.isoformat()
        return CacheKeyGenerator._join(
            "fortune_json",
            birth_place or "",
            birth_date,
            gender,
            language,
            today
        )

    @staticmethod
    def generate_chat_key(conversation_id: str) -> str:
        """生成对话记录存储键"""
        return f"bazi_chat:{conversation_id}"
