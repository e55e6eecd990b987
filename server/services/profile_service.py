#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
历史档案服务 - 保存排盘身份（出生地/日期/时间/性别），用于重新排盘

同一 (出生地, 日期, 性别) 只保留一条，时间不参与去重。
"""

import json
import logging
import threading
import uuid
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from server.models.bazi_chart import Gender, SavedProfile
from server.utils.cache_key_generator import PROFILES_KEY
from server.utils.kv_store import KeyValueStore, get_kv_store

logger = logging.getLogger(__name__)

# 旧档案缺字段时的默认值
DEFAULT_BIRTH_TIME = "12:00"
DEFAULT_BIRTH_PLACE = "Unknown"


class ProfileStore:
    """历史档案仓库（整表 JSON 存于单个键下，新档案在前）"""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else get_kv_store()
        # 读-改-写整表，排盘在线程池中并发执行
        self._lock = threading.Lock()

    def _load(self) -> List[SavedProfile]:
        raw = self.store.get(PROFILES_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError as e:
            logger.warning(f"历史档案数据损坏，按空处理: {e}")
            return []
        if not isinstance(items, list):
            logger.warning("历史档案数据格式错误（非数组），按空处理")
            return []

        profiles = []
        for item in items:
            try:
                profiles.append(SavedProfile.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(f"跳过无法解析的历史档案: {item!r}: {e}")
        return profiles

    def _save(self, profiles: List[SavedProfile]) -> None:
        data = [p.model_dump(mode='json') for p in profiles]
        self.store.set(PROFILES_KEY, json.dumps(data, ensure_ascii=False))

    def list_profiles(self) -> List[SavedProfile]:
        """全部档案，新的在前"""
        return self._load()

    def get_profile(self, profile_id: str) -> Optional[SavedProfile]:
        for profile in self._load():
            if profile.id == profile_id:
                return profile
        return None

    def add_profile(
        self,
        birth_place: str,
        birth_date: str,
        birth_time: str,
        gender
    ) -> Tuple[SavedProfile, bool]:
        """
        添加档案（去重）

        Returns:
            (档案, 是否新建)；已存在同一身份时返回原档案，不更新时间
        """
        gender = Gender(gender)
        identity = (birth_place, birth_date, gender)
        with self._lock:
            profiles = self._load()
            for existing in profiles:
                if existing.identity() == identity:
                    logger.debug(f"档案已存在，跳过: {identity}")
                    return existing, False

            profile = SavedProfile(
                id=uuid.uuid4().hex,
                birth_place=birth_place,
                birth_date=birth_date,
                birth_time=birth_time,
                gender=gender,
            )
            profiles.insert(0, profile)
            self._save(profiles)
        logger.info(f"新增历史档案 {profile.id}: {birth_place} {birth_date} {gender.value}")
        return profile, True

    def delete_profile(self, profile_id: str) -> bool:
        """按 id 删除，返回是否删除成功"""
        with self._lock:
            profiles = self._load()
            remaining = [p for p in profiles if p.id != profile_id]
            if len(remaining) == len(profiles):
                return False
            self._save(remaining)
        logger.info(f"删除历史档案 {profile_id}")
        return True

    @staticmethod
    def reload_args(profile: SavedProfile) -> Tuple[str, str, Gender, str]:
        """档案 -> 排盘参数 (日期, 时间, 性别, 出生地)，旧档案缺字段时补默认值"""
        return (
            profile.birth_date,
            profile.birth_time or DEFAULT_BIRTH_TIME,
            profile.gender,
            profile.birth_place or DEFAULT_BIRTH_PLACE,
        )


# 全局单例（延迟初始化）
_profile_store: Optional[ProfileStore] = None


def get_profile_store() -> ProfileStore:
    """获取历史档案仓库（单例模式）"""
    global _profile_store
    if _profile_store is None:
        _profile_store = ProfileStore()
    return _profile_store
