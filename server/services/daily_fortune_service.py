#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
每日运势服务 - 按 (命盘身份, 语言, 当天日期) 缓存 AI 生成的每日运势

读穿透：当天缓存存在时直接返回，不调用 AI；
写穿透：仅获取成功时写缓存，失败返回 None 且不覆盖已有缓存。
"""

import json
import logging
from datetime import date
from typing import Awaitable, Callable, NamedTuple, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from server.models.bazi_chart import BaziResult, DailyFortuneResponse, Language
from server.utils.cache_key_generator import CacheKeyGenerator
from server.utils.kv_store import KeyValueStore, get_kv_store

logger = logging.getLogger(__name__)

# (命盘, 语言, 日期) -> 运势；返回 None 或抛异常均视为获取失败
FortuneFetcher = Callable[[BaziResult, Language, date], Awaitable[Optional[DailyFortuneResponse]]]


class FortuneLookup(NamedTuple):
    """一次查询的结果"""
    fortune: Optional[DailyFortuneResponse]
    cached: bool
    cache_key: str


def _as_date(today: Union[date, str]) -> date:
    if isinstance(today, date):
        return today
    return date.fromisoformat(today)


class DailyFortuneService:
    """每日运势服务"""

    def __init__(self, store: Optional[KeyValueStore] = None, fetcher: Optional[FortuneFetcher] = None):
        """
        Args:
            store: 键值存储，默认全局存储
            fetcher: 运势获取协作方，默认 Gemini 服务
        """
        self._store = store
        self._fetcher = fetcher

    @property
    def store(self) -> KeyValueStore:
        if self._store is None:
            self._store = get_kv_store()
        return self._store

    @property
    def fetcher(self) -> FortuneFetcher:
        if self._fetcher is None:
            from server.services.gemini_stream_service import get_gemini_service
            self._fetcher = get_gemini_service().generate_daily_fortune
        return self._fetcher

    @staticmethod
    def generate_cache_key(chart: BaziResult, language: Union[Language, str], today: Union[date, str]) -> str:
        """
        生成缓存键：出生地 + 出生日期（不含时间）+ 性别 + 语言 + 当天日期
        """
        return CacheKeyGenerator.generate_fortune_key(
            birth_place=chart.birth_place,
            birth_date=chart.birth_date,
            gender=chart.gender.value,
            language=Language(language).value,
            today=_as_date(today),
        )

    def _read_cache(self, cache_key: str) -> Optional[DailyFortuneResponse]:
        raw = self.store.get(cache_key)
        if not raw:
            return None
        try:
            return DailyFortuneResponse.model_validate(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"⚠️  运势缓存损坏，按未命中处理 {cache_key}: {e}")
            return None

    def _write_cache(self, cache_key: str, fortune: DailyFortuneResponse) -> None:
        self.store.set(cache_key, fortune.model_dump_json())

    async def lookup(
        self,
        chart: BaziResult,
        language: Union[Language, str],
        today: Union[date, str],
        refresh: bool = False
    ) -> FortuneLookup:
        """
        查询每日运势（带缓存）

        Args:
            chart: 排盘结果
            language: 语言 en / zh
            today: 读者本地当天日期
            refresh: True 时跳过读缓存（成功后仍写缓存）

        Returns:
            FortuneLookup
        """
        language = Language(language)
        today = _as_date(today)
        cache_key = self.generate_cache_key(chart, language, today)

        # 1. 先查缓存
        if not refresh:
            cached = self._read_cache(cache_key)
            if cached is not None:
                logger.info(f"运势缓存命中: {cache_key}")
                return FortuneLookup(cached, True, cache_key)

        # 2. 缓存未命中，调用 AI
        logger.info(f"运势缓存未命中，调用 AI: {cache_key}")
        try:
            fortune = await self.fetcher(chart, language, today)
        except Exception as e:
            logger.warning(f"⚠️  每日运势获取失败（可重试）: {e}")
            fortune = None

        # 3. 仅成功时写缓存
        if fortune is None:
            return FortuneLookup(None, False, cache_key)
        self._write_cache(cache_key, fortune)
        return FortuneLookup(fortune, False, cache_key)

    async def get_or_fetch_fortune(
        self,
        chart: BaziResult,
        language: Union[Language, str],
        today: Union[date, str],
        refresh: bool = False
    ) -> Optional[DailyFortuneResponse]:
        """查询每日运势，失败返回 None"""
        result = await self.lookup(chart, language, today, refresh=refresh)
        return result.fortune


async def get_or_fetch_fortune(
    chart: BaziResult,
    language: Union[Language, str],
    today: Union[date, str],
    fetcher: Optional[FortuneFetcher] = None,
    store: Optional[KeyValueStore] = None,
    refresh: bool = False
) -> Optional[DailyFortuneResponse]:
    """便捷函数：按需注入 fetcher / store"""
    service = DailyFortuneService(store=store, fetcher=fetcher)
    return await service.get_or_fetch_fortune(chart, language, today, refresh=refresh)


# 全局单例
_daily_fortune_service: Optional[DailyFortuneService] = None


def get_daily_fortune_service() -> DailyFortuneService:
    """获取每日运势服务（单例模式）"""
    global _daily_fortune_service
    if _daily_fortune_service is None:
        _daily_fortune_service = DailyFortuneService()
    return _daily_fortune_service
