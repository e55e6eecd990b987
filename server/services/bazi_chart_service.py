#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘服务 - 排盘成功后记录历史档案；从档案重新排盘
"""

import logging
from typing import Optional, Tuple

from core.calculators.bazi_chart_calculator import calculate_bazi
from server.models.bazi_chart import BaziResult, SavedProfile
from server.services.profile_service import ProfileStore, get_profile_store
from server.utils.exception_handler import NotFoundError

logger = logging.getLogger(__name__)


class BaziChartService:
    """排盘服务"""

    def __init__(self, profile_store: Optional[ProfileStore] = None, calendar=None):
        self._profile_store = profile_store
        self.calendar = calendar

    @property
    def profile_store(self) -> ProfileStore:
        if self._profile_store is None:
            self._profile_store = get_profile_store()
        return self._profile_store

    def compute_chart(
        self,
        solar_date: str,
        solar_time: str,
        gender,
        birth_place: str,
        save_profile: bool = True
    ) -> Tuple[BaziResult, Optional[SavedProfile]]:
        """
        排盘并（可选）记录档案

        排盘失败时异常直接抛出，不会写入档案。

        Returns:
            (排盘结果, 档案)；save_profile=False 时档案为 None
        """
        result = calculate_bazi(solar_date, solar_time, gender, birth_place, calendar=self.calendar)

        profile = None
        if save_profile:
            profile, _ = self.profile_store.add_profile(
                birth_place=result.birth_place,
                birth_date=result.birth_date,
                birth_time=result.birth_time,
                gender=result.gender,
            )
        return result, profile

    def load_profile(self, profile_id: str) -> Tuple[BaziResult, SavedProfile]:
        """
        从档案重新排盘（不重复记录档案）

        Raises:
            NotFoundError: 档案不存在
        """
        profile = self.profile_store.get_profile(profile_id)
        if profile is None:
            raise NotFoundError(f"档案不存在: {profile_id}", resource="profile")

        date_str, time_str, gender, place = ProfileStore.reload_args(profile)
        logger.info(f"从档案 {profile_id} 重新排盘")
        result = calculate_bazi(date_str, time_str, gender, place, calendar=self.calendar)
        return result, profile


# 全局单例
_chart_service: Optional[BaziChartService] = None


def get_chart_service() -> BaziChartService:
    """获取排盘服务（单例模式）"""
    global _chart_service
    if _chart_service is None:
        _chart_service = BaziChartService()
    return _chart_service
