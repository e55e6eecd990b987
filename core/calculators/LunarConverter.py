#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from lunar_python import Solar

from core.data.constants import RAW_DAYUN_COUNT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawPillars:
    """历法库给出的八个原始干支符号"""
    year_stem: str
    year_branch: str
    month_stem: str
    month_branch: str
    day_stem: str
    day_branch: str
    hour_stem: str
    hour_branch: str


class LunarCycleView:
    """lunar_python 单步大运的只读视图，干支读取失败时返回 None"""

    def __init__(self, da_yun):
        self._da_yun = da_yun
        self.start_age = da_yun.getStartAge()
        self.end_age = da_yun.getEndAge()
        self.start_year = da_yun.getStartYear()

    def try_extract_token(self) -> Optional[str]:
        """
        读取干支（如 '甲子'），0-2 个字符

        getGanZhi() 是库里唯一可靠的大运干支来源，但个别步骤可能抛异常，
        这里统一吞掉并返回 None，由调用方决定跳过。
        """
        try:
            token = self._da_yun.getGanZhi()
        except Exception as e:
            logger.debug(f"getGanZhi 失败 (起运年 {self.start_year}): {e}")
            return None
        if not isinstance(token, str):
            return None
        return token


@dataclass(frozen=True)
class LunarChartView:
    """一次公历转换的原始结果：四柱符号 + 原始大运序列"""
    pillars: RawPillars
    cycles: List[LunarCycleView]


class LunarConverter:
    """农历转换工具类 - 排盘唯一接触 lunar_python 的地方"""

    @staticmethod
    def yun_gender(gender: str) -> int:
        """lunar_python 的大运顺逆参数：男 1，女 0"""
        value = getattr(gender, "value", gender)
        return 1 if str(value).lower() == "male" else 0

    @staticmethod
    def solar_to_eight_char(year: int, month: int, day: int, hour: int, minute: int, second: int = 0):
        """
        公历日期时间 -> lunar_python EightChar

        先用 datetime 校验公历是否存在（如 2月30日、25点），
        非法时抛 ValueError。
        """
        datetime(year, month, day, hour, minute, second)
        solar = Solar.fromYmdHms(year, month, day, hour, minute, second)
        return solar.getLunar().getEightChar()

    @staticmethod
    def convert(year: int, month: int, day: int, hour: int, minute: int, gender: str) -> LunarChartView:
        """
        将公历日期时间转换为排盘所需的原始数据

        Args:
            year, month, day, hour, minute: 公历出生时间
            gender: 性别（决定大运顺逆）

        Returns:
            LunarChartView: 原始四柱 + 原始大运

        Raises:
            ValueError / Exception: 日期非法或历法库内部错误，原样抛出
        """
        eight_char = LunarConverter.solar_to_eight_char(year, month, day, hour, minute)

        pillars = RawPillars(
            year_stem=eight_char.getYearGan(),
            year_branch=eight_char.getYearZhi(),
            month_stem=eight_char.getMonthGan(),
            month_branch=eight_char.getMonthZhi(),
            day_stem=eight_char.getDayGan(),
            day_branch=eight_char.getDayZhi(),
            hour_stem=eight_char.getTimeGan(),
            hour_branch=eight_char.getTimeZhi(),
        )

        yun = eight_char.getYun(LunarConverter.yun_gender(gender))
        da_yun_list = yun.getDaYun(RAW_DAYUN_COUNT) or []

        return LunarChartView(
            pillars=pillars,
            cycles=[LunarCycleView(dy) for dy in da_yun_list],
        )
