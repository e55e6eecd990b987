#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘组装：输入校验 -> 历法转换 -> 四柱规范化 -> 大运重建 -> BaziResult

失败语义：
- 日期/时间格式不对（无法拆成 年-月-日 / 时:分 整数）抛 InvalidInputError
- 历法库的任何异常（非法日期、超出范围、库内部错误）统一抛 ChartComputationError
- 不会返回残缺的命盘
"""

from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from core.calculators.LunarConverter import LunarConverter, LunarChartView
from core.calculators.cycle_reconstructor import reconstruct_cycles
from core.calculators.pillar_normalizer import make_pillar
from server.models.bazi_chart import BaziResult, Gender
from server.utils.exception_handler import (
    ChartComputationError,
    CycleExtractionWarning,
    InvalidInputError,
)

logger = logging.getLogger(__name__)


def _parse_int_parts(value: str, sep: str, count: int, field: str) -> Tuple[int, ...]:
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} 必须是字符串", field=field)
    parts = value.split(sep)
    if len(parts) != count:
        raise InvalidInputError(f"{field} 格式错误: {value!r}", field=field)
    # int() 还接受空白、正负号、下划线和全角数字，这里只认 ASCII 数字
    if not all(part.isascii() and part.isdigit() for part in parts):
        raise InvalidInputError(f"{field} 格式错误: {value!r}", field=field)
    return tuple(int(part) for part in parts)


def parse_birth_date(date_str: str) -> Tuple[int, int, int]:
    """'YYYY-MM-DD' -> (年, 月, 日)，只校验形状，不校验日历合法性"""
    return _parse_int_parts(date_str, '-', 3, 'solar_date')


def parse_birth_time(time_str: str) -> Tuple[int, int]:
    """'HH:MM' -> (时, 分)，只校验形状"""
    return _parse_int_parts(time_str, ':', 2, 'solar_time')


def parse_gender(gender) -> Gender:
    try:
        return Gender(gender)
    except ValueError:
        raise InvalidInputError(f"性别必须是 male 或 female: {gender!r}", field='gender') from None


class BaziChartCalculator:
    """排盘组装器，历法协作方可注入（默认 LunarConverter）"""

    def __init__(self, calendar=None) -> None:
        self.calendar = calendar or LunarConverter
        self.last_diagnostics: List[CycleExtractionWarning] = []

    def calculate(self, date_str: str, time_str: str, gender, birth_place: str) -> BaziResult:
        """
        执行排盘

        Args:
            date_str: 公历日期 'YYYY-MM-DD'
            time_str: 公历时间 'HH:MM'
            gender: 性别 male / female
            birth_place: 出生地（自由文本）

        Returns:
            BaziResult

        Raises:
            InvalidInputError: 日期/时间/性别格式错误
            ChartComputationError: 历法计算失败
        """
        year, month, day = parse_birth_date(date_str)
        hour, minute = parse_birth_time(time_str)
        gender = parse_gender(gender)

        try:
            view: LunarChartView = self.calendar.convert(year, month, day, hour, minute, gender.value)
        except Exception as e:
            logger.error(f"排盘计算失败 {date_str} {time_str}: {e}", exc_info=True)
            raise ChartComputationError() from e

        raw = view.pillars
        year_pillar = make_pillar(raw.year_stem, raw.year_branch)
        month_pillar = make_pillar(raw.month_stem, raw.month_branch)
        day_pillar = make_pillar(raw.day_stem, raw.day_branch)
        hour_pillar = make_pillar(raw.hour_stem, raw.hour_branch)

        self.last_diagnostics = []
        cycles = reconstruct_cycles(view.cycles, diagnostics=self.last_diagnostics)

        return BaziResult(
            year_pillar=year_pillar,
            month_pillar=month_pillar,
            day_pillar=day_pillar,
            hour_pillar=hour_pillar,
            day_master_stem=day_pillar.stem,
            cycles=cycles,
            gender=gender,
            birth_date=date_str,
            birth_time=time_str,
            birth_instant=f"{date_str}T{time_str}",
            birth_place=birth_place,
        )


def calculate_bazi(
    date_str: str,
    time_str: str,
    gender,
    birth_place: str,
    calendar=None,
    diagnostics: Optional[List[CycleExtractionWarning]] = None,
) -> BaziResult:
    """
    排盘便捷函数

    diagnostics 传入列表时，被跳过的大运步骤会追加到其中。
    """
    calculator = BaziChartCalculator(calendar=calendar)
    result = calculator.calculate(date_str, time_str, gender, birth_place)
    if diagnostics is not None:
        diagnostics.extend(calculator.last_diagnostics)
    return result
