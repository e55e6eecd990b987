#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
大运重建

历法库返回的原始大运序列可能残缺：第0步为起运前区间，
个别步骤的干支取值可能失败或为空。这里逐条容错，
单条失败只丢弃该条，不影响整张命盘。
"""

import logging
from typing import Iterable, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from core.data.constants import MAX_DAYUN_CYCLES
from server.models.bazi_chart import DaYun
from server.utils.exception_handler import CycleExtractionWarning

logger = logging.getLogger(__name__)


class RawCycle(Protocol):
    """历法库单步大运的只读视图"""
    start_age: int
    end_age: int
    start_year: int

    def try_extract_token(self) -> Optional[str]:
        """返回干支字符串（0-2个字符），任何失败返回 None"""
        ...


def _warn(diagnostics: Optional[list], index: int, reason: str) -> None:
    warning = CycleExtractionWarning(index, reason)
    logger.warning(f"大运第{index}步解析失败，已跳过: {reason}")
    if diagnostics is not None:
        diagnostics.append(warning)


def reconstruct_cycles(
    raw_cycles: Optional[Iterable[RawCycle]],
    diagnostics: Optional[List[CycleExtractionWarning]] = None,
    max_cycles: int = MAX_DAYUN_CYCLES,
) -> List[DaYun]:
    """
    原始大运序列 -> DaYun 列表

    Args:
        raw_cycles: 原始大运序列（第0步总是跳过）
        diagnostics: 可选，收集被跳过步骤的 CycleExtractionWarning
        max_cycles: 最多保留条数

    Returns:
        按原始顺序排列的大运，长度不超过 max_cycles，每条天干地支均非空
    """
    cycles: List[DaYun] = []
    if not raw_cycles:
        return cycles

    for index, raw in enumerate(raw_cycles):
        if index == 0:
            continue
        if len(cycles) >= max_cycles:
            break

        token = raw.try_extract_token() if raw is not None else None
        if not token:
            _warn(diagnostics, index, "干支为空或读取失败")
            continue

        stem = token[0]
        branch = token[1] if len(token) >= 2 else ""
        if not stem or not branch:
            _warn(diagnostics, index, f"干支不完整: {token!r}")
            continue

        try:
            cycles.append(DaYun(
                start_age=raw.start_age,
                end_age=raw.end_age,
                start_year=raw.start_year,
                stem=stem,
                branch=branch,
            ))
        except PydanticValidationError as e:
            _warn(diagnostics, index, f"年龄数据非法: {e.errors()}")

    return cycles
