#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
四柱规范化：由原始 (天干, 地支) 构造 Pillar
"""

from typing import Optional

from core.data.constants import animal_of, branch_element, stem_element
from server.models.bazi_chart import Pillar


def make_pillar(stem: Optional[str], branch: Optional[str]) -> Pillar:
    """
    构造单柱，五行/生肖由查表得出

    不校验干支组合是否合法（由历法库负责）；未知符号得到 Unknown / 空生肖。
    """
    stem = stem or ""
    branch = branch or ""
    return Pillar(
        stem=stem,
        branch=branch,
        stem_element=stem_element(stem),
        branch_element=branch_element(branch),
        branch_animal=animal_of(branch),
    )
