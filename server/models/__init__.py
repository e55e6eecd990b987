#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘数据模型 - 统一的数据结构定义
"""

from server.models.bazi_chart import (
    BaziResult,
    ChatMessage,
    DailyFortuneResponse,
    DaYun,
    Gender,
    Language,
    Pillar,
    SavedProfile,
)

__all__ = [
    'BaziResult',
    'ChatMessage',
    'DailyFortuneResponse',
    'DaYun',
    'Gender',
    'Language',
    'Pillar',
    'SavedProfile',
]
