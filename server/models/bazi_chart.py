#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘数据模型 - 四柱、大运、排盘结果、历史档案、每日运势
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from core.data.constants import Animal, Element


class Gender(str, Enum):
    """性别"""
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def _missing_(cls, value):
        # 兼容 "Male" / " FEMALE " 等写法
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class Language(str, Enum):
    """AI 输出语言"""
    EN = "en"
    ZH = "zh"


class Pillar(BaseModel):
    """单柱（年/月/日/时），五行与生肖由 make_pillar 推导"""
    stem: str = Field(..., description="天干", example="甲")
    branch: str = Field(..., description="地支", example="子")
    stem_element: Element = Field(..., description="天干五行", example="Wood")
    branch_element: Element = Field(..., description="地支五行", example="Water")
    branch_animal: Animal = Field(..., description="地支生肖，未知时为空字符串", example="Rat")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "stem": "甲",
                "branch": "子",
                "stem_element": "Wood",
                "branch_element": "Water",
                "branch_animal": "Rat"
            }
        }


class DaYun(BaseModel):
    """大运（十年一运）"""
    start_age: int = Field(..., ge=0, description="起运年龄", example=3)
    end_age: int = Field(..., ge=0, description="结束年龄", example=12)
    start_year: int = Field(..., description="起运年份", example=1993)
    stem: str = Field(..., min_length=1, description="天干", example="丙")
    branch: str = Field(..., min_length=1, description="地支", example="寅")

    class Config:
        frozen = True


class BaziResult(BaseModel):
    """一次排盘的不可变快照"""
    year_pillar: Pillar = Field(..., description="年柱")
    month_pillar: Pillar = Field(..., description="月柱")
    day_pillar: Pillar = Field(..., description="日柱")
    hour_pillar: Pillar = Field(..., description="时柱")
    day_master_stem: str = Field(..., description="日主（日柱天干）", example="甲")
    cycles: List[DaYun] = Field(default_factory=list, description="大运列表（最多8步）")
    gender: Gender = Field(..., description="性别", example="male")
    birth_date: str = Field(..., description="出生日期 YYYY-MM-DD", example="1990-05-15")
    birth_time: str = Field(..., description="出生时间 HH:MM", example="14:30")
    birth_instant: str = Field(..., description="出生日期时间", example="1990-05-15T14:30")
    birth_place: str = Field(..., description="出生地", example="Beijing")

    class Config:
        frozen = True


class SavedProfile(BaseModel):
    """历史档案（仅保存排盘身份，用于重新排盘）"""
    id: str = Field(..., description="档案ID")
    birth_place: Optional[str] = Field(None, description="出生地", example="Beijing")
    birth_date: str = Field(..., description="出生日期 YYYY-MM-DD", example="1990-05-15")
    birth_time: Optional[str] = Field(None, description="出生时间 HH:MM", example="14:30")
    gender: Gender = Field(..., description="性别", example="male")

    def identity(self) -> tuple:
        """去重身份：出生地 + 日期 + 性别（不含时间）"""
        return (self.birth_place, self.birth_date, self.gender)


class DailyFortuneResponse(BaseModel):
    """AI 生成的每日运势"""
    score: int = Field(..., ge=0, le=100, description="今日综合运势分数 0-100", example=78)
    summary: str = Field(..., description="一句话总结")
    analysis: str = Field(..., description="结合命盘的详细分析")
    advice: str = Field(..., description="今日行动建议")
    lucky_color: str = Field(..., description="幸运色", example="Green")
    lucky_direction: str = Field(..., description="幸运方位", example="East")

    class Config:
        json_schema_extra = {
            "example": {
                "score": 78,
                "summary": "A steady day for careful progress.",
                "analysis": "Today's Wood energy supports your Fire Day Master...",
                "advice": "Start the pending project before noon.",
                "lucky_color": "Green",
                "lucky_direction": "East"
            }
        }


class ChatMessage(BaseModel):
    """对话消息"""
    role: str = Field(..., description="user 或 model")
    text: str = Field(..., description="消息文本")
