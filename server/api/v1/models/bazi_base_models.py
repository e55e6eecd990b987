#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘基础请求模型 - 包含所有公共字段和验证器
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class BaziBaseRequest(BaseModel):
    """排盘基础请求模型 - 出生信息"""
    solar_date: str = Field(..., description="阳历日期，格式：YYYY-MM-DD", example="1990-05-15")
    solar_time: str = Field(..., description="出生时间，格式：HH:MM", example="14:30")
    gender: str = Field(..., description="性别：male(男) 或 female(女)，不区分大小写", example="male")
    birth_place: str = Field(..., description="出生地（自由文本）", example="Beijing")

    @field_validator('solar_date', 'solar_time')
    @classmethod
    def validate_not_empty(cls, v):
        """只检查非空，形状与日历合法性由排盘组装器判断"""
        if not v or not v.strip():
            raise ValueError('日期/时间不能为空')
        return v.strip()

    @field_validator('gender')
    @classmethod
    def validate_gender(cls, v):
        """验证性别"""
        lowered = v.strip().lower() if v else v
        if lowered not in ['male', 'female']:
            raise ValueError('性别必须为 male 或 female')
        return lowered

    @field_validator('birth_place')
    @classmethod
    def validate_birth_place(cls, v):
        return v.strip()


class LanguageRequestMixin(BaseModel):
    """AI 输出语言"""
    language: str = Field("en", description="AI 输出语言：en 或 zh", example="zh")

    @field_validator('language')
    @classmethod
    def validate_language(cls, v):
        lowered = (v or "").strip().lower()
        if lowered not in ['en', 'zh']:
            raise ValueError('语言必须为 en 或 zh')
        return lowered


class ChartRequest(BaziBaseRequest):
    """排盘请求"""
    save_profile: bool = Field(True, description="排盘成功后是否记录历史档案", example=True)


class DailyFortuneRequest(BaziBaseRequest, LanguageRequestMixin):
    """每日运势请求"""
    today: Optional[str] = Field(None, description="读者本地当天日期 YYYY-MM-DD（可选，默认服务器本地日期）", example="2026-10-19")
    refresh: bool = Field(False, description="是否跳过缓存重新获取", example=False)

    @field_validator('today')
    @classmethod
    def validate_today(cls, v):
        if v is None:
            return v
        from datetime import datetime
        try:
            datetime.strptime(v, '%Y-%m-%d')
        except ValueError:
            raise ValueError('日期格式错误，应为 YYYY-MM-DD')
        return v


class ChatCreateRequest(BaziBaseRequest, LanguageRequestMixin):
    """创建对话请求"""


class ChatSendRequest(BaseModel):
    """发送对话消息请求"""
    conversation_id: str = Field(..., description="对话ID")
    message: str = Field(..., description="用户消息", example="How is my career this year?")

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        if not v or not v.strip():
            raise ValueError('消息不能为空')
        return v
