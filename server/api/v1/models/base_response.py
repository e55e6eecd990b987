#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
统一 API 响应模型

标准响应格式：
{
    "success": true/false,
    "data": {...},           # 成功时返回数据
    "error": "错误信息",      # 失败时返回错误
    "error_type": "错误类型"
}
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from server.models.bazi_chart import BaziResult, DailyFortuneResponse, SavedProfile


class BaseAPIResponse(BaseModel):
    """基础 API 响应模型"""
    success: bool = Field(..., description="请求是否成功")
    data: Optional[Any] = Field(default=None, description="响应数据")
    error: Optional[str] = Field(default=None, description="错误信息")
    error_type: Optional[str] = Field(default=None, description="错误类型")


class ChartResponse(BaseAPIResponse):
    """排盘响应"""
    data: Optional[BaziResult] = None
    profile: Optional[SavedProfile] = Field(default=None, description="记录/使用的历史档案")


class ProfileListResponse(BaseAPIResponse):
    """历史档案列表响应"""
    data: List[SavedProfile] = Field(default_factory=list)


class DailyFortuneAPIResponse(BaseAPIResponse):
    """每日运势响应，获取失败时 success=false、data=null，可重试"""
    data: Optional[DailyFortuneResponse] = None
    cached: bool = Field(False, description="是否命中缓存")
    today: Optional[str] = Field(None, description="运势对应的日期")
