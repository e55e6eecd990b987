#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
每日运势 API - AI 生成，按 (命盘, 语言, 当天) 缓存
"""

import asyncio
import logging
from datetime import date

from fastapi import APIRouter

from server.api.v1.bazi import executor
from server.api.v1.models.base_response import DailyFortuneAPIResponse
from server.api.v1.models.bazi_base_models import DailyFortuneRequest
from server.services.bazi_chart_service import get_chart_service
from server.services.daily_fortune_service import get_daily_fortune_service
from server.utils.exception_handler import api_error_handler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/bazi/daily-fortune", response_model=DailyFortuneAPIResponse, summary="每日运势")
@api_error_handler
async def get_daily_fortune(request: DailyFortuneRequest):
    """
    获取今日运势

    - **solar_date / solar_time / gender / birth_place**: 出生信息
    - **language**: en / zh
    - **today**: 读者本地当天日期（可选，默认服务器本地日期）
    - **refresh**: 跳过缓存重新获取

    同一天同一命盘同一语言只调用一次 AI。获取失败时 success=false、data=null，可稍后重试。
    """
    loop = asyncio.get_event_loop()
    chart, _ = await loop.run_in_executor(
        executor,
        get_chart_service().compute_chart,
        request.solar_date,
        request.solar_time,
        request.gender,
        request.birth_place,
        False
    )

    today = date.fromisoformat(request.today) if request.today else date.today()
    lookup = await get_daily_fortune_service().lookup(
        chart, request.language, today, refresh=request.refresh
    )

    if lookup.fortune is None:
        return DailyFortuneAPIResponse(
            success=False,
            data=None,
            error="每日运势暂时无法获取，请稍后重试",
            error_type="fortune_fetch_failed",
            today=today.isoformat()
        )
    return DailyFortuneAPIResponse(
        success=True,
        data=lookup.fortune,
        cached=lookup.cached,
        today=today.isoformat()
    )
