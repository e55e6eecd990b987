#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
排盘 API - 四柱排盘、历史档案
"""

import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor

from fastapi import APIRouter

from server.api.v1.models.base_response import BaseAPIResponse, ChartResponse, ProfileListResponse
from server.api.v1.models.bazi_base_models import ChartRequest
from server.services.bazi_chart_service import get_chart_service
from server.services.profile_service import get_profile_store
from server.utils.exception_handler import NotFoundError, api_error_handler

logger = logging.getLogger(__name__)

router = APIRouter()

# 线程池（lunar_python 计算是同步的）
cpu_count = os.cpu_count() or 4
executor = ThreadPoolExecutor(max_workers=min(cpu_count * 2, 32))


@router.post("/bazi/chart", response_model=ChartResponse, summary="四柱排盘")
@api_error_handler
async def calculate_chart(request: ChartRequest):
    """
    根据出生信息排盘

    - **solar_date**: 出生日期（阳历）(YYYY-MM-DD)
    - **solar_time**: 出生时间 (HH:MM)
    - **gender**: 性别 (male/female)
    - **birth_place**: 出生地
    - **save_profile**: 成功后是否记录历史档案（默认 true）

    日期/时间格式错误返回 400；日期不存在等计算失败返回 422，均不记录档案。
    """
    loop = asyncio.get_event_loop()
    result, profile = await loop.run_in_executor(
        executor,
        get_chart_service().compute_chart,
        request.solar_date,
        request.solar_time,
        request.gender,
        request.birth_place,
        request.save_profile
    )
    return ChartResponse(success=True, data=result, profile=profile)


@router.get("/bazi/profiles", response_model=ProfileListResponse, summary="历史档案列表")
@api_error_handler
async def list_profiles():
    """历史档案，新的在前"""
    return ProfileListResponse(success=True, data=get_profile_store().list_profiles())


@router.post("/bazi/profiles/{profile_id}/load", response_model=ChartResponse, summary="从历史档案重新排盘")
@api_error_handler
async def load_profile(profile_id: str):
    """
    从历史档案重新排盘

    旧档案缺少时间时按 12:00，缺少出生地时按 Unknown。档案不存在返回 404。
    """
    loop = asyncio.get_event_loop()
    result, profile = await loop.run_in_executor(
        executor,
        get_chart_service().load_profile,
        profile_id
    )
    return ChartResponse(success=True, data=result, profile=profile)


@router.delete("/bazi/profiles/{profile_id}", response_model=BaseAPIResponse, summary="删除历史档案")
@api_error_handler
async def delete_profile(profile_id: str):
    """按 id 删除历史档案，不存在返回 404"""
    if not get_profile_store().delete_profile(profile_id):
        raise NotFoundError(f"档案不存在: {profile_id}", resource="profile")
    return BaseAPIResponse(success=True, data={"id": profile_id})
