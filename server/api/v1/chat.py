#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
AI 命理对话 API - 基于命盘的多轮对话，回复以 SSE 流式输出
"""

import asyncio
import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from server.api.v1.bazi import executor
from server.api.v1.models.base_response import BaseAPIResponse
from server.api.v1.models.bazi_base_models import ChatCreateRequest, ChatSendRequest
from server.services.bazi_chart_service import get_chart_service
from server.services.chat_service import get_chat_service
from server.utils.exception_handler import NotFoundError, api_error_handler

logger = logging.getLogger(__name__)

router = APIRouter()


def _sse(chunk: dict) -> str:
    return f"data: {json.dumps(chunk, ensure_ascii=False)}\n\n"


@router.post("/bazi/chat/create", response_model=BaseAPIResponse, summary="创建新对话")
@api_error_handler
async def create_conversation(request: ChatCreateRequest):
    """
    根据出生信息排盘并创建对话

    返回 conversation_id 与开场白
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
    data = get_chat_service().create_conversation(chart, request.language)
    return BaseAPIResponse(success=True, data=data)


@router.post("/bazi/chat/send", summary="发送消息（SSE 流式）")
async def send_message(request: ChatSendRequest):
    """
    发送消息，流式返回 AI 回复

    事件格式：data: {"type": "progress" | "complete" | "error", "content": "..."}
    """
    chat_service = get_chat_service()

    async def event_stream():
        try:
            async for chunk in chat_service.stream_message(request.conversation_id, request.message):
                yield _sse(chunk)
                if chunk.get('type') in ['complete', 'error']:
                    break
        except Exception as e:
            logger.error(f"对话流式输出失败: {e}", exc_info=True)
            yield _sse({'type': 'error', 'content': f"处理失败: {str(e)}"})

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@router.get("/bazi/chat/history/{conversation_id}", response_model=BaseAPIResponse, summary="获取对话历史")
@api_error_handler
async def get_conversation_history(conversation_id: str):
    """获取对话历史，不存在返回 404"""
    history = get_chat_service().get_conversation_history(conversation_id)
    if history is None:
        raise NotFoundError(f"对话不存在: {conversation_id}", resource="conversation")
    return BaseAPIResponse(success=True, data=history)


@router.delete("/bazi/chat/{conversation_id}", response_model=BaseAPIResponse, summary="删除对话")
@api_error_handler
async def delete_conversation(conversation_id: str):
    """删除对话，不存在返回 404"""
    if not get_chat_service().delete_conversation(conversation_id):
        raise NotFoundError(f"对话不存在: {conversation_id}", resource="conversation")
    return BaseAPIResponse(success=True, data={"conversation_id": conversation_id})
