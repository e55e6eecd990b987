#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
对话服务 - 基于命盘的多轮 AI 对话
对话上下文（命盘、语言、消息历史）存于键值存储，每轮回复流式输出
"""

import json
import logging
import uuid
from typing import Any, AsyncGenerator, Dict, Optional, Union

from server.models.bazi_chart import BaziResult, ChatMessage, Language
from server.services.base_llm_stream_service import BaseLLMStreamService
from server.utils.cache_key_generator import CacheKeyGenerator
from server.utils.kv_store import KeyValueStore, get_kv_store
from server.utils.prompt_builders import (
    build_chat_greeting,
    build_chat_system_instruction,
    chat_interrupted_message,
)

logger = logging.getLogger(__name__)


class ChatService:
    """对话服务 - 支持多轮对话"""

    def __init__(self, store: Optional[KeyValueStore] = None, llm_service: Optional[BaseLLMStreamService] = None):
        self._store = store
        self._llm_service = llm_service

    @property
    def store(self) -> KeyValueStore:
        if self._store is None:
            self._store = get_kv_store()
        return self._store

    @property
    def llm_service(self) -> BaseLLMStreamService:
        if self._llm_service is None:
            from server.services.gemini_stream_service import get_gemini_service
            self._llm_service = get_gemini_service()
        return self._llm_service

    def _get_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        """获取对话上下文"""
        data = self.store.get(CacheKeyGenerator.generate_chat_key(conversation_id))
        if not data:
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            logger.warning(f"对话记录损坏 {conversation_id}: {e}")
            return None

    def _save_conversation(self, conversation_id: str, conversation: Dict[str, Any]):
        """保存对话上下文"""
        self.store.set(
            CacheKeyGenerator.generate_chat_key(conversation_id),
            json.dumps(conversation, ensure_ascii=False)
        )

    def create_conversation(self, chart: BaziResult, language: Union[Language, str]) -> Dict[str, Any]:
        """
        创建新对话

        Args:
            chart: 排盘结果
            language: 回复语言

        Returns:
            dict: conversation_id、开场白、语言
        """
        language = Language(language)
        conversation_id = uuid.uuid4().hex
        greeting = build_chat_greeting(chart, language)

        self._save_conversation(conversation_id, {
            "chart": chart.model_dump(mode="json"),
            "language": language.value,
            "messages": [{"role": "model", "text": greeting, "greeting": True}],
        })
        logger.info(f"创建对话 {conversation_id} (language={language.value})")
        return {
            "conversation_id": conversation_id,
            "greeting": greeting,
            "language": language.value,
        }

    async def stream_message(
        self,
        conversation_id: str,
        message: str
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        发送消息并流式返回回复

        成功时两轮消息都追加到历史；失败时只产出 error 事件（内容为本地化的中断提示），
        不记录本轮。

        Yields:
            dict: {'type': 'progress' | 'complete' | 'error', 'content': 文本}
        """
        conversation = self._get_conversation(conversation_id)
        if conversation is None:
            yield {'type': 'error', 'content': f'对话不存在: {conversation_id}'}
            return

        chart = BaziResult.model_validate(conversation["chart"])
        language = Language(conversation.get("language", Language.EN.value))
        # 开场白是本地生成的，不作为模型历史发送
        history = [m for m in conversation.get("messages", []) if not m.get("greeting")]

        reply = None
        async for chunk in self.llm_service.stream_analysis(
            message,
            trace_id=conversation_id,
            system_instruction=build_chat_system_instruction(chart, language),
            history=history,
        ):
            chunk_type = chunk.get('type')
            if chunk_type == 'progress':
                yield chunk
            elif chunk_type == 'complete':
                reply = chunk.get('content', '')
            elif chunk_type == 'error':
                logger.warning(f"对话 {conversation_id} 回复中断: {chunk.get('content')}")
                yield {'type': 'error', 'content': chat_interrupted_message(language)}
                return

        if reply is None:
            yield {'type': 'error', 'content': chat_interrupted_message(language)}
            return

        conversation["messages"].append({"role": "user", "text": message})
        conversation["messages"].append({"role": "model", "text": reply})
        self._save_conversation(conversation_id, conversation)
        yield {'type': 'complete', 'content': reply}

    def get_conversation_history(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        """获取对话历史，不存在返回 None"""
        conversation = self._get_conversation(conversation_id)
        if conversation is None:
            return None
        return {
            "conversation_id": conversation_id,
            "language": conversation.get("language"),
            "messages": [
                ChatMessage(role=m["role"], text=m["text"]).model_dump()
                for m in conversation.get("messages", [])
            ],
        }

    def delete_conversation(self, conversation_id: str) -> bool:
        """删除对话，返回对话是否存在"""
        if self._get_conversation(conversation_id) is None:
            return False
        self.store.delete(CacheKeyGenerator.generate_chat_key(conversation_id))
        return True


# 全局单例
_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """获取对话服务（单例模式）"""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
