#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Gemini 流式服务

包装 google-genai 为统一的 BaseLLMStreamService 接口：
- stream_analysis: 多轮对话流式输出
- generate_daily_fortune: 一次性结构化 JSON 输出（每日运势）

所有传输错误都按"无结果"处理，不向上抛出。
"""

import json
import logging
from datetime import date
from typing import Any, AsyncGenerator, Dict, List, Optional, Union

from google import genai
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from server.config.app_config import GeminiConfig, get_config
from server.models.bazi_chart import BaziResult, DailyFortuneResponse, Language
from server.services.base_llm_stream_service import BaseLLMStreamService
from server.utils.exception_handler import FortuneFetchFailure
from server.utils.prompt_builders import build_daily_fortune_prompt

logger = logging.getLogger(__name__)

# 每日运势结构化输出 schema（六个字段均必填）
DAILY_FORTUNE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "score": types.Schema(
            type=types.Type.INTEGER,
            description="A score from 0 to 100 representing overall luck today."
        ),
        "summary": types.Schema(
            type=types.Type.STRING,
            description="A one-sentence summary of the fortune."
        ),
        "analysis": types.Schema(
            type=types.Type.STRING,
            description="A detailed paragraph analyzing the day's energy relative to the user's chart."
        ),
        "advice": types.Schema(
            type=types.Type.STRING,
            description="Specific actionable advice for the day."
        ),
        "lucky_color": types.Schema(
            type=types.Type.STRING,
            description="The lucky color for today."
        ),
        "lucky_direction": types.Schema(
            type=types.Type.STRING,
            description="The lucky direction for today."
        ),
    },
    required=["score", "summary", "analysis", "advice", "lucky_color", "lucky_direction"],
)


def extract_text_from_genai_response(response) -> Optional[str]:
    """取响应文本；response.text 为空时拼接 candidates 的 parts"""
    text = getattr(response, "text", None)
    if isinstance(text, str) and text.strip():
        return text

    candidates = getattr(response, "candidates", None) or []
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or []
        chunks = [p.text for p in parts if isinstance(getattr(p, "text", None), str) and p.text]
        if chunks:
            joined = "".join(chunks).strip()
            if joined:
                return joined
    return None


def to_genai_history(messages: Optional[List[Dict[str, str]]]) -> List[types.Content]:
    """[{role, text}] -> genai Content 列表（role 只允许 user / model）"""
    contents = []
    for message in messages or []:
        role = message.get("role")
        text = message.get("text")
        if role not in ("user", "model") or not text:
            continue
        contents.append(types.Content(role=role, parts=[types.Part(text=text)]))
    return contents


class GeminiStreamService(BaseLLMStreamService):
    """Gemini 流式服务（未配置 API Key 时所有调用走 error / None 分支）"""

    def __init__(self, config: Optional[GeminiConfig] = None, client=None):
        """
        Args:
            config: Gemini 配置，默认取应用配置
            client: genai.Client，可注入（测试用）
        """
        self.config = config or get_config().gemini
        self.model = self.config.model
        self.client = client
        if self.client is None and self.config.api_key:
            self.client = genai.Client(
                api_key=self.config.api_key,
                http_options=types.HttpOptions(timeout=self.config.timeout * 1000),
            )
        if self.client is None:
            logger.warning("未配置 GEMINI_API_KEY，AI 对话与每日运势不可用")

    @property
    def available(self) -> bool:
        return self.client is not None

    async def stream_analysis(
        self,
        prompt: str,
        trace_id: Optional[str] = None,
        **kwargs
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        流式生成回复

        Args:
            prompt: 本轮用户消息
            trace_id: 请求追踪ID（可选，用于日志关联）
            **kwargs:
                system_instruction: 系统指令
                history: 之前的对话 [{role, text}]

        Yields:
            dict: {'type': 'progress' | 'complete' | 'error', 'content': 文本}
        """
        trace = trace_id or 'N/A'
        if not self.available:
            yield {'type': 'error', 'content': 'Gemini 服务未配置'}
            return

        contents = to_genai_history(kwargs.get('history'))
        contents.append(types.Content(role="user", parts=[types.Part(text=prompt)]))
        config = types.GenerateContentConfig(system_instruction=kwargs.get('system_instruction'))

        logger.info(f"[{trace}] 调用 Gemini 流式对话: model={self.model}, 历史轮数={len(contents) - 1}")

        full_text = []
        try:
            stream = await self.client.aio.models.generate_content_stream(
                model=self.model,
                contents=contents,
                config=config,
            )
            async for chunk in stream:
                text = getattr(chunk, "text", None)
                if text:
                    full_text.append(text)
                    yield {'type': 'progress', 'content': text}
        except Exception as e:
            logger.error(f"[{trace}] Gemini 流式调用异常: {e}")
            yield {'type': 'error', 'content': f"Gemini 调用异常: {str(e)}"}
            return

        yield {'type': 'complete', 'content': "".join(full_text)}

    async def fetch_daily_fortune(
        self,
        chart: BaziResult,
        language: Union[Language, str],
        today: Union[date, str]
    ) -> DailyFortuneResponse:
        """
        获取每日运势（结构化输出）

        Raises:
            FortuneFetchFailure: 未配置、调用失败、返回为空或不符合 schema
        """
        if not self.available:
            raise FortuneFetchFailure("Gemini 服务未配置")

        prompt = build_daily_fortune_prompt(chart, language, today)
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=DAILY_FORTUNE_SCHEMA,
                ),
            )
        except Exception as e:
            raise FortuneFetchFailure(f"Gemini 调用异常: {e}") from e

        text = extract_text_from_genai_response(response)
        if not text:
            raise FortuneFetchFailure("Gemini 返回为空")
        try:
            return DailyFortuneResponse.model_validate(json.loads(text))
        except (ValueError, PydanticValidationError) as e:
            raise FortuneFetchFailure(f"每日运势 JSON 解析失败: {e}") from e

    async def generate_daily_fortune(
        self,
        chart: BaziResult,
        language: Union[Language, str],
        today: Union[date, str]
    ) -> Optional[DailyFortuneResponse]:
        """同 fetch_daily_fortune，失败返回 None"""
        try:
            return await self.fetch_daily_fortune(chart, language, today)
        except FortuneFetchFailure as e:
            logger.warning(f"每日运势获取失败: {e}")
            return None


# 单例缓存
_gemini_service: Optional[GeminiStreamService] = None


def get_gemini_service() -> GeminiStreamService:
    """获取 Gemini 服务（单例模式）"""
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiStreamService()
    return _gemini_service
