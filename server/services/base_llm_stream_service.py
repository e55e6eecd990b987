#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM 流式服务基类

定义统一的 LLM 流式服务接口。
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, AsyncGenerator


class BaseLLMStreamService(ABC):
    """LLM 流式服务基类 - 定义统一接口"""

    @abstractmethod
    async def stream_analysis(
        self,
        prompt: str,
        trace_id: Optional[str] = None,
        **kwargs
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        流式生成结果（通用方法）

        Args:
            prompt: 提示词
            trace_id: 请求追踪ID（可选，用于日志关联）
            **kwargs: 其他参数（如 system_instruction, history 等）

        Yields:
            dict: 包含 type 和 content 的字典
                - type: 'progress' 或 'complete' 或 'error'
                - content: 内容文本
        """
        pass
