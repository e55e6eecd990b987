#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FastAPI 应用主入口
"""

import sys
import os
import time
import logging
import json
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response


# 自定义UTF-8 JSONResponse类，确保中文正确编码 + 强制不缓存
class UTF8JSONResponse(Response):
    media_type = "application/json; charset=utf-8"

    def __init__(self, content, **kwargs):
        super().__init__(content, **kwargs)
        self.headers["Cache-Control"] = "no-cache, no-store, must-revalidate, max-age=0"

    def render(self, content) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,  # 关键：不转义非ASCII字符
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8")


# 添加项目根目录到路径
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# 优先加载 .env 文件（必须在读取配置之前）
from dotenv import load_dotenv

env_path = os.path.join(project_root, '.env')
if os.path.exists(env_path):
    load_dotenv(env_path)

from server.config.app_config import get_config

config = get_config()

# 配置日志（必须在导入路由之前初始化）
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from server.api.v1.bazi import router as bazi_router
from server.api.v1.chat import router as chat_router
from server.api.v1.daily_fortune import router as daily_fortune_router
from server.utils.exception_handler import ExceptionHandlerMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info(
        f"✓ 服务启动: env={config.env}, storage={config.storage.backend}, "
        f"model={config.gemini.model}, gemini_configured={bool(config.gemini.api_key)}"
    )
    yield
    logger.info("✓ 服务已停止")


app = FastAPI(
    title="Zen Destiny API",
    description="四柱八字排盘、AI 命理对话与每日运势",
    version="1.0.0",
    lifespan=lifespan,
    default_response_class=UTF8JSONResponse
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """记录请求日志，包括处理时间"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.3f}s"
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# 统一异常处理中间件（最后添加，确保能捕获所有异常）
app.add_middleware(ExceptionHandlerMiddleware)

# 注册路由
app.include_router(bazi_router, prefix="/api/v1", tags=["八字排盘"])
app.include_router(daily_fortune_router, prefix="/api/v1", tags=["每日运势"])
app.include_router(chat_router, prefix="/api/v1", tags=["AI对话"])


@app.get("/health")
async def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "storage": config.storage.backend,
        "gemini_configured": bool(config.gemini.api_key)
    }


# 健康检查别名
@app.get("/api/v1/health")
async def health_check_api():
    """健康检查 API 别名"""
    return await health_check()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8001")),
        reload=config.debug,
        workers=1
    )
