#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest 全局配置

提供：
- 共享 fixtures（应用、客户端、内存存储、假历法、示例命盘）
- 测试钩子
"""

import pytest
import sys
import os
from typing import Any, Dict

# 添加项目根目录到路径
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)
# 测试替身模块（tests/fakes.py）
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# 测试环境：内存存储，不连接 Gemini
os.environ.setdefault("ENV", "local")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("API_KEY", None)


# ==================== 应用和客户端 Fixtures ====================

@pytest.fixture(scope="session")
def app():
    """
    创建 FastAPI 应用实例（整个测试会话共享）
    """
    from server.main import app
    return app


@pytest.fixture(scope="session")
def client(app):
    """
    创建测试客户端（整个测试会话共享）
    """
    from fastapi.testclient import TestClient
    return TestClient(app)


# ==================== 存储 Fixtures ====================

@pytest.fixture(scope="function")
def memory_store(monkeypatch):
    """
    全局键值存储替换为独立的内存存储，并清空依赖它的服务单例

    Yields:
        InMemoryKeyValueStore
    """
    from server.utils import kv_store
    from server.services import profile_service, bazi_chart_service, daily_fortune_service, chat_service

    store = kv_store.InMemoryKeyValueStore()
    monkeypatch.setattr(kv_store, "_kv_store", store)
    monkeypatch.setattr(profile_service, "_profile_store", None)
    monkeypatch.setattr(bazi_chart_service, "_chart_service", None)
    monkeypatch.setattr(daily_fortune_service, "_daily_fortune_service", None)
    monkeypatch.setattr(chat_service, "_chat_service", None)
    yield store


@pytest.fixture(scope="function")
def mock_redis_client():
    """
    Mock Redis 客户端

    Yields:
        MagicMock Redis 客户端对象
    """
    from unittest.mock import MagicMock
    mock_redis = MagicMock()
    mock_redis.get.return_value = None
    mock_redis.set.return_value = True
    yield mock_redis


# ==================== 历法 Fixtures ====================

@pytest.fixture(scope="function")
def fake_calendar():
    """假历法（日柱甲子）"""
    from fakes import FakeCalendar
    return FakeCalendar()


# ==================== 数据 Fixtures ====================

@pytest.fixture(scope="function")
def sample_chart_request() -> Dict[str, Any]:
    """
    示例排盘请求
    """
    return {
        "solar_date": "1990-05-15",
        "solar_time": "14:30",
        "gender": "male",
        "birth_place": "Beijing"
    }


@pytest.fixture(scope="function")
def sample_chart(fake_calendar):
    """
    示例命盘（基于假历法，日主甲）
    """
    from core.calculators.bazi_chart_calculator import calculate_bazi
    return calculate_bazi("1990-05-15", "14:30", "male", "Beijing", calendar=fake_calendar)


@pytest.fixture(scope="function")
def sample_fortune():
    """示例每日运势"""
    from server.models.bazi_chart import DailyFortuneResponse
    return DailyFortuneResponse(
        score=82,
        summary="A bright day for steady progress.",
        analysis="Today's Fire supports your Wood Day Master.",
        advice="Finish one important task before noon.",
        lucky_color="Green",
        lucky_direction="East"
    )


# ==================== Pytest Hooks ====================

def pytest_configure(config):
    """
    pytest 配置钩子
    """
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "api: API 测试")


def pytest_collection_modifyitems(config, items):
    """
    根据路径自动添加标记
    """
    for item in items:
        if "unit" in item.nodeid:
            item.add_marker(pytest.mark.unit)
        elif "api" in item.nodeid:
            item.add_marker(pytest.mark.api)

