#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tests/api/ 目录的 conftest：每个 API 测试使用独立的内存存储

注意: 这些测试需要 fastapi 和 httpx (TestClient 依赖) 已安装
"""
import pytest

pytest.importorskip("httpx", reason="httpx not installed (required for TestClient)")


@pytest.fixture(autouse=True)
def _isolated_store(memory_store):
    """API 测试之间不共享档案/缓存/对话"""
    yield memory_store
