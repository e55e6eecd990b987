#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tests/unit/test_config.py
环境配置与应用配置单元测试
"""

from unittest.mock import MagicMock

import pytest
import redis

from server.config import app_config, env_config, redis_config
from server.config.app_config import AppConfig, GeminiConfig, RedisConfig, StorageConfig
from server.config.env_config import EnvConfig


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """每个用例重新读取环境变量"""
    monkeypatch.setattr(env_config, "_env_config", None)
    monkeypatch.setattr(app_config, "_config", None)
    yield


class TestEnvConfig:

    @pytest.mark.parametrize("raw,expected", [
        ("local", "local"), ("dev", "local"), ("TEST", "local"),
        ("staging", "staging"), ("prod", "production"), ("Production", "production"),
        ("whatever", "local"),
    ])
    def test_env_aliases(self, monkeypatch, raw, expected):
        monkeypatch.setenv("ENV", raw)
        assert EnvConfig().env == expected

    def test_app_env_fallback(self, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.setenv("APP_ENV", "staging")
        assert EnvConfig().env == "staging"

    def test_production_flags(self, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        assert env_config.is_production()

    def test_non_production_flags(self, monkeypatch):
        monkeypatch.setenv("ENV", "local")
        assert not env_config.is_production()

    def test_get_config_required(self, monkeypatch):
        monkeypatch.delenv("ZEN_MISSING", raising=False)
        with pytest.raises(ValueError):
            EnvConfig().get_config("ZEN_MISSING", required=True)

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("YES", True), ("on", True), ("false", False), ("0", False)
    ])
    def test_get_bool_config(self, monkeypatch, raw, expected):
        monkeypatch.setenv("ZEN_FLAG", raw)
        assert EnvConfig().get_bool_config("ZEN_FLAG") is expected

    def test_get_int_config_invalid_uses_default(self, monkeypatch):
        monkeypatch.setenv("ZEN_INT", "abc")
        assert EnvConfig().get_int_config("ZEN_INT", 7) == 7

    def test_singleton_reset(self):
        first = env_config.get_env_config()
        assert env_config.get_env_config() is first
        env_config.reset_env_config()
        assert env_config.get_env_config() is not first


class TestAppConfig:

    def test_defaults(self, monkeypatch):
        for var in ("STORAGE_BACKEND", "GEMINI_MODEL", "GEMINI_TIMEOUT"):
            monkeypatch.delenv(var, raising=False)
        config = AppConfig.from_env()
        assert config.storage.backend == "memory"
        assert config.gemini.model == "gemini-2.5-flash"
        assert config.gemini.timeout == 60

    def test_storage_backend_lowercased(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "Redis")
        assert StorageConfig.from_env().backend == "redis"

    def test_gemini_key_precedence(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "legacy")
        assert GeminiConfig.from_env().api_key == "legacy"
        monkeypatch.setenv("GEMINI_API_KEY", "primary")
        assert GeminiConfig.from_env().api_key == "primary"

    def test_gemini_key_missing(self, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert GeminiConfig.from_env().api_key is None

    def test_redis_config(self, monkeypatch):
        monkeypatch.setenv("REDIS_HOST", "cache.internal")
        monkeypatch.setenv("REDIS_PORT", "6380")
        monkeypatch.setenv("REDIS_TTL", "86400")
        config = AppConfig.from_env().redis
        assert (config.host, config.port, config.ttl) == ("cache.internal", 6380, 86400)
        assert config.password is None

    def test_log_level_uppercased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppConfig.from_env().log_level == "DEBUG"

    def test_get_config_singleton(self):
        first = app_config.get_config()
        assert app_config.get_config() is first
        assert app_config.reload_config() is not first


class TestRedisInit:

    @pytest.fixture
    def mock_pool(self, monkeypatch):
        pool_cls = MagicMock(name="ConnectionPool")
        client_cls = MagicMock(name="Redis")
        monkeypatch.setattr(redis_config, "ConnectionPool", pool_cls)
        monkeypatch.setattr(redis_config.redis, "Redis", client_cls)
        monkeypatch.setattr(redis_config, "redis_pool", None)
        monkeypatch.setattr(redis_config, "redis_client", None)
        return pool_cls, client_cls

    def test_pool_decodes_responses(self, mock_pool):
        pool_cls, client_cls = mock_pool
        assert redis_config.init_redis(RedisConfig(host="cache.internal", port=6380)) is True
        kwargs = pool_cls.call_args.kwargs
        assert kwargs["decode_responses"] is True
        assert (kwargs["host"], kwargs["port"]) == ("cache.internal", 6380)
        client_cls.assert_called_once_with(connection_pool=pool_cls.return_value)

    def test_ping_failure(self, mock_pool):
        _, client_cls = mock_pool
        client_cls.return_value.ping.side_effect = redis.ConnectionError("refused")
        assert redis_config.init_redis(RedisConfig()) is False
        assert redis_config.redis_client is None
