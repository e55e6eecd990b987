# -*- coding: utf-8 -*-
"""
配置模块
"""

from .app_config import get_config, reload_config
from .env_config import get_env_config, is_production

__all__ = ['get_config', 'reload_config', 'get_env_config', 'is_production']
