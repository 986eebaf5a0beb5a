"""
Application configuration loading.
"""

from .app_config import AppConfig, AppConfigLoader, load_config

__all__ = [
    "AppConfig",
    "AppConfigLoader",
    "load_config",
]
