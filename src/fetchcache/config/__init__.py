"""Configuration models and loaders for fetchcache."""

from .loader import ENV_APP_NAME, ENV_ROOT, ConfigError, dump_example_config, load_config
from .models import CacheSettings, FetchCacheConfig, LoggingSettings, TransportSettings

__all__ = [
    "CacheSettings",
    "ConfigError",
    "ENV_APP_NAME",
    "ENV_ROOT",
    "FetchCacheConfig",
    "LoggingSettings",
    "TransportSettings",
    "dump_example_config",
    "load_config",
]
