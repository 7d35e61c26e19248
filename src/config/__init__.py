"""
Configuration management for the v4 GDA swap engine.

Use get_config() to access all configuration settings.

Example:
    from src.config import get_config

    config = get_config()

    # Network settings
    rpc_url = config.chain.RPC_URL

    # Immutable deployment constants for the swap and pool components
    deployment = config.get_deployment()
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .deployment import DeploymentConfig
from .manager import ConfigManager, get_config, reload_config

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "DeploymentConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
