"""
Configuration manager for the v4 GDA swap engine.

This module provides a centralized way to access all configuration settings
across the application. It combines all configuration classes into a single
easy-to-use interface.
"""

import logging
from typing import Any, Dict, Optional

from ..core.types import Deployment
from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .deployment import DeploymentConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Centralized configuration manager that combines all configuration classes.

    This class provides easy access to all configuration settings and ensures
    that configurations are properly initialized and validated.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            environment: Override the environment (local, dev, staging, production, test)
        """
        self._environment = environment
        self._base_config = None
        self._chain_config = None
        self._deployment_config = None
        self._deployment = None
        self._initialize_configs()

    def _initialize_configs(self):
        """Initialize all configuration objects."""
        try:
            self._base_config = BaseConfig()
            if self._environment:
                self._base_config.ENVIRONMENT = self._environment
                self._base_config._validate_config()

            self._chain_config = ChainConfig()
            self._deployment_config = DeploymentConfig()

            logger.info(f"Configuration initialized for environment: {self.environment}")

        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

    @property
    def environment(self) -> str:
        """Get current environment."""
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        """Get base configuration."""
        return self._base_config

    @property
    def chain(self) -> ChainConfig:
        """Get chain and signer configuration."""
        return self._chain_config

    @property
    def deployment_config(self) -> DeploymentConfig:
        """Get raw deployment configuration."""
        return self._deployment_config

    def get_deployment(self) -> Deployment:
        """
        Get the immutable deployment struct shared by the swap and pool components.

        Built once per manager; every caller receives the same instance.
        """
        if self._deployment is None:
            self._deployment = self._deployment_config.to_deployment()
        return self._deployment

    def validate_configuration(self) -> bool:
        """
        Validate all configuration settings.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigError: If any configuration is invalid
        """
        deployment = self.get_deployment()

        if deployment.assets.input_asset == deployment.assets.output_asset:
            raise ConfigError("Input and output assets must differ")

        pool_currencies = {deployment.pool.currency0, deployment.pool.currency1}
        if {deployment.assets.input_asset, deployment.assets.output_asset} != pool_currencies:
            logger.warning("Approved assets do not match the pool currencies")

        if not self.chain.has_signer and not self.chain.SIGNER_ADDRESS:
            logger.warning("No signer configured; only read operations will work")

        logger.info("Configuration validation successful")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert all configurations to dictionary format."""
        return {
            "environment": self.environment,
            "base": self.base.to_dict() if self.base else {},
            "chain": self.chain.to_dict() if self.chain else {},
            "deployment": self.deployment_config.to_dict() if self.deployment_config else {},
        }

    def __repr__(self) -> str:
        """String representation of the configuration manager."""
        return f"ConfigManager(environment={self.environment})"


# Global configuration manager instance
_config_manager = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        environment: Override environment
        force_reload: Force reload of configuration

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
        _config_manager.validate_configuration()

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """
    Reload the global configuration manager.

    Args:
        environment: Override environment

    Returns:
        New ConfigManager instance
    """
    return get_config(environment=environment, force_reload=True)
