"""
Deployment constants for the swapper, hook pool and GDA distribution pool.

Defaults are the Base mainnet proof-of-concept deployment; every value can be
overridden from the environment.
"""

from dataclasses import dataclass, field

from eth_utils.address import is_hex_address
from hexbytes import HexBytes
from web3 import Web3

from ..core.types import (
    MAX_SQRT_PRICE_LIMIT as DEFAULT_MAX_SQRT_PRICE_LIMIT,
    MIN_SQRT_PRICE_LIMIT as DEFAULT_MIN_SQRT_PRICE_LIMIT,
    AssetPair,
    Deployment,
    PoolDescriptor,
)
from .base import BaseConfig, ConfigError

# Base mainnet
SWAPPER = "0x9b4B3e8D33d64EACabffd414dc6cc7b7Ea42e722"
VIRTUAL_GDA = "0x6745b438dfaD081Dfe9740FDFF38d96865cF1729"
GDA_POOL = "0xAc89c2aEa192d404801a3334a071504a4Bc7AC63"
TOKEN = "0x58e0e291ebf6e03efeff6ef628ae34114545d0ed"
HOOK = "0x9424Ff87a08da0F96ed2212dA91FD439b5f98540"
GDA_FORWARDER = "0x6DA13Bde224A05a288748d857b9e7DDEffd1dE08"


def _env(key: str, default: str):
    return field(default_factory=lambda: BaseConfig.get_env(key, default))


def _env_int(key: str, default: int):
    return field(default_factory=lambda: BaseConfig.get_env_int(key, default))


@dataclass
class DeploymentConfig(BaseConfig):
    """Contract addresses, pool parameters and call-sequence policy."""

    # Assets approved before every swap (in approval order)
    INPUT_ASSET_ADDRESS: str = _env("INPUT_ASSET_ADDRESS", VIRTUAL_GDA)
    OUTPUT_ASSET_ADDRESS: str = _env("OUTPUT_ASSET_ADDRESS", TOKEN)
    ASSET_DECIMALS: int = _env_int("ASSET_DECIMALS", 18)

    # Pool key
    POOL_CURRENCY0: str = _env("POOL_CURRENCY0", TOKEN)
    POOL_CURRENCY1: str = _env("POOL_CURRENCY1", VIRTUAL_GDA)
    POOL_FEE: int = _env_int("POOL_FEE", 3000)  # 0.3%
    POOL_TICK_SPACING: int = _env_int("POOL_TICK_SPACING", 60)
    HOOK_ADDRESS: str = _env("HOOK_ADDRESS", HOOK)

    # Contracts
    SWAPPER_ADDRESS: str = _env("SWAPPER_ADDRESS", SWAPPER)
    GDA_FORWARDER_ADDRESS: str = _env("GDA_FORWARDER_ADDRESS", GDA_FORWARDER)
    DISTRIBUTION_POOL_ADDRESS: str = _env("DISTRIBUTION_POOL_ADDRESS", GDA_POOL)

    # Policy
    APPROVAL_MULTIPLIER: int = _env_int("APPROVAL_MULTIPLIER", 10)
    APPROVE_BOTH_ASSETS: bool = field(
        default_factory=lambda: BaseConfig.get_env_bool("APPROVE_BOTH_ASSETS", True)
    )
    CONFIRMATION_THRESHOLD: int = _env_int("CONFIRMATION_THRESHOLD", 5)
    MEMBERSHIP_POLL_INTERVAL_SECONDS: float = field(
        default_factory=lambda: BaseConfig.get_env_float("MEMBERSHIP_POLL_INTERVAL_SECONDS", 5.0)
    )

    # Swap price bounds (sqrtPriceX96)
    MIN_SQRT_PRICE_LIMIT: int = _env_int("MIN_SQRT_PRICE_LIMIT", DEFAULT_MIN_SQRT_PRICE_LIMIT)
    MAX_SQRT_PRICE_LIMIT: int = _env_int("MAX_SQRT_PRICE_LIMIT", DEFAULT_MAX_SQRT_PRICE_LIMIT)

    # Opaque calldata passed through to the hook and to connectPool
    HOOK_DATA: str = _env("HOOK_DATA", "0x")
    CONNECT_USER_DATA: str = _env("CONNECT_USER_DATA", "0x")

    ADDRESS_FIELDS = (
        "INPUT_ASSET_ADDRESS",
        "OUTPUT_ASSET_ADDRESS",
        "POOL_CURRENCY0",
        "POOL_CURRENCY1",
        "HOOK_ADDRESS",
        "SWAPPER_ADDRESS",
        "GDA_FORWARDER_ADDRESS",
        "DISTRIBUTION_POOL_ADDRESS",
    )

    def _validate_config(self):
        """Validate addresses and numeric policy values."""
        super()._validate_config()

        for name in self.ADDRESS_FIELDS:
            value = getattr(self, name)
            if not value or not is_hex_address(value):
                raise ConfigError(f"{name} is not a valid address: {value}")

        if self.ASSET_DECIMALS < 0:
            raise ConfigError(f"ASSET_DECIMALS must be non-negative, got: {self.ASSET_DECIMALS}")
        if self.APPROVAL_MULTIPLIER < 1:
            raise ConfigError(
                f"APPROVAL_MULTIPLIER must be at least 1, got: {self.APPROVAL_MULTIPLIER}"
            )
        if self.CONFIRMATION_THRESHOLD < 1:
            raise ConfigError(
                f"CONFIRMATION_THRESHOLD must be at least 1, got: {self.CONFIRMATION_THRESHOLD}"
            )
        if self.MEMBERSHIP_POLL_INTERVAL_SECONDS <= 0:
            raise ConfigError("MEMBERSHIP_POLL_INTERVAL_SECONDS must be positive")
        if not 0 < self.MIN_SQRT_PRICE_LIMIT < self.MAX_SQRT_PRICE_LIMIT:
            raise ConfigError("Price limits must satisfy 0 < MIN_SQRT_PRICE_LIMIT < MAX_SQRT_PRICE_LIMIT")

        for name in ("HOOK_DATA", "CONNECT_USER_DATA"):
            try:
                HexBytes(getattr(self, name))
            except ValueError:
                raise ConfigError(f"{name} must be hex-encoded bytes, got: {getattr(self, name)}")

    def _checksum(self, name: str) -> str:
        return Web3.to_checksum_address(getattr(self, name))

    def to_deployment(self) -> Deployment:
        """Freeze the configured values into a ``Deployment``."""
        return Deployment(
            assets=AssetPair(
                input_asset=self._checksum("INPUT_ASSET_ADDRESS"),
                output_asset=self._checksum("OUTPUT_ASSET_ADDRESS"),
            ),
            pool=PoolDescriptor(
                currency0=self._checksum("POOL_CURRENCY0"),
                currency1=self._checksum("POOL_CURRENCY1"),
                fee_tier=self.POOL_FEE,
                tick_spacing=self.POOL_TICK_SPACING,
                hook_address=self._checksum("HOOK_ADDRESS"),
            ),
            swapper_address=self._checksum("SWAPPER_ADDRESS"),
            gda_forwarder_address=self._checksum("GDA_FORWARDER_ADDRESS"),
            distribution_pool_address=self._checksum("DISTRIBUTION_POOL_ADDRESS"),
            asset_decimals=self.ASSET_DECIMALS,
            approval_multiplier=self.APPROVAL_MULTIPLIER,
            approve_both_assets=self.APPROVE_BOTH_ASSETS,
            confirmation_threshold=self.CONFIRMATION_THRESHOLD,
            poll_interval=self.MEMBERSHIP_POLL_INTERVAL_SECONDS,
            min_sqrt_price_limit=self.MIN_SQRT_PRICE_LIMIT,
            max_sqrt_price_limit=self.MAX_SQRT_PRICE_LIMIT,
            hook_data=bytes(HexBytes(self.HOOK_DATA)),
            connect_user_data=bytes(HexBytes(self.CONNECT_USER_DATA)),
        )
