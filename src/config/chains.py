"""
Chain and signer configuration for the v4 GDA swap engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .base import BaseConfig, ConfigError


@dataclass
class ChainConfig(BaseConfig):
    """Network settings for the chain the deployment lives on (Base by default)."""

    CHAIN_NAME: str = field(
        default_factory=lambda: BaseConfig.get_env("CHAIN_NAME", "base")
    )
    RPC_URL: str = field(
        default_factory=lambda: BaseConfig.get_env("RPC_URL", "https://mainnet.base.org")
    )
    CHAIN_ID: int = field(
        default_factory=lambda: BaseConfig.get_env_int("CHAIN_ID", 8453)
    )
    EXPLORER_URL: str = field(
        default_factory=lambda: BaseConfig.get_env("EXPLORER_URL", "https://basescan.org")
    )

    # Signer (never commit a key; leave unset to use the node-managed account)
    SIGNER_PRIVATE_KEY: Optional[str] = field(
        default_factory=lambda: BaseConfig.get_env("SIGNER_PRIVATE_KEY")
    )
    SIGNER_ADDRESS: Optional[str] = field(
        default_factory=lambda: BaseConfig.get_env("SIGNER_ADDRESS")
    )

    # Receipt polling
    RECEIPT_TIMEOUT_SECONDS: float = field(
        default_factory=lambda: BaseConfig.get_env_float("RECEIPT_TIMEOUT_SECONDS", 120.0)
    )
    RECEIPT_POLL_LATENCY_SECONDS: float = field(
        default_factory=lambda: BaseConfig.get_env_float("RECEIPT_POLL_LATENCY_SECONDS", 2.0)
    )

    def _validate_config(self):
        super()._validate_config()
        if not self.RPC_URL.startswith(("http://", "https://")):
            raise ConfigError(f"RPC_URL must be an http(s) URL, got: {self.RPC_URL}")
        if self.CHAIN_ID <= 0:
            raise ConfigError(f"CHAIN_ID must be positive, got: {self.CHAIN_ID}")
        if self.RECEIPT_TIMEOUT_SECONDS <= 0:
            raise ConfigError("RECEIPT_TIMEOUT_SECONDS must be positive")

    @property
    def has_signer(self) -> bool:
        """Whether transactions can be signed locally."""
        return bool(self.SIGNER_PRIVATE_KEY)

    def get_tx_url(self, tx_hash: str) -> str:
        """Explorer link for a transaction hash."""
        return f"{self.EXPLORER_URL.rstrip('/')}/tx/{tx_hash}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        # Keep the key out of logs and dumps
        if data.get("SIGNER_PRIVATE_KEY"):
            data["SIGNER_PRIVATE_KEY"] = "***"
        return data
