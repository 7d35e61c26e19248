"""
Core domain types and errors for the v4 GDA swap engine.
"""

from .errors import (
    EmptyInput,
    ErrorHandler,
    InvalidAmount,
    InvalidTransition,
    Rejected,
    Reverted,
    SwapError,
    TimedOut,
    TransportError,
    ValidationError,
)
from .types import (
    MAX_INT256,
    MAX_SQRT_PRICE_LIMIT,
    MAX_UINT256,
    MIN_SQRT_PRICE_LIMIT,
    AssetPair,
    Deployment,
    MembershipState,
    OutcomeObserver,
    PoolDescriptor,
    Side,
    SwapIntent,
    TransactionOutcome,
    TxStatus,
    notify,
)

__all__ = [
    "SwapError",
    "ValidationError",
    "EmptyInput",
    "InvalidAmount",
    "TransportError",
    "Rejected",
    "TimedOut",
    "Reverted",
    "InvalidTransition",
    "ErrorHandler",
    "MIN_SQRT_PRICE_LIMIT",
    "MAX_SQRT_PRICE_LIMIT",
    "MAX_UINT256",
    "MAX_INT256",
    "Side",
    "TxStatus",
    "AssetPair",
    "PoolDescriptor",
    "SwapIntent",
    "MembershipState",
    "Deployment",
    "TransactionOutcome",
    "OutcomeObserver",
    "notify",
]
