"""
Swap orchestration between the two assets of the hook pool.
"""

from .orchestrator import (
    SwapOrchestrator,
    approval_amount,
    build_swap_args,
    derive_intent,
    select_price_limit,
    swap_amount,
    to_base_units,
)

__all__ = [
    "SwapOrchestrator",
    "derive_intent",
    "to_base_units",
    "approval_amount",
    "swap_amount",
    "select_price_limit",
    "build_swap_args",
]
