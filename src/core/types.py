"""
Domain types shared by the swap orchestrator and the pool membership controller.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .errors import InvalidTransition

logger = logging.getLogger(__name__)

# Uniswap TickMath bounds, one step inside the valid range.
MIN_SQRT_PRICE_LIMIT = 4295128739 + 1
MAX_SQRT_PRICE_LIMIT = 1461446703485210103287273052203988822378723970342 - 1

# ABI integer bounds for approve(uint256) and amountSpecified(int256)
MAX_UINT256 = 2**256 - 1
MAX_INT256 = 2**255 - 1


class Side(Enum):
    """Which user-facing amount was entered."""
    TOKEN_IN = "token_in"
    UNIT_IN = "unit_in"


class TxStatus(Enum):
    """Status of a call sequence."""
    IDLE = "idle"
    PENDING = "pending"
    ACCEPTED = "accepted"
    CONFIRMED = "confirmed"
    SKIPPED = "skipped"
    FAILED = "failed"


_TRANSITIONS = {
    TxStatus.IDLE: {TxStatus.PENDING, TxStatus.FAILED},
    TxStatus.PENDING: {
        TxStatus.ACCEPTED,
        TxStatus.CONFIRMED,
        TxStatus.SKIPPED,
        TxStatus.FAILED,
    },
    TxStatus.ACCEPTED: {TxStatus.CONFIRMED, TxStatus.FAILED},
    TxStatus.CONFIRMED: set(),
    TxStatus.SKIPPED: set(),
    TxStatus.FAILED: set(),
}


@dataclass(frozen=True)
class AssetPair:
    """The two assets approved for every swap."""
    input_asset: str
    output_asset: str


@dataclass(frozen=True)
class PoolDescriptor:
    """Uniswap v4 pool key."""
    currency0: str
    currency1: str
    fee_tier: int
    tick_spacing: int
    hook_address: str

    def as_pool_key(self) -> Tuple[str, str, int, int, str]:
        """Render as the (currency0, currency1, fee, tickSpacing, hooks) ABI tuple."""
        return (
            self.currency0,
            self.currency1,
            self.fee_tier,
            self.tick_spacing,
            self.hook_address,
        )


@dataclass(frozen=True)
class SwapIntent:
    """A single user submission: the entered amount and the side it was entered on."""
    raw_amount: str
    side: Side

    @property
    def zero_for_one(self) -> bool:
        """currency0 is sold for currency1 when the unit side was entered."""
        return self.side is Side.UNIT_IN


@dataclass(frozen=True)
class MembershipState:
    """Snapshot of an account's connection to a distribution pool."""
    connected: bool = False
    connecting: bool = False


@dataclass(frozen=True)
class Deployment:
    """
    Immutable deployment constants injected into both components.

    Built once from configuration (see ``ConfigManager.get_deployment``) and
    shared read-only by every caller.
    """
    assets: AssetPair
    pool: PoolDescriptor
    swapper_address: str
    gda_forwarder_address: str
    distribution_pool_address: str
    asset_decimals: int = 18
    approval_multiplier: int = 10
    approve_both_assets: bool = True
    confirmation_threshold: int = 5
    poll_interval: float = 5.0
    min_sqrt_price_limit: int = MIN_SQRT_PRICE_LIMIT
    max_sqrt_price_limit: int = MAX_SQRT_PRICE_LIMIT
    hook_data: bytes = b""
    connect_user_data: bytes = b""


@dataclass
class TransactionOutcome:
    """
    Result of one swap or connect invocation.

    Owned by the invocation that created it. Once the invocation has started
    exactly one of ``pending``, ``succeeded`` and ``failed`` is true.
    """
    operation: str
    confirmations_required: int = 0
    status: TxStatus = TxStatus.IDLE
    tx_hashes: List[str] = field(default_factory=list)
    error: Optional[Exception] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def pending(self) -> bool:
        if self.status is TxStatus.PENDING:
            return True
        return self.status is TxStatus.ACCEPTED and self.confirmations_required > 0

    @property
    def succeeded(self) -> bool:
        if self.status in (TxStatus.CONFIRMED, TxStatus.SKIPPED):
            return True
        return self.status is TxStatus.ACCEPTED and self.confirmations_required == 0

    @property
    def failed(self) -> bool:
        return self.status is TxStatus.FAILED

    @property
    def is_complete(self) -> bool:
        """Check if the outcome is in a final state."""
        return self.succeeded or self.failed

    @property
    def last_tx_hash(self) -> Optional[str]:
        return self.tx_hashes[-1] if self.tx_hashes else None

    def transition(self, status: TxStatus, tx_hash: Optional[str] = None,
                   error: Optional[Exception] = None) -> "TransactionOutcome":
        """
        Move to ``status``, recording the accepted hash or the failure cause.

        Raises:
            InvalidTransition: If ``status`` is not reachable from the current status
        """
        if status not in _TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"{self.operation}: cannot move from {self.status.value} to {status.value}"
            )

        now = datetime.now(timezone.utc)
        if self.status is TxStatus.IDLE:
            self.started_at = now

        self.status = status
        if tx_hash is not None:
            self.tx_hashes.append(tx_hash)
        if error is not None:
            self.error = error
        if self.is_complete:
            self.finished_at = now

        logger.debug(f"{self.operation} -> {status.value}")
        return self

    def record_accepted(self, tx_hash: str) -> "TransactionOutcome":
        """Record an intermediate accepted call; the sequence stays pending."""
        if self.status is not TxStatus.PENDING:
            raise InvalidTransition(
                f"{self.operation}: cannot record {tx_hash} while {self.status.value}"
            )
        self.tx_hashes.append(tx_hash)
        return self


OutcomeObserver = Callable[[TransactionOutcome], None]


def notify(observer: Optional[OutcomeObserver], outcome: TransactionOutcome):
    """Hand the outcome to the caller's observer, if any."""
    if observer is not None:
        observer(outcome)
