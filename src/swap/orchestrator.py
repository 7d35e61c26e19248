"""
Swap orchestration through the v4 hook pool.

Turns the amount a user typed into either the token field or the unit field
into an approve / approve / swap call sequence:

1. Approve the swapper for ``amount * APPROVAL_MULTIPLIER`` on the input asset
2. Same on the output asset, so a later swap in the other direction needs no
   new approval
3. Swap with ``zeroForOne = side is UNIT_IN`` and the matching extreme price
   limit

Each call must be accepted before the next one is sent. The first failure
ends the sequence; approvals already granted are left in place.
"""

import logging
from decimal import Decimal, DecimalException, Inexact, InvalidOperation, localcontext
from typing import Any, List, Optional

from ..contracts.abis import ERC20_ABI, SWAPPER_ABI
from ..core.errors import EmptyInput, ErrorHandler, InvalidAmount
from ..core.types import (
    MAX_INT256,
    MAX_UINT256,
    Deployment,
    OutcomeObserver,
    Side,
    SwapIntent,
    TransactionOutcome,
    TxStatus,
    notify,
)
from ..transport.base import Transport

logger = logging.getLogger(__name__)


def derive_intent(token_field: Optional[str], unit_field: Optional[str]) -> SwapIntent:
    """
    Work out the swap side from the two input fields.

    The unit field wins when it holds anything; the amount is taken from the
    same field.

    Raises:
        EmptyInput: If both fields are empty
    """
    token_amount = (token_field or "").strip()
    unit_amount = (unit_field or "").strip()

    if unit_amount:
        return SwapIntent(raw_amount=unit_amount, side=Side.UNIT_IN)
    if token_amount:
        return SwapIntent(raw_amount=token_amount, side=Side.TOKEN_IN)
    raise EmptyInput()


def _parse_amount(raw_amount: str) -> Decimal:
    try:
        amount = Decimal(str(raw_amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(raw_amount)
    if not amount.is_finite():
        raise InvalidAmount(raw_amount, "not a finite number")
    if amount < 0:
        raise InvalidAmount(raw_amount, "negative")
    return amount


def to_base_units(raw_amount: str, decimals: int = 18) -> int:
    """
    Convert a decimal string to the asset's smallest unit.

    Raises:
        InvalidAmount: If the amount is not a non-negative number, has more
            fractional digits than ``decimals`` or is too large to scale exactly
    """
    amount = _parse_amount(raw_amount)
    with localcontext() as ctx:
        # wide enough for any uint256 with its fractional digits; never round
        ctx.prec = 160
        ctx.traps[Inexact] = True
        try:
            scaled = amount.scaleb(decimals)
        except DecimalException:
            raise InvalidAmount(raw_amount, "out of range")
    if scaled != scaled.to_integral_value():
        raise InvalidAmount(raw_amount, f"more than {decimals} decimal places")
    return int(scaled)


def approval_amount(raw_amount: str, deployment: Deployment) -> int:
    """Over-approval for one asset: ``amount * approval_multiplier`` in base units."""
    amount = to_base_units(raw_amount, deployment.asset_decimals) * deployment.approval_multiplier
    if amount > MAX_UINT256:
        raise InvalidAmount(raw_amount, "approval exceeds uint256")
    return amount


def swap_amount(raw_amount: str, deployment: Deployment) -> int:
    """``amountSpecified`` in base units, bounded by int256."""
    amount = to_base_units(raw_amount, deployment.asset_decimals)
    if amount > MAX_INT256:
        raise InvalidAmount(raw_amount, "swap amount exceeds int256")
    return amount


def select_price_limit(zero_for_one: bool, deployment: Deployment) -> int:
    """Extreme sqrtPriceX96 bound for the swap direction."""
    return deployment.min_sqrt_price_limit if zero_for_one else deployment.max_sqrt_price_limit


def build_swap_args(intent: SwapIntent, deployment: Deployment) -> List[Any]:
    """Arguments for ``swap(key, params, testSettings, hookData)``."""
    zero_for_one = intent.zero_for_one
    return [
        deployment.pool.as_pool_key(),
        (
            zero_for_one,
            swap_amount(intent.raw_amount, deployment),
            select_price_limit(zero_for_one, deployment),
        ),
        (False, False),  # takeClaims, settleUsingBurn
        deployment.hook_data,
    ]


class SwapOrchestrator:
    """Runs the approve / approve / swap sequence for one deployment."""

    def __init__(self, transport: Transport, deployment: Deployment):
        self.transport = transport
        self.deployment = deployment
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger)

    def _approval_targets(self) -> List[str]:
        assets = self.deployment.assets
        if self.deployment.approve_both_assets:
            return [assets.input_asset, assets.output_asset]
        return [assets.input_asset]

    async def _dispatch(self, outcome: TransactionOutcome, observer: Optional[OutcomeObserver],
                        step: str, address: str, abi, function_name: str, args) -> str:
        self.logger.info(f"{step}: {function_name} on {address}")
        tx_hash = await self.transport.call(address, abi, function_name, args)
        outcome.record_accepted(tx_hash)
        notify(observer, outcome)
        return tx_hash

    async def execute(
        self,
        intent: SwapIntent,
        observer: Optional[OutcomeObserver] = None,
        wait_for_confirmations: bool = False,
    ) -> TransactionOutcome:
        """
        Run the call sequence for ``intent``.

        Args:
            intent: Amount and side from ``derive_intent``
            observer: Called with the outcome after every transition
            wait_for_confirmations: Also wait for the swap transaction to reach
                the deployment's confirmation threshold

        Returns:
            The final outcome; failures are reported, not raised
        """
        threshold = self.deployment.confirmation_threshold if wait_for_confirmations else 0
        outcome = TransactionOutcome(operation="swap", confirmations_required=threshold)

        try:
            allowance = approval_amount(intent.raw_amount, self.deployment)
            swap_args = build_swap_args(intent, self.deployment)
        except InvalidAmount as e:
            self.error_handler.log_error(e, {"step": "validate", "side": intent.side.value})
            outcome.transition(TxStatus.FAILED, error=e)
            notify(observer, outcome)
            return outcome

        outcome.transition(TxStatus.PENDING)
        notify(observer, outcome)

        step = "approve"
        try:
            for index, asset in enumerate(self._approval_targets(), start=1):
                step = f"approve[{index}]"
                await self._dispatch(
                    outcome, observer, step, asset, ERC20_ABI, "approve",
                    [self.deployment.swapper_address, allowance],
                )

            step = "swap"
            self.logger.info(
                f"Swapping {intent.raw_amount} ({intent.side.value}), "
                f"zeroForOne={swap_args[1][0]}"
            )
            tx_hash = await self.transport.call(
                self.deployment.swapper_address, SWAPPER_ABI, "swap", swap_args
            )
            outcome.transition(TxStatus.ACCEPTED, tx_hash=tx_hash)
            notify(observer, outcome)

            if threshold:
                step = "confirm"
                await self.transport.wait_for_confirmations(tx_hash, threshold)
                outcome.transition(TxStatus.CONFIRMED)
                notify(observer, outcome)

        except Exception as e:
            self.error_handler.log_error(
                e, {"step": step, "accepted_txs": list(outcome.tx_hashes)}
            )
            outcome.transition(TxStatus.FAILED, error=e)
            notify(observer, outcome)
            return outcome

        self.logger.info(f"Swap {outcome.status.value}: {outcome.last_tx_hash}")
        return outcome

    async def swap(
        self,
        token_field: Optional[str],
        unit_field: Optional[str],
        observer: Optional[OutcomeObserver] = None,
        wait_for_confirmations: bool = False,
    ) -> TransactionOutcome:
        """``derive_intent`` followed by ``execute``; empty input is a failed outcome."""
        try:
            intent = derive_intent(token_field, unit_field)
        except EmptyInput as e:
            self.error_handler.log_error(e, {"step": "derive_intent"})
            outcome = TransactionOutcome(operation="swap")
            outcome.transition(TxStatus.FAILED, error=e)
            notify(observer, outcome)
            return outcome

        return await self.execute(
            intent, observer=observer, wait_for_confirmations=wait_for_confirmations
        )
