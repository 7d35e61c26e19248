"""
Distribution pool membership: polling and one-shot connection.

Membership is read from the GDA forwarder's ``isMemberConnected`` and cached
per (pool, account) as a frozen ``MembershipState``. The poll loop is the only
writer besides ``connect``; each write replaces the previous snapshot.
"""

import asyncio
import logging
from typing import AsyncIterator, Dict, Optional, Tuple

from web3 import Web3

from ..contracts.abis import GDA_FORWARDER_ABI
from ..core.errors import ErrorHandler
from ..core.types import (
    Deployment,
    MembershipState,
    OutcomeObserver,
    TransactionOutcome,
    TxStatus,
    notify,
)
from ..transport.base import Transport

logger = logging.getLogger(__name__)


class PoolMembershipController:
    """Reports and changes whether an account receives distribution-pool flow."""

    def __init__(self, transport: Transport, deployment: Deployment):
        self.transport = transport
        self.deployment = deployment
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger)
        self._states: Dict[Tuple[str, str], MembershipState] = {}

    def _key(self, account: str, pool: Optional[str]) -> Tuple[str, str]:
        pool = pool or self.deployment.distribution_pool_address
        return Web3.to_checksum_address(pool), Web3.to_checksum_address(account)

    def latest_state(self, account: str, pool: Optional[str] = None) -> MembershipState:
        """Last observed snapshot; disconnected if nothing has been read yet."""
        return self._states.get(self._key(account, pool), MembershipState())

    async def read_membership(self, account: str, pool: Optional[str] = None) -> MembershipState:
        """Read the connected flag once and store the snapshot."""
        key = self._key(account, pool)
        pool_address, member = key

        connected = await self.transport.read(
            self.deployment.gda_forwarder_address,
            GDA_FORWARDER_ABI,
            "isMemberConnected",
            [pool_address, member],
        )

        previous = self._states.get(key, MembershipState())
        connected = bool(connected)
        state = MembershipState(
            connected=connected, connecting=previous.connecting and not connected
        )
        self._states[key] = state
        return state

    async def poll_membership(
        self,
        account: str,
        pool: Optional[str] = None,
        interval: Optional[float] = None,
    ) -> AsyncIterator[MembershipState]:
        """
        Yield a fresh membership snapshot every ``interval`` seconds, forever.

        Stop by breaking out of the loop or cancelling the consuming task. A
        failed read is logged and the previous snapshot is yielded again.
        """
        interval = interval if interval is not None else self.deployment.poll_interval

        while True:
            try:
                state = await self.read_membership(account, pool)
            except Exception as e:
                self.logger.warning(f"Membership read for {account} failed: {e}")
                state = self.latest_state(account, pool)
            yield state
            await asyncio.sleep(interval)

    async def connect(
        self,
        account: str,
        pool: Optional[str] = None,
        observer: Optional[OutcomeObserver] = None,
    ) -> TransactionOutcome:
        """
        Connect ``account`` to the pool and wait for the confirmation threshold.

        No call is made if the latest snapshot already shows the account as
        connected. Failures are reported in the outcome, never retried.
        """
        key = self._key(account, pool)
        pool_address = key[0]
        threshold = self.deployment.confirmation_threshold
        outcome = TransactionOutcome(operation="connect", confirmations_required=threshold)

        if key not in self._states:
            try:
                await self.read_membership(account, pool)
            except Exception as e:
                self.logger.warning(f"Membership read before connect failed: {e}")

        outcome.transition(TxStatus.PENDING)
        notify(observer, outcome)

        if self.latest_state(account, pool).connected:
            self.logger.info(f"{account} already connected to {pool_address}")
            outcome.transition(TxStatus.SKIPPED)
            notify(observer, outcome)
            return outcome

        self._states[key] = MembershipState(connected=False, connecting=True)
        step = "connectPool"
        try:
            tx_hash = await self.transport.call(
                self.deployment.gda_forwarder_address,
                GDA_FORWARDER_ABI,
                "connectPool",
                [pool_address, self.deployment.connect_user_data],
            )
            outcome.transition(TxStatus.ACCEPTED, tx_hash=tx_hash)
            notify(observer, outcome)

            step = "confirm"
            await self.transport.wait_for_confirmations(tx_hash, threshold)
        except Exception as e:
            self.error_handler.log_error(e, {"step": step, "pool": pool_address})
            self._states[key] = MembershipState(connected=False, connecting=False)
            outcome.transition(TxStatus.FAILED, error=e)
            notify(observer, outcome)
            return outcome

        self._states[key] = MembershipState(connected=True, connecting=False)
        outcome.transition(TxStatus.CONFIRMED)
        notify(observer, outcome)
        self.logger.info(f"{account} connected to {pool_address}: {tx_hash}")
        return outcome
