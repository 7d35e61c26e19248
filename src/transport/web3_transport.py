"""
web3.py-backed transport.

Transactions are built from the contract ABI, signed locally with an
eth-account key when one is configured (otherwise sent from the node-managed
account) and broadcast through an ``AsyncWeb3`` provider.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted

from ..core.errors import Rejected, Reverted, TimedOut
from .base import Transport

logger = logging.getLogger(__name__)


class Web3Transport(Transport):
    """
    Transport over an ``AsyncWeb3`` instance.

    Any failure before the transaction is broadcast (chain mismatch, gas revert,
    signing error, node refusal) surfaces as ``Rejected``.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        account: Optional[LocalAccount] = None,
        chain_id: Optional[int] = None,
        from_address: Optional[str] = None,
        receipt_timeout: float = 120.0,
        poll_latency: float = 2.0,
    ):
        self.web3 = web3
        self.account = account
        self.from_address = (
            account.address if account is not None
            else Web3.to_checksum_address(from_address) if from_address
            else None
        )
        self.chain_id = chain_id
        self._chain_verified = False
        self.receipt_timeout = receipt_timeout
        self.poll_latency = poll_latency
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_config(cls, config) -> "Web3Transport":
        """Build a transport from a ``ConfigManager``."""
        chain = config.chain
        web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(chain.RPC_URL))
        account = Account.from_key(chain.SIGNER_PRIVATE_KEY) if chain.has_signer else None
        return cls(
            web3,
            account=account,
            chain_id=chain.CHAIN_ID,
            from_address=chain.SIGNER_ADDRESS,
            receipt_timeout=chain.RECEIPT_TIMEOUT_SECONDS,
            poll_latency=chain.RECEIPT_POLL_LATENCY_SECONDS,
        )

    async def _check_chain(self):
        """Refuse to sign for a node on another chain; checked once per transport."""
        if self.chain_id is None or self._chain_verified:
            return
        actual = await self.web3.eth.chain_id
        if actual != self.chain_id:
            raise Rejected(f"Node is on chain {actual}, expected {self.chain_id}")
        self._chain_verified = True

    def _bind(self, address: str, abi: List[Dict[str, Any]], function_name: str,
              args: Sequence[Any]):
        contract = self.web3.eth.contract(
            address=Web3.to_checksum_address(address), abi=abi
        )
        return contract.get_function_by_name(function_name)(*args)

    async def call(self, address: str, abi: List[Dict[str, Any]], function_name: str,
                   args: Sequence[Any]) -> str:
        if self.from_address is None:
            raise Rejected(f"{function_name}: no signer configured")

        try:
            await self._check_chain()
            bound = self._bind(address, abi, function_name, args)

            if self.account is None:
                tx_hash = await bound.transact({"from": self.from_address})
            else:
                nonce = await self.web3.eth.get_transaction_count(self.from_address, "pending")
                tx = await bound.build_transaction({
                    "from": self.from_address,
                    "nonce": nonce,
                })
                signed = self.account.sign_transaction(tx)
                tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except Rejected:
            raise
        except Exception as e:
            raise Rejected(f"{function_name} on {address} rejected: {e}") from e

        tx_hash = Web3.to_hex(tx_hash)
        self.logger.info(f"{function_name} sent to {address}: {tx_hash}")
        return tx_hash

    async def wait_for_confirmations(self, tx_hash: str, threshold: int) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.receipt_timeout

        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout, poll_latency=self.poll_latency
            )
        except TimeExhausted as e:
            raise TimedOut(f"No receipt for {tx_hash}: {e}", tx_hash=tx_hash) from e

        if receipt["status"] != 1:
            raise Reverted(
                f"Transaction {tx_hash} reverted in block {receipt['blockNumber']}",
                tx_hash=tx_hash,
            )

        # The inclusion block counts as the first confirmation
        while True:
            head = await self.web3.eth.block_number
            confirmations = head - receipt["blockNumber"] + 1
            if confirmations >= threshold:
                break
            if loop.time() >= deadline:
                raise TimedOut(
                    f"{tx_hash} reached {confirmations}/{threshold} confirmations",
                    tx_hash=tx_hash,
                )
            await asyncio.sleep(self.poll_latency)

        self.logger.info(
            f"{tx_hash} confirmed in block {receipt['blockNumber']} ({confirmations} confirmations)"
        )
        return receipt

    async def read(self, address: str, abi: List[Dict[str, Any]], function_name: str,
                   args: Sequence[Any]) -> Any:
        return await self._bind(address, abi, function_name, args).call()
