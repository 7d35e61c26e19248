"""
Transport interface consumed by the swap orchestrator and the pool controller.

A transport dispatches contract calls, waits for their confirmations and
performs side-effect-free reads. Implementations map their own failures onto
``Rejected``, ``TimedOut`` and ``Reverted``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence


class Transport(ABC):
    """Opaque signing/RPC capability."""

    @abstractmethod
    async def call(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any],
    ) -> str:
        """
        Dispatch a state-changing contract call.

        Args:
            address: Contract address
            abi: Contract ABI (at least the called function)
            function_name: Function to call
            args: Positional function arguments

        Returns:
            Transaction hash as a 0x-prefixed hex string

        Raises:
            Rejected: If the signer declines or the node refuses the call
        """
        pass

    @abstractmethod
    async def wait_for_confirmations(self, tx_hash: str, threshold: int) -> Dict[str, Any]:
        """
        Wait until ``tx_hash`` has ``threshold`` confirmations.

        Returns:
            The transaction receipt

        Raises:
            TimedOut: If the threshold is not reached in time
            Reverted: If the transaction was mined but failed
        """
        pass

    @abstractmethod
    async def read(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any],
    ) -> Any:
        """Call a view function and return its decoded value."""
        pass
