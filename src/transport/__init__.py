"""
Transports for dispatching contract calls.
"""

from .base import Transport
from .web3_transport import Web3Transport

__all__ = ["Transport", "Web3Transport"]
