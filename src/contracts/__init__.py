from .abis import ERC20_ABI, GDA_FORWARDER_ABI, SWAPPER_ABI

__all__ = ["ERC20_ABI", "SWAPPER_ABI", "GDA_FORWARDER_ABI"]
