# Minimal ABIs for the contracts the swap engine talks to.

ERC20_ABI = [
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

POOL_KEY_COMPONENTS = [
    {"name": "currency0", "type": "address"},
    {"name": "currency1", "type": "address"},
    {"name": "fee", "type": "uint24"},
    {"name": "tickSpacing", "type": "int24"},
    {"name": "hooks", "type": "address"},
]

# PoolSwapTest router
SWAPPER_ABI = [
    {
        "name": "swap",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {
                "name": "key",
                "type": "tuple",
                "components": POOL_KEY_COMPONENTS,
            },
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "zeroForOne", "type": "bool"},
                    {"name": "amountSpecified", "type": "int256"},
                    {"name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
            },
            {
                "name": "testSettings",
                "type": "tuple",
                "components": [
                    {"name": "takeClaims", "type": "bool"},
                    {"name": "settleUsingBurn", "type": "bool"},
                ],
            },
            {"name": "hookData", "type": "bytes"},
        ],
        "outputs": [{"name": "delta", "type": "int256"}],
    }
]

# Superfluid GDAv1Forwarder
GDA_FORWARDER_ABI = [
    {
        "name": "connectPool",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "pool", "type": "address"},
            {"name": "userData", "type": "bytes"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "isMemberConnected",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "pool", "type": "address"},
            {"name": "member", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]
