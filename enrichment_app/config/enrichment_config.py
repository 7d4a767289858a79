"""
Enrichment Configuration Module

Contains the chain-level constants used by the annotation engine:
ERC-20 selectors and event topics, known EVM networks with their base
assets, the verified token table and the EIP-2612 permit schema.
"""

# Function Selectors (ERC-20 calls the engine understands)
ERC20_SELECTORS = {
    "0xa9059cbb": "transfer",
    "0x23b872dd": "transferFrom",
    "0x095ea7b3": "approve",
}

# ERC-20 Transfer event topic0
# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# Empty call data as reported by nodes and wallets
EMPTY_INPUT_VALUES = {None, "", "0x"}

# 2^256 - 1, the conventional "unlimited" approval amount
MAX_UINT256 = 2**256 - 1

# LRU cache sizes
CACHE_SIZES = {
    "blocks": 1024,
}

# Known EVM networks, keyed by chain id (decimal string)
# base asset: (symbol, name, decimals)
NETWORKS = {
    "1": {
        "name": "Ethereum",
        "base_asset": ("ETH", "Ether", 18),
    },
    "137": {
        "name": "Polygon",
        "base_asset": ("MATIC", "Matic Token", 18),
    },
    "10": {
        "name": "Optimism",
        "base_asset": ("ETH", "Ether", 18),
    },
    "42161": {
        "name": "Arbitrum",
        "base_asset": ("ETH", "Ether", 18),
    },
}

DEFAULT_CHAIN_ID = "1"

# Verified Token Contract Addresses (Ethereum mainnet)
# symbol: (address, name, decimals)
VERIFIED_TOKENS = {
    # Major stablecoins
    "USDC": ("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "USD Coin", 6),
    "USDT": ("0xdAC17F958D2ee523a2206206994597C13D831ec7", "Tether USD", 6),
    "DAI": ("0x6B175474E89094C44Da98b954EedeAC495271d0F", "Dai Stablecoin", 18),
    "LUSD": ("0x5f98805A4E8be255a32880FDeC7F6728C6568bA0", "LUSD Stablecoin", 18),

    # ETH and wETH variants
    "WETH": ("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "Wrapped Ether", 18),
    "WSTETH": ("0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0", "Wrapped liquid staked Ether 2.0", 18),
    "STETH": ("0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84", "Liquid staked Ether 2.0", 18),
    "RETH": ("0xae78736Cd615f374D3085123A210448E74Fc6393", "Rocket Pool ETH", 18),

    # Major cryptocurrencies
    "WBTC": ("0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599", "Wrapped BTC", 8),
    "LINK": ("0x514910771AF9Ca656af840dff83E8264EcF986CA", "ChainLink Token", 18),
    "UNI": ("0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984", "Uniswap", 18),
    "AAVE": ("0x7Fc66500c84A76Ad7e9c93437bFc5Ac33E2DDaE9", "Aave Token", 18),
}

# EIP-2612 permit schema
EIP2612_PRIMARY_TYPE = "Permit"
EIP2612_TYPE_FIELDS = {"owner", "spender", "value", "nonce", "deadline"}
EIP2612_MESSAGE_FIELDS = {"owner", "spender", "value", "deadline"}

# Decimal Precision Settings
DEFAULT_DESIRED_DECIMALS = 2

# Concurrency
DEFAULT_MAX_CONCURRENT_RESOLUTIONS = 16
