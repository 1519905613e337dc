"""EVM chain and token registry.

Token addresses are keyed by upper-case symbol per chain. Native gas tokens use
the 1inch native-asset placeholder address.
"""

from dataclasses import dataclass, field
from typing import Optional

from eth_utils import is_address, to_checksum_address

from swapsettle.errors import RouteUnavailable, TokenUnsupported

NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"


@dataclass
class ChainConfig:
    """Configuration for an EVM chain."""

    name: str
    chain_id: int
    native_symbol: str
    explorer_url: str
    tokens: dict[str, str] = field(default_factory=dict)


CHAINS: dict[int, ChainConfig] = {
    1: ChainConfig(
        name="Ethereum",
        chain_id=1,
        native_symbol="ETH",
        explorer_url="https://etherscan.io",
        tokens={
            "ETH": NATIVE_TOKEN_ADDRESS,
            "WETH": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
            "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            "DAI": "0x6B175474E89094C44Da98b954EedcdeCB5BE3830",
            "WBTC": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
            "LINK": "0x514910771AF9Ca656af840dff83E8264EcF986CA",
            "UNI": "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984",
            "AAVE": "0x7Fc66500c84A76Ad7e9c93437bFc5Ac33E2DDaE9",
            "PEPE": "0x6982508145454Ce325dDbE47a25d4ec3d2311933",
        },
    ),
    8453: ChainConfig(
        name="Base",
        chain_id=8453,
        native_symbol="ETH",
        explorer_url="https://basescan.org",
        tokens={
            "ETH": NATIVE_TOKEN_ADDRESS,
            "WETH": "0x4200000000000000000000000000000000000006",
            "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            "CBBTC": "0xcbB7C0000aB88B473b1f5aFd9ef808440eed33Bf",
            "VIRTUAL": "0x0b3e328455c4059EEb9e3f84b5543F74E24e7E1b",
            "DEGEN": "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed",
            "BRETT": "0x532f27101965dd16442E59d40670FaF5eBB142E4",
        },
    ),
    42161: ChainConfig(
        name="Arbitrum",
        chain_id=42161,
        native_symbol="ETH",
        explorer_url="https://arbiscan.io",
        tokens={
            "ETH": NATIVE_TOKEN_ADDRESS,
            "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            "USDT": "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
            "PENDLE": "0x0c880f6761F1af8d9Aa9C466984b80DAb9a8c9e8",
            "CRV": "0x11cDb42B0EB46D95f990BeDD4695A6e3fA034978",
            "GMX": "0xfc5A1A6EB076a2C7aD06eD22C90d7E710E35ad0a",
        },
    ),
    137: ChainConfig(
        name="Polygon",
        chain_id=137,
        native_symbol="POL",
        explorer_url="https://polygonscan.com",
        tokens={
            "POL": NATIVE_TOKEN_ADDRESS,
            "WPOL": "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270",
            "USDT": "0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
            "USDC": "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
            "WETH": "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619",
            "AAVE": "0xD6DF932A45C0f255f85145f286eA0b292B21C90B",
        },
    ),
    56: ChainConfig(
        name="BNB Chain",
        chain_id=56,
        native_symbol="BNB",
        explorer_url="https://bscscan.com",
        tokens={
            "BNB": NATIVE_TOKEN_ADDRESS,
            "WBNB": "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c",
            "USDT": "0x55d398326f99059fF775485246999027B3197955",
            "USDC": "0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d",
            "CAKE": "0x0E09FaBB73Bd3Ade0a17ECC321fD13a19e81cE82",
            "ETH": "0x2170Ed0880ac9A755fd29B2688956BD959F933F8",
        },
    ),
    43114: ChainConfig(
        name="Avalanche",
        chain_id=43114,
        native_symbol="AVAX",
        explorer_url="https://snowtrace.io",
        tokens={
            "AVAX": NATIVE_TOKEN_ADDRESS,
            "WAVAX": "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7",
            "USDT": "0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7",
            "USDC": "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
            "JOE": "0x6e84a6216eA6dACC71eE8E6b0a5B7322EEbC0fDd",
        },
    ),
    10: ChainConfig(
        name="Optimism",
        chain_id=10,
        native_symbol="ETH",
        explorer_url="https://optimistic.etherscan.io",
        tokens={
            "ETH": NATIVE_TOKEN_ADDRESS,
            "USDC": "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
            "OP": "0x4200000000000000000000000000000000000042",
        },
    ),
}


def get_chain(chain_id: int) -> ChainConfig:
    """Get chain config by id.

    Raises:
        RouteUnavailable: If the chain is unknown
    """
    chain = CHAINS.get(chain_id)
    if chain is None:
        raise RouteUnavailable(f"Unsupported chain id {chain_id}")
    return chain


def is_valid_address(address: str) -> bool:
    """Check that a string is a well-formed EVM address."""
    return isinstance(address, str) and is_address(address)


def resolve_token(chain_id: int, token: str) -> str:
    """Resolve a token symbol or address to a checksummed address on a chain.

    Args:
        chain_id: Chain the token lives on
        token: Symbol known to the registry (e.g. "USDC") or a 0x address

    Returns:
        Checksummed token address

    Raises:
        TokenUnsupported: If the symbol is unknown or the address malformed
    """
    if not token:
        raise TokenUnsupported("Empty token")

    if token.startswith("0x"):
        if not is_valid_address(token):
            raise TokenUnsupported(f"Invalid token address {token}")
        return to_checksum_address(token)

    chain = get_chain(chain_id)
    address: Optional[str] = chain.tokens.get(token.upper())
    if address is None:
        raise TokenUnsupported(
            f"Token {token} not known on {chain.name}",
            user_message=f"Token {token} is not supported on {chain.name}.",
        )
    return to_checksum_address(address)


def symbol_for(chain_id: int, address: str) -> Optional[str]:
    """Reverse lookup of a token symbol from its address."""
    chain = CHAINS.get(chain_id)
    if chain is None:
        return None
    lowered = address.lower()
    for symbol, token_address in chain.tokens.items():
        if token_address.lower() == lowered:
            return symbol
    return None
