"""
Chain-specific configuration for pair-explorer.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..batchers.errors import ConfigurationError
from ..batchers.multicall import validate_aggregator_address
from .base import BaseConfig, ConfigError


def _rpc_url_from_env() -> Optional[str]:
    return BaseConfig.get_env("PAIR_EXPLORER_RPC_URL") or BaseConfig.get_env("ETHEREUM_RPC_URL")


@dataclass
class ChainConfig(BaseConfig):
    """Node and aggregator settings for the chain being explored."""

    RPC_URL: Optional[str] = field(default_factory=_rpc_url_from_env)
    MULTICALL_ADDRESS: Optional[str] = field(
        default_factory=lambda: BaseConfig.get_env("MULTICALL_ADDRESS")
    )
    CHAIN_ID: int = field(default_factory=lambda: BaseConfig.get_env_int("CHAIN_ID", 1))

    # Well known Uniswap V2 pairs on Ethereum mainnet
    EXAMPLE_PAIRS: Dict[str, str] = field(
        default_factory=lambda: {
            "ETH/USDC": "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc",
            "ETH/USDT": "0x0d4a11d5EEaaC28EC3F61d100daF4d40471f1852",
            "WBTC/ETH": "0xBb2b8038a1640196FbE3e38816F3e67Cba72D940",
        }
    )

    def _validate_config(self):
        super()._validate_config()
        if self.CHAIN_ID <= 0:
            raise ConfigError(f"Invalid chain id: {self.CHAIN_ID}")

    @property
    def has_multicall(self) -> bool:
        try:
            self.validate_multicall_address()
        except ConfigurationError:
            return False
        return True

    def validate_multicall_address(self) -> str:
        """
        Return the checksummed aggregator address.

        Raises:
            ConfigurationError: If the address is missing or malformed
        """
        return validate_aggregator_address(self.MULTICALL_ADDRESS)

    def get_example_pair(self, label: str) -> str:
        """Get the address of a well known pair such as ``"ETH/USDC"``."""
        try:
            return self.EXAMPLE_PAIRS[label]
        except KeyError:
            raise ValueError(f"Unknown example pair: {label}") from None
