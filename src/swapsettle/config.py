"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")
    dry_run: bool = Field(default=True, description="Use simulated venues (no real orders)")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # 1inch venues
    # ======================
    oneinch_api_url: str = Field(
        default="https://api.1inch.dev", description="1inch developer portal base URL"
    )
    oneinch_api_key: str = Field(default="", description="1inch API key")
    enabled_chain_ids: str = Field(
        default="1,8453,42161,137,56,43114,10",
        description="Comma-separated chain ids the engine must serve",
    )
    default_slippage: float = Field(default=1.0, description="Raw swap slippage in percent")

    # ======================
    # Chain RPC Endpoints
    # ======================
    eth_rpc_url: str = Field(default="https://eth.llamarpc.com", description="Ethereum RPC URL")
    base_rpc_url: str = Field(default="https://mainnet.base.org", description="Base RPC URL")
    arbitrum_rpc_url: str = Field(default="https://arb1.arbitrum.io/rpc", description="Arbitrum RPC URL")
    polygon_rpc_url: str = Field(default="https://polygon-rpc.com", description="Polygon RPC URL")
    bsc_rpc_url: str = Field(default="https://bsc-dataseed.binance.org", description="BSC RPC URL")
    avax_rpc_url: str = Field(
        default="https://api.avax.network/ext/bc/C/rpc", description="Avalanche RPC URL"
    )
    optimism_rpc_url: str = Field(default="https://mainnet.optimism.io", description="Optimism RPC URL")

    # ======================
    # Settlement watcher
    # ======================
    watcher_poll_interval: float = Field(default=5.0, gt=0, description="Seconds between polls")
    watcher_max_iterations: int = Field(default=120, ge=1, description="Polls before giving up")
    request_timeout: float = Field(default=3.0, gt=0, description="Per-request timeout in seconds")

    # ======================
    # Signing
    # ======================
    signer_private_key: Optional[SecretStr] = Field(
        default=None, description="Hex private key for the local signer"
    )

    @model_validator(mode="after")
    def _timeout_below_interval(self) -> "Settings":
        if self.request_timeout >= self.watcher_poll_interval:
            raise ValueError(
                "request_timeout must be shorter than watcher_poll_interval "
                f"({self.request_timeout} >= {self.watcher_poll_interval})"
            )
        return self

    @property
    def chain_ids(self) -> list[int]:
        """Parse enabled chain ids into a list of integers."""
        if not self.enabled_chain_ids:
            return []
        return [int(cid.strip()) for cid in self.enabled_chain_ids.split(",") if cid.strip()]

    @property
    def has_signer(self) -> bool:
        return bool(self.signer_private_key and self.signer_private_key.get_secret_value())

    def get_rpc_url(self, chain_id: int) -> str:
        """Get RPC URL for a chain id."""
        rpc_map = {
            1: self.eth_rpc_url,
            8453: self.base_rpc_url,
            42161: self.arbitrum_rpc_url,
            137: self.polygon_rpc_url,
            56: self.bsc_rpc_url,
            43114: self.avax_rpc_url,
            10: self.optimism_rpc_url,
        }
        return rpc_map.get(chain_id, "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "oneinch": {
                "api_url": self.oneinch_api_url,
                "api_key": "***" if self.oneinch_api_key else "(not set)",
            },
            "chains": {str(cid): self.get_rpc_url(cid) for cid in self.chain_ids},
            "watcher": {
                "poll_interval": self.watcher_poll_interval,
                "max_iterations": self.watcher_max_iterations,
                "request_timeout": self.request_timeout,
            },
            "signer_configured": self.has_signer,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
