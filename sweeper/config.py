import os

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the public-prefixed env names the web client used."""

        super().model_post_init(__context)

        if not self.debank_access_key:
            fallback = os.getenv("NEXT_PUBLIC_DEBANK_ACCESS_KEY")
            if fallback:
                object.__setattr__(self, "debank_access_key", fallback)
        if not self.alchemy_api_key:
            fallback = os.getenv("NEXT_PUBLIC_ALCHEMY_API_KEY")
            if fallback:
                object.__setattr__(self, "alchemy_api_key", fallback)

    log_level: str = Field(default="INFO", description="Logging level")

    # Balance index (DeBank Pro OpenAPI)
    debank_api_base: str = Field(
        default="https://pro-openapi.debank.com/v1",
        description="Base URL for the DeBank Pro OpenAPI",
        validation_alias=AliasChoices("debank_api_base", "NEXT_PUBLIC_DEBANK_API_BASE"),
    )
    debank_access_key: str = Field(default="", description="DeBank AccessKey header value")

    # Execution relay (Biconomy MEE node)
    mee_api_base: str = Field(
        default="https://network.biconomy.io/v1",
        description="Base URL for the MEE node REST API",
    )
    mee_api_key: str = Field(default="", description="Optional MEE API key")

    # Chain RPC
    alchemy_api_key: str = Field(default="", description="Alchemy API key for RPC endpoints")
    request_timeout_seconds: int = Field(default=30, description="HTTP request timeout")

    # Smart account factories, keyed by account version
    account_factory_addresses: Dict[str, str] = Field(
        default_factory=dict,
        description="Nexus account factory address per version ('2.1.0', '2.2.0')",
    )
    account_index: int = Field(default=0, ge=0, description="Account index used for address derivation")
    anchor_chain_id: int = Field(default=8453, description="Chain used to derive account addresses")

    # Token selection
    min_token_usd_value: Decimal = Field(
        default=Decimal("0.1"),
        description="Minimum USD value for a discovered token to be worth sweeping",
    )
    fee_token_candidate_limit: int = Field(
        default=10,
        ge=1,
        description="Number of EOA tokens offered as fee-token candidates",
    )

    # Sweep execution
    instruction_gas_limit: int = Field(default=100_000, ge=21_000, description="Gas limit per transfer instruction")
    forwarder_gas_limit: int = Field(default=300_000, ge=21_000, description="Gas limit for forwarder calls")
    native_transfer_strategy: str = Field(
        default="direct",
        description="How native balances are swept: 'direct' value transfer or 'forwarder' contract call",
    )
    eth_forwarder_address: str = Field(
        default="0x000000Afe527A978Ecb761008Af475cfF04132a1",
        description="ETH forwarder contract used by the 'forwarder' native strategy",
    )
    sweep_settle_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Delay between obtaining a supertransaction hash and reading its receipt",
    )
    receipt_poll_attempts: int = Field(
        default=12,
        ge=1,
        description="Receipt reads before giving up on a pending supertransaction",
    )
    receipt_poll_interval_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Delay between receipt reads while the supertransaction is pending",
    )
    token_refresh_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Delay before refreshing token lists after a successful sweep",
    )

    # Sweep history
    max_history_entries: int = Field(default=20, ge=1, description="Sweep history retention")
    history_storage_path: Path = Field(
        default=Path.home() / ".nexus-sweeper" / "storage.json",
        description="Local JSON file backing the sweep history",
    )

    @property
    def has_debank_key(self) -> bool:
        return bool(self.debank_access_key)

    def factory_for(self, version: str) -> str:
        return self.account_factory_addresses.get(version, "")


# Global settings instance
settings = Settings()
