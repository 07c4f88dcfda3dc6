"""Configuration management for Trickle using Pydantic Settings."""

from enum import Enum

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Supported log output formats."""

    JSON = "json"
    TEXT = "text"


class TrickleConfig(BaseSettings):
    """Trickle service configuration loaded from environment variables.

    The RPC endpoint, faucet contract address and signing credential are all
    optional at load time so the HTTP service can come up and answer every
    drip with a configuration error instead of refusing to start.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Network
    rpc_endpoint: str | None = Field(default=None, alias="TRICKLE_RPC_ENDPOINT")
    faucet_contract_address: str | None = Field(
        default=None, alias="TRICKLE_FAUCET_CONTRACT_ADDRESS"
    )
    block_explorer_url: str | None = Field(default=None, alias="TRICKLE_BLOCK_EXPLORER_URL")

    # Wallet
    wallet_private_key: SecretStr | None = Field(default=None, alias="TRICKLE_WALLET_PRIVATE_KEY")
    wallet_private_key_file: str | None = Field(
        default=None, alias="TRICKLE_WALLET_PRIVATE_KEY_FILE"
    )

    # HTTP
    host: str = Field(default="0.0.0.0", alias="TRICKLE_HOST")  # noqa: S104
    port: int = Field(default=8080, alias="TRICKLE_PORT", ge=1, le=65535)

    # Observability
    log_level: str = Field(default="INFO", alias="TRICKLE_LOG_LEVEL")
    log_format: LogFormat = Field(default=LogFormat.JSON, alias="TRICKLE_LOG_FORMAT")

    @property
    def has_signing_credential(self) -> bool:
        """Whether a private key or key file is configured."""
        if self.wallet_private_key and self.wallet_private_key.get_secret_value():
            return True
        return bool(self.wallet_private_key_file)

    def missing_drip_settings(self) -> list[str]:
        """List the environment variables a drip needs but that are not set.

        Returns
        -------
        list[str]
            Names of missing variables, empty when the faucet is fully configured.
        """
        missing = []
        if not self.has_signing_credential:
            missing.append("TRICKLE_WALLET_PRIVATE_KEY")
        if not self.rpc_endpoint:
            missing.append("TRICKLE_RPC_ENDPOINT")
        if not self.faucet_contract_address:
            missing.append("TRICKLE_FAUCET_CONTRACT_ADDRESS")
        return missing
