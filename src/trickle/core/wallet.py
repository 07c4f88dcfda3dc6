"""Signing credential for drip transactions."""

from abc import ABC, abstractmethod
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import SecretStr

from trickle.config import TrickleConfig


class WalletProvider(ABC):
    """Source of the account that signs faucet transactions."""

    @abstractmethod
    def get_account(self) -> LocalAccount:
        """Return the local account used for signing."""
        ...

    @property
    def address(self) -> str:
        """Checksummed address of the signing account."""
        return self.get_account().address


class EnvironmentWallet(WalletProvider):
    """Wallet whose private key comes from the environment or a key file.

    Parameters
    ----------
    private_key : SecretStr, optional
        Hex-encoded private key. Wins over ``private_key_file`` when both are given.
    private_key_file : str, optional
        Path to a file holding the hex-encoded private key.

    Raises
    ------
    ValueError
        If neither source is provided.
    FileNotFoundError
        If ``private_key_file`` does not exist.
    """

    def __init__(
        self,
        private_key: SecretStr | None = None,
        private_key_file: str | None = None,
    ):
        if private_key is not None and private_key.get_secret_value():
            self._account = Account.from_key(private_key.get_secret_value())
        elif private_key_file:
            key_path = Path(private_key_file).expanduser()
            if not key_path.is_file():
                raise FileNotFoundError(f"Private key file not found: {private_key_file}")
            self._account = Account.from_key(key_path.read_text().strip())
        else:
            raise ValueError("Either private_key or private_key_file must be provided")

    @classmethod
    def from_config(cls, config: TrickleConfig) -> "EnvironmentWallet":
        """Build the wallet from the service configuration."""
        return cls(
            private_key=config.wallet_private_key,
            private_key_file=config.wallet_private_key_file,
        )

    def get_account(self) -> LocalAccount:
        return self._account
