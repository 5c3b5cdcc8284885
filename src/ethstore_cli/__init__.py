"""Ethereum key store command layer public surface."""

from ethstore_cli.commands import (
    ChangePassword,
    ChangeVaultPassword,
    CommandRequest,
    CreateVault,
    FindWalletPassword,
    ImportAccounts,
    ImportWallet,
    Insert,
    ListAccounts,
    ListVaults,
    MoveFromVault,
    MoveToVault,
    PublicKey,
    RemoveAccount,
    SignMessage,
    execute,
)
from ethstore_cli.errors import (
    ArgumentParseError,
    EthstoreError,
    InvalidAccountError,
    InvalidAddressError,
    InvalidMessageError,
    InvalidPasswordError,
    InvalidSecretError,
    PasswordFileError,
    StoreError,
)
from ethstore_cli.passwords import load_password
from ethstore_cli.store import KeyDirectory, SecretStore, import_accounts, resolve_key_dir
from ethstore_cli.types import ROOT, AccountRef, NamedVault, Outcome, RootVault, VaultRef
from ethstore_cli.vaults import resolve_account, resolve_vault

__all__ = [
    "EthstoreError",
    "ArgumentParseError",
    "PasswordFileError",
    "StoreError",
    "InvalidAddressError",
    "InvalidSecretError",
    "InvalidMessageError",
    "InvalidAccountError",
    "InvalidPasswordError",
    "CommandRequest",
    "Insert",
    "ChangePassword",
    "ListAccounts",
    "ImportAccounts",
    "ImportWallet",
    "FindWalletPassword",
    "RemoveAccount",
    "SignMessage",
    "PublicKey",
    "ListVaults",
    "CreateVault",
    "ChangeVaultPassword",
    "MoveToVault",
    "MoveFromVault",
    "execute",
    "load_password",
    "KeyDirectory",
    "SecretStore",
    "import_accounts",
    "resolve_key_dir",
    "ROOT",
    "RootVault",
    "NamedVault",
    "VaultRef",
    "AccountRef",
    "Outcome",
    "resolve_vault",
    "resolve_account",
]
