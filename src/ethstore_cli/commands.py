"""Typed command requests and their dispatch to the secret store.

Each request is built once from the command line and handled by exactly one
``_run_*`` function. Handlers load passwords, resolve the keystore directory
and vault context, call one store operation and format its result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from ethstore_cli.cli.config import CLIConfig
from ethstore_cli.crack import find_wallet_password
from ethstore_cli.crypto.keys import parse_address, parse_message, parse_secret
from ethstore_cli.crypto.presale import PresaleWallet
from ethstore_cli.errors import StoreError
from ethstore_cli.formatting import (
    OK,
    format_accounts,
    format_address,
    format_found_password,
    format_hex,
    format_outcome,
    format_vaults,
)
from ethstore_cli.passwords import load_password, split_candidates
from ethstore_cli.store.directory import KeyDirectory, resolve_key_dir
from ethstore_cli.store.secret_store import SecretStore, import_accounts
from ethstore_cli.types import ROOT, AccountRef, NamedVault, Outcome
from ethstore_cli.vaults import resolve_vault, resolve_vault_account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Insert:
    secret: str
    password: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class ChangePassword:
    address: str
    old_pwd: str
    new_pwd: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class ListAccounts:
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class ImportAccounts:
    password: str = ""
    src: str | None = None
    dir: str | None = None


@dataclass(frozen=True)
class ImportWallet:
    path: str
    password: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class FindWalletPassword:
    path: str
    password: str


@dataclass(frozen=True)
class RemoveAccount:
    address: str
    password: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class SignMessage:
    address: str
    password: str
    message: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class PublicKey:
    address: str
    password: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class ListVaults:
    dir: str | None = None


@dataclass(frozen=True)
class CreateVault:
    name: str
    password: str
    dir: str | None = None


@dataclass(frozen=True)
class ChangeVaultPassword:
    name: str
    old_pwd: str
    new_pwd: str
    dir: str | None = None


@dataclass(frozen=True)
class MoveToVault:
    address: str
    name: str
    password: str
    dir: str | None = None
    vault: str = ""
    vault_pwd: str = ""


@dataclass(frozen=True)
class MoveFromVault:
    address: str
    name: str
    password: str
    dir: str | None = None


CommandRequest = Union[
    Insert,
    ChangePassword,
    ListAccounts,
    ImportAccounts,
    ImportWallet,
    FindWalletPassword,
    RemoveAccount,
    SignMessage,
    PublicKey,
    ListVaults,
    CreateVault,
    ChangeVaultPassword,
    MoveToVault,
    MoveFromVault,
]


def attempt(operation: Callable[[], object]) -> Outcome:
    """Run a store operation, reporting store refusals as a failed outcome."""
    try:
        operation()
    except StoreError as exc:
        logger.debug("best-effort operation failed: %s", exc)
        return Outcome(ok=False, reason=str(exc))
    return Outcome(ok=True)


def _key_dir(key_dir: str | None, config: CLIConfig, password: str | None = None) -> KeyDirectory:
    return resolve_key_dir(key_dir or config.default_dir, password, paths=config.keystore_paths())


def _open_store(key_dir: str | None, config: CLIConfig) -> SecretStore:
    return SecretStore.open(_key_dir(key_dir, config), kdf_iterations=config.kdf_iterations)


def _run_insert(request: Insert, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    secret = parse_secret(request.secret)
    password = load_password(request.password)
    vault = resolve_vault(store, request.vault, request.vault_pwd)
    account = store.insert_account(vault, secret, password)
    return format_address(account.address)


def _run_change_password(request: ChangePassword, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    address = parse_address(request.address)
    old_pwd = load_password(request.old_pwd)
    new_pwd = load_password(request.new_pwd)
    account = resolve_vault_account(store, address, request.vault, request.vault_pwd)
    return format_outcome(attempt(lambda: store.change_password(account, old_pwd, new_pwd)))


def _run_list(request: ListAccounts, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    vault = resolve_vault(store, request.vault, request.vault_pwd)
    addresses = [account.address for account in store.accounts() if account.vault == vault]
    return format_accounts(addresses)


def _run_import(request: ImportAccounts, config: CLIConfig) -> str:
    password = load_password(request.password) if request.password else None
    src = _key_dir(request.src or config.default_src, config, password)
    dst = _key_dir(request.dir, config)
    return format_accounts(import_accounts(src, dst))


def _run_import_wallet(request: ImportWallet, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    wallet = PresaleWallet.open(request.path)
    password = load_password(request.password)
    secret = wallet.decrypt(password)
    vault = resolve_vault(store, request.vault, request.vault_pwd)
    account = store.insert_account(vault, secret, password)
    return format_address(account.address)


def _run_find_wallet_password(request: FindWalletPassword, config: CLIConfig) -> str:
    candidates = split_candidates(load_password(request.password))
    wallet = PresaleWallet.open(request.path)
    found = find_wallet_password(candidates, wallet, workers=config.crack_workers)
    return format_found_password(found)


def _run_remove(request: RemoveAccount, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    address = parse_address(request.address)
    password = load_password(request.password)
    account = resolve_vault_account(store, address, request.vault, request.vault_pwd)
    return format_outcome(attempt(lambda: store.remove_account(account, password)))


def _run_sign(request: SignMessage, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    address = parse_address(request.address)
    message = parse_message(request.message)
    password = load_password(request.password)
    account = resolve_vault_account(store, address, request.vault, request.vault_pwd)
    return format_hex(store.sign(account, password, message))


def _run_public(request: PublicKey, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    address = parse_address(request.address)
    password = load_password(request.password)
    account = resolve_vault_account(store, address, request.vault, request.vault_pwd)
    return format_hex(store.public(account, password))


def _run_list_vaults(request: ListVaults, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    return format_vaults(store.list_vaults())


def _run_create_vault(request: CreateVault, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    password = load_password(request.password)
    store.create_vault(request.name, password)
    return OK


def _run_change_vault_password(request: ChangeVaultPassword, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    old_pwd = load_password(request.old_pwd)
    new_pwd = load_password(request.new_pwd)
    store.open_vault(request.name, old_pwd)
    store.change_vault_password(request.name, new_pwd)
    return OK


def _run_move_to_vault(request: MoveToVault, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    address = parse_address(request.address)
    password = load_password(request.password)
    account = resolve_vault_account(store, address, request.vault, request.vault_pwd)
    store.open_vault(request.name, password)
    store.change_account_vault(NamedVault(request.name), account)
    return OK


def _run_move_from_vault(request: MoveFromVault, config: CLIConfig) -> str:
    store = _open_store(request.dir, config)
    address = parse_address(request.address)
    password = load_password(request.password)
    store.open_vault(request.name, password)
    store.change_account_vault(ROOT, AccountRef.in_vault(request.name, address))
    return OK


_HANDLERS: dict[type, Callable[..., str]] = {
    Insert: _run_insert,
    ChangePassword: _run_change_password,
    ListAccounts: _run_list,
    ImportAccounts: _run_import,
    ImportWallet: _run_import_wallet,
    FindWalletPassword: _run_find_wallet_password,
    RemoveAccount: _run_remove,
    SignMessage: _run_sign,
    PublicKey: _run_public,
    ListVaults: _run_list_vaults,
    CreateVault: _run_create_vault,
    ChangeVaultPassword: _run_change_vault_password,
    MoveToVault: _run_move_to_vault,
    MoveFromVault: _run_move_from_vault,
}


def execute(request: CommandRequest, *, config: CLIConfig | None = None) -> str:
    """Run one command and return its output text.

    Errors propagate as ``EthstoreError`` subclasses, except for the store's
    refusal to change a password or remove an account, which render as
    ``false``.
    """
    handler = _HANDLERS.get(type(request))
    if handler is None:
        raise TypeError(f"unsupported command request: {type(request).__name__}")
    logger.debug("executing %s", type(request).__name__)
    return handler(request, config or CLIConfig())
