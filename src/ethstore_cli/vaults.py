"""Vault context resolution for account-scoped commands."""

from __future__ import annotations

import logging

from ethstore_cli.passwords import load_password
from ethstore_cli.store.secret_store import SecretStore
from ethstore_cli.types import ROOT, AccountRef, NamedVault, RootVault, VaultRef

logger = logging.getLogger(__name__)


def resolve_vault(store: SecretStore, vault_name: str, vault_password_path: str) -> VaultRef:
    """Open the named vault and return its reference.

    An empty name means the root directory; the password path is then ignored
    even when given.
    """
    if not vault_name:
        return ROOT
    password = load_password(vault_password_path)
    store.open_vault(vault_name, password)
    return NamedVault(vault_name)


def resolve_account(address: bytes, vault: VaultRef) -> AccountRef:
    if isinstance(vault, RootVault):
        return AccountRef.root(address)
    return AccountRef.in_vault(vault.name, address)


def resolve_vault_account(
    store: SecretStore,
    address: bytes,
    vault_name: str,
    vault_password_path: str,
) -> AccountRef:
    vault = resolve_vault(store, vault_name, vault_password_path)
    logger.debug("addressing 0x%s in %s", address.hex(), vault)
    return resolve_account(address, vault)
