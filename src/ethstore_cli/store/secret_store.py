"""Vault-aware secret store over a key directory."""

from __future__ import annotations

import logging
from typing import Any

from eth_account import Account

from ethstore_cli.crypto.keys import address_from_secret, public_from_secret, sign_digest
from ethstore_cli.errors import (
    AccountExistsError,
    InvalidAccountError,
    InvalidKeyFileError,
    InvalidVaultNameError,
    KeyDirectoryError,
    VaultNotOpenedError,
)
from ethstore_cli.store.directory import KeyDirectory, KeyFile, decrypt_key
from ethstore_cli.store.vault import VaultDirectory, check_vault_name
from ethstore_cli.types import AccountRef, RootVault, VaultRef

logger = logging.getLogger(__name__)

DEFAULT_KDF_ITERATIONS = 10240


class SecretStore:
    """Accounts in a root key directory and its vaults.

    Vault accounts are only visible once the vault has been opened on this
    instance. Nothing is cached across instances.
    """

    def __init__(self, directory: KeyDirectory, *, kdf_iterations: int = DEFAULT_KDF_ITERATIONS) -> None:
        self.directory = directory
        self.kdf_iterations = kdf_iterations
        self._vaults: dict[str, VaultDirectory] = {}

    @classmethod
    def open(cls, directory: KeyDirectory, *, kdf_iterations: int = DEFAULT_KDF_ITERATIONS) -> SecretStore:
        return cls(directory, kdf_iterations=kdf_iterations)

    def _directory_for(self, vault: VaultRef) -> KeyDirectory:
        if isinstance(vault, RootVault):
            return self.directory
        opened = self._vaults.get(vault.name)
        if opened is None:
            raise VaultNotOpenedError()
        return opened

    def _find(self, account: AccountRef) -> tuple[KeyDirectory, KeyFile]:
        directory = self._directory_for(account.vault)
        key_file = directory.find(account.address)
        if key_file is None:
            raise InvalidAccountError()
        return directory, key_file

    def _encrypt(self, secret: bytes, password: str) -> dict[str, Any]:
        return Account.encrypt(secret, password, kdf="pbkdf2", iterations=self.kdf_iterations)

    def accounts(self) -> list[AccountRef]:
        refs = [AccountRef.root(key_file.address) for key_file in self.directory.load()]
        for name, vault_dir in self._vaults.items():
            refs.extend(AccountRef.in_vault(name, key_file.address) for key_file in vault_dir.load())
        return refs

    def insert_account(self, vault: VaultRef, secret: bytes, password: str) -> AccountRef:
        address = address_from_secret(secret)
        directory = self._directory_for(vault)
        if directory.find(address) is not None:
            raise AccountExistsError()
        directory.insert(self._encrypt(secret, password))
        logger.info("inserted account 0x%s into %s", address.hex(), vault)
        return AccountRef(address=address, vault=vault)

    def remove_account(self, account: AccountRef, password: str) -> None:
        directory, key_file = self._find(account)
        decrypt_key(key_file, password)
        directory.remove(key_file)
        logger.info("removed account 0x%s from %s", account.address.hex(), account.vault)

    def change_password(self, account: AccountRef, old_password: str, new_password: str) -> None:
        directory, key_file = self._find(account)
        secret = decrypt_key(key_file, old_password)
        directory.update(key_file, self._encrypt(secret, new_password))
        logger.info("changed password of account 0x%s", account.address.hex())

    def sign(self, account: AccountRef, password: str, digest: bytes) -> bytes:
        _, key_file = self._find(account)
        return sign_digest(decrypt_key(key_file, password), digest)

    def public(self, account: AccountRef, password: str) -> bytes:
        _, key_file = self._find(account)
        return public_from_secret(decrypt_key(key_file, password))

    def _vault_dirs(self) -> list[tuple[int, VaultDirectory]]:
        try:
            entries = sorted(self.directory.path.iterdir())
        except OSError as exc:
            raise KeyDirectoryError(f"failed to read key directory: {self.directory.path}: {exc}") from exc

        found = []
        for entry in entries:
            if not entry.is_dir():
                continue
            try:
                vault_dir = VaultDirectory(self.directory.path, entry.name)
            except InvalidVaultNameError:
                continue
            if not vault_dir.exists():
                continue
            try:
                found.append((vault_dir.created_at, vault_dir))
            except InvalidKeyFileError as exc:
                logger.warning("skipping vault %s: %s", entry.name, exc)
        return found

    def list_vaults(self) -> list[str]:
        vault_dirs = sorted(self._vault_dirs(), key=lambda item: (item[0], item[1].name))
        return [vault_dir.name for _, vault_dir in vault_dirs]

    def create_vault(self, name: str, password: str) -> None:
        vault_dir = VaultDirectory(self.directory.path, check_vault_name(name))
        vault_dir.create(password, kdf_iterations=self.kdf_iterations)
        self._vaults[name] = vault_dir
        logger.info("created vault %s", name)

    def open_vault(self, name: str, password: str) -> None:
        vault_dir = VaultDirectory(self.directory.path, check_vault_name(name))
        vault_dir.check_password(password)
        self._vaults[name] = vault_dir
        logger.debug("opened vault %s", name)

    def change_vault_password(self, name: str, new_password: str) -> None:
        vault_dir = self._vaults.get(check_vault_name(name))
        if vault_dir is None:
            raise VaultNotOpenedError()
        vault_dir.set_password(new_password, kdf_iterations=self.kdf_iterations)
        logger.info("changed password of vault %s", name)

    def change_account_vault(self, vault: VaultRef, account: AccountRef) -> AccountRef:
        if account.vault == vault:
            return account
        source, key_file = self._find(account)
        target = self._directory_for(vault)
        if target.find(account.address) is not None:
            raise AccountExistsError()
        target.insert(key_file.payload)
        source.remove(key_file)
        logger.info("moved account 0x%s from %s to %s", account.address.hex(), account.vault, vault)
        return AccountRef(address=account.address, vault=vault)


def import_accounts(src: KeyDirectory, dst: KeyDirectory) -> list[bytes]:
    """Copy root-level keys from ``src`` into ``dst``, skipping known addresses."""
    existing = {key_file.address for key_file in dst.load()}
    imported: list[bytes] = []
    for key_file in src.load():
        if key_file.address in existing:
            continue
        dst.insert(key_file.payload)
        existing.add(key_file.address)
        imported.append(key_file.address)
    logger.info("imported %d account(s) from %s into %s", len(imported), src.path, dst.path)
    return imported
