from __future__ import annotations

import pytest

from ethstore_cli.errors import InvalidPasswordError, PasswordFileError, VaultNotFoundError
from ethstore_cli.store.directory import KeyDirectory
from ethstore_cli.store.secret_store import SecretStore
from ethstore_cli.types import ROOT, AccountRef, NamedVault
from ethstore_cli.vaults import resolve_account, resolve_vault, resolve_vault_account


def _store(tmp_path) -> SecretStore:
    return SecretStore(KeyDirectory.create(tmp_path / "keys"), kdf_iterations=2)


def test_empty_vault_name_is_root_and_ignores_password_path(tmp_path) -> None:
    store = _store(tmp_path)
    assert resolve_vault(store, "", "") is ROOT
    assert resolve_vault(store, "", str(tmp_path / "does-not-exist")) is ROOT


def test_named_vault_opens_with_correct_password(tmp_path, write_password) -> None:
    store = _store(tmp_path)
    store.create_vault("savings", "vault-pw")

    fresh = _store(tmp_path)
    vault = resolve_vault(fresh, "savings", write_password("vault.txt", "vault-pw\n"))
    assert vault == NamedVault("savings")


def test_named_vault_with_wrong_password_fails(tmp_path, write_password) -> None:
    _store(tmp_path).create_vault("savings", "vault-pw")

    with pytest.raises(InvalidPasswordError):
        resolve_vault(_store(tmp_path), "savings", write_password("vault.txt", "nope\n"))


def test_named_vault_requires_password_file(tmp_path) -> None:
    _store(tmp_path).create_vault("savings", "vault-pw")

    with pytest.raises(PasswordFileError):
        resolve_vault(_store(tmp_path), "savings", "")


def test_unknown_vault_fails(tmp_path, write_password) -> None:
    with pytest.raises(VaultNotFoundError):
        resolve_vault(_store(tmp_path), "missing", write_password("vault.txt", "pw\n"))


def test_resolve_account_composes_vault_scope() -> None:
    address = bytes.fromhex("a8fa5dd30a87bb9e3288d604eb74949c515ab66e")

    assert resolve_account(address, ROOT) == AccountRef.root(address)
    assert resolve_account(address, NamedVault("v")) == AccountRef.in_vault("v", address)
    assert resolve_account(address, ROOT) != resolve_account(address, NamedVault("v"))


def test_resolve_vault_account_in_root(tmp_path) -> None:
    address = bytes(20)
    account = resolve_vault_account(_store(tmp_path), address, "", "")
    assert account == AccountRef(address=address, vault=ROOT)
