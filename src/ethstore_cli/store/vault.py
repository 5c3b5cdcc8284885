"""Vault sub-directories.

A vault is a directory under the keystore root holding ``vault.json``: a v3
envelope around a random check key, encrypted with the vault password, plus
metadata. The vault password is verified by decrypting the check key.
"""

from __future__ import annotations

import json
import re
import secrets
import time
from pathlib import Path
from typing import Any

from eth_account import Account

from ethstore_cli.crypto.keys import is_valid_secret
from ethstore_cli.errors import (
    InvalidKeyFileError,
    InvalidPasswordError,
    InvalidVaultNameError,
    KeyDirectoryError,
    VaultExistsError,
    VaultNotFoundError,
)
from ethstore_cli.store.directory import (
    VAULT_FILE_NAME,
    KeyDirectory,
    chmod_owner_only,
    write_json,
)

_INVALID_VAULT_NAME_CHARS = re.compile(r'[/\\:*?"<>|]')


def check_vault_name(name: str) -> str:
    if not name or name.startswith(".") or _INVALID_VAULT_NAME_CHARS.search(name):
        raise InvalidVaultNameError()
    return name


def _random_check_key() -> bytes:
    while True:
        candidate = secrets.token_bytes(32)
        if is_valid_secret(candidate):
            return candidate


def _seal(password: str, kdf_iterations: int) -> dict[str, Any]:
    return Account.encrypt(_random_check_key(), password, kdf="pbkdf2", iterations=kdf_iterations)


class VaultDirectory(KeyDirectory):
    def __init__(self, root: Path, name: str) -> None:
        super().__init__(root / check_vault_name(name))
        self.name = name

    @property
    def vault_file(self) -> Path:
        return self.path / VAULT_FILE_NAME

    def exists(self) -> bool:
        return self.vault_file.is_file()

    def read_meta(self) -> dict[str, Any]:
        try:
            payload = json.loads(self.vault_file.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise VaultNotFoundError() from exc
        except (OSError, ValueError) as exc:
            raise InvalidKeyFileError(f"Invalid vault file: {self.vault_file}: {exc}") from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("crypto"), dict):
            raise InvalidKeyFileError(f"Invalid vault file: {self.vault_file}")
        return payload

    @property
    def created_at(self) -> int:
        meta = self.read_meta().get("meta")
        if isinstance(meta, dict) and isinstance(meta.get("created_at"), int):
            return meta["created_at"]
        return 0

    def create(self, password: str, *, kdf_iterations: int) -> None:
        if self.exists():
            raise VaultExistsError()
        try:
            if not self.path.is_dir():
                self.path.mkdir(parents=True)
                chmod_owner_only(self.path, 0o700)
        except OSError as exc:
            raise KeyDirectoryError(f"failed to create vault directory: {self.path}: {exc}") from exc
        write_json(
            self.vault_file,
            {
                "crypto": _seal(password, kdf_iterations),
                "meta": {"created_at": time.time_ns()},
            },
        )

    def check_password(self, password: str) -> None:
        sealed = self.read_meta()["crypto"]
        try:
            Account.decrypt(sealed, password)
        except ValueError as exc:
            raise InvalidPasswordError() from exc
        except (KeyError, TypeError) as exc:
            raise InvalidKeyFileError(f"Invalid vault file: {self.vault_file}") from exc

    def set_password(self, password: str, *, kdf_iterations: int) -> None:
        payload = self.read_meta()
        payload["crypto"] = _seal(password, kdf_iterations)
        write_json(self.vault_file, payload)
