"""Key directories and keystore location resolution."""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from eth_account import Account

from ethstore_cli.errors import InvalidKeyFileError, InvalidPasswordError, KeyDirectoryError

logger = logging.getLogger(__name__)

VAULT_FILE_NAME = "vault.json"
DEFAULT_CHAIN = "ethereum"


def _default_data_dir() -> Path:
    home = Path.home()
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", home)) / "Parity" / "Ethereum"
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "io.parity.ethereum"
    return home / ".local" / "share" / "io.parity.ethereum"


def _default_geth_dir() -> Path:
    home = Path.home()
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", home)) / "Ethereum"
    if sys.platform == "darwin":
        return home / "Library" / "Ethereum"
    return home / ".ethereum"


@dataclass(frozen=True)
class KeystorePaths:
    """Base directories for the named keystore locations."""

    data_dir: Path
    geth_dir: Path

    @classmethod
    def default(cls) -> KeystorePaths:
        return cls(data_dir=_default_data_dir(), geth_dir=_default_geth_dir())

    def geth(self, testnet: bool) -> Path:
        if testnet:
            return self.geth_dir / "testnet" / "keystore"
        return self.geth_dir / "keystore"

    def parity(self, chain: str) -> Path:
        return self.data_dir / "keys" / chain


def locate(location: str, paths: KeystorePaths | None = None) -> Path:
    """Map a location specifier to a directory path without touching disk."""
    paths = paths or KeystorePaths.default()
    if location == "geth":
        return paths.geth(testnet=False)
    if location == "geth-test":
        return paths.geth(testnet=True)
    if location.startswith("parity"):
        parts = location.split("-")
        chain = parts[1] if len(parts) > 1 else DEFAULT_CHAIN
        return paths.parity(chain)
    return Path(location)


def chmod_owner_only(path: Path, mode: int) -> None:
    if os.name != "posix":
        return
    path.chmod(mode)


@dataclass(frozen=True)
class KeyFile:
    path: Path
    address: bytes
    payload: dict[str, Any]


def key_file_name(address: bytes) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S.%fZ")
    return f"UTC--{stamp}--{address.hex()}"


def write_json(path: Path, payload: dict[str, Any]) -> None:
    """Write JSON owner-only, replacing ``path`` atomically."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, sort_keys=True, indent=2) + "\n")
        chmod_owner_only(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise KeyDirectoryError(f"failed to write key file: {path}: {exc}") from exc


def parse_key_file(path: Path) -> KeyFile | None:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("skipping unreadable key file %s: %s", path, exc)
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("crypto"), dict):
        logger.warning("skipping malformed key file %s", path)
        return None

    raw_address = payload.get("address")
    if not isinstance(raw_address, str):
        logger.warning("skipping key file without address %s", path)
        return None
    try:
        address = bytes.fromhex(raw_address.removeprefix("0x"))
    except ValueError:
        address = b""
    if len(address) != 20:
        logger.warning("skipping key file with invalid address %s", path)
        return None
    return KeyFile(path=path, address=address, payload=payload)


def decrypt_key(key_file: KeyFile, password: str) -> bytes:
    try:
        return bytes(Account.decrypt(key_file.payload, password))
    except ValueError as exc:
        raise InvalidPasswordError() from exc
    except (KeyError, TypeError) as exc:
        raise InvalidKeyFileError(f"Invalid key file: {key_file.path}") from exc


class KeyDirectory:
    """A directory of v3 key files.

    ``password`` is only meaningful for import sources: when set, ``load``
    yields just the keys that unlock with it.
    """

    def __init__(self, path: str | Path, password: str | None = None) -> None:
        self.path = Path(path)
        self.password = password

    @classmethod
    def create(cls, path: str | Path, password: str | None = None) -> KeyDirectory:
        directory = Path(path)
        if directory.is_dir():
            return cls(directory, password)
        try:
            directory.mkdir(parents=True)
            chmod_owner_only(directory, 0o700)
        except OSError as exc:
            raise KeyDirectoryError(f"failed to create key directory: {directory}: {exc}") from exc
        return cls(directory, password)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"

    def _key_paths(self) -> list[Path]:
        try:
            entries = sorted(self.path.iterdir())
        except OSError as exc:
            raise KeyDirectoryError(f"failed to read key directory: {self.path}: {exc}") from exc
        return [
            entry
            for entry in entries
            if entry.is_file() and not entry.name.startswith(".") and entry.name != VAULT_FILE_NAME
        ]

    def load(self) -> list[KeyFile]:
        loaded: list[KeyFile] = []
        for path in self._key_paths():
            key_file = parse_key_file(path)
            if key_file is None:
                continue
            if self.password is not None and not self._unlocks(key_file):
                logger.warning("skipping %s: key does not unlock with the source password", path)
                continue
            loaded.append(key_file)
        return loaded

    def _unlocks(self, key_file: KeyFile) -> bool:
        try:
            decrypt_key(key_file, self.password or "")
        except (InvalidPasswordError, InvalidKeyFileError):
            return False
        return True

    def find(self, address: bytes) -> KeyFile | None:
        for key_file in self.load():
            if key_file.address == address:
                return key_file
        return None

    def insert(self, payload: dict[str, Any]) -> KeyFile:
        address = bytes.fromhex(str(payload["address"]).removeprefix("0x"))
        path = self.path / key_file_name(address)
        write_json(path, payload)
        logger.debug("wrote key file %s", path)
        return KeyFile(path=path, address=address, payload=payload)

    def update(self, key_file: KeyFile, payload: dict[str, Any]) -> KeyFile:
        write_json(key_file.path, payload)
        return KeyFile(path=key_file.path, address=key_file.address, payload=payload)

    def remove(self, key_file: KeyFile) -> None:
        try:
            key_file.path.unlink()
        except OSError as exc:
            raise KeyDirectoryError(f"failed to remove key file: {key_file.path}: {exc}") from exc
        logger.debug("removed key file %s", key_file.path)


def resolve_key_dir(
    location: str,
    password: str | None = None,
    *,
    paths: KeystorePaths | None = None,
) -> KeyDirectory:
    """Resolve ``geth``, ``geth-test``, ``parity[-<chain>]`` or a path to a key directory.

    The directory is created if absent.
    """
    path = locate(location, paths)
    logger.debug("resolved keystore %r to %s", location, path)
    return KeyDirectory.create(path, password)
