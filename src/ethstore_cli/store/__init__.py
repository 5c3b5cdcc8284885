"""On-disk secret store."""

from ethstore_cli.store.directory import KeyDirectory, KeyFile, KeystorePaths, resolve_key_dir
from ethstore_cli.store.secret_store import SecretStore, import_accounts

__all__ = [
    "KeyDirectory",
    "KeyFile",
    "KeystorePaths",
    "SecretStore",
    "import_accounts",
    "resolve_key_dir",
]
