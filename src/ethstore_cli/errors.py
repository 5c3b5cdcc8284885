"""Error types for the key store and its command layer."""

from __future__ import annotations


class EthstoreError(RuntimeError):
    """Base error."""


class ArgumentParseError(EthstoreError):
    """Command line could not be parsed."""


class PasswordFileError(EthstoreError):
    """Password file could not be opened or read."""

    def __init__(self, message: str, *, path: str, reason: str) -> None:
        super().__init__(message)
        self.path = path
        self.reason = reason


class StoreError(EthstoreError):
    """Secret store operation failed."""


class InvalidAddressError(StoreError, ValueError):
    def __init__(self, message: str = "Invalid address") -> None:
        super().__init__(message)


class InvalidSecretError(StoreError, ValueError):
    def __init__(self, message: str = "Invalid secret") -> None:
        super().__init__(message)


class InvalidMessageError(StoreError, ValueError):
    def __init__(self, message: str = "Invalid message") -> None:
        super().__init__(message)


class InvalidAccountError(StoreError):
    def __init__(self, message: str = "Invalid account") -> None:
        super().__init__(message)


class AccountExistsError(StoreError):
    def __init__(self, message: str = "Account already exists") -> None:
        super().__init__(message)


class InvalidPasswordError(StoreError):
    def __init__(self, message: str = "Invalid password") -> None:
        super().__init__(message)


class InvalidKeyFileError(StoreError):
    """Key or wallet file is malformed."""


class KeyDirectoryError(StoreError):
    """Key directory could not be created or written."""


class InvalidVaultNameError(StoreError):
    def __init__(self, message: str = "Invalid vault name") -> None:
        super().__init__(message)


class VaultNotFoundError(StoreError):
    def __init__(self, message: str = "Vault not found") -> None:
        super().__init__(message)


class VaultExistsError(StoreError):
    def __init__(self, message: str = "Vault already exists") -> None:
        super().__init__(message)


class VaultNotOpenedError(StoreError):
    def __init__(self, message: str = "Vault is not opened") -> None:
        super().__init__(message)
