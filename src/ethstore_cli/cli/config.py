"""Configuration helpers for the ethstore CLI."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from ethstore_cli.store.directory import KeystorePaths
from ethstore_cli.store.secret_store import DEFAULT_KDF_ITERATIONS

DEFAULT_CONFIG_PATH = Path.home() / ".ethstore" / "config.toml"
DEFAULT_DIR = "parity"
DEFAULT_SRC = "geth"
DIR_ENV_VAR = "ETHSTORE_DIR"
DATA_DIR_ENV_VAR = "ETHSTORE_DATA_DIR"
GETH_DIR_ENV_VAR = "ETHSTORE_GETH_DIR"
LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class CLIConfig:
    default_dir: str = DEFAULT_DIR
    default_src: str = DEFAULT_SRC
    data_dir: str | None = None
    geth_dir: str | None = None
    kdf_iterations: int = DEFAULT_KDF_ITERATIONS
    crack_workers: int | None = None
    log_level: str = "warning"

    def keystore_paths(self) -> KeystorePaths:
        defaults = KeystorePaths.default()
        return KeystorePaths(
            data_dir=Path(self.data_dir) if self.data_dir else defaults.data_dir,
            geth_dir=Path(self.geth_dir) if self.geth_dir else defaults.geth_dir,
        )


class ConfigError(ValueError):
    """Raised when CLI config is invalid."""


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"failed to read config {path}: {exc}") from exc


def _to_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a positive integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a positive integer") from exc
    if parsed < 1:
        raise ConfigError(f"{field_name} must be a positive integer")
    return parsed


def _optional_path(source: dict[str, Any], field_name: str, env_var: str) -> str | None:
    env_value = os.getenv(env_var)
    if env_value and env_value.strip():
        return env_value.strip()
    raw = source.get(field_name)
    if raw is None:
        return None
    value = str(raw).strip()
    return str(Path(value).expanduser()) if value else None


def load_cli_config(path: str | Path | None = None) -> CLIConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    parsed: dict[str, Any] = _load_toml(config_path) if config_path.exists() else {}

    section = parsed.get("ethstore")
    if isinstance(section, dict):
        source = section
    elif section is None:
        source = parsed
    else:
        raise ConfigError("[ethstore] must be a table")

    env_dir = os.getenv(DIR_ENV_VAR)
    configured_dir = str(source.get("default_dir", DEFAULT_DIR)).strip()
    default_dir = env_dir.strip() if env_dir and env_dir.strip() else configured_dir
    if not default_dir:
        raise ConfigError("default_dir must not be empty")

    default_src = str(source.get("default_src", DEFAULT_SRC)).strip()
    if not default_src:
        raise ConfigError("default_src must not be empty")

    kdf_iterations = _to_positive_int(
        source.get("kdf_iterations", DEFAULT_KDF_ITERATIONS), "kdf_iterations"
    )

    crack_workers_raw = source.get("crack_workers")
    crack_workers = (
        None if crack_workers_raw is None else _to_positive_int(crack_workers_raw, "crack_workers")
    )

    log_level = str(source.get("log_level", "warning")).strip().lower()
    if log_level not in LOG_LEVELS:
        raise ConfigError("log_level must be one of: debug, info, warning, error")

    return CLIConfig(
        default_dir=default_dir,
        default_src=default_src,
        data_dir=_optional_path(source, "data_dir", DATA_DIR_ENV_VAR),
        geth_dir=_optional_path(source, "geth_dir", GETH_DIR_ENV_VAR),
        kdf_iterations=kdf_iterations,
        crack_workers=crack_workers,
        log_level=log_level,
    )
