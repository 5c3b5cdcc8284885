"""Password file loading."""

from __future__ import annotations

from pathlib import Path

from ethstore_cli.errors import PasswordFileError


def load_password(path: str | Path) -> str:
    """Read a password file and drop its final character.

    The final character is assumed to be the file's trailing newline and is
    removed without checking. Nothing else is stripped.
    """
    try:
        handle = open(path, encoding="utf-8", newline="")
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise PasswordFileError(
            f"Error opening password file '{path}': {reason}", path=str(path), reason=reason
        ) from exc

    with handle:
        try:
            password = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            reason = str(exc)
            raise PasswordFileError(
                f"Error reading password file '{path}': {reason}", path=str(path), reason=reason
            ) from exc

    return password[:-1]


def split_candidates(text: str) -> list[str]:
    """Split a password list into lines, dropping a trailing empty line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
