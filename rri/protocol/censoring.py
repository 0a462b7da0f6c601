"""Masking of sensitive values in raw protocol text meant for display."""

from __future__ import annotations

from .constants import CENSOR_MASK

PASSWORD_PREFIX = "password:"


def _censor_line(line: str) -> str:
    if not line.startswith(PASSWORD_PREFIX):
        return line
    if not line[len(PASSWORD_PREFIX):].strip():
        return line
    return f"{PASSWORD_PREFIX} {CENSOR_MASK}"


def censor(raw: str) -> str:
    """Return ``raw`` with the value of every ``password:`` line masked."""
    return "\n".join(_censor_line(line) for line in raw.split("\n"))


__all__ = ["censor"]
