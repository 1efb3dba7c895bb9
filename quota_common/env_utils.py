"""Shared environment variable helpers for the quota provisioner."""

from __future__ import annotations

import os
from typing import Iterable

ENV_FILE_PROVISIONER = "env/provisioner.env"


def _env_reference(env_file: str) -> str:
    return f"Set it in {env_file} or export it before starting the provisioner."


def _missing_env_message(name: str, env_file: str, *, hint: str | None = None) -> str:
    message = f"Missing required environment variable: {name}. "
    message += _env_reference(env_file)
    if hint:
        message = f"{message} {hint}"
    return message


def _invalid_env_message(name: str, value: str, env_file: str, *, expected: str) -> str:
    return (
        f"Invalid value for {name} in {env_file}: {value!r}. Expected {expected}. "
        f"{_env_reference(env_file)}"
    )


def get_optional_env(
    name: str,
    *,
    env_file: str,
    allow_empty: bool = False,
) -> str | None:
    """Return an environment variable or None when unset."""
    value = os.environ.get(name)
    if value is None:
        return None
    if not allow_empty and str(value).strip() == "":
        return None
    return value


def require_env(
    name: str,
    *,
    env_file: str,
    allow_empty: bool = False,
    hint: str | None = None,
) -> str:
    """Return a required environment variable or raise."""
    value = os.environ.get(name)
    if value is None or (not allow_empty and str(value).strip() == ""):
        raise RuntimeError(_missing_env_message(name, env_file, hint=hint))
    return value


def get_float_env(name: str, *, env_file: str, default: float) -> float:
    """Return a float environment variable, falling back to ``default`` when unset."""
    raw = get_optional_env(name, env_file=env_file)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            _invalid_env_message(name, raw, env_file, expected="a number")
        ) from exc


def get_choice_env(
    name: str,
    *,
    env_file: str,
    choices: Iterable[str],
    default: str,
) -> str:
    """Return a lower-cased environment variable restricted to ``choices``."""
    allowed = tuple(choices)
    raw = get_optional_env(name, env_file=env_file)
    if raw is None:
        return default
    normalized = str(raw).strip().lower()
    if normalized not in allowed:
        raise ValueError(
            _invalid_env_message(
                name,
                raw,
                env_file,
                expected="one of " + ", ".join(allowed),
            )
        )
    return normalized
