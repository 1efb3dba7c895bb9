"""Configuration for XFS project quota administration."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

from quota_common.env_utils import (
    ENV_FILE_PROVISIONER,
    get_choice_env,
    get_float_env,
    get_optional_env,
    require_env,
)
from xfs_project_quota.services.xfs_quota import (
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    DEFAULT_QUOTA_BINARY,
)

MODE_REQUIRED = "required"
MODE_AUTO = "auto"
MODE_DISABLED = "disabled"
QUOTA_MODES = (MODE_REQUIRED, MODE_AUTO, MODE_DISABLED)


@dataclass(frozen=True)
class QuotaConfig:
    """Configuration values for the quota backend."""

    xfs_path: Path
    mode: str
    binary: str
    command_timeout_seconds: float
    log_level: str


def build_quota_config() -> QuotaConfig:
    """Build and validate the quota configuration from environment variables."""
    xfs_path = require_env(
        "XFS_QUOTA_PATH",
        env_file=ENV_FILE_PROVISIONER,
        hint="Expected the XFS mountpoint holding provisioned directories (e.g., /mnt/xfs).",
    )
    mode = get_choice_env(
        "XFS_QUOTA_MODE",
        env_file=ENV_FILE_PROVISIONER,
        choices=QUOTA_MODES,
        default=MODE_AUTO,
    )
    binary = get_optional_env("XFS_QUOTA_BINARY", env_file=ENV_FILE_PROVISIONER)
    timeout_seconds = get_float_env(
        "XFS_QUOTA_COMMAND_TIMEOUT_SECONDS",
        env_file=ENV_FILE_PROVISIONER,
        default=DEFAULT_COMMAND_TIMEOUT_SECONDS,
    )
    log_level = get_optional_env("XFS_QUOTA_LOG_LEVEL", env_file=ENV_FILE_PROVISIONER)

    if not Path(xfs_path).is_absolute():
        raise ValueError("XFS_QUOTA_PATH must be an absolute path.")
    if not math.isfinite(timeout_seconds) or timeout_seconds <= 0:
        raise ValueError("XFS_QUOTA_COMMAND_TIMEOUT_SECONDS must be a positive finite number.")

    return QuotaConfig(
        xfs_path=Path(xfs_path),
        mode=mode,
        binary=(binary or DEFAULT_QUOTA_BINARY).strip(),
        command_timeout_seconds=timeout_seconds,
        log_level=(log_level or "INFO").strip().upper(),
    )
