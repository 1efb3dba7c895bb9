"""Checks that a path is an XFS mount with project quotas enabled."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from xfs_project_quota.services.errors import ValidationError
from xfs_project_quota.strings import errors

logger = logging.getLogger(__name__)

MOUNTS_PATH = Path("/proc/mounts")
XFS_FS_TYPE = "xfs"
PROJECT_QUOTA_OPTIONS = ("pquota", "prjquota")
STAT_TIMEOUT_SECONDS = 8.0


@dataclass(frozen=True)
class MountEntry:
    """One line of the mount table."""

    source: str
    mount_point: str
    fs_type: str
    options: Tuple[str, ...]


def _unescape_mount_field(value: str) -> str:
    # /proc/mounts encodes whitespace and backslashes as octal escapes.
    return (
        value.replace("\\040", " ")
        .replace("\\011", "\t")
        .replace("\\012", "\n")
        .replace("\\134", "\\")
    )


def read_mount_entries(mounts_path: Path = MOUNTS_PATH) -> List[MountEntry]:
    try:
        text = Path(mounts_path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(errors.mount_table_unreadable(mounts_path, exc)) from exc

    entries: List[MountEntry] = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 4:
            continue
        entries.append(
            MountEntry(
                source=_unescape_mount_field(parts[0]),
                mount_point=_unescape_mount_field(parts[1]),
                fs_type=parts[2],
                options=tuple(option for option in parts[3].split(",") if option),
            )
        )
    return entries


def find_mount_entry(
    mount_point: str, fs_type: str, mounts_path: Path = MOUNTS_PATH
) -> MountEntry:
    """Return the entry mounted exactly at ``mount_point`` with ``fs_type``."""
    for entry in read_mount_entries(mounts_path):
        if entry.mount_point == mount_point and entry.fs_type == fs_type:
            return entry
    raise ValidationError(errors.mount_entry_not_found(mount_point, fs_type))


def detect_filesystem(path: Path, mounts_path: Path = MOUNTS_PATH) -> Optional[MountEntry]:
    """Return the mount entry containing ``path`` (longest mountpoint wins)."""
    resolved = Path(path).resolve()
    best_match: Optional[MountEntry] = None
    for entry in read_mount_entries(mounts_path):
        try:
            resolved.relative_to(Path(entry.mount_point))
        except ValueError:
            continue
        if best_match is None or len(entry.mount_point) > len(best_match.mount_point):
            best_match = entry
    return best_match


def filesystem_type(path: Path) -> str:
    """Return the filesystem type name reported by ``stat -f -c %T``."""
    cmd = ["stat", "-f", "-c", "%T", str(path)]
    try:
        completed = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
            timeout=STAT_TIMEOUT_SECONDS,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
        raise ValidationError(errors.xfs_type_check_failed(path, exc)) from exc
    if completed.returncode != 0:
        raise ValidationError(
            errors.xfs_type_check_failed(path, completed.stderr.strip())
        )
    return completed.stdout.strip()


def has_project_quota(entry: MountEntry) -> bool:
    return any(option in PROJECT_QUOTA_OPTIONS for option in entry.options)


def validate_xfs_path(
    xfs_path: Path,
    *,
    binary: str,
    mounts_path: Path = MOUNTS_PATH,
) -> MountEntry:
    """Raise :class:`ValidationError` unless project quotas can be managed."""
    xfs_path = Path(xfs_path)
    if not xfs_path.exists():
        raise ValidationError(errors.xfs_path_missing(xfs_path))

    fs_type = filesystem_type(xfs_path)
    if fs_type != XFS_FS_TYPE:
        raise ValidationError(errors.not_xfs_filesystem(xfs_path, fs_type))

    entry = find_mount_entry(os.path.normpath(str(xfs_path)), XFS_FS_TYPE, mounts_path)
    if not has_project_quota(entry):
        raise ValidationError(errors.project_quota_not_enabled(xfs_path))

    if shutil.which(binary) is None:
        raise ValidationError(errors.quota_binary_missing(binary))

    logger.debug(
        "Validated xfs path %s (source=%s, options=%s)",
        xfs_path,
        entry.source,
        ",".join(entry.options),
    )
    return entry
