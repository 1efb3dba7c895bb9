"""Per-directory XFS project quotas for provisioned volumes.

An :class:`XfsQuotaer` owns one XFS root. It hands out project ids, records
``id:directory:bhard`` blocks in ``<root>/projects`` and drives ``xfs_quota``.
On construction it replays the projects file so that limits survive a
restart of the provisioner. :class:`DummyQuotaer` offers the same calls
without doing anything and is used when the root cannot enforce quotas.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

from xfs_project_quota.config import MODE_AUTO, MODE_DISABLED, QuotaConfig
from xfs_project_quota.services.errors import (
    PersistenceError,
    QuotaError,
    StateError,
    ValidationError,
)
from xfs_project_quota.services.filesystem import validate_xfs_path
from xfs_project_quota.services.project_ids import ProjectIdAllocator
from xfs_project_quota.services.projects_file import ProjectRecord, ProjectsFile
from xfs_project_quota.services.xfs_quota import (
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    DEFAULT_QUOTA_BINARY,
    QuotaEnforcer,
    XfsQuotaCommand,
)
from xfs_project_quota.strings import errors

logger = logging.getLogger(__name__)


class Quotaer(Protocol):
    def add_project(self, directory: str, bhard: str) -> Tuple[str, int]: ...

    def remove_project(self, block: str, project_id: int) -> None: ...

    def set_quota(self, project_id: int, directory: str, bhard: str) -> None: ...

    def unset_quota(self) -> None: ...


def _validate_project_input(directory: str, bhard: str) -> None:
    # xfs_quota splits its -c argument on whitespace.
    if not directory or any(char.isspace() for char in directory):
        raise ValidationError(errors.invalid_directory(directory))
    if not bhard or any(char.isspace() for char in bhard) or ":" in bhard:
        raise ValidationError(errors.invalid_bhard(bhard))


def _directory_is_gone(directory: str) -> bool:
    """True only when stat reports the directory missing (ENOENT)."""
    try:
        os.stat(directory)
    except FileNotFoundError:
        return True
    except OSError as exc:
        logger.warning(
            "Cannot stat %s (%s); keeping its project record", directory, exc
        )
    return False


class XfsQuotaer:
    """Quota backend for a single XFS root mounted with project quotas.

    The allocator and the projects file each have their own lock. Operations
    that need both take the allocator's first and release it before touching
    the file, so the two locks are never held together.
    """

    def __init__(
        self,
        xfs_path: Path,
        enforcer: QuotaEnforcer,
        *,
        projects_file: Optional[ProjectsFile] = None,
        allocator: Optional[ProjectIdAllocator] = None,
    ) -> None:
        self.xfs_path = Path(xfs_path)
        self.enforcer = enforcer
        self.projects_file = projects_file or ProjectsFile.under(self.xfs_path)
        self.project_ids = allocator or ProjectIdAllocator()

        self.projects_file.ensure_exists()
        self._seed_project_ids()
        try:
            self._restore_quotas()
        except QuotaError as exc:
            raise QuotaError(
                errors.restore_from_file_failed(self.projects_file.path, exc)
            ) from exc

    def _seed_project_ids(self) -> None:
        # Ids found here stay reserved even if full parsing fails below.
        try:
            existing = self.projects_file.scan()
        except PersistenceError:
            logger.error(
                "Error while populating project ids from %s; project ids may be "
                "reused when setting quotas later",
                self.projects_file.path,
                exc_info=True,
            )
            return
        for project_id in existing:
            self.project_ids.register(project_id)

    def _restore_quotas(self) -> None:
        records = self.projects_file.load_records()
        logger.info(
            "Restoring %d xfs project quota(s) from %s",
            len(records),
            self.projects_file.path,
        )
        stale = [_directory_is_gone(record.directory) for _, record in records]
        live_ids = {
            record.project_id
            for (_, record), is_stale in zip(records, stale)
            if not is_stale
        }
        restored = 0
        for (block, record), is_stale in zip(records, stale):
            if is_stale:
                # Setting a limit for a missing directory would fail.
                logger.info(
                    "Directory %s of xfs project %s no longer exists; removing its record",
                    record.directory,
                    record.project_id,
                )
                try:
                    if record.project_id in live_ids:
                        # Another surviving block still uses this id.
                        self.projects_file.remove(block)
                    else:
                        self.remove_project(block, record.project_id)
                except PersistenceError:
                    logger.error(
                        "Could not remove stale block for xfs project %s",
                        record.project_id,
                        exc_info=True,
                    )
                continue

            self.project_ids.register(record.project_id)
            try:
                self.set_quota(record.project_id, record.directory, record.bhard)
            except QuotaError as exc:
                raise QuotaError(errors.restore_failed(record.directory, exc)) from exc
            restored += 1
        logger.info("Restored %d xfs project quota(s)", restored)

    def add_project(self, directory: str, bhard: str) -> Tuple[str, int]:
        """Register ``directory`` as a new project and associate it.

        Returns the block text (needed by :meth:`remove_project`) and the
        project id. On failure nothing is left allocated or recorded.
        """
        _validate_project_input(directory, bhard)
        project_id = self.project_ids.allocate()
        record = ProjectRecord(project_id=project_id, directory=directory, bhard=bhard)

        try:
            block = self.projects_file.append(record)
        except PersistenceError:
            self.project_ids.release(project_id)
            raise

        try:
            self.enforcer.associate(directory, project_id)
        except Exception:
            self.project_ids.release(project_id)
            try:
                self.projects_file.remove(block)
            except PersistenceError:
                logger.error(
                    "Could not roll back block %r after failed association",
                    block,
                    exc_info=True,
                )
            raise

        logger.info("Added xfs project %s for %s", project_id, directory)
        return block, project_id

    def remove_project(self, block: str, project_id: int) -> None:
        self.project_ids.release(project_id)
        self.projects_file.remove(block)
        logger.info("Removed xfs project %s", project_id)

    def set_quota(self, project_id: int, directory: str, bhard: str) -> None:
        if not self.project_ids.is_allocated(project_id):
            raise StateError(errors.project_not_added(project_id), project_id)
        self.enforcer.limit(project_id, directory, bhard)

    def unset_quota(self) -> None:
        """No-op: limits go away together with the project via :meth:`remove_project`."""
        return None

    def projects(self) -> List[ProjectRecord]:
        return [record for _, record in self.projects_file.load_records()]


class DummyQuotaer:
    """Quotaer for roots without project quota support; every call succeeds."""

    def add_project(self, directory: str, bhard: str) -> Tuple[str, int]:
        return "", 0

    def remove_project(self, block: str, project_id: int) -> None:
        return None

    def set_quota(self, project_id: int, directory: str, bhard: str) -> None:
        return None

    def unset_quota(self) -> None:
        return None

    def projects(self) -> List[ProjectRecord]:
        return []


def new_xfs_quotaer(
    xfs_path: Path,
    *,
    binary: str = DEFAULT_QUOTA_BINARY,
    timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS,
) -> XfsQuotaer:
    """Validate ``xfs_path`` and build a quotaer, restoring recorded limits."""
    validate_xfs_path(xfs_path, binary=binary)
    enforcer = XfsQuotaCommand(xfs_path, binary=binary, timeout_seconds=timeout_seconds)
    return XfsQuotaer(xfs_path, enforcer)


def build_quotaer(config: QuotaConfig):
    """Return the quotaer selected by ``config.mode``."""
    if config.mode == MODE_DISABLED:
        logger.info("XFS project quotas disabled; using dummy quotaer")
        return DummyQuotaer()
    try:
        return new_xfs_quotaer(
            config.xfs_path,
            binary=config.binary,
            timeout_seconds=config.command_timeout_seconds,
        )
    except ValidationError as exc:
        if config.mode != MODE_AUTO:
            raise
        logger.warning(
            "XFS project quotas unavailable for %s (%s); using dummy quotaer",
            config.xfs_path,
            exc,
        )
        return DummyQuotaer()
