"""Thin wrapper around the ``xfs_quota`` administrative command."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Protocol

from xfs_project_quota.services.errors import EnforcementError
from xfs_project_quota.strings import errors

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_BINARY = "xfs_quota"
DEFAULT_COMMAND_TIMEOUT_SECONDS = 30.0


class QuotaEnforcer(Protocol):
    """Operations that change live quota state on the filesystem.

    Both calls must be safe to repeat with the same arguments; restore relies
    on re-issuing them after every restart.
    """

    def associate(self, directory: str, project_id: int) -> None: ...

    def limit(self, project_id: int, directory: str, bhard: str) -> None: ...


class XfsQuotaCommand:
    """:class:`QuotaEnforcer` that shells out to ``xfs_quota -x``."""

    def __init__(
        self,
        xfs_path: Path,
        *,
        binary: str = DEFAULT_QUOTA_BINARY,
        timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS,
    ) -> None:
        self.xfs_path = Path(xfs_path)
        self.binary = binary
        self.timeout_seconds = timeout_seconds

    def associate(self, directory: str, project_id: int) -> None:
        """Bind ``directory`` to ``project_id`` (``project -s``)."""
        self._run(f"project -s -p {directory} {project_id}")
        logger.info("Associated %s with xfs project %s", directory, project_id)

    def limit(self, project_id: int, directory: str, bhard: str) -> None:
        """Set the hard block limit of ``project_id``."""
        self._run(f"limit -p bhard={bhard} {project_id}")
        logger.info(
            "Set bhard=%s for xfs project %s (%s)", bhard, project_id, directory
        )

    def build_command(self, subcommand: str) -> List[str]:
        return [self.binary, "-x", "-c", subcommand, str(self.xfs_path)]

    def _run(self, subcommand: str) -> None:
        cmd = self.build_command(subcommand)
        logger.debug("Running %s", cmd)
        try:
            completed = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            raise EnforcementError(
                errors.quota_command_unavailable(self.binary), cmd
            ) from exc
        except subprocess.TimeoutExpired as exc:
            logger.error(
                "xfs_quota timed out after %.1fs: %s", self.timeout_seconds, cmd
            )
            raise EnforcementError(
                errors.quota_command_timeout(subcommand, self.timeout_seconds), cmd
            ) from exc
        except OSError as exc:
            raise EnforcementError(
                errors.quota_command_os_error(self.binary, exc), cmd
            ) from exc

        if completed.returncode != 0:
            output = ((completed.stdout or "") + (completed.stderr or "")).strip()
            raise EnforcementError(
                errors.quota_command_failed(subcommand, completed.returncode, output),
                cmd,
                output,
            )
