"""Durable ``projects`` file mapping XFS project ids to directories and limits.

Each project is stored as a block ``"\\n<id>:<directory>:<bhard>\\n"``. The
block text returned by :meth:`ProjectsFile.append` is the token used to
remove the project again, so removal is an exact substring match rather than
a line lookup.
"""

from __future__ import annotations

import logging
import os
import re
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Set, Tuple

from xfs_project_quota.services.errors import PersistenceError
from xfs_project_quota.services.project_ids import is_valid_project_id
from xfs_project_quota.strings import errors

logger = logging.getLogger(__name__)

PROJECTS_FILE_NAME = "projects"

_SCAN_PATTERN = re.compile(r"^([0-9]+):/.+$", re.MULTILINE)
_BLOCK_PATTERN = re.compile(r"\n^([0-9]+):(.+):(.+)$\n", re.MULTILINE)


@dataclass(frozen=True)
class ProjectRecord:
    """One project as stored in the projects file."""

    project_id: int
    directory: str
    bhard: str


def format_block(record: ProjectRecord) -> str:
    return f"\n{record.project_id}:{record.directory}:{record.bhard}\n"


def parse_block(block: str) -> ProjectRecord:
    """Parse a single block produced by :func:`format_block`."""
    match = _BLOCK_PATTERN.fullmatch(block)
    if match is None:
        raise ValueError(f"not a projects file block: {block!r}")
    return ProjectRecord(
        project_id=int(match.group(1)),
        directory=match.group(2),
        bhard=match.group(3),
    )


class ProjectsFile:
    """Append/remove log of project blocks backed by a single text file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    @classmethod
    def under(cls, xfs_path: Path) -> "ProjectsFile":
        return cls(Path(xfs_path) / PROJECTS_FILE_NAME)

    def ensure_exists(self) -> bool:
        """Create an empty projects file if missing; return True if created."""
        with self._lock:
            if self.path.exists():
                return False
            try:
                self.path.touch()
            except OSError as exc:
                raise PersistenceError(
                    errors.projects_file_create_failed(self.path, exc), str(self.path)
                ) from exc
        logger.info("Created xfs projects file %s", self.path)
        return True

    def append(self, record: ProjectRecord) -> str:
        """Append ``record`` and return its block text."""
        block = format_block(record)
        with self._lock:
            content = self._read()
            try:
                self._write(content + block)
            except PersistenceError as exc:
                raise PersistenceError(
                    errors.project_block_add_failed(block, self.path, exc),
                    str(self.path),
                ) from exc
        return block

    def remove(self, block: str) -> bool:
        """Remove the first occurrence of ``block``; return False if absent."""
        with self._lock:
            content = self._read()
            if block not in content:
                logger.warning(
                    "Project block %r not present in %s; nothing to remove",
                    block,
                    self.path,
                )
                return False
            self._write(content.replace(block, "", 1))
        return True

    def scan(self) -> Set[int]:
        """Return ids of lines shaped like ``<id>:/<path>``.

        Only used to pre-seed the allocator, so the match is deliberately loose
        and runs before any block parsing.
        """
        content = self._read()
        project_ids: Set[int] = set()
        for match in _SCAN_PATTERN.finditer(content):
            project_id = int(match.group(1))
            if is_valid_project_id(project_id):
                project_ids.add(project_id)
        return project_ids

    def load_records(self) -> List[Tuple[str, ProjectRecord]]:
        """Return ``(block, record)`` pairs in file order."""
        content = self._read()
        records: List[Tuple[str, ProjectRecord]] = []
        for match in _BLOCK_PATTERN.finditer(content):
            project_id = int(match.group(1))
            if not is_valid_project_id(project_id):
                logger.warning(
                    "Skipping block with out-of-range project id %s in %s",
                    project_id,
                    self.path,
                )
                continue
            record = ProjectRecord(
                project_id=project_id,
                directory=match.group(2),
                bhard=match.group(3),
            )
            records.append((match.group(0), record))
        return records

    def _read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(
                errors.projects_file_read_failed(self.path, exc), str(self.path)
            ) from exc

    def _write(self, content: str) -> None:
        # os.replace is atomic on POSIX, so readers never see a partial block.
        random_suffix = uuid.uuid4().hex[:8]
        temp_path = self.path.with_name(f".{self.path.name}.tmp_{random_suffix}")
        try:
            temp_path.write_text(content, encoding="utf-8")
            if self.path.exists():
                os.chmod(temp_path, self.path.stat().st_mode & 0o7777)
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise PersistenceError(
                errors.projects_file_write_failed(self.path, exc), str(self.path)
            ) from exc
        finally:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
