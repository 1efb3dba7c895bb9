"""In-memory pool of XFS project ids."""

from __future__ import annotations

import logging
import random
import threading
from typing import FrozenSet, Iterable, Set

from xfs_project_quota.services.errors import QuotaError
from xfs_project_quota.strings import errors

logger = logging.getLogger(__name__)

MIN_PROJECT_ID = 1
MAX_PROJECT_ID = 65535


def is_valid_project_id(project_id: int) -> bool:
    return MIN_PROJECT_ID <= project_id <= MAX_PROJECT_ID


class ProjectIdAllocator:
    """Hands out unique project ids and takes them back.

    The allocator knows nothing about directories or limits. Every read and
    write of the id set happens under ``self._lock``.
    """

    def __init__(self, existing: Iterable[int] = ()) -> None:
        self._lock = threading.Lock()
        self._ids: Set[int] = set()
        for project_id in existing:
            self.register(project_id)

    def allocate(self) -> int:
        """Reserve and return an id that is not currently allocated."""
        with self._lock:
            capacity = MAX_PROJECT_ID - MIN_PROJECT_ID + 1
            if len(self._ids) >= capacity:
                raise QuotaError(errors.project_ids_exhausted(MAX_PROJECT_ID))
            # Random probing stays cheap until the pool is nearly full.
            for _ in range(64):
                candidate = random.randint(MIN_PROJECT_ID, MAX_PROJECT_ID)
                if candidate not in self._ids:
                    break
            else:
                candidate = next(
                    value
                    for value in range(MIN_PROJECT_ID, MAX_PROJECT_ID + 1)
                    if value not in self._ids
                )
            self._ids.add(candidate)
        logger.debug("Allocated xfs project id %s", candidate)
        return candidate

    def register(self, project_id: int) -> None:
        """Mark an id taken from the projects file as allocated."""
        if not is_valid_project_id(project_id):
            raise ValueError(
                f"project id {project_id} outside {MIN_PROJECT_ID}..{MAX_PROJECT_ID}"
            )
        with self._lock:
            self._ids.add(project_id)

    def release(self, project_id: int) -> None:
        with self._lock:
            self._ids.discard(project_id)
        logger.debug("Released xfs project id %s", project_id)

    def is_allocated(self, project_id: int) -> bool:
        with self._lock:
            return project_id in self._ids

    def allocated(self) -> FrozenSet[int]:
        with self._lock:
            return frozenset(self._ids)

    def __contains__(self, project_id: object) -> bool:
        return isinstance(project_id, int) and self.is_allocated(project_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)
