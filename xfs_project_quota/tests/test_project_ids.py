from __future__ import annotations

import threading

import pytest

from xfs_project_quota.services import project_ids
from xfs_project_quota.services.errors import QuotaError
from xfs_project_quota.services.project_ids import (
    MAX_PROJECT_ID,
    MIN_PROJECT_ID,
    ProjectIdAllocator,
)


def test_allocate_returns_unallocated_id_in_range() -> None:
    allocator = ProjectIdAllocator(existing=[1, 2, 3])

    project_id = allocator.allocate()

    assert MIN_PROJECT_ID <= project_id <= MAX_PROJECT_ID
    assert project_id not in {1, 2, 3}
    assert allocator.is_allocated(project_id)
    assert len(allocator) == 4


def test_release_makes_id_available_again() -> None:
    allocator = ProjectIdAllocator()
    project_id = allocator.allocate()

    allocator.release(project_id)

    assert not allocator.is_allocated(project_id)
    assert project_id not in allocator
    assert len(allocator) == 0


def test_release_of_unknown_id_is_ignored() -> None:
    allocator = ProjectIdAllocator(existing=[7])

    allocator.release(42)

    assert allocator.allocated() == frozenset({7})


def test_register_rejects_out_of_range_ids() -> None:
    allocator = ProjectIdAllocator()

    with pytest.raises(ValueError):
        allocator.register(0)
    with pytest.raises(ValueError):
        allocator.register(MAX_PROJECT_ID + 1)


def test_allocate_falls_back_to_scan_when_random_draws_collide(monkeypatch) -> None:
    allocator = ProjectIdAllocator(existing=[5])
    monkeypatch.setattr(project_ids.random, "randint", lambda _low, _high: 5)

    assert allocator.allocate() == 1
    assert allocator.allocate() == 2


def test_allocate_raises_when_id_space_is_exhausted() -> None:
    allocator = ProjectIdAllocator(existing=range(MIN_PROJECT_ID, MAX_PROJECT_ID + 1))

    with pytest.raises(QuotaError, match="all 65535 xfs project ids are allocated"):
        allocator.allocate()


def test_concurrent_allocations_never_share_an_id() -> None:
    allocator = ProjectIdAllocator()
    results = []
    results_lock = threading.Lock()

    def _worker() -> None:
        for _ in range(50):
            project_id = allocator.allocate()
            with results_lock:
                results.append(project_id)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 400
    assert len(set(results)) == 400
    assert len(allocator) == 400
