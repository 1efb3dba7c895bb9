"""Root conftest: shared fixtures that keep tests away from the real xfs_quota."""
from pathlib import Path

import pytest


class RecordingEnforcer:
    """Records associate/limit calls; set ``fail_on`` to make one of them fail."""

    def __init__(self):
        self.calls = []
        self.fail_on = set()

    def associate(self, directory, project_id):
        self.calls.append(("associate", directory, project_id))
        self._maybe_fail("associate")

    def limit(self, project_id, directory, bhard):
        self.calls.append(("limit", project_id, directory, bhard))
        self._maybe_fail("limit")

    def limits(self):
        return [call for call in self.calls if call[0] == "limit"]

    def _maybe_fail(self, operation):
        if operation in self.fail_on:
            from xfs_project_quota.services.errors import EnforcementError

            raise EnforcementError(
                f"xfs_quota failed: {operation}",
                ["xfs_quota", "-x", "-c", operation],
                "permission denied",
            )


@pytest.fixture
def recording_enforcer():
    return RecordingEnforcer()


@pytest.fixture
def xfs_root(tmp_path) -> Path:
    root = tmp_path / "xfs"
    root.mkdir()
    return root
