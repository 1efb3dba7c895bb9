"""Tests for the boot-time quota restore tool."""

from __future__ import annotations

import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tools import restore_project_quotas


class RestoreProjectQuotasToolTests(unittest.TestCase):
    """Coverage for the restore entrypoint."""

    def _run_main(self, env: dict) -> tuple[int, str]:
        output = io.StringIO()
        with mock.patch.dict(os.environ, env, clear=True), mock.patch.object(
            restore_project_quotas, "configure_quota_logging"
        ), contextlib.redirect_stdout(output):
            code = restore_project_quotas.main()
        return code, output.getvalue()

    def test_missing_configuration_returns_error(self) -> None:
        code, output = self._run_main({})
        self.assertEqual(code, 1)
        self.assertIn("XFS_QUOTA_PATH", output)

    def test_disabled_mode_reports_dummy_quotaer(self) -> None:
        code, output = self._run_main(
            {"XFS_QUOTA_PATH": "/mnt/xfs", "XFS_QUOTA_MODE": "disabled"}
        )
        self.assertEqual(code, 0)
        self.assertIn("not enforced", output)

    def test_restore_reports_active_projects(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            volume = root / "vol1"
            volume.mkdir()
            (root / "projects").write_text(
                f"\n7:{volume}:5Gi\n\n8:{root / 'gone'}:1Gi\n", encoding="utf-8"
            )
            completed = mock.Mock(returncode=0, stdout="", stderr="")
            with mock.patch(
                "xfs_project_quota.services.quotaer.validate_xfs_path"
            ), mock.patch(
                "xfs_project_quota.services.xfs_quota.subprocess.run",
                return_value=completed,
            ) as run:
                code, output = self._run_main(
                    {"XFS_QUOTA_PATH": temp_dir, "XFS_QUOTA_MODE": "required"}
                )

            self.assertEqual(code, 0)
            self.assertIn("1 active project(s)", output)
            self.assertEqual(run.call_count, 1)
            self.assertEqual(run.call_args.args[0][3], "limit -p bhard=5Gi 7")

    def test_restore_failure_returns_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            volume = root / "vol1"
            volume.mkdir()
            (root / "projects").write_text(f"\n7:{volume}:5Gi\n", encoding="utf-8")
            failed = mock.Mock(returncode=1, stdout="", stderr="permission denied")
            with mock.patch(
                "xfs_project_quota.services.quotaer.validate_xfs_path"
            ), mock.patch(
                "xfs_project_quota.services.xfs_quota.subprocess.run",
                return_value=failed,
            ):
                code, output = self._run_main(
                    {"XFS_QUOTA_PATH": temp_dir, "XFS_QUOTA_MODE": "required"}
                )

            self.assertEqual(code, 1)
            self.assertIn("ERROR:", output)
            self.assertIn("permission denied", output)


if __name__ == "__main__":
    unittest.main()
