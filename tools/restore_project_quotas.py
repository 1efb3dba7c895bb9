"""Re-apply recorded XFS project quotas, e.g. from a boot-time unit.

Reads the quota configuration from the environment, builds the quotaer
(which replays ``<XFS_QUOTA_PATH>/projects``) and reports the result.
"""

from __future__ import annotations

from quota_common.logging_utils import configure_quota_logging
from xfs_project_quota.config import build_quota_config
from xfs_project_quota.services.errors import QuotaError
from xfs_project_quota.services.quotaer import XfsQuotaer, build_quotaer


def main() -> int:
    """Program entrypoint."""
    try:
        config = build_quota_config()
    except (RuntimeError, ValueError) as exc:
        print(f"ERROR: {exc}")
        return 1

    configure_quota_logging(config.log_level)
    try:
        quotaer = build_quotaer(config)
    except QuotaError as exc:
        print(f"ERROR: {exc}")
        return 1

    if isinstance(quotaer, XfsQuotaer):
        count = len(quotaer.projects())
        print(f"Restored xfs project quotas under {config.xfs_path}: {count} active project(s).")
    else:
        print(f"XFS project quotas not enforced for {config.xfs_path} (mode={config.mode}).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
