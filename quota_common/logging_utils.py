"""Logging helpers shared by the quota services and tools."""

import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOGGER_CONFIGURED = False


def configure_quota_logging(level: str = "INFO") -> None:
    """Install a single stderr handler on the root logger.

    Repeated calls are ignored so that tools which build several quotaers in
    one process do not stack handlers and duplicate every line.
    """
    global _LOGGER_CONFIGURED

    if _LOGGER_CONFIGURED:
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    _LOGGER_CONFIGURED = True
