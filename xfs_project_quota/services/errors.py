"""Exception hierarchy for XFS project quota administration."""

from __future__ import annotations

from typing import Sequence


class QuotaError(RuntimeError):
    """Base class for every quota administration failure."""


class ValidationError(QuotaError):
    """Raised when the XFS root or a project's input cannot be used."""


class PersistenceError(QuotaError):
    """Raised when the projects file cannot be created, read or rewritten."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class EnforcementError(QuotaError):
    """Raised when an ``xfs_quota`` invocation does not succeed."""

    def __init__(self, message: str, command: Sequence[str], output: str = "") -> None:
        super().__init__(message)
        self.command = list(command)
        self.output = output


class StateError(QuotaError):
    """Raised for operations on a project id that is not allocated."""

    def __init__(self, message: str, project_id: int) -> None:
        super().__init__(message)
        self.project_id = project_id
