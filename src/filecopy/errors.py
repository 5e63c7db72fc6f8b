"""
Exception hierarchy for filecopy.

Every error raised deliberately by the package derives from FileCopyError.
Startup errors are fatal: the launcher and CLI surface them immediately and
never retry.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from filecopy.config.validation import ValidationIssue


class FileCopyError(Exception):
    """Base class for filecopy errors."""


class DirectoryPreparationError(FileCopyError):
    """A required directory could not be created or is blocked by a non-directory."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class ConfigurationResolutionError(FileCopyError):
    """A pipeline configuration resource could not be found, loaded or validated."""

    def __init__(
        self,
        name: str,
        message: str,
        issues: list[ValidationIssue] | None = None,
    ) -> None:
        super().__init__(f"{name}: {message}")
        self.name = name
        self.issues = list(issues or [])


class PipelineStateError(FileCopyError):
    """Pipeline lifecycle misuse, e.g. starting twice or without its directories."""
