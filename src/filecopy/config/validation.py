"""
Semantic validation for pipeline configurations.

Pydantic enforces the shape of a configuration; these checks cover the
relationships between fields that a schema cannot express.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass

from .models import PipelineConfig


@dataclass(frozen=True)
class ValidationIssue:
    """
    Represents a validation problem.

    Attributes:
        path: Dotted path to the problematic field (e.g., "target.directory")
        message: Human-readable description of the issue
    """

    path: str
    message: str


def validate_config(config: PipelineConfig) -> list[ValidationIssue]:
    """
    Validate a pipeline configuration.

    Checks that:
    - Source and target directories are different
    - The upper transform is not combined with binary mode
    - The text encoding is a known codec
    - The temporary suffix is non-empty

    Parameters:
        config: Configuration to validate

    Returns:
        List of validation issues (empty if valid)

    Example:
        >>> issues = validate_config(config)
        >>> for issue in issues:
        ...     print(f"{issue.path}: {issue.message}")
    """
    issues: list[ValidationIssue] = []

    source_dir = config.source.directory.expanduser().resolve()
    target_dir = config.target.directory.expanduser().resolve()
    if source_dir == target_dir:
        issues.append(
            ValidationIssue("target.directory", "Target directory is the source directory.")
        )

    if config.transfer.mode == "binary" and config.transfer.transform != "none":
        issues.append(
            ValidationIssue(
                "transfer.transform",
                f"Transform '{config.transfer.transform}' requires bytes or text mode.",
            )
        )

    try:
        codecs.lookup(config.transfer.encoding)
    except LookupError:
        issues.append(
            ValidationIssue(
                "transfer.encoding", f"Unknown encoding '{config.transfer.encoding}'."
            )
        )

    if not config.target.temporary_suffix:
        issues.append(
            ValidationIssue("target.temporary_suffix", "Temporary suffix must not be empty.")
        )

    return issues
