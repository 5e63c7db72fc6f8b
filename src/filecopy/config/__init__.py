"""
File-copy pipeline configuration.

Pydantic models for pipeline definitions along with resource resolution,
loading and validation.

Basic usage:
    >>> from filecopy.config import load_config
    >>>
    >>> config = load_config("filecopy-binary")
    >>> print(config.source.directory, "->", config.target.directory)

Inline configurations:
    >>> from filecopy.config import parse_config, validate_config
    >>>
    >>> config = parse_config({
    ...     "name": "inline",
    ...     "source": {"directory": "in"},
    ...     "target": {"directory": "out"},
    ... })
    >>> validate_config(config)
    []
"""

from .models import (
    PipelineConfig,
    SourceSpec,
    TransferSpec,
    TargetSpec,
    PollerSpec,
)
from .loaders import (
    resolve_resource,
    list_bundled_configs,
    load_json,
    fetch_json,
    default_context,
    interpolate,
    parse_config,
    load_config,
)
from .validation import (
    ValidationIssue,
    validate_config,
)

__all__ = [
    # Models
    "PipelineConfig",
    "SourceSpec",
    "TransferSpec",
    "TargetSpec",
    "PollerSpec",
    # Loaders
    "resolve_resource",
    "list_bundled_configs",
    "load_json",
    "fetch_json",
    "default_context",
    "interpolate",
    "parse_config",
    "load_config",
    # Validation
    "ValidationIssue",
    "validate_config",
]
