"""
Pydantic models for file-copy pipeline configuration.

A PipelineConfig names the directory the pipeline reads from, how each file
is transferred, where it is written and when the source directory is
scanned. Models are immutable once parsed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SourceSpec(BaseModel):
    """
    Inbound side of the pipeline.

    Selects the files picked up from the source directory.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    directory: Path
    pattern: str = "*"
    ignore_hidden: bool = True
    prevent_duplicates: bool = True


class TransferSpec(BaseModel):
    """
    How a file's content travels from source to target.

    - binary: the file is streamed unchanged
    - bytes: the whole payload is loaded into memory as bytes
    - text: the payload is decoded with `encoding`

    `transform="upper"` upper-cases the payload and is only meaningful for
    the bytes and text modes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: Literal["binary", "bytes", "text"] = "binary"
    transform: Literal["none", "upper"] = "none"
    encoding: str = "utf-8"


class TargetSpec(BaseModel):
    """Outbound side of the pipeline."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    directory: Path
    exists: Literal["replace", "ignore", "fail"] = "replace"
    temporary_suffix: str = ".writing"
    delete_source: bool = False


class PollerSpec(BaseModel):
    """
    When the source directory is scanned.

    `once` performs a single scan and lets the pipeline finish; `poll`
    rescans every `interval_seconds` until the pipeline is stopped.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    trigger: Literal["once", "poll"] = "poll"
    interval_seconds: float = Field(default=5.0, gt=0)
    max_files_per_poll: int | None = Field(default=None, ge=1)


class PipelineConfig(BaseModel):
    """
    Complete file-copy pipeline definition.

    Example:
        >>> config = PipelineConfig.model_validate({
        ...     "name": "demo",
        ...     "source": {"directory": "input"},
        ...     "target": {"directory": "output"},
        ... })
        >>> config.transfer.mode
        'binary'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    description: str | None = None
    source: SourceSpec
    transfer: TransferSpec = Field(default_factory=TransferSpec)
    target: TargetSpec
    poller: PollerSpec = Field(default_factory=PollerSpec)
    journal: Path | None = None
