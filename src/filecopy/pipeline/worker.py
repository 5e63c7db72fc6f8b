"""
Single file transfer worker.

Core processing function for copying one source file according to a
pipeline configuration. Copy errors are reported in the result rather than
raised, so one bad file does not stop the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal
import logging
import time

from filecopy.config import PipelineConfig

from .transfer import target_path_for, write_file

LOGGER = logging.getLogger(__name__)


@dataclass
class TransferResult:
    """
    Result of transferring a single file.

    Attributes:
        source: Source file path
        target: Destination file path
        status: copied, skipped (target kept) or failed
        bytes_written: Number of bytes written to the target
        elapsed_seconds: Total transfer time
        error: Description of the failure (if any)
    """

    source: Path
    target: Path
    status: Literal["copied", "skipped", "failed"]
    bytes_written: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status != "failed"


def transfer_file(source_path: Path, config: PipelineConfig) -> TransferResult:
    """
    Copy one file from the source directory to the target directory.

    Handles:
    - The target exists policy (replace, ignore, fail)
    - Atomic writes through a temporary file
    - Deleting the source after a successful copy (when configured)

    Parameters:
        source_path: File to copy
        config: Pipeline configuration

    Returns:
        TransferResult describing the outcome

    Example:
        >>> result = transfer_file(Path("input/sample.bin"), config)
        >>> print(result.status, result.bytes_written)
    """
    start_time = time.perf_counter()
    target = config.target
    target_path = target_path_for(source_path, target)

    if target_path.exists():
        if target.exists == "ignore":
            LOGGER.info(
                "file_skipped",
                extra={"source": str(source_path), "target": str(target_path)},
            )
            return TransferResult(
                source=source_path,
                target=target_path,
                status="skipped",
                elapsed_seconds=time.perf_counter() - start_time,
            )
        if target.exists == "fail":
            LOGGER.warning(
                "transfer_failed",
                extra={"source": str(source_path), "error": "target exists"},
            )
            return TransferResult(
                source=source_path,
                target=target_path,
                status="failed",
                elapsed_seconds=time.perf_counter() - start_time,
                error=f"Target already exists: {target_path}",
            )

    try:
        written = write_file(
            source_path,
            target_path,
            config.transfer,
            temporary_suffix=target.temporary_suffix,
        )
        if target.delete_source:
            source_path.unlink(missing_ok=True)
    except (OSError, UnicodeError) as e:
        LOGGER.warning(
            "transfer_failed",
            extra={"source": str(source_path), "target": str(target_path), "error": str(e)},
        )
        return TransferResult(
            source=source_path,
            target=target_path,
            status="failed",
            elapsed_seconds=time.perf_counter() - start_time,
            error=str(e),
        )

    elapsed = time.perf_counter() - start_time
    LOGGER.info(
        "file_copied",
        extra={
            "source": str(source_path),
            "target": str(target_path),
            "bytes": written,
            "mode": config.transfer.mode,
            "elapsed_ms": int(elapsed * 1000),
        },
    )
    return TransferResult(
        source=source_path,
        target=target_path,
        status="copied",
        bytes_written=written,
        elapsed_seconds=elapsed,
    )
