"""
Moving file content from source to target.

Each transfer mode has a handler that writes the payload to a temporary
file next to the target. The temporary file is renamed into place only once
it is complete, and removed on every failure path.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable

from filecopy.config import TargetSpec, TransferSpec


def target_path_for(source_path: Path, target: TargetSpec) -> Path:
    """Path the source file is written to in the target directory."""
    return target.directory.expanduser() / source_path.name


def temporary_path_for(target_path: Path, suffix: str) -> Path:
    """Path the payload is written to before being renamed into place."""
    return target_path.with_name(target_path.name + suffix)


def copy_binary(source_path: Path, destination: Path, transfer: TransferSpec) -> int:
    """Stream the file unchanged. Returns the number of bytes written."""
    shutil.copyfile(source_path, destination)
    return destination.stat().st_size


def copy_bytes(source_path: Path, destination: Path, transfer: TransferSpec) -> int:
    """Load the whole payload as bytes, transform it and write it."""
    data = source_path.read_bytes()
    if transfer.transform == "upper":
        data = data.upper()
    destination.write_bytes(data)
    return len(data)


def copy_text(source_path: Path, destination: Path, transfer: TransferSpec) -> int:
    """
    Decode the payload as text, transform it and write it back encoded.

    Line endings are preserved as they are in the source file.

    Raises:
        UnicodeDecodeError: If the file is not valid in transfer.encoding
    """
    text = source_path.read_bytes().decode(transfer.encoding)
    if transfer.transform == "upper":
        text = text.upper()
    data = text.encode(transfer.encoding)
    destination.write_bytes(data)
    return len(data)


HANDLERS: dict[str, Callable[[Path, Path, TransferSpec], int]] = {
    "binary": copy_binary,
    "bytes": copy_bytes,
    "text": copy_text,
}


def write_file(
    source_path: Path,
    target_path: Path,
    transfer: TransferSpec,
    *,
    temporary_suffix: str,
) -> int:
    """
    Transfer one file into place atomically.

    The payload is written to `<target><temporary_suffix>` and renamed onto
    `target_path` when complete. An existing target is replaced.

    Parameters:
        source_path: File to read
        target_path: Final destination
        transfer: Transfer mode and transform
        temporary_suffix: Suffix of the in-flight file

    Returns:
        Number of bytes written

    Raises:
        OSError: If reading, writing or renaming fails
        UnicodeError: If text mode cannot decode or encode the payload
    """
    handler = HANDLERS[transfer.mode]
    tmp_path = temporary_path_for(target_path, temporary_suffix)

    try:
        written = handler(source_path, tmp_path, transfer)
        os.replace(tmp_path, target_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    return written
