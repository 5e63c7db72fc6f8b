"""
Directory preparation.

Creates the well-known input and output directories the copy pipeline reads
from and writes to. Preparation is idempotent and fails loudly: a blocked
path or an OS error aborts startup.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from filecopy.errors import DirectoryPreparationError

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_DIR = Path(tempfile.gettempdir()) / "filecopy-demo"
DEFAULT_INPUT_DIR = DEFAULT_BASE_DIR / "input"
DEFAULT_OUTPUT_DIR = DEFAULT_BASE_DIR / "output"


@dataclass(frozen=True)
class DirectoryLayout:
    """
    Prepared directory layout.

    Attributes:
        input_dir: Directory the pipeline reads from
        output_dir: Directory the pipeline writes to
    """

    input_dir: Path
    output_dir: Path


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and its parents) unless it already exists.

    Parameters:
        path: Directory to create

    Returns:
        The expanded directory path

    Raises:
        DirectoryPreparationError: If the path is occupied by a non-directory
            or the directory cannot be created
    """
    path = Path(path).expanduser()

    if path.exists() and not path.is_dir():
        raise DirectoryPreparationError(path, "path exists and is not a directory")

    try:
        path.mkdir(parents=True, exist_ok=True)
    except NotADirectoryError as e:
        raise DirectoryPreparationError(path, "a parent path is not a directory") from e
    except OSError as e:
        raise DirectoryPreparationError(path, e.strerror or str(e)) from e

    return path


def setup_directories(
    input_dir: Path = DEFAULT_INPUT_DIR,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
) -> DirectoryLayout:
    """
    Ensure the input and output directories exist.

    Calling this repeatedly is safe: existing directories and their contents
    are left untouched.

    Parameters:
        input_dir: Directory the pipeline will read from
        output_dir: Directory the pipeline will write to

    Returns:
        DirectoryLayout with the prepared paths

    Raises:
        DirectoryPreparationError: If either directory cannot be prepared

    Example:
        >>> layout = setup_directories(Path("input"), Path("output"))
        >>> layout.input_dir.is_dir()
        True
    """
    layout = DirectoryLayout(
        input_dir=ensure_directory(input_dir),
        output_dir=ensure_directory(output_dir),
    )
    LOGGER.info(
        "directories_ready",
        extra={"input_dir": str(layout.input_dir), "output_dir": str(layout.output_dir)},
    )
    return layout
