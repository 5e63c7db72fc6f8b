"""
Source directory scanning.

Lists the files a poll should pick up and filters out file versions that
were already accepted.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path
import threading
from typing import Callable, Iterable

from filecopy.config import SourceSpec

from .journal import key_path, transfer_key


def _mtime_ns(key: str) -> int:
    try:
        return int(key.rsplit("|", 1)[1])
    except (IndexError, ValueError):
        return -1


class AcceptOnceFilter:
    """
    Accepts each version of a file only once.

    Versions are told apart by transfer_key(), so a file that changes size
    or modification time is accepted again. Only the latest accepted version
    of each path is remembered, and prune() forgets paths that no longer
    exist. Safe to share between threads.
    """

    def __init__(self, seen: Iterable[str] = ()) -> None:
        # path -> latest accepted transfer key
        self._latest: dict[str, str] = {}
        for key in seen:
            current = self._latest.get(key_path(key))
            if current is None or _mtime_ns(key) >= _mtime_ns(current):
                self._latest[key_path(key)] = key
        self._lock = threading.Lock()

    def __call__(self, path: Path) -> bool:
        try:
            key = transfer_key(path)
        except FileNotFoundError:
            return False
        with self._lock:
            if self._latest.get(key_path(key)) == key:
                return False
            self._latest[key_path(key)] = key
            return True

    def prune(self) -> int:
        """
        Forget paths that no longer exist.

        Returns:
            Number of paths forgotten
        """
        with self._lock:
            gone = [p for p in self._latest if not Path(p).exists()]
            for p in gone:
                del self._latest[p]
            return len(gone)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._latest.get(key_path(key)) == key

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest)


def scan_directory(
    source: SourceSpec,
    *,
    temporary_suffix: str | None = None,
    accept: Callable[[Path], bool] | None = None,
    limit: int | None = None,
) -> list[Path]:
    """
    List files in the source directory that a poll should transfer.

    Only regular files directly inside the directory are considered. They
    are returned sorted by name, after dropping:
    - hidden files (when source.ignore_hidden is set)
    - in-flight files ending with `temporary_suffix`
    - names not matching source.pattern
    - files rejected by `accept`

    Parameters:
        source: Source section of the pipeline configuration
        temporary_suffix: Suffix of partially written files to skip
        accept: Optional filter called last, e.g. an AcceptOnceFilter
        limit: Maximum number of files to return

    Returns:
        List of file paths

    Raises:
        FileNotFoundError: If the source directory does not exist
    """
    directory = source.directory.expanduser()
    files: list[Path] = []

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if limit is not None and len(files) >= limit:
            break
        if not entry.is_file():
            continue
        if source.ignore_hidden and entry.name.startswith("."):
            continue
        if temporary_suffix and entry.name.endswith(temporary_suffix):
            continue
        if not fnmatchcase(entry.name, source.pattern):
            continue
        if accept is not None and not accept(entry):
            continue
        files.append(entry)

    return files
