"""
Transfer keys and the persistent transfer journal.

A transfer key identifies one version of a source file. The optional JSONL
journal records every completed transfer so a restarted pipeline does not
copy the same file version again.
"""

from __future__ import annotations

from pathlib import Path
import json
from typing import Any


def transfer_key(path: Path) -> str:
    """
    Generate stable identifier for one version of a source file.

    The key combines the absolute path with the file's size and modification
    time, so a file that is rewritten in place gets a new key.

    Parameters:
        path: Source file path

    Returns:
        Pipe-separated transfer key string

    Raises:
        FileNotFoundError: If the file no longer exists

    Example:
        >>> transfer_key(Path("input/sample.bin"))
        '/tmp/input/sample.bin|1024|1700000000000000000'
    """
    st = path.stat()
    return "|".join([str(path.absolute()), str(st.st_size), str(st.st_mtime_ns)])


def key_path(key: str) -> str:
    """Absolute source path a transfer key was built from."""
    return key.rsplit("|", 2)[0]


def load_transferred_keys(journal_path: Path) -> set[str]:
    """
    Load transfer_key set from existing JSONL journal.

    Parameters:
        journal_path: Path to JSONL journal file

    Returns:
        Set of transfer_key strings already copied

    Example:
        >>> done = load_transferred_keys(Path("output/.filecopy-journal.jsonl"))
        >>> print(f"Already copied: {len(done)} files")
    """
    transferred: set[str] = set()
    if not journal_path.exists():
        return transferred

    try:
        with journal_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    rec = json.loads(line)
                except json.JSONDecodeError:
                    # Ignore truncated/invalid lines (e.g., partial last line)
                    continue
                if not isinstance(rec, dict):
                    continue
                k = rec.get("transfer_key")
                if isinstance(k, str):
                    transferred.add(k)
    except OSError:
        # If the journal cannot be read, fall back to copying again
        return set()

    return transferred


def append_record(journal_path: Path, record: dict[str, Any]) -> None:
    """
    Append a record to JSONL journal.

    Creates parent directories if they don't exist.

    Parameters:
        journal_path: Path to JSONL journal file
        record: Dictionary to write as JSON
    """
    journal_path.parent.mkdir(parents=True, exist_ok=True)
    with journal_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")
