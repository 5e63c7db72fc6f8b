"""
Pipeline lifecycle.

A PipelineHandle owns the polling thread for one configured pipeline. It is
started explicitly, stopped explicitly (or by leaving a `with` block) and
keeps a running report of what it copied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import threading

from filecopy.config import PipelineConfig
from filecopy.errors import PipelineStateError

from .journal import append_record, load_transferred_keys, transfer_key
from .source import AcceptOnceFilter, scan_directory
from .worker import TransferResult, transfer_file

LOGGER = logging.getLogger(__name__)


@dataclass
class PollReport:
    """Outcome of a single scan of the source directory."""

    results: list[TransferResult] = field(default_factory=list)

    @property
    def copied(self) -> int:
        return sum(1 for r in self.results if r.status == "copied")

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.status == "skipped")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")

    @property
    def bytes_written(self) -> int:
        return sum(r.bytes_written for r in self.results)


@dataclass
class PipelineReport:
    """
    Cumulative statistics for a pipeline.

    Attributes:
        polls: Number of completed scans
        copied: Files copied
        skipped: Files skipped because the target was kept
        failed: Files that could not be copied
        bytes_written: Total bytes written
    """

    polls: int = 0
    copied: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_written: int = 0

    def add(self, poll: PollReport) -> None:
        self.polls += 1
        self.copied += poll.copied
        self.skipped += poll.skipped
        self.failed += poll.failed
        self.bytes_written += poll.bytes_written


class PipelineHandle:
    """
    Handle on a running file-copy pipeline.

    The handle runs scans on a background thread: a single scan for the
    `once` trigger, or one scan every `interval_seconds` for `poll` until
    stop() is called. poll() may also be called directly to run one scan on
    the calling thread.

    Example:
        >>> with start_pipeline(config) as handle:
        ...     handle.wait(timeout=30)
        >>> print(handle.report.copied)
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self.report = PipelineReport()
        self.error: Exception | None = None

        self._stop_event = threading.Event()
        self._poll_lock = threading.Lock()
        self._thread: threading.Thread | None = None

        journal = config.journal.expanduser() if config.journal else None
        self._journal = journal
        if config.source.prevent_duplicates:
            seen = load_transferred_keys(journal) if journal else set()
            self._accept: AcceptOnceFilter | None = AcceptOnceFilter(seen)
        else:
            self._accept = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> PipelineHandle:
        """
        Start the polling thread.

        Raises:
            PipelineStateError: If the handle was already started, or the
                source or target directory does not exist
        """
        if self._thread is not None:
            raise PipelineStateError(f"Pipeline '{self.config.name}' already started")

        for label, directory in (
            ("source", self.config.source.directory),
            ("target", self.config.target.directory),
        ):
            if not directory.expanduser().is_dir():
                raise PipelineStateError(
                    f"Pipeline '{self.config.name}' {label} directory missing: {directory}"
                )

        self._thread = threading.Thread(
            target=self._run, name=f"filecopy-{self.config.name}", daemon=True
        )
        self._thread.start()
        LOGGER.info(
            "pipeline_started",
            extra={
                "pipeline": self.config.name,
                "trigger": self.config.poller.trigger,
                "source": str(self.config.source.directory),
                "target": str(self.config.target.directory),
            },
        )
        return self

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                self.poll()
                if self.config.poller.trigger == "once":
                    break
                self._stop_event.wait(self.config.poller.interval_seconds)
        except Exception as e:
            self.error = e
            LOGGER.exception("pipeline_failed", extra={"pipeline": self.config.name})
        finally:
            LOGGER.info(
                "pipeline_finished",
                extra={
                    "pipeline": self.config.name,
                    "polls": self.report.polls,
                    "copied": self.report.copied,
                    "skipped": self.report.skipped,
                    "failed": self.report.failed,
                    "bytes": self.report.bytes_written,
                },
            )

    def poll(self) -> PollReport:
        """
        Scan the source directory once and transfer every accepted file.

        Returns:
            PollReport for this scan

        Raises:
            FileNotFoundError: If the source directory has disappeared
        """
        with self._poll_lock:
            poll = PollReport()
            if self._accept is not None:
                self._accept.prune()
            candidates = scan_directory(
                self.config.source,
                temporary_suffix=self.config.target.temporary_suffix,
                accept=self._accept,
                limit=self.config.poller.max_files_per_poll,
            )

            for source_path in candidates:
                try:
                    key = transfer_key(source_path)
                except FileNotFoundError:
                    continue

                result = transfer_file(source_path, self.config)
                poll.results.append(result)

                if result.status == "copied" and self._journal is not None:
                    self._record_transfer(key, result)

            self.report.add(poll)
            return poll

    def _record_transfer(self, key: str, result: TransferResult) -> None:
        """Append a completed transfer to the journal.

        A failed write is logged and the copy still counts; the file will be
        copied again after a restart.
        """
        try:
            append_record(
                self._journal,
                {
                    "created_at": datetime.now(timezone.utc).isoformat(),
                    "transfer_key": key,
                    "pipeline": self.config.name,
                    "source": str(result.source),
                    "target": str(result.target),
                    "mode": self.config.transfer.mode,
                    "bytes": result.bytes_written,
                    "elapsed_ms": int(result.elapsed_seconds * 1000),
                },
            )
        except OSError as e:
            LOGGER.warning(
                "journal_write_failed",
                extra={"journal": str(self._journal), "source": str(result.source), "error": str(e)},
            )

    def stop(self, timeout: float | None = None) -> None:
        """Ask the polling thread to finish and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def wait(self, timeout: float | None = None) -> bool:
        """
        Wait for the polling thread to finish.

        Returns:
            True if the pipeline has finished, False if the timeout expired

        Raises:
            PipelineStateError: If the pipeline was never started
        """
        if self._thread is None:
            raise PipelineStateError(f"Pipeline '{self.config.name}' not started")
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __enter__(self) -> PipelineHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def start_pipeline(config: PipelineConfig) -> PipelineHandle:
    """
    Build and start a pipeline from its configuration.

    Parameters:
        config: Validated pipeline configuration

    Returns:
        Started PipelineHandle

    Raises:
        PipelineStateError: If the source or target directory does not exist
    """
    return PipelineHandle(config).start()
