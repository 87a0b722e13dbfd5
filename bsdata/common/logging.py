"""
Logging module - JSON Lines based logging for retrieval runs.

Logging Levels:
- Level 1: Phases of a retrieval (workspace, fetch, load)
- Level 2: Steps within phases (one per catalogue file)
- Level 3: Detailed item-level logging (git commands, decoded catalogues)

Log files are stored in: {logs_dir}/run_{id}/log_{datetime}.jsonl

While a run log is open, warnings and errors of the ``bsdata`` loggers can be
copied into it through ``setup_logging_bridge``.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bsdata.adapters.catalogue.models import Catalogue

__all__ = [
    "LogLevel",
    "LogStatus",
    "LogEntry",
    "RunLogger",
    "StepContext",
    "RunLoggerHandler",
    "BRIDGE_LOGGER",
    "new_run_id",
    "read_run_logs",
    "setup_logging_bridge",
    "teardown_logging_bridge",
]


class LogLevel(int, Enum):
    """Log levels for filtering."""

    PHASE = 1  # workspace, fetch, load
    STEP = 2  # one catalogue file
    DETAIL = 3  # git command, decoded catalogue


class LogStatus(str, Enum):
    """Status values for log entries."""

    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class LogEntry:
    """A single log entry."""

    level: int
    phase: str
    status: str
    timestamp: str
    message: str
    step: str | None = None
    sequence: int | None = None
    duration_ms: int | None = None
    items_processed: int | None = None
    items_created: int | None = None
    items_failed: int | None = None
    stats: dict[str, Any] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())


def new_run_id() -> str:
    """Generate an identifier for a retrieval run."""
    return uuid.uuid4().hex[:12]


class RunLogger:
    """
    Logger for a single retrieval run.

    Creates and appends to a JSONL file in {logs_dir}/run_{id}/.
    """

    def __init__(self, run_id: str | None = None, logs_dir: str | Path = "logs"):
        """
        Initialize logger for a run.

        Args:
            run_id: Identifier of the run (generated if omitted)
            logs_dir: Base directory for logs
        """
        self.run_id = run_id or new_run_id()
        self.logs_dir = Path(logs_dir)
        self.run_dir = self.logs_dir / f"run_{self.run_id}"

        # Create run directory
        self.run_dir.mkdir(parents=True, exist_ok=True)

        # Create log file with datetime
        self.start_time = datetime.now()
        datetime_str = self.start_time.strftime("%Y%m%d_%H%M%S")
        self.log_file = self.run_dir / f"log_{datetime_str}.jsonl"

        # Track current phase for step logging
        self._current_phase: str | None = None
        self._phase_start: datetime | None = None
        self._step_sequence: int = 0

    def _write_entry(self, entry: LogEntry) -> None:
        """Write a log entry to the JSONL file."""
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def _now(self) -> str:
        """Get current timestamp as ISO string."""
        return datetime.now().isoformat()

    def _elapsed_ms(self, start: datetime) -> int:
        """Calculate elapsed milliseconds since start."""
        return int((datetime.now() - start).total_seconds() * 1000)

    # ==================== Level 1: Phase Logging ====================

    def phase_start(self, phase: str, message: str = "") -> None:
        """
        Log the start of a phase (Level 1).

        Args:
            phase: Phase name (workspace, fetch, load)
            message: Optional message
        """
        self._current_phase = phase
        self._phase_start = datetime.now()
        self._step_sequence = 0

        entry = LogEntry(
            level=LogLevel.PHASE,
            phase=phase,
            status=LogStatus.STARTED,
            timestamp=self._now(),
            message=message or f"Starting {phase}",
        )
        self._write_entry(entry)

    def phase_complete(
        self, phase: str, message: str = "", stats: dict[str, Any] | None = None
    ) -> None:
        """
        Log the completion of a phase (Level 1).

        Args:
            phase: Phase name
            message: Optional message
            stats: Optional summary statistics
        """
        duration = None
        if self._phase_start and self._current_phase == phase:
            duration = self._elapsed_ms(self._phase_start)

        entry = LogEntry(
            level=LogLevel.PHASE,
            phase=phase,
            status=LogStatus.COMPLETED,
            timestamp=self._now(),
            message=message or f"Completed {phase}",
            duration_ms=duration,
            stats=stats,
        )
        self._write_entry(entry)
        self._current_phase = None
        self._phase_start = None

    def phase_error(self, phase: str, error: str, message: str = "") -> None:
        """
        Log a phase error (Level 1).

        Args:
            phase: Phase name
            error: Error message/details
            message: Optional message
        """
        duration = None
        if self._phase_start and self._current_phase == phase:
            duration = self._elapsed_ms(self._phase_start)

        entry = LogEntry(
            level=LogLevel.PHASE,
            phase=phase,
            status=LogStatus.ERROR,
            timestamp=self._now(),
            message=message or f"Error in {phase}",
            duration_ms=duration,
            error=error,
        )
        self._write_entry(entry)
        self._current_phase = None
        self._phase_start = None

    # ==================== Level 2: Step Logging ====================

    def step_start(self, step: str, message: str = "") -> StepContext:
        """
        Log the start of a step within a phase (Level 2).

        Args:
            step: Step name, usually a catalogue file name
            message: Optional message

        Returns:
            StepContext for tracking step completion
        """
        self._step_sequence += 1

        entry = LogEntry(
            level=LogLevel.STEP,
            phase=self._current_phase or "unknown",
            step=step,
            sequence=self._step_sequence,
            status=LogStatus.STARTED,
            timestamp=self._now(),
            message=message or f"Starting {step}",
        )
        self._write_entry(entry)

        return StepContext(self, step, self._step_sequence)

    def step_complete(
        self,
        step: str,
        sequence: int,
        message: str = "",
        items_processed: int = 0,
        items_created: int = 0,
        items_failed: int = 0,
        duration_ms: int | None = None,
        stats: dict[str, Any] | None = None,
    ) -> None:
        """Log the completion of a step (Level 2)."""
        entry = LogEntry(
            level=LogLevel.STEP,
            phase=self._current_phase or "unknown",
            step=step,
            sequence=sequence,
            status=LogStatus.COMPLETED,
            timestamp=self._now(),
            message=message or f"Completed {step}",
            duration_ms=duration_ms,
            items_processed=items_processed,
            items_created=items_created,
            items_failed=items_failed,
            stats=stats,
        )
        self._write_entry(entry)

    def step_error(
        self,
        step: str,
        sequence: int,
        error: str,
        message: str = "",
        duration_ms: int | None = None,
    ) -> None:
        """Log a step error (Level 2)."""
        entry = LogEntry(
            level=LogLevel.STEP,
            phase=self._current_phase or "unknown",
            step=step,
            sequence=sequence,
            status=LogStatus.ERROR,
            timestamp=self._now(),
            message=message or f"Error in {step}",
            duration_ms=duration_ms,
            error=error,
        )
        self._write_entry(entry)

    # ==================== Level 3: Detail Logging ====================

    def detail_git_command(self, command: list[str], step: str) -> None:
        """
        Log a git invocation (Level 3).

        Args:
            command: Full command line
            step: Fetch step the command belongs to (clone, resolve, checkout)
        """
        entry = LogEntry(
            level=LogLevel.DETAIL,
            phase=self._current_phase or "fetch",
            status=LogStatus.STARTED,
            timestamp=self._now(),
            message=f"git {step}",
            stats={"command": command, "step": step},
        )
        self._write_entry(entry)

    def detail_catalogue_decoded(self, file_name: str, catalogue: Catalogue) -> None:
        """
        Log a decoded catalogue (Level 3).

        Args:
            file_name: Source file name
            catalogue: The decoded catalogue
        """
        entry = LogEntry(
            level=LogLevel.DETAIL,
            phase=self._current_phase or "load",
            status=LogStatus.COMPLETED,
            timestamp=self._now(),
            message=f"Decoded: {file_name}",
            stats={
                "file_name": file_name,
                "catalogue_id": catalogue.id,
                "catalogue_name": catalogue.name,
                "revision": catalogue.revision,
                "shared_selection_entries": len(catalogue.shared_selection_entries),
                "shared_selection_entry_groups": len(
                    catalogue.shared_selection_entry_groups
                ),
                "shared_rules": len(catalogue.shared_rules),
            },
        )
        self._write_entry(entry)

    # ==================== Utility Methods ====================

    def get_log_path(self) -> Path:
        """Get the path to the current log file."""
        return self.log_file

    def read_logs(self, level: int | None = None) -> list[dict[str, Any]]:
        """
        Read all log entries from the file.

        Args:
            level: Optional level filter (1, 2, or 3)

        Returns:
            List of log entry dictionaries
        """
        if not self.log_file.exists():
            return []
        return _read_jsonl(self.log_file, level)


class StepContext:
    """
    Context manager for tracking step duration and completion.

    Usage:
        with run_logger.step_start("Empire.cat") as step:
            # do work
            step.items_processed = 1
    """

    def __init__(self, logger: RunLogger, step: str, sequence: int):
        self.logger = logger
        self.step = step
        self.sequence = sequence
        self.start_time = datetime.now()
        self.items_processed = 0
        self.items_created = 0
        self.items_failed = 0
        self.stats: dict[str, Any] | None = None
        self._completed = False

    def __enter__(self) -> StepContext:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.error(str(exc_val))
        elif not self._completed:
            self.complete()

    def _elapsed_ms(self) -> int:
        return int((datetime.now() - self.start_time).total_seconds() * 1000)

    def complete(self, message: str = "") -> None:
        """Mark step as completed."""
        self._completed = True
        self.logger.step_complete(
            step=self.step,
            sequence=self.sequence,
            message=message,
            items_processed=self.items_processed,
            items_created=self.items_created,
            items_failed=self.items_failed,
            duration_ms=self._elapsed_ms(),
            stats=self.stats,
        )

    def error(self, error: str, message: str = "") -> None:
        """Mark step as errored."""
        self._completed = True
        self.logger.step_error(
            step=self.step,
            sequence=self.sequence,
            error=error,
            message=message,
            duration_ms=self._elapsed_ms(),
        )


def _read_jsonl(path: Path, level: int | None) -> list[dict[str, Any]]:
    entries = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue  # partially written line
                if level is None or entry.get("level") == level:
                    entries.append(entry)
    return entries


def read_run_logs(
    run_id: str, logs_dir: str | Path = "logs", level: int | None = None
) -> list[dict[str, Any]]:
    """
    Read logs for a specific run.

    Args:
        run_id: The run ID
        logs_dir: Base directory for logs
        level: Optional level filter

    Returns:
        List of log entries, or empty list if no logs found
    """
    run_dir = Path(logs_dir) / f"run_{run_id}"
    if not run_dir.exists():
        return []

    # Find the most recent log file
    log_files = sorted(run_dir.glob("log_*.jsonl"), reverse=True)
    if not log_files:
        return []

    return _read_jsonl(log_files[0], level)


# =============================================================================
# Standard Logging Bridge
# =============================================================================

BRIDGE_LOGGER = "bsdata"


class RunLoggerHandler(logging.Handler):
    """Copies records of the ``bsdata`` loggers into a run log.

    Records become detail entries of the phase that is current when they are
    emitted (``system`` between phases). ERROR and above carry the message in
    the ``error`` field as well, so they show up next to phase errors.
    """

    def __init__(self, run_logger: RunLogger, min_level: int = logging.WARNING):
        super().__init__(level=min_level)
        self.run_logger = run_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            failed = record.levelno >= logging.ERROR
            self.run_logger._write_entry(
                LogEntry(
                    level=LogLevel.DETAIL,
                    phase=self.run_logger._current_phase or "system",
                    status=LogStatus.ERROR if failed else LogStatus.COMPLETED,
                    timestamp=datetime.fromtimestamp(record.created).isoformat(),
                    message=message,
                    error=message if failed else None,
                    stats={
                        "logger": record.name,
                        "level": record.levelname,
                        "lineno": record.lineno,
                    },
                )
            )
        except Exception:
            self.handleError(record)


def setup_logging_bridge(
    run_logger: RunLogger,
    min_level: int = logging.WARNING,
    logger_name: str = BRIDGE_LOGGER,
) -> RunLoggerHandler:
    """
    Forward records of ``logger_name`` and its children into ``run_logger``.

    Returns:
        The installed handler; pass it to ``teardown_logging_bridge``
    """
    handler = RunLoggerHandler(run_logger, min_level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logging.getLogger(logger_name).addHandler(handler)
    return handler


def teardown_logging_bridge(
    handler: RunLoggerHandler, logger_name: str = BRIDGE_LOGGER
) -> None:
    """Remove a handler installed by ``setup_logging_bridge``."""
    logging.getLogger(logger_name).removeHandler(handler)
    handler.close()
