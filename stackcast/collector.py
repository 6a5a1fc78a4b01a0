"""Error collector for recoverable failures.

Steps that are allowed to fail without aborting a generation run report
their errors here. The CLI renders the collected entries as a warning table
at the end of the command.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from stackcast.utils import err_console

ErrorKind = Literal["error", "warning"]


@dataclass
class CollectedError:
    """One recoverable failure."""

    task: str
    error: str
    kind: ErrorKind = "error"
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ErrorCollector:
    """Accumulates recoverable errors and warnings for batch display.

    In debug mode every entry is echoed to stderr with its traceback and
    appended to a persistent log file.
    """

    def __init__(self, debug: bool = False, log_path: Path | None = None) -> None:
        self.debug = debug
        self.log_path = log_path
        self._errors: list[CollectedError] = []
        self._enabled = True

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def configure(self, debug: bool, log_path: Path | None = None) -> None:
        """Switch debug echoing on or off."""
        self.debug = debug
        self.log_path = log_path

    def add_error(self, task: str, error: Any, kind: ErrorKind = "error") -> None:
        """Record *error* under *task*. Exceptions, strings and other values are accepted."""
        if not self._enabled:
            return

        message = str(error) if isinstance(error, (BaseException, str)) else repr(error)
        self._errors.append(CollectedError(task=task, error=message, kind=kind))

        if self.debug:
            details = _format_details(error)
            err_console.print(f"[red][{kind.upper()} COLLECTED] {task}:[/red]\n{details}")
            if self.log_path is not None:
                _append_log(self.log_path, task, details)

    def add_warning(self, task: str, warning: Any) -> None:
        self.add_error(task, warning, kind="warning")

    def get_errors(self) -> list[CollectedError]:
        """Return a copy of every collected entry, oldest first."""
        return list(self._errors)

    def has_errors(self) -> bool:
        return self.error_count > 0

    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._errors if e.kind == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._errors if e.kind == "warning")

    def clear(self) -> None:
        self._errors.clear()


def _format_details(error: Any) -> str:
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
    return str(error)


def _append_log(log_path: Path, task: str, details: str) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).isoformat()
    with log_path.open("a", encoding="utf-8") as fh:
        fh.write(f"[{timestamp}] TASK: {task}\nERROR: {details}\n{'=' * 80}\n")


# Process-wide default instance.
error_collector = ErrorCollector()
