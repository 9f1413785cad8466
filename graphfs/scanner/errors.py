"""Error collection and reporting for the scanner.

Per-file failures are collected rather than raised so a scan can return
partial results. Strict mode and the max-error threshold are the only
ways a scan aborts; both raise a ScanAbortedError.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphfs.scanner.scanner import ScanResult

# Entries shown by ErrorCollector.report() before summarising the rest
REPORT_LIMIT = 10


@dataclass(frozen=True)
class ScanError:
    """An error encountered while scanning or parsing one file."""

    file: str
    message: str
    line: int | None = None
    cause: BaseException | None = None

    def __str__(self) -> str:
        if self.line:
            return f"{self.file}:{self.line}: {self.message}"
        return f"{self.file}: {self.message}"


class ErrorCollector:
    """Thread-safe, ordered collection of ScanError records."""

    def __init__(self) -> None:
        self._errors: list[ScanError] = []
        self._lock = threading.Lock()

    def add(self, file: str, err: BaseException | str) -> ScanError:
        return self._append(file, err, None)

    def add_with_line(self, file: str, line: int, err: BaseException | str) -> ScanError:
        return self._append(file, err, line)

    def _append(
        self, file: str, err: BaseException | str, line: int | None
    ) -> ScanError:
        cause = err if isinstance(err, BaseException) else None
        record = ScanError(file=file, message=str(err), line=line, cause=cause)
        with self._lock:
            self._errors.append(record)
        return record

    def has_errors(self) -> bool:
        with self._lock:
            return bool(self._errors)

    def count(self) -> int:
        with self._lock:
            return len(self._errors)

    def errors(self) -> list[ScanError]:
        """Return a copy of the collected errors, in insertion order."""
        with self._lock:
            return list(self._errors)

    def report(self, limit: int = REPORT_LIMIT) -> str:
        """Format a human-readable report of the first *limit* errors."""
        errors = self.errors()
        if not errors:
            return ""

        lines = [f"{len(errors)} error(s) encountered:", ""]
        lines.extend(f"  • {err}" for err in errors[:limit])
        if len(errors) > limit:
            lines.append("")
            lines.append(f"... and {len(errors) - limit} more error(s)")
        return "\n".join(lines) + "\n"

    def clear(self) -> None:
        with self._lock:
            self._errors.clear()

    def __len__(self) -> int:
        return self.count()


class ScanAbortedError(RuntimeError):
    """Scan aborted by the strict-mode policy.

    The partial result collected before the abort is attached as ``result``.
    """

    def __init__(self, message: str, result: ScanResult | None = None) -> None:
        super().__init__(message)
        self.result = result


class MaxErrorsExceededError(ScanAbortedError):
    """Scan aborted because the max-error threshold was reached."""
