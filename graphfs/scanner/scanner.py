"""
Filesystem scanner.

Walks a source tree and produces an inventory of source files:
- Ignored directories are pruned (never listed, their files never stat'ed)
- Each surviving file is classified by extension; unknown languages,
  oversized files and (unless followed) symlinks never produce a record
- Files carrying a LinkedDoc block are flagged by looking for the start
  marker in the raw content

Two execution modes share the same traversal:
- sequential: records appear in traversal order
- concurrent: the walk runs in the calling thread and feeds a bounded queue
  drained by a fixed pool of worker threads; record order is not guaranteed

Per-file failures go to an ErrorCollector. Strict mode aborts on the first
error and ``max_errors`` aborts once the threshold is reached; otherwise
partial results are returned together with the collected errors.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from graphfs.parser.parser import START_MARKER
from graphfs.scanner.errors import (
    ErrorCollector,
    MaxErrorsExceededError,
    ScanAbortedError,
)
from graphfs.scanner.ignore import (
    IgnoreMatcher,
    default_ignore_patterns,
    glob_match,
    load_ignore_files,
    relative_posix,
)
from graphfs.scanner.language import (
    UNKNOWN_LANGUAGE,
    LanguageRegistry,
    default_registry,
)
from graphfs.settings import (
    get_concurrent,
    get_ignore_files,
    get_max_file_size,
    get_workers,
)

logger = logging.getLogger(__name__)

# Capacity of the work queue between the walker and the workers
WORK_QUEUE_SIZE = 100

_START_MARKER_BYTES = START_MARKER.encode("utf-8")


class ScanOptions(BaseModel):
    """Scanner configuration supplied by the calling layer."""

    model_config = ConfigDict(extra="forbid")

    include_patterns: list[str] = Field(
        default_factory=list,
        description="Globs a file must match (relative path or name); empty keeps all",
    )
    exclude_patterns: list[str] = Field(
        default_factory=list, description="Extra ignore rules"
    )
    max_file_size: int = Field(
        default_factory=get_max_file_size,
        ge=0,
        description="Largest file in bytes to include (0 = unlimited)",
    )
    follow_symlinks: bool = False
    ignore_files: list[str] = Field(
        default_factory=get_ignore_files,
        description="Ignore-file names read from the scan root",
    )
    use_defaults: bool = Field(
        default=True, description="Apply the built-in ignore patterns"
    )
    concurrent: bool = Field(default_factory=get_concurrent)
    workers: int = Field(
        default_factory=get_workers, ge=0, description="0 = all available CPUs"
    )
    strict: bool = Field(default=False, description="Abort on the first error")
    max_errors: int = Field(
        default=0, ge=0, description="Abort after this many errors (0 = unlimited)"
    )
    # Hooks for callers that wrap scans in a deadline; not enforced here
    timeout: float | None = Field(default=None, ge=0)
    file_timeout: float | None = Field(default=None, ge=0)

    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1


@dataclass(frozen=True)
class FileRecord:
    """A source file discovered by the scanner."""

    path: str
    language: str
    size: int
    mod_time: datetime
    has_linked_doc: bool


@dataclass
class ScanResult:
    """Inventory produced by one Scanner.scan() call."""

    files: list[FileRecord] = field(default_factory=list)
    errors: ErrorCollector = field(default_factory=ErrorCollector)
    files_scanned: int = 0
    files_failed: int = 0
    duration: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size for f in self.files)

    def linked_doc_files(self) -> list[FileRecord]:
        return [f for f in self.files if f.has_linked_doc]


@dataclass
class _ScanState:
    """Shared mutable state of one scan, guarded by a single lock."""

    result: ScanResult
    options: ScanOptions
    lock: threading.Lock = field(default_factory=threading.Lock)
    abort: ScanAbortedError | None = None

    def should_stop(self) -> bool:
        return self.abort is not None

    def record_scanned(self) -> None:
        with self.lock:
            self.result.files_scanned += 1

    def record_file(self, record: FileRecord) -> None:
        with self.lock:
            self.result.files.append(record)

    def record_error(self, path: str, err: BaseException, scanned: bool = False) -> None:
        """Collect a per-file error and trigger an abort if policy requires."""
        self.result.errors.add(path, err)
        logger.warning("Scan error for %s: %s", path, err)
        with self.lock:
            if scanned:
                self.result.files_scanned += 1
            self.result.files_failed += 1
            failed = self.result.files_failed
            if self.abort is not None:
                return
            if self.options.strict:
                self.abort = ScanAbortedError(f"strict mode: {path}: {err}")
            elif self.options.max_errors and failed >= self.options.max_errors:
                self.abort = MaxErrorsExceededError(
                    f"max errors ({self.options.max_errors}) reached"
                )


class Scanner:
    """Recursive filesystem scanner."""

    def __init__(self, registry: LanguageRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def scan(self, root_path: str | Path, options: ScanOptions | None = None) -> ScanResult:
        """Scan *root_path* recursively.

        Raises:
            FileNotFoundError: If the root does not exist.
            ScanAbortedError: Strict mode hit an error, or the max-error
                threshold was reached. The partial result is attached.
        """
        options = options or ScanOptions()
        start = time.monotonic()

        root = Path(root_path).resolve()
        if not root.exists():
            raise FileNotFoundError(f"path does not exist: {root}")

        matcher = self.build_ignore_matcher(root, options)
        state = _ScanState(result=ScanResult(), options=options)

        if options.concurrent:
            self._scan_concurrent(root, matcher, state)
        else:
            self._scan_sequential(root, matcher, state)

        state.result.duration = time.monotonic() - start

        if state.abort is not None:
            state.abort.result = state.result
            raise state.abort

        logger.info(
            "Scanned %s: %d files kept, %d scanned, %d failed in %.2fs",
            root,
            state.result.total_files,
            state.result.files_scanned,
            state.result.files_failed,
            state.result.duration,
        )
        return state.result

    def scan_file(self, file_path: str | Path) -> FileRecord:
        """Stat, classify and inspect a single file.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        path = Path(file_path)
        info = os.stat(path)
        language = self.registry.detect(path)
        has_linked_doc = False
        if language != UNKNOWN_LANGUAGE:
            try:
                has_linked_doc = self._has_linked_doc(path)
            except OSError as e:
                logger.debug("Could not read %s for LinkedDoc detection: %s", path, e)
        return FileRecord(
            path=str(path),
            language=language,
            size=info.st_size,
            mod_time=datetime.fromtimestamp(info.st_mtime, tz=UTC),
            has_linked_doc=has_linked_doc,
        )

    @staticmethod
    def _has_linked_doc(path: Path) -> bool:
        with path.open("rb") as f:
            return _START_MARKER_BYTES in f.read()

    def build_ignore_matcher(self, root: Path, options: ScanOptions) -> IgnoreMatcher:
        """Combine defaults, caller excludes and ignore-file rules."""
        patterns: list[str] = []
        if options.use_defaults:
            patterns.extend(default_ignore_patterns())
        patterns.extend(options.exclude_patterns)
        patterns.extend(load_ignore_files(root, options.ignore_files))
        return IgnoreMatcher(patterns)

    # ─── Traversal ─────────────────────────────────────────────────────────

    def _walk(
        self, root: Path, matcher: IgnoreMatcher, state: _ScanState
    ) -> Iterator[Path]:
        """Yield candidate files, pruning ignored directories.

        Directory listing errors are recorded on *state*.
        """
        follow = state.options.follow_symlinks
        seen_dirs: set[str] = set()
        stack = [root]

        while stack:
            directory = stack.pop()
            if state.should_stop():
                return
            if follow:
                real = os.path.realpath(directory)
                if real in seen_dirs:
                    continue
                seen_dirs.add(real)

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                state.record_error(str(directory), e, scanned=True)
                continue

            subdirs = []
            for entry in entries:
                if state.should_stop():
                    return
                rel = relative_posix(Path(entry.path), root)
                if matcher.should_ignore(rel):
                    logger.debug("Ignoring %s", rel)
                    continue
                try:
                    is_symlink = entry.is_symlink()
                    if entry.is_dir(follow_symlinks=follow):
                        subdirs.append(Path(entry.path))
                        continue
                except OSError as e:
                    state.record_error(entry.path, e, scanned=True)
                    continue
                if is_symlink and not follow:
                    continue
                if not self._included(rel, state.options):
                    continue
                yield Path(entry.path)

            # Reverse so the stack pops directories in name order
            stack.extend(reversed(subdirs))

    @staticmethod
    def _included(rel: str, options: ScanOptions) -> bool:
        if not options.include_patterns:
            return True
        return any(glob_match(pattern, rel) for pattern in options.include_patterns)

    def _process(self, path: Path, state: _ScanState) -> None:
        """Scan one file and record the outcome on *state*.

        Failures of any kind are recorded against the file, so they never
        end a sequential walk or a worker thread.
        """
        try:
            self._process_file(path, state)
        except Exception as e:
            state.record_error(str(path), e)

    def _process_file(self, path: Path, state: _ScanState) -> None:
        try:
            info = os.stat(path)
        except OSError as e:
            state.record_error(str(path), e, scanned=True)
            return
        state.record_scanned()

        language = self.registry.detect(path)
        if language == UNKNOWN_LANGUAGE:
            return
        max_size = state.options.max_file_size
        if max_size and info.st_size > max_size:
            logger.debug("Skipping %s: %d bytes exceeds limit", path, info.st_size)
            return

        try:
            has_linked_doc = self._has_linked_doc(path)
        except OSError as e:
            state.record_error(str(path), e)
            return

        state.record_file(
            FileRecord(
                path=str(path),
                language=language,
                size=info.st_size,
                mod_time=datetime.fromtimestamp(info.st_mtime, tz=UTC),
                has_linked_doc=has_linked_doc,
            )
        )

    def _scan_sequential(
        self, root: Path, matcher: IgnoreMatcher, state: _ScanState
    ) -> None:
        for path in self._walk(root, matcher, state):
            self._process(path, state)
            if state.should_stop():
                break

    def _scan_concurrent(
        self, root: Path, matcher: IgnoreMatcher, state: _ScanState
    ) -> None:
        num_workers = state.options.worker_count()
        work: queue.Queue[Path | None] = queue.Queue(maxsize=WORK_QUEUE_SIZE)

        def worker() -> None:
            while True:
                path = work.get()
                if path is None:
                    return
                self._process(path, state)

        with ThreadPoolExecutor(
            max_workers=num_workers, thread_name_prefix="graphfs-scan"
        ) as pool:
            futures = [pool.submit(worker) for _ in range(num_workers)]
            try:
                for path in self._walk(root, matcher, state):
                    if state.should_stop():
                        break
                    work.put(path)
            finally:
                for _ in futures:
                    work.put(None)
            for future in as_completed(futures):
                future.result()


def scan(
    root_path: str | Path,
    options: ScanOptions | None = None,
    registry: LanguageRegistry | None = None,
) -> ScanResult:
    """Convenience wrapper around Scanner(registry).scan()."""
    return Scanner(registry).scan(root_path, options)

