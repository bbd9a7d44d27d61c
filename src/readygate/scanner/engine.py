"""Scan engine: orchestrates enumeration, parallel matching and aggregation."""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path

from readygate.policy.models import Policy
from readygate.scanner.allowlist import ExceptionResolver
from readygate.scanner.matcher import FileMatch, match_file
from readygate.scanner.models import ScanReport, ScanWarning, Violation
from readygate.scanner.paths import GlobSet, enumerate_files
from readygate.scanner.report import aggregate

logger = logging.getLogger(__name__)


class ScanTimeoutError(RuntimeError):
    """The scan exceeded its time budget; no report is produced."""

    def __init__(self, budget: float, completed: int, total: int) -> None:
        self.budget = budget
        self.completed = completed
        self.total = total
        super().__init__(
            f"Scan exceeded its {budget:g}s budget after {completed}/{total} files; "
            "refusing to report a partial scan"
        )


class _ViolationSink:
    """The only shared mutable state of a scan, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.violations: list[Violation] = []
        self.warnings: list[ScanWarning] = []
        self.scanned = 0

    def add(self, match: FileMatch) -> None:
        with self._lock:
            if match.warning is not None:
                self.warnings.append(match.warning)
                return
            self.scanned += 1
            self.violations.extend(match.violations)


class ScanEngine:
    """Scans a repository tree against a policy with a bounded worker pool."""

    def __init__(
        self,
        policy: Policy,
        root: str | Path = ".",
        workers: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self._policy = policy
        self._root = Path(root).resolve()
        self._workers = max(1, workers or os.cpu_count() or 1)
        self._timeout = timeout
        self._exclusions = GlobSet(policy.exclusions)
        self._resolver = ExceptionResolver(policy)

    @property
    def root(self) -> Path:
        return self._root

    def scan(self) -> ScanReport:
        """Scan the tree and return the complete report.

        Raises ScanTimeoutError when the budget runs out before every file
        has been matched.
        """
        start = time.monotonic()
        enumeration = enumerate_files(
            self._policy.scan_paths, self._exclusions, self._root
        )
        files = enumeration.files
        if self._over_budget(start):
            raise ScanTimeoutError(self._timeout, 0, len(files))
        logger.info(
            "Scanning %d files under %s with policy '%s' (%d workers)",
            len(files),
            self._root,
            self._policy.name,
            self._workers,
        )

        sink = _ViolationSink()
        timed_out = False
        pool = ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="readygate-scan"
        )
        try:
            futures = [pool.submit(self._scan_file, f, sink) for f in files]
            remaining = None
            if self._timeout is not None:
                remaining = max(0.0, self._timeout - (time.monotonic() - start))
            done, pending = wait(futures, timeout=remaining)
            if pending:
                timed_out = True
                for future in pending:
                    future.cancel()
                raise ScanTimeoutError(self._timeout or 0.0, len(done), len(futures))
            # Surface unexpected worker failures instead of reporting a clean scan
            for future in done:
                future.result()
            if self._over_budget(start):
                raise ScanTimeoutError(self._timeout, len(done), len(futures))
        finally:
            pool.shutdown(wait=not timed_out, cancel_futures=True)

        report = aggregate(
            sink.violations,
            scanned_file_count=sink.scanned,
            duration=time.monotonic() - start,
            warnings=[*enumeration.warnings, *sink.warnings],
            policy=self._policy,
        )
        logger.info(
            "Scan finished: %d files, %d errors, %d warnings in %.2fs",
            report.scanned_file_count,
            report.error_count,
            report.warning_count,
            report.duration,
        )
        return report

    def _over_budget(self, start: float) -> bool:
        return self._timeout is not None and time.monotonic() - start > self._timeout

    def _scan_file(self, file: str, sink: _ViolationSink) -> None:
        logger.debug("Matching %s", file)
        sink.add(
            match_file(
                self._root,
                file,
                self._policy.forbidden_patterns,
                self._resolver.is_excepted,
            )
        )
