"""Path resolution: glob matching and deterministic file enumeration."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from readygate.scanner.models import ScanWarning, WarningKind

logger = logging.getLogger(__name__)

# Version-control metadata is never part of a scanned tree
_SKIP_DIRS = {".git", ".hg", ".svn"}


def glob_to_regex(pattern: str) -> str:
    """Translate a path glob into a regex body (unanchored).

    ``*`` stays inside one path segment, ``**`` crosses segments and ``**/``
    may match zero directories. ``{a,b}`` and ``[...]`` are supported.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                at_segment_start = i == 0 or pattern[i - 1] == "/"
                if at_segment_start and i + 2 < n and pattern[i + 2] == "/":
                    out.append("(?:.*/)?")
                    i += 3
                else:
                    out.append(".*")
                    i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = end
        elif c == "{":
            end = pattern.find("}", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                options = pattern[i + 1 : end].split(",")
                out.append("(?:" + "|".join(glob_to_regex(o) for o in options) + ")")
                i = end
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob matched against a whole repo-relative POSIX path."""
    pattern = normalize_path(pattern)
    if pattern == "**":
        return re.compile(r".*")
    if pattern.endswith("/**"):
        # "dir/**" covers the directory itself and everything below it
        body = glob_to_regex(pattern[:-3])
        return re.compile(f"(?:{body})(?:/.*)?")
    return re.compile(glob_to_regex(pattern))


def normalize_path(path: str) -> str:
    """Repo-relative POSIX form: no backslashes, no ``./`` prefix, no trailing slash."""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.rstrip("/")
    return "" if path == "." else path


def ancestors(path: str) -> Iterator[str]:
    """Yield ``path`` and then each parent directory, innermost first."""
    while path:
        yield path
        path = path.rpartition("/")[0]


class GlobSet:
    """A compiled set of globs where a match on any ancestor counts."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns = tuple(patterns)
        self._compiled = [compile_glob(p) for p in self.patterns]

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def matches(self, path: str) -> bool:
        if not self._compiled:
            return False
        for candidate in ancestors(normalize_path(path)):
            for regex in self._compiled:
                if regex.fullmatch(candidate):
                    return True
        return False


@dataclass
class Enumeration:
    """Sorted candidate files plus non-fatal problems met on the way."""

    files: list[str] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)


def enumerate_files(
    scan_paths: Iterable[str],
    exclusions: Iterable[str] | GlobSet,
    root: str | Path = ".",
) -> Enumeration:
    """List every non-excluded file under ``scan_paths``, sorted lexicographically."""
    root = Path(root).resolve()
    excluded = exclusions if isinstance(exclusions, GlobSet) else GlobSet(exclusions)
    found: set[str] = set()
    result = Enumeration()

    for scan_path in scan_paths:
        rel = normalize_path(scan_path)
        if rel and excluded.matches(rel):
            logger.debug("Scan path %s is excluded", rel)
            continue

        target = root / rel
        if target.is_file():
            found.add(rel)
            continue
        if not target.is_dir():
            logger.warning("Scan path does not exist: %s", rel or ".")
            result.warnings.append(
                ScanWarning(
                    kind=WarningKind.MISSING_PATH,
                    path=rel or ".",
                    message="scan path does not exist",
                )
            )
            continue

        def on_walk_error(error: OSError, scan_root: str = rel) -> None:
            path = _relative(root, error.filename) if error.filename else scan_root
            logger.warning("Cannot read directory %s: %s", path or ".", error)
            result.warnings.append(
                ScanWarning(
                    kind=WarningKind.UNREADABLE_DIR,
                    path=path or ".",
                    message=error.strerror or str(error),
                )
            )

        for dirpath, dirnames, filenames in os.walk(target, onerror=on_walk_error):
            base = _relative(root, dirpath)
            # Prune excluded directories in-place so they are never descended
            dirnames[:] = [
                d
                for d in dirnames
                if d not in _SKIP_DIRS and not excluded.matches(_join(base, d))
            ]
            for name in filenames:
                rel_file = _join(base, name)
                if not excluded.matches(rel_file):
                    found.add(rel_file)

    result.files = sorted(found)
    result.warnings.sort(key=lambda w: w.path)
    logger.debug("Enumerated %d files", len(result.files))
    return result


def _relative(root: Path, dirpath: str) -> str:
    rel = Path(dirpath).relative_to(root).as_posix()
    return "" if rel == "." else rel


def _join(base: str, name: str) -> str:
    return f"{base}/{name}" if base else name
