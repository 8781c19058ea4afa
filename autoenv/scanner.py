"""Environment variable scanner for Rust source trees.

Finds literal-keyed accessor calls such as ``std::env::var("KEY")``,
``env::var_os("KEY")`` and ``dotenv::var("KEY")`` and collects the keys.

Each file is scanned in three passes whose results are unioned:
1. line by line, looking only at the text before any ``//`` marker
2. the same gate and extraction on whole lines that carry no marker
3. the file with comment-only lines dropped, trailing comments cut and
   the rest joined by single spaces, which catches calls whose argument
   sits on a different line than the call name

Files are scanned concurrently in a thread pool. Any failure aborts the
whole directory scan; a partial result is never returned.
"""

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from .config import Config
from .errors import ScanError
from .patterns import Extractor, LiteralMatcher, is_ignored
from .walker import find_source_files

logger = logging.getLogger(__name__)

COMMENT_MARKER = "//"


def merge_results(partials: Iterable[set[str]]) -> set[str]:
    """Union per-file result sets into one."""
    merged: set[str] = set()
    for partial in partials:
        merged |= partial
    return merged


class EnvScanner:
    """Scans files and directories for environment variable names.

    The configuration is read-only once the scanner is built; one instance
    may be shared across worker threads.
    """

    def __init__(self, config: Config | None = None, max_workers: int | None = None):
        self.config = config if config is not None else Config()
        self.max_workers = max_workers
        self.matcher = LiteralMatcher()
        self.extractor = Extractor()
        self._ignore = frozenset(self.config.ignore)

    def _collect(self, text: str, found: set[str]) -> None:
        """Gate on the literal matcher, then extract and filter into found."""
        if not self.matcher.is_match(text):
            return
        for name in self.extractor.extract(text):
            if not is_ignored(name, self._ignore):
                found.add(name)

    def _scan_lines(self, text: str, found: set[str]) -> None:
        for line in text.splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(COMMENT_MARKER):
                continue

            comment_pos = line.find(COMMENT_MARKER)
            if comment_pos != -1:
                self._collect(line[:comment_pos], found)
            else:
                self._collect(line, found)

    def _scan_normalized(self, text: str, found: set[str]) -> None:
        kept = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith(COMMENT_MARKER):
                continue
            comment_pos = line.find(COMMENT_MARKER)
            if comment_pos != -1:
                line = line[:comment_pos].rstrip()
                if not line:
                    continue
            kept.append(line)
        self._collect(" ".join(kept), found)

    def scan_text(self, text: str) -> set[str]:
        """Return the set of variable names referenced in source text."""
        found: set[str] = set()
        self._scan_lines(text, found)
        self._scan_normalized(text, found)
        return found

    def scan_file(self, path: str | Path) -> set[str]:
        """Scan a single file.

        Raises:
            ScanError: If the file cannot be read or is not valid UTF-8
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScanError(path, e) from e
        return self.scan_text(text)

    def find_files(self, root: str | Path) -> list[Path]:
        """List the source files a directory scan would visit."""
        try:
            return find_source_files(root, exclude=self.config.exclude)
        except OSError as e:
            raise ScanError(getattr(e, "filename", None) or root, e) from e

    def _scan_files(self, files: list[Path]) -> dict[Path, set[str]]:
        """Scan files concurrently, failing fast on the first error."""
        results: dict[Path, set[str]] = {}
        if not files:
            return results

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            future_to_path = {executor.submit(self.scan_file, f): f for f in files}
            for future in as_completed(future_to_path):
                path = future_to_path[future]
                # ScanError propagates; the finally block drops queued work
                results[path] = future.result()
                logger.debug(f"Scanned {path}: {len(results[path])} variables")
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
        return results

    def scan_directory(self, root: str | Path) -> set[str]:
        """Scan every source file under root and return all variable names.

        Raises:
            ScanError: If any directory or file cannot be read
        """
        files = self.find_files(root)
        logger.debug(f"Scanning {len(files)} files under {root}")
        return merge_results(self._scan_files(files).values())

    def scan_directory_with_locations(self, root: str | Path) -> dict[str, list[str]]:
        """Scan like scan_directory, also reporting where each name is used.

        Returns:
            Mapping of variable name to sorted root-relative file paths
            (forward slashes), in name order
        """
        root = Path(root)
        per_file = self._scan_files(self.find_files(root))

        locations: dict[str, set[str]] = {}
        for path, names in per_file.items():
            rel = Path(os.path.relpath(path, root)).as_posix()
            for name in names:
                locations.setdefault(name, set()).add(rel)
        return {name: sorted(locations[name]) for name in sorted(locations)}
