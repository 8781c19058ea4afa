"""Source file discovery with gitignore-style directory exclusion.

Uses pathspec for pattern matching. The built-in patterns always apply:
hidden directories (``.git/``, ``.cargo/`` ...) and Cargo's ``target/``
build directory are pruned and never descended into. Extra patterns come
from the ``exclude`` configuration key and use the same syntax.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathspec import PathSpec

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = frozenset({".rs"})

BUILD_DIR_NAME = "target"

DEFAULT_EXCLUDES = (
    ".*/",
    f"{BUILD_DIR_NAME}/",
)


def load_exclude_spec(extra: Iterable[str] = ()) -> "PathSpec":
    """Build a PathSpec from the built-in exclusions plus extra patterns.

    Args:
        extra: Additional gitignore-style patterns

    Returns:
        PathSpec matcher for relative paths
    """
    import pathspec

    patterns = list(DEFAULT_EXCLUDES)
    patterns.extend(extra)
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def _raise_walk_error(error: OSError) -> None:
    raise error


def find_source_files(
    root: str | Path,
    exclude: Iterable[str] = (),
    extensions: Iterable[str] = SOURCE_EXTENSIONS,
) -> list[Path]:
    """Find every source file under root, skipping excluded directories.

    Args:
        root: Directory to search
        exclude: Extra gitignore-style patterns on top of DEFAULT_EXCLUDES
        extensions: File suffixes to collect

    Returns:
        Sorted list of paths to source files; files reached through a
        symlinked directory are listed under the link

    Raises:
        OSError: If root or any directory below it cannot be listed
    """
    root = Path(root)
    spec = load_exclude_spec(exclude)
    extensions = frozenset(extensions)
    files = []

    # Symlinked directories are followed; (st_dev, st_ino) pairs stop link cycles
    root_stat = os.stat(root)
    visited = {(root_stat.st_dev, root_stat.st_ino)}

    # onerror re-raises so an unreadable directory aborts the walk
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error, followlinks=True):
        rel_dir = os.path.relpath(dirpath, root)
        # Prune in place so os.walk never descends into excluded directories
        kept = []
        for d in dirnames:
            rel = d if rel_dir == "." else os.path.join(rel_dir, d)
            if spec.match_file(rel + "/"):
                logger.debug(f"Skipping excluded directory {rel}")
                continue
            st = os.stat(os.path.join(dirpath, d))
            key = (st.st_dev, st.st_ino)
            if key in visited:
                logger.debug(f"Skipping already visited directory {rel}")
                continue
            visited.add(key)
            kept.append(d)
        dirnames[:] = kept

        for filename in filenames:
            if os.path.splitext(filename)[1] not in extensions:
                continue
            rel_path = filename if rel_dir == "." else os.path.join(rel_dir, filename)
            if spec.match_file(rel_path):
                continue
            files.append(Path(dirpath) / filename)

    files.sort()
    logger.debug(f"Found {len(files)} source files under {root}")
    return files
