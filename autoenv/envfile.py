"""Reading, merging and writing KEY=VALUE env files."""

import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path

from .errors import EnvFileError

logger = logging.getLogger(__name__)

HEADER = "# Auto-generated environment variables\n# Add your values below\n\n"


def parse_env_text(text: str) -> dict[str, str]:
    """Parse KEY=VALUE lines; blank lines, comments and lines without '=' are skipped."""
    entries: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        entries[key.strip()] = value.strip()
    return entries


def read_existing_env(path: str | Path) -> dict[str, str]:
    """Read an env file into a mapping; a missing file gives an empty mapping.

    Raises:
        EnvFileError: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError(path, e) from e
    return parse_env_text(text)


def is_writable_key(name: str) -> bool:
    """True if a name survives being written as KEY= and parsed back."""
    return name == name.strip() and "=" not in name and not name.startswith("#")


def merge_variables(existing: Mapping[str, str], discovered: Iterable[str]) -> dict[str, str]:
    """Add discovered names with empty values; existing values are never touched.

    Names that would read back as a different key (surrounding whitespace,
    an '=' or a leading '#') are skipped with a warning.
    """
    merged = dict(existing)
    for name in discovered:
        if not is_writable_key(name):
            logger.warning(f"Skipping variable {name!r}: cannot be written as an env file key")
            continue
        merged.setdefault(name, "")
    return merged


def render_env_file(entries: Mapping[str, str]) -> str:
    lines = [HEADER]
    for key in sorted(entries):
        lines.append(f"{key}={entries[key]}\n")
    return "".join(lines)


def _atomic_write(path: Path, content: str) -> None:
    # Temp file lives next to the target so os.replace stays on one filesystem
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        # mkstemp creates 0600; keep the old file's mode, or a normal 0644
        mode = path.stat().st_mode & 0o777 if path.exists() else 0o644
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def write_env_file(
    variables: Iterable[str],
    output_path: str | Path,
    merge_existing: bool = True,
) -> dict[str, str]:
    """Write the env file for a set of discovered variable names.

    Args:
        variables: Names found by the scanner
        output_path: File to create or update
        merge_existing: Keep entries (and their values) already in output_path

    Returns:
        The entries that were written

    Raises:
        EnvFileError: If the existing file cannot be read or the output
            cannot be written; the previous file is left untouched
    """
    # Resolve so a symlinked output is updated through the link, not replaced
    output_path = Path(output_path).resolve()
    existing = read_existing_env(output_path) if merge_existing else {}
    entries = merge_variables(existing, variables)

    try:
        _atomic_write(output_path, render_env_file(entries))
    except OSError as e:
        raise EnvFileError(output_path, e) from e

    logger.debug(f"Wrote {len(entries)} entries to {output_path}")
    return entries
