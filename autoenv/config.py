"""autoenv.toml configuration.

Recognized keys (all optional):

    output = ".env"              # name of the generated file
    merge_existing = true        # keep values already in the output file
    ignore = ["HOME", "PATH"]    # variable names to leave out
    exclude = ["examples/"]      # extra gitignore-style paths to skip

Reading uses the standard library tomllib; printing and scaffolding use
tomli-w.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable

import tomli_w

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "autoenv.toml"
DEFAULT_OUTPUT = ".env"

SAMPLE_HEADER = """\
# Auto Environment Generator Configuration
# Generated by `autoenv init-config`; edit to customize

"""

# Common variables that rarely belong in a project .env
SAMPLE_IGNORE = ["HOME", "PATH", "USER"]


@dataclass
class Config:
    """Settings for a scan-and-generate run."""
    output: str = DEFAULT_OUTPUT
    merge_existing: bool = True
    ignore: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    def with_overrides(
        self,
        output: str | None = None,
        no_merge: bool = False,
        ignore: Iterable[str] = (),
    ) -> "Config":
        """Return a copy with command-line overrides applied.

        Extra ignore names are appended to the configured ones.
        """
        return replace(
            self,
            output=output if output is not None else self.output,
            merge_existing=False if no_merge else self.merge_existing,
            ignore=[*self.ignore, *ignore],
            exclude=list(self.exclude),
        )

    def to_toml(self) -> str:
        return tomli_w.dumps(asdict(self))


_FIELD_TYPES = {
    "output": str,
    "merge_existing": bool,
    "ignore": list,
    "exclude": list,
}


def _validate(path: Path, data: dict[str, Any]) -> dict[str, Any]:
    values = {}
    for key, value in data.items():
        expected = _FIELD_TYPES.get(key)
        if expected is None:
            logger.warning(f"Ignoring unknown configuration key {key!r} in {path}")
            continue
        if not isinstance(value, expected):
            raise ConfigError(
                path, f"{key!r} must be a {expected.__name__}, got {type(value).__name__}"
            )
        if expected is list and not all(isinstance(item, str) for item in value):
            raise ConfigError(path, f"{key!r} must be a list of strings")
        values[key] = value
    return values


def load_config(path: str | Path) -> Config:
    """Load configuration from a TOML file.

    Absent keys keep their defaults.

    Raises:
        ConfigError: If the file is unreadable, not TOML, or has bad values
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(path, f"cannot read file: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(path, f"malformed TOML: {e}") from e

    config = Config(**_validate(path, data))
    logger.debug(f"Loaded configuration from {path}: {config}")
    return config


def find_config(root: str | Path, explicit: str | Path | None = None) -> Path | None:
    """Pick the configuration file for a scan of root.

    An explicit path always wins (even if missing, so the caller reports it);
    otherwise autoenv.toml in root is used when present.
    """
    if explicit is not None:
        return Path(explicit)
    candidate = Path(root) / DEFAULT_CONFIG_NAME
    if candidate.is_file():
        return candidate
    return None


def resolve_config(root: str | Path, explicit: str | Path | None = None) -> Config:
    """Load the configuration that applies to root, or the defaults."""
    path = find_config(root, explicit)
    if path is None:
        return Config()
    return load_config(path)


def write_sample_config(path: str | Path, force: bool = False) -> tuple[bool, str]:
    """Scaffold a sample configuration file.

    Args:
        path: Where to write the file
        force: Overwrite an existing file

    Returns:
        Tuple of (created: bool, message: str)

    Raises:
        ConfigError: If the file cannot be written
    """
    path = Path(path)

    if path.exists() and not force:
        return False, f"Configuration file already exists: {path} (use --force to overwrite)"

    sample = Config(ignore=list(SAMPLE_IGNORE))
    try:
        path.write_text(SAMPLE_HEADER + sample.to_toml(), encoding="utf-8")
    except OSError as e:
        raise ConfigError(path, f"cannot write file: {e}") from e

    return (
        True,
        f"""Created configuration file: {path}

Edit the file to customize your settings:
  - output: Name of the generated file
  - merge_existing: Whether to preserve existing values
  - ignore: List of variables to skip
  - exclude: Extra paths to leave out of the scan""",
    )
