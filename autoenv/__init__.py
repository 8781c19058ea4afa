"""Scan Rust projects for environment variable usage and generate .env files.

Library entry points:
- scan_for_env_vars(path) - set of variable names used under path
- generate_env_file(path) - write path/.env with the default configuration
- generate_env_file_with_config(path, config) - write path/<config.output>
- generate_env_file_to(scan_path, output_path) - write to an explicit path
"""

from pathlib import Path

from .config import Config, load_config
from .envfile import write_env_file
from .errors import AutoEnvError, ConfigError, EnvFileError, PatternError, ScanError
from .scanner import EnvScanner

__version__ = "0.1.0"

__all__ = [
    "AutoEnvError",
    "Config",
    "ConfigError",
    "EnvFileError",
    "EnvScanner",
    "PatternError",
    "ScanError",
    "generate_env_file",
    "generate_env_file_to",
    "generate_env_file_with_config",
    "load_config",
    "scan_for_env_vars",
]


def scan_for_env_vars(path: str | Path) -> set[str]:
    """Return every variable name used under path, with the default configuration."""
    return EnvScanner().scan_directory(path)


def generate_env_file(path: str | Path) -> Path:
    """Scan path and write path/.env with the default configuration."""
    return generate_env_file_with_config(path, Config())


def generate_env_file_with_config(path: str | Path, config: Config) -> Path:
    """Scan path and write the configured output file inside it.

    Returns:
        Path of the written file
    """
    scanner = EnvScanner(config)
    variables = scanner.scan_directory(path)
    output_path = Path(path) / config.output
    write_env_file(variables, output_path, merge_existing=config.merge_existing)
    return output_path


def generate_env_file_to(scan_path: str | Path, output_path: str | Path) -> Path:
    """Scan scan_path with the default configuration and write output_path."""
    config = Config()
    variables = EnvScanner(config).scan_directory(scan_path)
    write_env_file(variables, output_path, merge_existing=config.merge_existing)
    return Path(output_path)
