"""Exceptions raised by autoenv.

Every error carries the path it concerns so the command line can report
something actionable. Nothing in the package retries; callers decide.
"""

from pathlib import Path


class AutoEnvError(Exception):
    """Base class for all autoenv failures."""


class PatternError(AutoEnvError):
    """Raised when the built-in literal set or extraction regex is unusable."""


class ConfigError(AutoEnvError):
    """Raised when a configuration file cannot be read or has bad values."""
    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid configuration {self.path}: {reason}")


class ScanError(AutoEnvError):
    """Raised when a file or directory cannot be scanned."""
    def __init__(self, path: str | Path, error: Exception):
        self.path = Path(path)
        self.original_error = error
        super().__init__(f"Failed to scan {self.path}: {error}")


class EnvFileError(AutoEnvError):
    """Raised when the existing env file cannot be read or the output cannot be written."""
    def __init__(self, path: str | Path, error: Exception):
        self.path = Path(path)
        self.original_error = error
        super().__init__(f"Failed to update {self.path}: {error}")
