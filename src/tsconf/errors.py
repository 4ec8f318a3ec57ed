"""Typed exceptions for tsconf configuration loading.

Every failure of the loading pipeline is reported as a :class:`ConfigLoadError`
carrying exactly one :class:`ErrorCause` tag. Programs are expected to branch
on the tag, the message is meant for humans:

>>> try:
...     config = await load_config("/abs/path/config.ts")
... except ConfigLoadError as err:
...     if err.cause is ErrorCause.HALT_AND_CHECK:
...         sys.exit(0)
...     raise
"""

from enum import Enum
from typing import Any, Optional


class ErrorCause(str, Enum):
    """Closed set of reasons a configuration could not be produced."""

    FILE_NOT_FOUND = "file_not_found"
    HALT_AND_CHECK = "halt_and_check"
    NO_EXPORTS = "no_exports"
    UNCERTAIN_EXPORT = "uncertain_export"
    INVALID_DEFAULT_CONFIG_FORMAT = "invalid_default_config_format"
    INVALID_CONFIG_FORMAT = "invalid_config_format"
    INVALID_PATH = "invalid_path"
    TRANSPILE_FAILED = "transpile_failed"


class ConfigLoadError(Exception):
    """Raised when a configuration cannot be resolved.

    Attributes
    ----------
    cause : ErrorCause
        Tag identifying why the operation failed
    reason : str, optional
        Finer-grained sub-code (e.g. `not_absolute_path`)
    """

    def __init__(self, message: str, cause: ErrorCause, reason: Optional[str] = None):
        """Initialize the error with its tag.

        Parameters
        ----------
        message : str
            Human readable explanation
        cause : ErrorCause
            Tag identifying the failure
        reason : str, optional
            Finer-grained sub-code
        """
        self.cause = ErrorCause(cause)
        self.reason = reason
        super().__init__(message)

    def __repr__(self):
        """Include the cause tag in the representation."""
        return f"{type(self).__name__}({str(self)!r}, cause={self.cause.value!r})"


class UnsupportedSourceError(Exception):
    """Raised by a module loader that cannot interpret a source kind."""


class CompilerError(RuntimeError):
    """Raised when an external compiler rejects a config source.

    Attributes
    ----------
    path : str
        Source file that was being compiled
    stderr : str
        Diagnostic output of the compiler
    """

    def __init__(self, path: str, stderr: str, tool: str = "compiler"):
        self.path = path
        self.stderr = stderr
        self.tool = tool
        super().__init__(f"{tool} failed for {path}:\n{stderr.strip()}")


def is_known_cause(cause: Any) -> bool:
    """Check whether a value is one of the recognised error causes.

    Accepts an :class:`ErrorCause` member, its string tag, or a
    :class:`ConfigLoadError` instance.

    Parameters
    ----------
    cause : Any
        Value to check

    Returns
    -------
    bool
        `True` if the value maps onto a known cause
    """
    if isinstance(cause, ConfigLoadError):
        return True
    if isinstance(cause, ErrorCause):
        return True
    if isinstance(cause, str):
        return cause in ErrorCause._value2member_map_

    return False
