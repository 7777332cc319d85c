"""Exception hierarchy for sentinel.

Three families matter to callers:

- precondition failures (``DirectoryNotFoundError``) abort a run before any
  file is touched;
- per-file access failures (``SourceFileNotFoundError``, ``FileReadError``,
  ``OutOfRangeLineError``) are caught by the rule base and recorded;
- lookup misses (``ParamTagNotFoundError``, ``ThrowsTagNotFoundError``) signal
  that a named tag does not exist on a DocBlock.
"""


class SentinelError(Exception):
    """Base class for all sentinel errors."""


class DirectoryNotFoundError(SentinelError):
    """Raised when the directory to analyze does not exist."""

    def __init__(self, directory: str):
        self.directory = directory
        super().__init__(f"Directory not found: {directory}")


class SourceFileNotFoundError(SentinelError):
    """Raised when a source file is missing or is not a regular file."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")


class FileReadError(SentinelError):
    """Raised when a source file exists but cannot be read."""

    def __init__(self, file_path: str, reason: str | None = None):
        self.file_path = file_path
        self.reason = reason
        message = f"Failed to read file: {file_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class OutOfRangeLineError(SentinelError):
    """Raised when a 1-based line number falls outside a file."""

    def __init__(self, file_path: str, line: int):
        self.file_path = file_path
        self.line = line
        super().__init__(f"Line {line} is out of range in file: {file_path}")


class ParamTagNotFoundError(SentinelError):
    """Raised when a DocBlock has no @param tag for the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"@param tag not found for parameter: ${name}")


class ThrowsTagNotFoundError(SentinelError):
    """Raised when a DocBlock has no @throws tag for the requested exception."""

    def __init__(self, exception: str):
        self.exception = exception
        super().__init__(f"@throws tag not found for exception: {exception}")
