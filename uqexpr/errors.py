# Exception hierarchy for uqexpr.

from typing import Optional

from .messages import (
    DUPLICATE_NAME_MESSAGE,
    FILE_READ_MESSAGE,
    INVALID_VARIABLES_MESSAGE,
    USAGE_MESSAGE,
    ExitStatus,
)


class UqexprError(Exception):
    """Base class for fatal startup errors.

    Each subclass knows the exit status the process must terminate with; the
    exception text is the single diagnostic line written to stderr.
    """
    status: ExitStatus = ExitStatus.USAGE
    message: str = USAGE_MESSAGE

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class UsageError(UqexprError):
    """Malformed command line."""
    status = ExitStatus.USAGE
    message = USAGE_MESSAGE


class InvalidVariablesError(UqexprError):
    """A --def or --forloop value failed validation."""
    status = ExitStatus.INVALID_VARIABLES
    message = INVALID_VARIABLES_MESSAGE


class DuplicateNameError(UqexprError):
    """Two bindings given on the command line share a name."""
    status = ExitStatus.DUPLICATE_NAME
    message = DUPLICATE_NAME_MESSAGE


class FileReadError(UqexprError):
    """The input file cannot be opened for reading."""
    status = ExitStatus.FILE_READ

    def __init__(self, path: str):
        self.path = path
        super().__init__(FILE_READ_MESSAGE.format(path=path))


class LineError(Exception):
    """A single input line could not be processed. Never fatal."""
    pass
