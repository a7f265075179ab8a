"""
Errors raised by the loader, the correlation engine and the peak extractor.

File open failures are not wrapped: they surface as the builtin OSError.
"""


class CorrelationError(Exception):
    """Base class for iq_xcorr errors."""


class TruncatedReadError(CorrelationError):
    """Raised when a file holds fewer sample pairs than the requested window."""

    def __init__(self, path, start_offset: int, count: int, available: int):
        self.path = path
        self.start_offset = start_offset
        self.count = count
        self.available = available
        super().__init__(
            f"{path}: requested samples [{start_offset}, {start_offset + count}) "
            f"but file holds only {available}"
        )


class LengthMismatchError(CorrelationError, ValueError):
    """Raised when the two sequences given to one correlation differ in length."""


class InvalidWorkerCountError(CorrelationError, ValueError):
    """Raised when worker_count is zero or negative."""


class EmptyInputError(CorrelationError, ValueError):
    """Raised when a peak is requested from an empty correlation vector."""
