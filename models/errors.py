"""
Exception types for the Banker's Algorithm Safety Calculator.

Structural problems with caller input raise one of these. Requests that the
algorithm refuses (exceeds need, not available, unsafe) are NOT errors and
come back as a normal RequestResult.
"""


class BankersError(Exception):
    """Base class for all calculator errors."""
    pass


class InvalidArgumentError(BankersError, ValueError):
    """Raised when a matrix, vector or request is malformed."""
    pass


class DimensionMismatchError(InvalidArgumentError):
    """Raised when two matrices or vectors do not have matching shapes."""
    pass


class InvalidProcessIdError(InvalidArgumentError, IndexError):
    """Raised when a process index is outside 0..P-1."""

    def __init__(self, process_id, process_count: int = None):
        self.process_id = process_id
        self.process_count = process_count
        message = f"Invalid process ID: {process_id}"
        if process_count is not None:
            message += f" (valid range 0..{process_count - 1})"
        super().__init__(message)
