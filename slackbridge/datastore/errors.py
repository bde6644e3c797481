"""Datastore exception hierarchy.

Lookups never raise for missing records; they return None. Exceptions
are reserved for malformed arguments and for capabilities a backend
refuses to fake. Faults from the backing files (OSError and friends)
are not wrapped.
"""


class DatastoreError(Exception):
    """Base exception for datastore errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidArgumentError(DatastoreError, ValueError):
    """Raised when a write is missing required fields."""


class UnsupportedOperationError(DatastoreError, NotImplementedError):
    """Raised when a backend cannot serve an operation and must not pretend to."""

    def __init__(self, operation: str, backend: str) -> None:
        super().__init__(f"{operation} is not supported on {backend}")
        self.operation = operation
        self.backend = backend
