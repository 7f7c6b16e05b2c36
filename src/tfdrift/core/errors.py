"""Error taxonomy shared by the fingerprinter, the reconciler and the store."""

from __future__ import annotations


class DriftError(Exception):
    """Base class for tfdrift errors."""

    retryable: bool = False


class SerializationError(DriftError):
    """A live spec could not be projected or encoded into a fingerprint."""


class UnsupportedKindError(SerializationError):
    """No fingerprinting strategy exists for the resource kind."""


class WriteConflictError(DriftError):
    """The owned annotations changed between fetch and patch."""

    retryable = True


class StoreUnavailableError(DriftError):
    """The resource store could not be reached or answered with an error."""

    retryable = True

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
