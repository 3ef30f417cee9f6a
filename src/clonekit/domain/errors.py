"""Exception taxonomy for clone strategies.

These exceptions never cross the public ``clone()`` boundary. Each one is
raised at its point of origin inside a strategy and converted into a
:class:`~clonekit.services.result.CloneFailure` by the strategy wrapper.
"""

from __future__ import annotations

from clonekit.domain.types import FailureKind


class CloneError(Exception):
    """Base class; ``code`` identifies the failure for result records."""

    code: FailureKind = FailureKind.UNSUPPORTED_TYPE

    def __init__(self, message: str, *, path: str = "$") -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class NotSerializableError(CloneError):
    """A type in the graph lacks the binary-serialization marker."""

    code = FailureKind.NOT_SERIALIZABLE


class UnauthorizedTrustError(CloneError):
    """The binary round trip was requested without a safe-source assertion."""

    code = FailureKind.UNAUTHORIZED_TRUST


class EncodingError(CloneError):
    code = FailureKind.ENCODING_FAILURE


class DecodingError(CloneError):
    code = FailureKind.DECODING_FAILURE


class ReflectiveAccessError(CloneError):
    """A field could not be read from the source or written to the clone."""

    code = FailureKind.REFLECTIVE_ACCESS_DENIED


class UnsupportedTypeError(CloneError):
    code = FailureKind.UNSUPPORTED_TYPE


class CapabilityMissingError(CloneError):
    """Reflective traversal is not available in this runtime or configuration."""

    code = FailureKind.CAPABILITY_MISSING


class InvalidRequestError(CloneError):
    code = FailureKind.INVALID_REQUEST


class TraversalAbortedError(CloneError):
    """The recursive traversal hit an unrecoverable runtime limit."""

    code = FailureKind.TRAVERSAL_ABORTED
