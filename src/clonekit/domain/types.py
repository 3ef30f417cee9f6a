"""Classification enums shared by every layer.

Categories drive the recursive traversal, status codes are the public
contract of ``clone()``, and failure kinds name every way a strategy
can decline or degrade.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Category(StrEnum):
    """Structural category of a value, as seen by the recursive cloner."""

    NULL = "null"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    COMPLEX = "complex"
    UNSUPPORTED = "unsupported"


class StatusCode(IntEnum):
    """Integer result of a clone call."""

    FULL = 0
    PARTIAL = 1
    FAILED = 2


class StrategyKind(StrEnum):
    """The closed set of cloning techniques."""

    FULL = "full"
    RECURSIVE = "recursive"
    TEXT = "text"


class FailureKind(StrEnum):
    """Machine-readable codes carried by CloneFailure records."""

    NOT_SERIALIZABLE = "not_serializable"
    UNAUTHORIZED_TRUST = "unauthorized_trust"
    ENCODING_FAILURE = "encoding_failure"
    DECODING_FAILURE = "decoding_failure"
    REFLECTIVE_ACCESS_DENIED = "reflective_access_denied"
    UNSUPPORTED_TYPE = "unsupported_type"
    CAPABILITY_MISSING = "capability_missing"
    INVALID_REQUEST = "invalid_request"
    TRAVERSAL_ABORTED = "traversal_aborted"
    INTERNAL_ERROR = "internal_error"
