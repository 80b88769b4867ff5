"""
Error Kinds
===========

Every failure inside the package is raised as a subclass of ``TIACError``
carrying an ``ErrorKind``. The boundary layer (``tiac.boundary``) catches
these once and turns them into a failure outcome; nothing raises past it.
"""

from enum import Enum


class ErrorKind(Enum):
    PARAMETER_GENERATION_FAILURE = "ParameterGenerationFailure"
    INVALID_THRESHOLD = "InvalidThreshold"
    INVALID_AUTHORITY_COUNT = "InvalidAuthorityCount"
    INVALID_PARAMETERS = "InvalidParameters"
    MALFORMED_ENCODING = "MalformedEncoding"
    OUT_OF_RANGE = "OutOfRange"
    UNSUPPORTED_SECURITY_LEVEL = "UnsupportedSecurityLevel"
    UNKNOWN_FAILURE = "UnknownFailure"

    @property
    def is_caller_error(self) -> bool:
        """True for errors caused by the caller's input rather than the environment."""
        return self not in (ErrorKind.PARAMETER_GENERATION_FAILURE, ErrorKind.UNKNOWN_FAILURE)


class TIACError(ValueError):
    """Base class for all setup/keygen errors."""

    kind = ErrorKind.UNKNOWN_FAILURE

    def __init__(self, message: str, field: str = None):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)


class ParameterGenerationFailure(TIACError):
    kind = ErrorKind.PARAMETER_GENERATION_FAILURE


class InvalidThreshold(TIACError):
    kind = ErrorKind.INVALID_THRESHOLD


class InvalidAuthorityCount(TIACError):
    kind = ErrorKind.INVALID_AUTHORITY_COUNT


class InvalidParameters(TIACError):
    kind = ErrorKind.INVALID_PARAMETERS


class MalformedEncoding(TIACError):
    kind = ErrorKind.MALFORMED_ENCODING


class OutOfRange(TIACError):
    kind = ErrorKind.OUT_OF_RANGE


class UnsupportedSecurityLevel(TIACError):
    kind = ErrorKind.UNSUPPORTED_SECURITY_LEVEL
