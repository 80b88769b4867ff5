"""
Setup / KeyGen Boundary
=======================

The two operations exposed to callers outside the package. Each returns an
outcome object instead of raising:

- ``perform_setup(security_level) -> SetupOutcome``
- ``perform_keygen(serialized_params, threshold, num_authorities) -> KeyGenOutcome``

On success the payload fields are populated and ``error_message`` is None.
On failure every payload field is None, ``success`` is False and
``error_message`` reads ``"<ErrorKind>: <detail>"``. No exception escapes
these two functions.

Outcomes own their payload. ``release()`` drops it and may be called any
number of times, on success or failure outcomes alike; outcomes are also
context managers that release on exit.
"""

import logging

from . import groups
from .errors import ErrorKind, TIACError, InvalidParameters
from .keygen import check_counts, keygen

logger = logging.getLogger(__name__)

PARAM_FIELDS = ('pairing_descriptor', 'prime_order', 'g1', 'g2', 'h1')


class Outcome:
    """Tagged result: success with payload, or failure with a message."""

    PAYLOAD_FIELDS = ()

    def __init__(self, success: bool, error_message: str = None,
                 error_kind: ErrorKind = None, **payload):
        unknown = set(payload) - set(self.PAYLOAD_FIELDS)
        if unknown:
            raise TypeError(f"unexpected payload fields: {sorted(unknown)}")
        self.success = success
        self.error_message = error_message
        self.error_kind = error_kind
        for name in self.PAYLOAD_FIELDS:
            setattr(self, name, payload.get(name) if success else None)

    @classmethod
    def failure(cls, error: Exception) -> 'Outcome':
        if isinstance(error, TIACError):
            kind = error.kind
        else:
            kind = ErrorKind.UNKNOWN_FAILURE
        detail = str(error) or type(error).__name__
        return cls(False, error_message=f"{kind.value}: {detail}", error_kind=kind)

    def to_dict(self) -> dict:
        result = {'success': self.success}
        for name in self.PAYLOAD_FIELDS:
            result[name] = getattr(self, name)
        result['error_message'] = self.error_message
        return result

    def release(self):
        """Drop every payload reference. Safe to call repeatedly."""
        for name in self.PAYLOAD_FIELDS:
            setattr(self, name, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        if self.success:
            return f"{type(self).__name__}(success=True)"
        return f"{type(self).__name__}(success=False, error_message={self.error_message!r})"


class SetupOutcome(Outcome):
    PAYLOAD_FIELDS = PARAM_FIELDS + ('security_level',)


class KeyGenOutcome(Outcome):
    PAYLOAD_FIELDS = ('master_verification_key', 'authority_shares', 'threshold', 'num_authorities')


def _log_failure(operation: str, error: Exception):
    if isinstance(error, TIACError) and error.kind.is_caller_error:
        logger.warning("%s rejected: %s", operation, error)
    elif isinstance(error, TIACError):
        logger.error("%s failed: %s", operation, error)
    else:
        logger.exception("%s failed unexpectedly", operation)


def perform_setup(security_level: int = groups.DEFAULT_SECURITY_LEVEL) -> SetupOutcome:
    """
    TIAC Setup behind the boundary.

    Parameters
    ----------
    security_level : int, optional
        Lambda, see ``groups.SECURITY_LEVELS``

    Returns
    -------
    SetupOutcome
        Hex fields ``pairing_descriptor``, ``prime_order``, ``g1``, ``g2``,
        ``h1`` plus ``security_level`` on success
    """
    try:
        params = groups.setup(security_level)
        return SetupOutcome(True, security_level=security_level, **params.serialize())
    except Exception as e:
        _log_failure('setup', e)
        return SetupOutcome.failure(e)


def perform_keygen(serialized_params: dict, threshold: int, num_authorities: int) -> KeyGenOutcome:
    """
    TIAC KeyGen behind the boundary.

    Parameters
    ----------
    serialized_params : dict
        The fields of a successful ``SetupOutcome`` (``to_dict()`` output is
        accepted as is; extra keys are ignored)
    threshold : int
        t, 1 <= t <= num_authorities
    num_authorities : int
        n >= 1

    Returns
    -------
    KeyGenOutcome
        ``master_verification_key`` as ``{alpha2, beta2, beta1}`` and
        ``authority_shares`` as a list of ``{index, xm, ym, vkm1, vkm2, vkm3}``
        ordered by index
    """
    try:
        check_counts(threshold, num_authorities)
        if not isinstance(serialized_params, dict):
            raise InvalidParameters(f"expected a mapping, got {type(serialized_params).__name__}")
        missing = [name for name in PARAM_FIELDS if serialized_params.get(name) is None]
        if missing:
            raise InvalidParameters(f"missing setup fields {missing}")

        params = groups.load_params(*(serialized_params[name] for name in PARAM_FIELDS))
        mvk, shares = keygen(params, threshold, num_authorities)
        return KeyGenOutcome(
            True,
            master_verification_key=mvk.serialize(params),
            authority_shares=[share.serialize(params) for share in shares],
            threshold=threshold,
            num_authorities=num_authorities,
        )
    except Exception as e:
        _log_failure('keygen', e)
        return KeyGenOutcome.failure(e)
