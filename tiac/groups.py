"""
Group Setup
===========

This module generates and reconstructs the bilinear pairing groups used by
TIAC Setup (Algorithm 1): params = (G1, G2, GT, p, g1, g2, h1).

Every call to ``setup`` draws a fresh PBC type A curve

    E: y^2 = x^3 + x  over F_q,   q = h * r - 1,   q = 3 (mod 4)

whose order-r subgroup carries a symmetric pairing e: G1 x G2 -> GT with
embedding degree 2. The subgroup order r is a Solinas prime
r = 2^exp2 + sign1 * 2^exp1 + sign0, exactly the shape PBC's ``a_gen`` uses.

The parameter set (q, h, r, exp2, exp1, sign1, sign0) is the group's
*descriptor*. It is published with the generators, and KeyGen rebuilds the
identical group from it; a KeyGen that generated its own group would produce
keys in a group nobody else uses.

Security level mapping (subgroup bits -> base field bits):

    160 -> (160, 512)   same size class as charm's 'SS512'
    256 -> (256, 512)   PBC a_gen(256, 512)
    384 -> (384, 1024)

The subgroup order r has rbits or rbits - 1 bits depending on sign1; q has
exactly qbits bits.

According to charm-crypto documentation:
- ``PairingGroup(path, param_file=True)`` loads a PBC parameter file
- ``group.random(G1)`` / ``group.random(G2)`` sample random points
- ``group.order()`` returns the prime order r
"""

import logging
import secrets
import tempfile

import gmpy2
from charm.toolbox.pairinggroup import PairingGroup, G1, G2

from . import codec
from .errors import (
    TIACError, InvalidParameters, MalformedEncoding,
    ParameterGenerationFailure, UnsupportedSecurityLevel,
)

logger = logging.getLogger(__name__)

SECURITY_LEVELS = {
    160: (160, 512),
    256: (256, 512),
    384: (384, 1024),
}

DEFAULT_SECURITY_LEVEL = 256

# Bounds accepted when decoding a descriptor supplied by a caller.
MIN_ORDER_BITS = 128
MAX_FIELD_BITS = 4096

MAX_GENERATOR_ATTEMPTS = 16


class PairingDescriptor:
    """
    PBC type A parameters identifying one pairing group instance.

    The text form is PBC's own parameter format, one ``key value`` pair per
    line, so the same string can be fed to any PBC-based implementation.
    """

    KEYS = ('q', 'h', 'r', 'exp2', 'exp1', 'sign1', 'sign0')

    def __init__(self, q: int, h: int, r: int, exp2: int, exp1: int, sign1: int, sign0: int):
        self.q = q
        self.h = h
        self.r = r
        self.exp2 = exp2
        self.exp1 = exp1
        self.sign1 = sign1
        self.sign0 = sign0

    def to_text(self) -> str:
        lines = ['type a']
        lines += [f"{key} {getattr(self, key)}" for key in self.KEYS]
        return '\n'.join(lines) + '\n'

    def to_hex(self) -> str:
        return self.to_text().encode('ascii').hex()

    @classmethod
    def from_text(cls, text: str) -> 'PairingDescriptor':
        """
        Parse and validate PBC type A parameter text.

        Raises
        ------
        InvalidParameters
            If the text is not a well-formed, internally consistent type A
            parameter set.
        """
        values = {}
        for number, line in enumerate(text.splitlines(), 1):
            parts = line.split()
            if not parts:
                continue
            if len(parts) != 2:
                raise InvalidParameters(f"line {number} is not a 'key value' pair", 'pairing_descriptor')
            if parts[0] in values:
                raise InvalidParameters(f"duplicate key {parts[0]!r} on line {number}", 'pairing_descriptor')
            values[parts[0]] = parts[1]

        if values.pop('type', None) != 'a':
            raise InvalidParameters("only PBC type 'a' pairings are supported", 'pairing_descriptor')
        missing = [key for key in cls.KEYS if key not in values]
        if missing:
            raise InvalidParameters(f"missing keys {missing}", 'pairing_descriptor')
        extra = sorted(set(values) - set(cls.KEYS))
        if extra:
            raise InvalidParameters(f"unexpected keys {extra}", 'pairing_descriptor')
        try:
            ints = {key: int(values[key], 10) for key in cls.KEYS}
        except ValueError as e:
            raise InvalidParameters(f"non-integer value ({e})", 'pairing_descriptor') from e

        descriptor = cls(**ints)
        descriptor.validate()
        return descriptor

    @classmethod
    def from_hex(cls, text: str) -> 'PairingDescriptor':
        if not isinstance(text, str) or len(text) % 2 or set(text) - codec.HEX_DIGITS:
            raise MalformedEncoding("expected an even-length lowercase hex string", 'pairing_descriptor')
        try:
            decoded = bytes.fromhex(text).decode('ascii')
        except UnicodeDecodeError as e:
            raise InvalidParameters("descriptor is not ASCII text", 'pairing_descriptor') from e
        return cls.from_text(decoded)

    def validate(self):
        """Check the algebraic relations every type A parameter set satisfies."""
        def fail(reason):
            raise InvalidParameters(reason, 'pairing_descriptor')

        if self.sign1 not in (1, -1) or self.sign0 not in (1, -1):
            fail("sign1 and sign0 must be 1 or -1")
        if not 0 < self.exp1 < self.exp2:
            fail("exponents must satisfy 0 < exp1 < exp2")
        rbits = self.r.bit_length()
        if rbits < MIN_ORDER_BITS:
            fail(f"subgroup order below {MIN_ORDER_BITS} bits")
        if rbits > MAX_FIELD_BITS or self.q.bit_length() > MAX_FIELD_BITS:
            fail(f"base field above {MAX_FIELD_BITS} bits")
        # bounds exp2 before it is used as a shift count
        if not rbits - 1 <= self.exp2 <= rbits + 1:
            fail(f"exp2 = {self.exp2} inconsistent with a {rbits}-bit r")
        if self.r != (1 << self.exp2) + self.sign1 * (1 << self.exp1) + self.sign0:
            fail("r does not match its Solinas form")
        if self.h <= 0 or self.h % 12:
            fail("cofactor h must be a positive multiple of 12")
        if self.q + 1 != self.h * self.r:
            fail("q + 1 != h * r")
        if not gmpy2.is_prime(self.r):
            fail("r is not prime")
        if not gmpy2.is_prime(self.q):
            fail("q is not prime")

    def __eq__(self, other):
        if not isinstance(other, PairingDescriptor):
            return NotImplemented
        return all(getattr(self, key) == getattr(other, key) for key in self.KEYS)

    def __hash__(self):
        return hash(tuple(getattr(self, key) for key in self.KEYS))

    def __repr__(self):
        return f"PairingDescriptor(rbits={self.r.bit_length()}, qbits={self.q.bit_length()})"


class PairingParams:
    """
    Public parameters produced by Setup.

    Attributes
    ----------
    descriptor : PairingDescriptor
        Identifies the group instance
    group : PairingGroup
        The live charm group built from ``descriptor``
    g1, h1 : G1
        Independent generators of G1
    g2 : G2
        Generator of G2
    security_level : int or None
        The lambda requested at Setup
    """

    def __init__(self, descriptor: PairingDescriptor, group: PairingGroup,
                 g1, g2, h1, security_level: int = None):
        self.descriptor = descriptor
        self.group = group
        self.g1 = g1
        self.g2 = g2
        self.h1 = h1
        self.security_level = security_level

    @property
    def prime_order(self) -> int:
        return self.descriptor.r

    def encode(self, elem, tag: int) -> str:
        return codec.encode(elem, tag, self.group, self.descriptor)

    def decode(self, text: str, tag: int, field: str = None):
        return codec.decode(text, tag, self.group, self.descriptor, field)

    def serialize(self) -> dict:
        """Hex fields of params, in the shape Setup publishes them."""
        return {
            'pairing_descriptor': self.descriptor.to_hex(),
            'prime_order': codec.encode_int(self.prime_order, codec.scalar_width(self.descriptor)),
            'g1': self.encode(self.g1, G1),
            'g2': self.encode(self.g2, G2),
            'h1': self.encode(self.h1, G1),
        }


def _solinas_prime(rbits: int) -> tuple:
    exp2 = rbits - 1
    attempts = 0
    while True:
        attempts += 1
        # exp1 < exp2 - 1 keeps r at exp2 or exp2 + 1 bits
        exp1 = 1 + secrets.randbelow(exp2 - 2)
        sign1 = secrets.choice((1, -1))
        sign0 = secrets.choice((1, -1))
        r = (1 << exp2) + sign1 * (1 << exp1) + sign0
        if gmpy2.is_prime(r):
            logger.debug("found %d-bit Solinas prime after %d attempts", r.bit_length(), attempts)
            return r, exp2, exp1, sign1, sign0


def generate_descriptor(rbits: int, qbits: int) -> PairingDescriptor:
    """
    Draw fresh type A parameters.

    Parameters
    ----------
    rbits : int
        Bit length of the subgroup order r
    qbits : int
        Bit length of the base field prime q

    Returns
    -------
    PairingDescriptor
        Parameters with r prime, q = h * r - 1 prime, h a multiple of 12

    Notes
    -----
    Because 12 | h, q + 1 = 0 (mod 4) so q = 3 (mod 4), which makes
    y^2 = x^3 + x supersingular with q + 1 points.
    """
    if qbits <= rbits + 4:
        raise ParameterGenerationFailure(f"qbits={qbits} too small for rbits={rbits}")

    r, exp2, exp1, sign1, sign0 = _solinas_prime(rbits)
    # k in [lo, hi] keeps q = 12 * k * r - 1 inside [2^(qbits-1), 2^qbits)
    step = 12 * r
    lo = ((1 << (qbits - 1)) + step) // step
    hi = (1 << qbits) // step
    attempts = 0
    while True:
        attempts += 1
        k = lo + secrets.randbelow(hi - lo + 1)
        h = 12 * k
        q = h * r - 1
        if gmpy2.is_prime(q):
            logger.debug("found %d-bit field prime after %d attempts", qbits, attempts)
            return PairingDescriptor(q, h, r, exp2, exp1, sign1, sign0)


def load_group(descriptor: PairingDescriptor) -> PairingGroup:
    """
    Build the charm PairingGroup identified by ``descriptor``.

    The same descriptor always yields the same group, so elements encoded
    against one instance decode against any other.
    """
    try:
        with tempfile.NamedTemporaryFile('w', suffix='.param') as handle:
            handle.write(descriptor.to_text())
            handle.flush()
            group = PairingGroup(handle.name, param_file=True)
    except Exception as e:
        raise InvalidParameters(f"pairing library rejected descriptor ({e})", 'pairing_descriptor') from e

    if int(group.order()) != descriptor.r:
        raise InvalidParameters("group order does not match descriptor", 'pairing_descriptor')
    return group


def _random_generator(group: PairingGroup, tag: int, exclude=None):
    identity = group.init(tag, 1)
    for _ in range(MAX_GENERATOR_ATTEMPTS):
        candidate = group.random(tag)
        if candidate == identity:
            continue
        if exclude is not None and candidate == exclude:
            continue
        return candidate
    raise ParameterGenerationFailure("could not sample a non-identity generator")


def setup(security_level: int = DEFAULT_SECURITY_LEVEL) -> PairingParams:
    """
    TIAC Setup (Algorithm 1).

    Input: security parameter lambda
    Output: params = (G1, G2, GT, p, g1, g2, h1)

    1. Choose a bilinear group (G1, G2, GT) of prime order p
    2. Choose generators g1, h1 of G1 and g2 of G2
    3. Return params

    p is drawn with exp2 = rbits - 1, so it has rbits bits when sign1 = 1
    and rbits - 1 bits when sign1 = -1, as with PBC's ``a_gen``.

    Parameters
    ----------
    security_level : int, optional
        Lambda, one of ``SECURITY_LEVELS``. Default is 256.

    Returns
    -------
    PairingParams
        Freshly generated public parameters

    Raises
    ------
    UnsupportedSecurityLevel
        If ``security_level`` has no mapping
    ParameterGenerationFailure
        If the pairing library cannot produce a valid instance
    """
    if (not isinstance(security_level, int) or isinstance(security_level, bool)
            or security_level not in SECURITY_LEVELS):
        raise UnsupportedSecurityLevel(
            f"{security_level!r} is not one of {sorted(SECURITY_LEVELS)}", 'security_level'
        )
    rbits, qbits = SECURITY_LEVELS[security_level]

    try:
        descriptor = generate_descriptor(rbits, qbits)
        group = load_group(descriptor)
    except ParameterGenerationFailure:
        raise
    except TIACError as e:
        raise ParameterGenerationFailure(f"could not build a pairing group: {e}") from e

    g1 = _random_generator(group, G1)
    h1 = _random_generator(group, G1, exclude=g1)
    g2 = _random_generator(group, G2)

    logger.info("setup complete: lambda=%d, |p|=%d bits, |q|=%d bits",
                security_level, descriptor.r.bit_length(), descriptor.q.bit_length())
    return PairingParams(descriptor, group, g1, g2, h1, security_level)


def load_params(pairing_descriptor: str, prime_order: str, g1: str, g2: str, h1: str,
                security_level: int = None) -> PairingParams:
    """
    Reconstruct published Setup output.

    The group is rebuilt from ``pairing_descriptor`` (never regenerated) and
    each generator is decoded with full curve and subgroup checks.

    Raises
    ------
    MalformedEncoding, OutOfRange
        If a field is not a valid canonical encoding
    InvalidParameters
        If the descriptor is invalid, ``prime_order`` disagrees with it, or a
        generator is the identity or coincides with another
    """
    descriptor = PairingDescriptor.from_hex(pairing_descriptor)
    group = load_group(descriptor)

    order = codec.decode_int(prime_order, codec.scalar_width(descriptor), 'prime_order')
    if order != descriptor.r:
        raise InvalidParameters("does not match the descriptor's subgroup order", 'prime_order')

    decoded = {}
    for field, text, tag in (('g1', g1, G1), ('g2', g2, G2), ('h1', h1, G1)):
        elem = codec.decode(text, tag, group, descriptor, field)
        if elem == group.init(tag, 1):
            raise InvalidParameters("generator is the identity element", field)
        decoded[field] = elem
    if decoded['g1'] == decoded['h1']:
        raise InvalidParameters("h1 must be independent of g1", 'h1')

    return PairingParams(descriptor, group, decoded['g1'], decoded['g2'], decoded['h1'], security_level)
