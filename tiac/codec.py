"""
Canonical Element Encoding
==========================

Fixed-width, big-endian, lowercase-hex encodings for the three kinds of
values that cross the Setup/KeyGen boundary:

- ZR: scalars modulo the prime order p, ``ceil(|p| / 8)`` bytes
- G1, G2: curve points in the uncompressed PBC layout ``x || y``, each
  coordinate ``ceil(|q| / 8)`` bytes, where q is the base field prime

The identity point encodes as all-zero bytes. The affine point (0, 0) lies
on ``y^2 = x^3 + x`` but has order 2, so it can never be a member of the
order-p subgroup and the zero encoding is unambiguous.

Decoding is strict: the text must be lowercase hex of exactly the expected
width, and points must lie on the curve and in the order-p subgroup.

According to charm-crypto:
- ``group.serialize(elem, compression=False)`` returns ``b'<type>:<base64>'``
  where the base64 payload is PBC's ``element_to_bytes`` output
- ``group.deserialize(b'<type>:<base64>', compression=False)`` is the inverse
- ``group.ismember(elem)`` checks subgroup membership
"""

import base64
import string

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2

from .errors import MalformedEncoding, OutOfRange

HEX_DIGITS = frozenset(string.digits + 'abcdef')

TAG_NAMES = {ZR: 'ZR', G1: 'G1', G2: 'G2'}


def scalar_width(descriptor) -> int:
    """Byte width of a scalar in Z_p."""
    return (descriptor.r.bit_length() + 7) // 8


def coordinate_width(descriptor) -> int:
    """Byte width of one base field coordinate."""
    return (descriptor.q.bit_length() + 7) // 8


def element_width(tag: int, descriptor) -> int:
    """
    Expected byte width for an element of the given group tag.

    Parameters
    ----------
    tag : int
        One of ZR, G1, G2
    descriptor : PairingDescriptor
        Descriptor of the group the element belongs to

    Returns
    -------
    int
        Number of bytes in the canonical encoding
    """
    if tag == ZR:
        return scalar_width(descriptor)
    if tag in (G1, G2):
        return 2 * coordinate_width(descriptor)
    raise ValueError(f"unsupported group tag: {tag}")


def encode_int(value: int, width: int) -> str:
    """Encode a non-negative integer as fixed-width lowercase hex."""
    return value.to_bytes(width, 'big').hex()


def decode_hex(text: str, width: int, field: str = None) -> bytes:
    """
    Parse fixed-width lowercase hex into bytes.

    Raises
    ------
    MalformedEncoding
        If ``text`` is not a string, has odd length, contains characters
        other than ``0-9a-f``, or does not decode to exactly ``width`` bytes.
    """
    if not isinstance(text, str):
        raise MalformedEncoding(f"expected a hex string, got {type(text).__name__}", field)
    if len(text) % 2:
        raise MalformedEncoding(f"odd-length hex string ({len(text)} characters)", field)
    bad = set(text) - HEX_DIGITS
    if bad:
        raise MalformedEncoding(f"non-hex characters {''.join(sorted(bad))!r}", field)
    if len(text) // 2 != width:
        raise MalformedEncoding(f"expected {width} bytes, got {len(text) // 2}", field)
    return bytes.fromhex(text)


def decode_int(text: str, width: int, field: str = None) -> int:
    """Parse fixed-width lowercase hex into an integer."""
    return int.from_bytes(decode_hex(text, width, field), 'big')


def encode(elem, tag: int, group: PairingGroup, descriptor) -> str:
    """
    Encode a group element or scalar to its canonical hex form.

    Parameters
    ----------
    elem : G1, G2, ZR or int
        The value to encode. Plain integers are accepted for ZR and
        reduced modulo p.
    tag : int
        One of ZR, G1, G2
    group : PairingGroup
        The group the element belongs to
    descriptor : PairingDescriptor
        Descriptor of ``group``

    Returns
    -------
    str
        Lowercase hex string of exactly ``element_width(tag)`` bytes
    """
    width = element_width(tag, descriptor)
    if tag == ZR:
        return encode_int(int(elem) % descriptor.r, width)

    if elem == group.init(tag, 1):
        return '00' * width
    payload = group.serialize(elem, compression=False)
    raw = base64.b64decode(payload.split(b':', 1)[1])
    if len(raw) != width:
        raise MalformedEncoding(
            f"{TAG_NAMES[tag]} element serialized to {len(raw)} bytes, expected {width}"
        )
    return raw.hex()


def decode(text: str, tag: int, group: PairingGroup, descriptor, field: str = None):
    """
    Decode canonical hex back into a group element or scalar.

    Parameters
    ----------
    text : str
        Lowercase hex produced by ``encode``
    tag : int
        One of ZR, G1, G2
    group : PairingGroup
        The group to decode into
    descriptor : PairingDescriptor
        Descriptor of ``group``
    field : str, optional
        Name of the field being decoded, used in error messages

    Returns
    -------
    G1, G2 or ZR
        The decoded element

    Raises
    ------
    MalformedEncoding
        On bad hex, wrong width, off-curve or wrong-subgroup points
    OutOfRange
        If a scalar is not in [0, p)
    """
    width = element_width(tag, descriptor)
    raw = decode_hex(text, width, field)

    if tag == ZR:
        value = int.from_bytes(raw, 'big')
        if value >= descriptor.r:
            raise OutOfRange("scalar is not smaller than the prime order", field)
        return group.init(ZR, value)

    if not any(raw):
        return group.init(tag, 1)

    q = descriptor.q
    half = width // 2
    x = int.from_bytes(raw[:half], 'big')
    y = int.from_bytes(raw[half:], 'big')
    if x >= q or y >= q:
        raise MalformedEncoding("point coordinate exceeds the field modulus", field)
    # type A curve: y^2 = x^3 + x
    if (y * y - x * x * x - x) % q:
        raise MalformedEncoding("point is not on the curve", field)

    try:
        elem = group.deserialize(b'%d:' % tag + base64.b64encode(raw), compression=False)
    except Exception as e:
        raise MalformedEncoding(f"pairing library rejected point ({e})", field) from e
    if not group.ismember(elem):
        raise MalformedEncoding(
            f"point is not in the order-p subgroup of {TAG_NAMES[tag]}", field
        )
    return elem

