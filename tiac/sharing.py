"""
Polynomial Secret Sharing
=========================

Shamir sharing over the scalar field Z_p.

A secret s is hidden as the constant term of a random polynomial

    f(X) = a_0 + a_1 X + ... + a_{t-1} X^{t-1},   a_0 = s

and authority m receives f(m). Any t evaluations determine f, and hence s,
by Lagrange interpolation:

    s = f(0) = sum_{j in S} f(j) * prod_{k in S, k != j} (0 - k) / (j - k)

With t - 1 or fewer evaluations every candidate secret is consistent with
exactly one polynomial of degree t - 1, so nothing about s is revealed.

Scalars are plain Python integers reduced mod p. Coefficients come from the
``secrets`` module (the operating system's CSPRNG).
"""

import secrets
from typing import Dict, List

from .errors import InvalidThreshold, InvalidParameters


def share(p: int, degree: int) -> List[int]:
    """
    Sample a uniformly random polynomial of the given degree over Z_p.

    Parameters
    ----------
    p : int
        The prime field modulus
    degree : int
        Polynomial degree, t - 1 for a t-out-of-n sharing

    Returns
    -------
    List[int]
        Coefficients ``[a_0, ..., a_degree]``; ``a_0`` is the secret
    """
    if isinstance(degree, bool) or not isinstance(degree, int) or degree < 0:
        raise InvalidThreshold(f"polynomial degree must be a non-negative integer, got {degree!r}")
    return [secrets.randbelow(p) for _ in range(degree + 1)]


def evaluate(coefficients: List[int], point: int, p: int) -> int:
    """
    Evaluate a polynomial at ``point`` modulo p (Horner's rule).

    Examples
    --------
    >>> evaluate([5, 0, 1], 3, 97)   # 5 + 3^2
    14
    """
    result = 0
    for coeff in reversed(coefficients):
        result = (result * point + coeff) % p
    return result


def _check_indices(indices, p: int):
    reduced = [i % p for i in indices]
    if len(set(reduced)) != len(reduced):
        raise InvalidParameters(f"share indices must be distinct mod p: {sorted(indices)}")
    if 0 in reduced:
        raise InvalidParameters("share index 0 would reveal the secret directly")


def lagrange_coefficient(indices: List[int], j: int, p: int, at: int = 0) -> int:
    """
    Lagrange basis coefficient for index ``j`` over ``indices``, evaluated at ``at``.

        lambda_j = prod_{k != j} (at - k) / (j - k)   mod p
    """
    if j not in indices:
        raise InvalidParameters(f"index {j} not in {sorted(indices)}")
    num = 1
    den = 1
    for k in indices:
        if k == j:
            continue
        num = num * (at - k) % p
        den = den * (j - k) % p
    return num * pow(den, -1, p) % p


def reconstruct(points: Dict[int, int], p: int, at: int = 0) -> int:
    """
    Interpolate the unique polynomial through ``points`` and evaluate it at ``at``.

    Parameters
    ----------
    points : Dict[int, int]
        Mapping of share index to share value
    p : int
        The prime field modulus
    at : int, optional
        Evaluation point, 0 (the secret) by default

    Returns
    -------
    int
        f(at) mod p
    """
    if not points:
        raise InvalidParameters("at least one share is required")
    indices = list(points)
    _check_indices(indices, p)
    return sum(value * lagrange_coefficient(indices, j, p, at)
               for j, value in points.items()) % p


def interpolate(points: Dict[int, int], p: int) -> List[int]:
    """
    Coefficients of the unique polynomial of degree ``len(points) - 1`` through ``points``.

    Used to exhibit, for fewer than t shares, distinct polynomials of degree
    t - 1 that agree on every share yet have different constant terms.
    """
    if not points:
        raise InvalidParameters("at least one point is required")
    indices = list(points)
    _check_indices(indices, p)

    result = [0] * len(indices)
    for j, value in points.items():
        # basis = prod_{k != j} (X - k), built one linear factor at a time
        basis = [1]
        for k in indices:
            if k == j:
                continue
            shifted = [0] + basis
            for i, c in enumerate(basis):
                shifted[i] = (shifted[i] - k * c) % p
            basis = shifted
        denom = evaluate(basis, j, p)
        scale = value * pow(denom, -1, p) % p
        for i, c in enumerate(basis):
            result[i] = (result[i] + scale * c) % p
    return result
