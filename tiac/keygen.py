"""
Threshold Key Generation
========================

Coconut key generation with a trusted third party (TIAC Algorithm 2).

Input: params = (G1, G2, GT, p, g1, g2, h1), threshold t, authorities n
Output: master verification key mvk and one key pair per authority

1. Choose polynomials v, w of degree t - 1 with random coefficients in Z_p;
   x = v(0), y = w(0)
2. mvk = (alpha2, beta2, beta1) = (g2^x, g2^y, g1^y)
3. For m = 1..n:
       sgk_m = (x_m, y_m) = (v(m), w(m))
       vk_m  = (alpha2_m, beta2_m, beta1_m) = (g2^x_m, g2^y_m, g1^y_m)
4. Return mvk and [(sgk_m, vk_m)] ordered by m

The generators come from the params passed in; the group is never
regenerated here.
"""

import logging
from typing import List, Tuple

from charm.toolbox.pairinggroup import ZR, G1, G2

from . import sharing
from .errors import InvalidAuthorityCount, InvalidThreshold
from .groups import PairingParams

logger = logging.getLogger(__name__)


class MasterVerificationKey:
    """mvk = (alpha2, beta2, beta1) = (g2^x, g2^y, g1^y)."""

    def __init__(self, alpha2, beta2, beta1):
        self.alpha2 = alpha2
        self.beta2 = beta2
        self.beta1 = beta1

    def serialize(self, params: PairingParams) -> dict:
        return {
            'alpha2': params.encode(self.alpha2, G2),
            'beta2': params.encode(self.beta2, G2),
            'beta1': params.encode(self.beta1, G1),
        }


class AuthorityKeyShare:
    """
    Key material of authority ``index``.

    Attributes
    ----------
    index : int
        Authority index m, 1-based
    xm, ym : int
        Secret share sgk_m = (v(m), w(m)) mod p
    vkm1, vkm2 : G2
        g2^xm and g2^ym
    vkm3 : G1
        g1^ym
    """

    def __init__(self, index: int, xm: int, ym: int, vkm1, vkm2, vkm3):
        self.index = index
        self.xm = xm
        self.ym = ym
        self.vkm1 = vkm1
        self.vkm2 = vkm2
        self.vkm3 = vkm3

    def serialize(self, params: PairingParams) -> dict:
        return {
            'index': self.index,
            'xm': params.encode(self.xm, ZR),
            'ym': params.encode(self.ym, ZR),
            'vkm1': params.encode(self.vkm1, G2),
            'vkm2': params.encode(self.vkm2, G2),
            'vkm3': params.encode(self.vkm3, G1),
        }

    def __repr__(self):
        # secret shares stay out of reprs and logs
        return f"AuthorityKeyShare(index={self.index})"


def default_threshold(num_authorities: int) -> int:
    """
    Threshold used when the caller does not choose one.

    3 authorities -> 2, 5 -> 3, 7 or more -> simple majority,
    any other count requires every authority.
    """
    if num_authorities == 3:
        return 2
    if num_authorities == 5:
        return 3
    if num_authorities >= 7:
        return num_authorities // 2 + 1
    return num_authorities


def check_counts(threshold: int, num_authorities: int):
    """
    Validate (t, n). The authority count is checked first.

    Raises
    ------
    InvalidAuthorityCount
        If n is not an integer >= 1
    InvalidThreshold
        If t is not an integer with 1 <= t <= n
    """
    if isinstance(num_authorities, bool) or not isinstance(num_authorities, int) or num_authorities < 1:
        raise InvalidAuthorityCount(f"must be an integer >= 1, got {num_authorities!r}", 'num_authorities')
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise InvalidThreshold(f"must be an integer, got {threshold!r}", 'threshold')
    if not 1 <= threshold <= num_authorities:
        raise InvalidThreshold(
            f"must satisfy 1 <= t <= n, got t={threshold}, n={num_authorities}", 'threshold'
        )


def keygen(params: PairingParams, threshold: int,
           num_authorities: int) -> Tuple[MasterVerificationKey, List[AuthorityKeyShare]]:
    """
    Generate the master verification key and n authority key shares.

    Parameters
    ----------
    params : PairingParams
        Setup output, usually rebuilt with ``groups.load_params``
    threshold : int
        t, the number of authorities needed to issue
    num_authorities : int
        n, the number of authorities

    Returns
    -------
    mvk : MasterVerificationKey
    shares : List[AuthorityKeyShare]
        One share per authority, ordered by index 1..n

    Notes
    -----
    Output is random on every call, but any t shares always interpolate to
    the x and y behind mvk.
    """
    check_counts(threshold, num_authorities)
    group = params.group
    p = params.prime_order

    def exp(base, scalar: int):
        return base ** group.init(ZR, scalar)

    v = sharing.share(p, threshold - 1)
    w = sharing.share(p, threshold - 1)
    x = sharing.evaluate(v, 0, p)
    y = sharing.evaluate(w, 0, p)

    mvk = MasterVerificationKey(exp(params.g2, x), exp(params.g2, y), exp(params.g1, y))
    del x, y

    shares = []
    for m in range(1, num_authorities + 1):
        xm = sharing.evaluate(v, m, p)
        ym = sharing.evaluate(w, m, p)
        shares.append(AuthorityKeyShare(
            m, xm, ym,
            exp(params.g2, xm),
            exp(params.g2, ym),
            exp(params.g1, ym),
        ))
    del v, w

    logger.info("keygen complete: t=%d, n=%d", threshold, num_authorities)
    return mvk, shares


def verify_share(params: PairingParams, share: AuthorityKeyShare) -> bool:
    """
    Check that a share's verification elements match its secret scalars.

    Returns
    -------
    bool
        True iff vkm1 == g2^xm, vkm2 == g2^ym and vkm3 == g1^ym
    """
    group = params.group
    xm = group.init(ZR, share.xm)
    ym = group.init(ZR, share.ym)
    return (share.vkm1 == params.g2 ** xm
            and share.vkm2 == params.g2 ** ym
            and share.vkm3 == params.g1 ** ym)
