"""
TIAC Setup and Threshold Key Generation
=======================================

Trusted-party Setup and threshold KeyGen for a Coconut/TIAC-style
threshold-issuance anonymous credential scheme, using charm-crypto over
freshly generated PBC type A pairing groups.

Modules:
--------
- groups: Pairing group generation, descriptors, Setup (Algorithm 1)
- codec: Fixed-width hex encoding of G1, G2 and ZR values
- sharing: Shamir polynomial sharing and Lagrange interpolation over Z_p
- keygen: Master verification key and authority key shares (Algorithm 2)
- boundary: Setup/KeyGen returning tagged outcomes, never raising
- errors: Error kinds

Usage:
------
    from tiac import perform_setup, perform_keygen

    setup_out = perform_setup(256)
    keygen_out = perform_keygen(setup_out.to_dict(), threshold=2, num_authorities=3)
    mvk = keygen_out.master_verification_key
    shares = keygen_out.authority_shares
"""

__version__ = "0.1.0"

from .groups import setup, load_params
from .keygen import keygen
from .boundary import perform_setup, perform_keygen, SetupOutcome, KeyGenOutcome

__all__ = [
    'setup', 'load_params', 'keygen',
    'perform_setup', 'perform_keygen', 'SetupOutcome', 'KeyGenOutcome',
]
